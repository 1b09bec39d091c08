from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DueDateInput = Union[date, datetime, str]


def _parse_due_date(value: Optional[DueDateInput]) -> Optional[datetime]:
    """Task due dates: a date means midnight, an empty string clears the field."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        raise ValueError("due_date must be a date or an ISO 8601 string")

    text = value.strip()
    if not text:
        return None
    try:
        # fromisoformat rejects a trailing Z before Python 3.11
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"due_date is not an ISO 8601 date: {value!r}") from None


def _clean_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("title length must be between 1 and 200 characters")
    return s


class _Payload(BaseModel):
    """Base for request bodies that are written straight to a table."""

    def to_row(self) -> Dict[str, Any]:
        """Fields the client actually sent, JSON-ready (datetimes as ISO strings)."""
        return self.model_dump(mode="json", exclude_unset=True)


# PUBLIC_INTERFACE
class TaskCreate(_Payload):
    """
    Schema for creating a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Draft Q3 roadmap",
                "status": "todo",
                "priority": "high",
                "project": "proj-1",
                "user_id": "user-1",
                "due_date": "2025-02-01",
            }
        }
    )

    title: str = Field(..., description="Short title for the task", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    status: str = Field(default="todo", description="Workflow state")
    priority: Optional[str] = Field(default=None, description="Priority label")
    assignee: Optional[str] = Field(default=None, description="Assigned user id")
    project: Optional[str] = Field(default=None, description="Owning project id")
    user_id: Optional[str] = Field(default=None, description="Owner of the task")
    due_date: Optional[datetime] = Field(
        default=None,
        description="Due date/time. Accepts ISO8601 date or datetime; dates are set to 00:00",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _clean_title(v)  # type: ignore[return-value]

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return _parse_due_date(v)

    def to_row(self) -> Dict[str, Any]:
        # Defaults such as status are part of a new row
        return self.model_dump(mode="json", exclude_none=True)


# PUBLIC_INTERFACE
class TaskUpdate(_Payload):
    """
    Schema for updating a task. Only provided fields are written.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    assignee: Optional[str] = None
    project: Optional[str] = None
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _clean_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[datetime]:
        return _parse_due_date(v)


# PUBLIC_INTERFACE
class ClientCreate(_Payload):
    """Schema for a CRM contact."""

    name: str = Field(..., min_length=1, description="Contact name")
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[str] = None


class ClientUpdate(_Payload):
    name: Optional[str] = Field(default=None, min_length=1)
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


# PUBLIC_INTERFACE
class RiskCreate(_Payload):
    """
    Schema for a risk. `risk_score` is derived (probability * impact) and
    cannot be set by clients.
    """

    description: str = Field(..., min_length=1)
    level: Optional[str] = None
    status: str = Field(default="open")
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    probability: float = Field(default=0, ge=0)
    impact: float = Field(default=0, ge=0)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class RiskUpdate(_Payload):
    description: Optional[str] = None
    level: Optional[str] = None
    status: Optional[str] = None
    probability: Optional[float] = Field(default=None, ge=0)
    impact: Optional[float] = Field(default=None, ge=0)


# PUBLIC_INTERFACE
class KnowledgePageCreate(_Payload):
    """Schema for a knowledge base page; a slug is derived from the title when omitted."""

    title: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    is_published: bool = True
    is_archived: bool = False

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class KnowledgePageUpdate(_Payload):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    is_published: Optional[bool] = None


# PUBLIC_INTERFACE
class FileUploadRequest(BaseModel):
    """
    Body of the file-upload endpoint. Fields are optional at the schema level
    so the handler can report every missing one in a single 400.
    """

    bucket: Optional[str] = None
    filePath: Optional[str] = None
    fileContent: Optional[str] = Field(default=None, description="Base64 encoded bytes")
    mimeType: Optional[str] = None

    def missing_fields(self) -> List[str]:
        return [name for name in ("bucket", "filePath", "fileContent") if not getattr(self, name)]


# PUBLIC_INTERFACE
class AssignmentRequest(BaseModel):
    """Assign one of `assignee_id`'s available resources to `target_id`."""

    target_id: str = Field(..., min_length=1, description="Project/task the resource is assigned to")
    assignee_id: Optional[str] = Field(
        default=None, description="Owner of the resource pool; defaults to the caller"
    )


# PUBLIC_INTERFACE
class ValidationRequest(BaseModel):
    """Input for the field validation endpoint."""

    type: str
    data: Any = None


# PUBLIC_INTERFACE
class MessageCreate(BaseModel):
    """A chat message posted by the caller."""

    channel_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=4000)
