from __future__ import annotations

from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TaskRecord(TypedDict, total=False):
    """
    A row of the `tasks` table as returned by the store.

    Fields:
    - id: Unique identifier
    - title: Short title
    - status: Workflow state ("todo", "in-progress", "completed", ...)
    - priority: Priority label
    - assignee: Assigned user id
    - project: Owning project id
    - user_id: Owner of the task
    """

    id: str
    title: str
    description: Optional[str]
    status: str
    priority: Optional[str]
    assignee: Optional[str]
    project: Optional[str]
    user_id: str
    due_date: Optional[str]
    created_at: str
    updated_at: Optional[str]


# PUBLIC_INTERFACE
class TimeEntryRecord(TypedDict, total=False):
    """A row of `time_entries`. `time_spent` is in minutes and never negative."""

    id: str
    user_id: str
    task_id: Optional[str]
    project_id: Optional[str]
    description: Optional[str]
    date: str
    time_spent: int
    billable: bool


# PUBLIC_INTERFACE
class ResourceRecord(TypedDict, total=False):
    """
    A row of `resources`.

    `allocation` is a percentage (0..100); this layer only ever writes 100.
    """

    id: str
    name: str
    role: str
    user_id: str
    availability: Optional[str]
    allocation: Optional[int]
    current_project_id: Optional[str]


# PUBLIC_INTERFACE
class IntegrationActionRecord(TypedDict, total=False):
    """A row of `integration_actions`; `enabled` may be missing or null."""

    id: str
    user_id: str
    source_app: str
    target_app: str
    action_type: str
    error_count: Optional[int]
    enabled: Optional[bool]
    last_error_message: Optional[str]
    last_executed_at: Optional[str]
    created_at: str


# PUBLIC_INTERFACE
class ProfileRecord(TypedDict, total=False):
    """A row of `profiles`, keyed by the auth user id."""

    id: str
    full_name: Optional[str]
    avatar_url: Optional[str]
    created_at: str
