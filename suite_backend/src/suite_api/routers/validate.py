from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from ..auth import require_session
from ..profiles import SessionIdentity
from ..schemas import ValidationRequest

router = APIRouter(prefix="/api/validate", tags=["validate"])

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_RULE = (
    "Password must be at least 8 characters and include uppercase, lowercase, number, and special character"
)


def _valid_password(value: str) -> bool:
    return (
        len(value) >= 8
        and re.search(r"[A-Z]", value) is not None
        and re.search(r"[a-z]", value) is not None
        and re.search(r"[0-9]", value) is not None
        and re.search(r"[^A-Za-z0-9]", value) is not None
    )


def _valid_date(value: str) -> bool:
    s = value.strip()
    for parse in (datetime.fromisoformat, date.fromisoformat):
        try:
            parse(s)
            return True
        except ValueError:
            continue
    return False


# PUBLIC_INTERFACE
def validate_value(kind: str, data: Any) -> Dict[str, Optional[Any]]:
    """Check `data` against the rule for `kind` ("email", "password" or "date")."""
    text = data if isinstance(data, str) else None

    if kind == "email":
        valid = text is not None and _EMAIL_RE.match(text) is not None
        return {"valid": valid, "error": None if valid else "Invalid email format"}
    if kind == "password":
        valid = text is not None and _valid_password(text)
        return {"valid": valid, "error": None if valid else PASSWORD_RULE}
    if kind == "date":
        valid = text is not None and _valid_date(text)
        return {"valid": valid, "error": None if valid else "Invalid date format"}
    return {"valid": False, "error": f"Unknown validation type: {kind}"}


# PUBLIC_INTERFACE
@router.post("", summary="Validate Field", description="Validate an email, password or date. Requires a session.")
def validate(payload: ValidationRequest, session: SessionIdentity = Depends(require_session)):
    return validate_value(payload.type, payload.data)
