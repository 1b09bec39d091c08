"""
Projection of integration-action records into display notifications.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping

from .models import IntegrationActionRecord


class FlagState(Enum):
    """A stored boolean that may be true, false, or not there at all."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    UNSET = "unset"

    @classmethod
    def of(cls, record: Mapping[str, Any], key: str) -> "FlagState":
        value = record.get(key)
        if value is None:
            return cls.UNSET
        return cls.ENABLED if bool(value) else cls.DISABLED

    def resolve(self, default: bool) -> bool:
        if self is FlagState.UNSET:
            return default
        return self is FlagState.ENABLED


def _message(action: IntegrationActionRecord, is_error: bool, error_count: int) -> str:
    action_type = action.get("action_type") or "action"
    if is_error:
        return action.get("last_error_message") or f"{action_type} failed {error_count} time(s)"
    return f"{action_type} from {action.get('source_app')} to {action.get('target_app')} completed"


# PUBLIC_INTERFACE
def project_notification(action: IntegrationActionRecord) -> Dict[str, Any]:
    """
    Map one integration action to a notification view.

    - type: "error" when error_count > 0, else "success"
    - timestamp: last_executed_at, falling back to created_at
    - enabled: the stored flag; only a missing flag defaults to True
    """
    error_count = action.get("error_count") or 0
    is_error = error_count > 0
    enabled = FlagState.of(action, "enabled").resolve(default=True)

    return {
        "id": action.get("id"),
        "title": f"{action.get('source_app')} → {action.get('target_app')}",
        "message": _message(action, is_error, error_count),
        "type": "error" if is_error else "success",
        "timestamp": action.get("last_executed_at") or action.get("created_at"),
        "source_app": action.get("source_app"),
        "target_app": action.get("target_app"),
        "action_type": action.get("action_type"),
        "error_count": error_count,
        "enabled": enabled,
        "status": "Active" if enabled else "Paused",
    }


def project_notifications(actions: Iterable[IntegrationActionRecord]) -> List[Dict[str, Any]]:
    """Map every action, preserving input order. Performs no I/O."""
    return [project_notification(a) for a in actions]
