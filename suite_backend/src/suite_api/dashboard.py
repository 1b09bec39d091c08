"""
Dashboard aggregation.

Combines counts and sums over several independent reads into one summary.
Reads are neither atomic nor transactional; a failed read is logged and
contributes zero instead of failing the whole summary.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

from .models import TimeEntryRecord
from .readers import list_time_entries, run_query
from .store import Query, StoreClient, StoreError
from .utils import round_half_up

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class DashboardStats:
    """Derived per-user summary; recomputed on every read, never stored."""

    completedTasks: int = 0
    hoursTracked: int = 0
    openIssues: int = 0
    teamMembers: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def _safe_count(store: StoreClient, table: str, eq: Mapping[str, Any], label: str) -> int:
    try:
        return store.count(table, eq)
    except StoreError as e:
        logger.error("Error fetching %s: %s", label, e.message)
        return 0


def total_minutes(entries: Iterable[TimeEntryRecord]) -> int:
    return sum(int(e.get("time_spent") or 0) for e in entries)


# PUBLIC_INTERFACE
def get_dashboard_stats(store: StoreClient, user_id: str) -> DashboardStats:
    """
    Build the dashboard summary for `user_id`.

    - completedTasks: the user's tasks with status "completed"
    - hoursTracked: the user's total time_spent minutes in hours, rounded half-up
    - openIssues: open risks across ALL users (not scoped to the user)
    - teamMembers: the user's team members
    """
    completed = _safe_count(store, "tasks", {"user_id": user_id, "status": "completed"}, "completed tasks")

    entries = run_query(store, Query("time_entries", columns="time_spent", eq={"user_id": user_id}))
    minutes = total_minutes(entries.data) if entries.ok else 0

    open_issues = _safe_count(store, "risks", {"status": "open"}, "open issues")
    members = _safe_count(store, "team_members", {"user_id": user_id}, "team members")

    return DashboardStats(
        completedTasks=completed,
        hoursTracked=round_half_up(minutes / 60),
        openIssues=open_issues,
        teamMembers=members,
    )


def week_start(today: date) -> date:
    """Start of the week containing `today`; weeks begin on Sunday."""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def _hours(entries: Iterable[TimeEntryRecord]) -> float:
    return sum((e.get("time_spent") or 0) / 60 for e in entries)


# PUBLIC_INTERFACE
def summarize_time(
    today_entries: Iterable[TimeEntryRecord],
    week_entries: Iterable[TimeEntryRecord],
) -> Dict[str, Any]:
    """
    Reduce today's and this week's entries to hour totals and a productivity score.

    The score is the billable share of the week's hours as a percentage,
    clamped to 60..95.
    """
    week = list(week_entries)
    hours_today = _hours(today_entries)
    hours_week = _hours(week)
    billable_week = _hours(e for e in week if e.get("billable"))

    score = round_half_up(billable_week / max(hours_week, 1) * 100)
    return {
        "total_hours_today": round_half_up(hours_today, 1),
        "total_hours_week": round_half_up(hours_week, 1),
        "billable_hours_week": round_half_up(billable_week, 1),
        "active_timer": None,
        "productivity_score": min(95, max(60, score)),
    }


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def get_time_summary(store: StoreClient, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Read today's and this week's entries (all users) and summarize them.
    `today` defaults to the current UTC date.
    Either read failing raises its StoreError.
    """
    today = today or utc_today()
    columns = "time_spent,billable"
    today_entries = list_time_entries(store, since=today, limit=None, columns=columns).unwrap()
    week_entries = list_time_entries(store, since=week_start(today), limit=None, columns=columns).unwrap()
    return summarize_time(today_entries, week_entries)
