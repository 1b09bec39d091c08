"""
Entity readers.

Each reader issues exactly one query against one table: exact-match filters,
a single ordering column and a fixed row cap. Rows beyond the cap are not
reachable. Failures come back as QueryResult(data=None, error=...).
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional, Sequence

from .store import Query, QueryResult, StoreClient, StoreError

logger = logging.getLogger(__name__)

TASK_LIMIT = 50
TIME_ENTRY_LIMIT = 100
MESSAGE_LIMIT = 100
EXPENSE_LIMIT = 100


def _filters(**fields: Any) -> Dict[str, Any]:
    # Drop filters the caller did not supply
    return {k: v for k, v in fields.items() if v is not None}


def run_query(store: StoreClient, query: Query) -> QueryResult:
    """Run one select and wrap the outcome."""
    try:
        return QueryResult(data=store.select(query))
    except StoreError as e:
        logger.error("Error fetching %s: %s", query.table, e.message)
        return QueryResult(error=e)


# PUBLIC_INTERFACE
def list_tasks(
    store: StoreClient,
    user_id: Optional[str],
    status: Optional[str] = None,
    project: Optional[str] = None,
    priority: Optional[str] = None,
    assignee: Optional[str] = None,
    limit: int = TASK_LIMIT,
) -> QueryResult:
    """
    Return tasks newest first, narrowed by exact-match fields.

    With a `user_id` only that user's rows come back; `None` reads across users.
    """
    eq = _filters(user_id=user_id, status=status, project=project, priority=priority, assignee=assignee)
    return run_query(store, Query("tasks", eq=eq, sort="-created_at", limit=limit))


def get_task(store: StoreClient, task_id: str) -> QueryResult:
    result = run_query(store, Query("tasks", eq={"id": task_id}, limit=1))
    if not result.ok:
        return result
    return QueryResult(data=result.data[0] if result.data else None)


def list_projects(store: StoreClient, user_id: str) -> QueryResult:
    return run_query(store, Query("projects", eq={"user_id": user_id}, sort="-created_at"))


# PUBLIC_INTERFACE
def list_time_entries(
    store: StoreClient,
    user_id: Optional[str] = None,
    project_id: Optional[str] = None,
    since: Optional[date] = None,
    limit: Optional[int] = TIME_ENTRY_LIMIT,
    columns: str = "*",
) -> QueryResult:
    """
    Return time entries, most recent date first.

    `since` is the only range predicate (date >= since). Passing `user_id=None`
    reads across all users, which is what the time summary does.
    """
    gte = {"date": since.isoformat()} if since is not None else {}
    query = Query(
        "time_entries",
        columns=columns,
        eq=_filters(user_id=user_id, project_id=project_id),
        gte=gte,
        sort="-date",
        limit=limit,
    )
    return run_query(store, query)


def list_files(
    store: StoreClient,
    user_id: str,
    project_id: Optional[str] = None,
    file_type: Optional[str] = None,
    is_archived: Optional[bool] = None,
) -> QueryResult:
    eq = {"user_id": user_id, **_filters(project_id=project_id, file_type=file_type, is_archived=is_archived)}
    return run_query(store, Query("files", eq=eq, sort="-created_at"))


def list_clients(store: StoreClient, user_id: Optional[str] = None) -> QueryResult:
    return run_query(store, Query("clients", eq=_filters(user_id=user_id), sort="-created_at"))


def list_client_notes(store: StoreClient, client_id: str) -> QueryResult:
    return run_query(store, Query("client_notes", eq={"client_id": client_id}, sort="-created_at"))


def list_channels(store: StoreClient) -> QueryResult:
    return run_query(store, Query("channels", sort="-created_at"))


def list_messages(
    store: StoreClient,
    channel_id: Optional[str] = None,
    limit: int = MESSAGE_LIMIT,
) -> QueryResult:
    return run_query(
        store,
        Query("messages", eq=_filters(channel_id=channel_id), sort="-created_at", limit=limit),
    )


# PUBLIC_INTERFACE
def list_message_authors(store: StoreClient, channel_ids: Sequence[str]) -> QueryResult:
    """
    Return (channel_id, user_id) pairs for every message in `channel_ids`.

    One batched query covers all channels, so enriching N channels costs one
    round trip instead of N.
    """
    if not channel_ids:
        return QueryResult(data=[])
    return run_query(
        store,
        Query("messages", columns="channel_id,user_id", in_={"channel_id": list(channel_ids)}),
    )


def list_tickets(store: StoreClient, user_id: str) -> QueryResult:
    return run_query(store, Query("tickets", eq={"submitted_by": user_id}, sort="-created_at"))


def list_resources(store: StoreClient, user_id: str) -> QueryResult:
    # No declared order: the assigner applies its own tie-break
    return run_query(store, Query("resources", eq={"user_id": user_id}))


def list_integration_actions(store: StoreClient, user_id: str) -> QueryResult:
    return run_query(store, Query("integration_actions", eq={"user_id": user_id}, sort="-created_at"))


def list_notifications(store: StoreClient, user_id: str) -> QueryResult:
    return run_query(store, Query("notifications", eq={"user_id": user_id}, sort="-created_at"))


def list_team_members(store: StoreClient, user_id: str) -> QueryResult:
    return run_query(store, Query("team_members", eq={"user_id": user_id}, sort="-created_at"))


def list_risks(store: StoreClient) -> QueryResult:
    return run_query(store, Query("risks", sort="-risk_score"))


def get_risk(store: StoreClient, risk_id: str) -> QueryResult:
    result = run_query(store, Query("risks", columns="probability,impact", eq={"id": risk_id}, limit=1))
    if not result.ok:
        return result
    return QueryResult(data=result.data[0] if result.data else None)


def list_budgets(store: StoreClient) -> QueryResult:
    return run_query(
        store,
        Query("budgets", columns="id,project_id,total,spent,updated_at", sort="-updated_at"),
    )


def list_expenses(store: StoreClient, limit: int = EXPENSE_LIMIT) -> QueryResult:
    return run_query(store, Query("expenses", sort="-date", limit=limit))


def list_knowledge_pages(store: StoreClient) -> QueryResult:
    return run_query(
        store,
        Query("knowledge_pages", eq={"is_published": True, "is_archived": False}, sort="-updated_at"),
    )
