"""
Entity writers: create/update/delete functions, each a single remote mutation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from .models import ProfileRecord, TaskRecord
from .store import QueryResult, StoreClient, StoreError

logger = logging.getLogger(__name__)


def insert_row(store: StoreClient, table: str, values: Mapping[str, Any]) -> QueryResult:
    """Insert one row; data is the stored row."""
    try:
        return QueryResult(data=store.insert(table, values))
    except StoreError as e:
        logger.error("Error creating %s row: %s", table, e.message)
        return QueryResult(error=e)


def update_row(store: StoreClient, table: str, row_id: Any, values: Mapping[str, Any]) -> QueryResult:
    """Update the row with `row_id`; data is the updated row, or None if no row matched."""
    try:
        rows = store.update(table, values, {"id": row_id})
    except StoreError as e:
        logger.error("Error updating %s %s: %s", table, row_id, e.message)
        return QueryResult(error=e)
    return QueryResult(data=rows[0] if rows else None)


def delete_row(store: StoreClient, table: str, row_id: Any) -> QueryResult:
    """Delete the row with `row_id`; data is True if a row was removed."""
    try:
        return QueryResult(data=store.delete(table, {"id": row_id}) > 0)
    except StoreError as e:
        logger.error("Error deleting %s %s: %s", table, row_id, e.message)
        return QueryResult(error=e)


# Tasks

def create_task(store: StoreClient, task: TaskRecord) -> QueryResult:
    return insert_row(store, "tasks", task)


def update_task(store: StoreClient, task_id: str, updates: TaskRecord) -> QueryResult:
    return update_row(store, "tasks", task_id, updates)


def delete_task(store: StoreClient, task_id: str) -> QueryResult:
    return delete_row(store, "tasks", task_id)


# Projects

def create_project(store: StoreClient, project: Mapping[str, Any]) -> QueryResult:
    return insert_row(store, "projects", project)


def update_project(store: StoreClient, project_id: str, updates: Mapping[str, Any]) -> QueryResult:
    return update_row(store, "projects", project_id, updates)


def delete_project(store: StoreClient, project_id: str) -> QueryResult:
    return delete_row(store, "projects", project_id)


# Time entries

def create_time_entry(store: StoreClient, entry: Mapping[str, Any]) -> QueryResult:
    """Create a time entry. Negative `time_spent` is clamped to zero."""
    values: Dict[str, Any] = dict(entry)
    if values.get("time_spent") is not None:
        values["time_spent"] = max(int(values["time_spent"]), 0)
    return insert_row(store, "time_entries", values)


def update_time_entry(store: StoreClient, entry_id: str, updates: Mapping[str, Any]) -> QueryResult:
    return update_row(store, "time_entries", entry_id, updates)


def delete_time_entry(store: StoreClient, entry_id: str) -> QueryResult:
    return delete_row(store, "time_entries", entry_id)


# Files

def create_file_record(store: StoreClient, record: Mapping[str, Any]) -> QueryResult:
    return insert_row(store, "files", record)


def update_file_record(store: StoreClient, file_id: str, updates: Mapping[str, Any]) -> QueryResult:
    return update_row(store, "files", file_id, updates)


def archive_file(store: StoreClient, file_id: str) -> QueryResult:
    return update_row(store, "files", file_id, {"is_archived": True})


def delete_file_record(store: StoreClient, file_id: str) -> QueryResult:
    return delete_row(store, "files", file_id)


# Clients (CRM)

def create_client(store: StoreClient, client: Mapping[str, Any]) -> QueryResult:
    return insert_row(store, "clients", client)


def update_client(store: StoreClient, client_id: str, updates: Mapping[str, Any]) -> QueryResult:
    return update_row(store, "clients", client_id, updates)


def delete_client(store: StoreClient, client_id: str) -> QueryResult:
    return delete_row(store, "clients", client_id)


def create_client_note(store: StoreClient, note: Mapping[str, Any]) -> QueryResult:
    return insert_row(store, "client_notes", note)


def update_client_note(store: StoreClient, note_id: str, updates: Mapping[str, Any]) -> QueryResult:
    return update_row(store, "client_notes", note_id, updates)


def delete_client_note(store: StoreClient, note_id: str) -> QueryResult:
    return delete_row(store, "client_notes", note_id)


# Team chat

def create_channel(store: StoreClient, channel: Mapping[str, Any]) -> QueryResult:
    return insert_row(store, "channels", channel)


def send_message(store: StoreClient, channel_id: str, user_id: str, content: str) -> QueryResult:
    return insert_row(
        store,
        "messages",
        {"channel_id": channel_id, "user_id": user_id, "content": content, "type": "text"},
    )


def delete_message(store: StoreClient, message_id: str) -> QueryResult:
    return delete_row(store, "messages", message_id)


# Ticketing

def create_ticket(store: StoreClient, ticket: Mapping[str, Any]) -> QueryResult:
    return insert_row(store, "tickets", ticket)


def update_ticket(store: StoreClient, ticket_id: str, updates: Mapping[str, Any]) -> QueryResult:
    return update_row(store, "tickets", ticket_id, updates)


def delete_ticket(store: StoreClient, ticket_id: str) -> QueryResult:
    return delete_row(store, "tickets", ticket_id)


# Resources

def create_resource(store: StoreClient, resource: Mapping[str, Any]) -> QueryResult:
    return insert_row(store, "resources", resource)


def update_resource(store: StoreClient, resource_id: str, updates: Mapping[str, Any]) -> QueryResult:
    return update_row(store, "resources", resource_id, updates)


def delete_resource(store: StoreClient, resource_id: str) -> QueryResult:
    return delete_row(store, "resources", resource_id)


# Risks

def create_risk(store: StoreClient, risk: Mapping[str, Any]) -> QueryResult:
    return insert_row(store, "risks", risk)


def update_risk(store: StoreClient, risk_id: str, updates: Mapping[str, Any]) -> QueryResult:
    return update_row(store, "risks", risk_id, updates)


def delete_risk(store: StoreClient, risk_id: str) -> QueryResult:
    return delete_row(store, "risks", risk_id)


# Knowledge pages

def create_knowledge_page(store: StoreClient, page: Mapping[str, Any]) -> QueryResult:
    return insert_row(store, "knowledge_pages", page)


def update_knowledge_page(store: StoreClient, page_id: str, updates: Mapping[str, Any]) -> QueryResult:
    return update_row(store, "knowledge_pages", page_id, updates)


def archive_knowledge_page(store: StoreClient, page_id: str) -> QueryResult:
    """Soft delete: pages are archived, never removed."""
    return update_row(store, "knowledge_pages", page_id, {"is_archived": True})


# Notifications and profiles

def mark_notification_read(store: StoreClient, notification_id: str) -> QueryResult:
    return update_row(store, "notifications", notification_id, {"read": True})


def update_profile(store: StoreClient, user_id: str, updates: ProfileRecord) -> QueryResult:
    return update_row(store, "profiles", user_id, updates)
