from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from .. import readers
from ..dashboard import get_time_summary
from ..store import StoreClient, get_store
from ..utils import materialize, success_envelope

router = APIRouter(prefix="/api/timetrack", tags=["timetrack"])


# PUBLIC_INTERFACE
@router.get("/entries", summary="List Time Entries", description="Most recent 100 time entries by date.")
def list_entries(
    user_id: Optional[str] = Query(None, description="Only entries logged by this user"),
    project_id: Optional[str] = Query(None, description="Filter by project id"),
    store: StoreClient = Depends(get_store),
):
    entries = materialize(readers.list_time_entries(store, user_id=user_id, project_id=project_id).unwrap())
    return success_envelope(entries, total=len(entries))


# PUBLIC_INTERFACE
@router.get(
    "/summary",
    summary="Time Summary",
    description="Hours logged today and this week (weeks start on Sunday), billable hours and a productivity score.",
)
def summary(store: StoreClient = Depends(get_store)):
    return success_envelope(get_time_summary(store))
