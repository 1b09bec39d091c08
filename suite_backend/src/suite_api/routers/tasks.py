from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .. import readers, utils, writers
from ..readers import TASK_LIMIT
from ..schemas import TaskCreate, TaskUpdate
from ..store import StoreClient, get_store
from ..utils import materialize, success_envelope

CRUD_METHODS = ("GET", "POST", "PUT", "DELETE")

router = APIRouter(
    prefix="/api/taskmaster/tasks",
    tags=["taskmaster"],
)


def _require_id(task_id: Optional[str]) -> str:
    if not task_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Task ID is required")
    return task_id


# PUBLIC_INTERFACE
@router.get(
    "",
    summary="List Tasks",
    description=(
        "List the newest tasks (at most 50) with optional exact-match filters.\n\n"
        "Query parameters:\n"
        "- user_id: only tasks owned by this user\n"
        "- status, project, priority, assignee: exact-match filters\n\n"
        "Returns the rows with total/page/per_page."
    ),
    responses={200: {"description": "List retrieved"}, 500: {"description": "Store error"}},
)
def list_tasks(
    user_id: Optional[str] = Query(None, description="Owner of the tasks"),
    status_: Optional[str] = Query(None, alias="status", description="Filter by status"),
    project: Optional[str] = Query(None, description="Filter by project id"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    assignee: Optional[str] = Query(None, description="Filter by assignee"),
    store: StoreClient = Depends(get_store),
):
    tasks = readers.list_tasks(
        store, user_id, status=status_, project=project, priority=priority, assignee=assignee
    ).unwrap()
    tasks = materialize(tasks)
    return success_envelope(tasks, total=len(tasks), page=1, per_page=TASK_LIMIT)


# PUBLIC_INTERFACE
@router.post("", summary="Create Task", description="Create a task and return the stored row.")
def create_task(payload: TaskCreate, store: StoreClient = Depends(get_store)):
    created = writers.create_task(store, payload.to_row()).unwrap()
    return success_envelope(created)


# PUBLIC_INTERFACE
@router.put(
    "",
    summary="Update Task",
    description="Update the task given by `?id=`; only the fields sent are changed.",
    responses={400: {"description": "Missing id"}, 404: {"description": "Task not found"}},
)
def update_task(
    payload: TaskUpdate,
    task_id: Optional[str] = Query(None, alias="id"),
    store: StoreClient = Depends(get_store),
):
    updated = writers.update_task(store, _require_id(task_id), payload.to_row()).unwrap()
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return success_envelope(updated)


# PUBLIC_INTERFACE
@router.delete(
    "",
    summary="Delete Task",
    responses={400: {"description": "Missing id"}, 404: {"description": "Task not found"}},
)
def delete_task(
    task_id: Optional[str] = Query(None, alias="id"),
    store: StoreClient = Depends(get_store),
):
    deleted = writers.delete_task(store, _require_id(task_id)).unwrap()
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return {"success": True, "message": "Task deleted successfully"}


@router.api_route("", methods=["PATCH"], include_in_schema=False)
def method_not_allowed():
    return utils.method_not_allowed(CRUD_METHODS)
