from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .. import readers, utils, writers
from ..schemas import KnowledgePageCreate, KnowledgePageUpdate
from ..store import StoreClient, get_store
from ..utils import materialize, slugify, success_envelope

CRUD_METHODS = ("GET", "POST", "PUT", "DELETE")

router = APIRouter(prefix="/api/knowledge/pages", tags=["knowledge"])


def _require_id(page_id: Optional[str]) -> str:
    if not page_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Page ID is required")
    return page_id


# PUBLIC_INTERFACE
@router.get("", summary="List Pages", description="Published, non-archived pages, most recently updated first.")
def list_pages(store: StoreClient = Depends(get_store)):
    return success_envelope(materialize(readers.list_knowledge_pages(store).unwrap()))


# PUBLIC_INTERFACE
@router.post("", summary="Create Page")
def create_page(payload: KnowledgePageCreate, store: StoreClient = Depends(get_store)):
    row = payload.to_row()
    if not row.get("slug"):
        row["slug"] = slugify(payload.title)
    return success_envelope(writers.create_knowledge_page(store, row).unwrap())


# PUBLIC_INTERFACE
@router.put("", summary="Update Page", description="A new title regenerates the slug unless one is sent.")
def update_page(
    payload: KnowledgePageUpdate,
    page_id: Optional[str] = Query(None, alias="id"),
    store: StoreClient = Depends(get_store),
):
    row = payload.to_row()
    if payload.title and not payload.slug:
        row["slug"] = slugify(payload.title)
    updated = writers.update_knowledge_page(store, _require_id(page_id), row).unwrap()
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return success_envelope(updated)


# PUBLIC_INTERFACE
@router.delete("", summary="Archive Page", description="Pages are archived, not removed.")
def archive_page(
    page_id: Optional[str] = Query(None, alias="id"),
    store: StoreClient = Depends(get_store),
):
    archived = writers.archive_knowledge_page(store, _require_id(page_id)).unwrap()
    if archived is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Page not found")
    return {"success": True, "message": "Page archived successfully"}


@router.api_route("", methods=["PATCH"], include_in_schema=False)
def method_not_allowed():
    return utils.method_not_allowed(CRUD_METHODS)
