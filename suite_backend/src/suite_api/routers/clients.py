from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .. import readers, utils, writers
from ..schemas import ClientCreate, ClientUpdate
from ..store import StoreClient, get_store
from ..utils import materialize, success_envelope

CRUD_METHODS = ("GET", "POST", "PUT", "DELETE")

router = APIRouter(prefix="/api/clients/contacts", tags=["clients"])


def _require_id(client_id: Optional[str]) -> str:
    if not client_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Client ID is required")
    return client_id


# PUBLIC_INTERFACE
@router.get("", summary="List Clients")
def list_clients(
    user_id: Optional[str] = Query(None, description="Only contacts owned by this user"),
    store: StoreClient = Depends(get_store),
):
    return success_envelope(materialize(readers.list_clients(store, user_id).unwrap()))


# PUBLIC_INTERFACE
@router.post("", summary="Create Client")
def create_client(payload: ClientCreate, store: StoreClient = Depends(get_store)):
    return success_envelope(writers.create_client(store, payload.to_row()).unwrap())


# PUBLIC_INTERFACE
@router.put("", summary="Update Client", responses={400: {"description": "Missing id"}})
def update_client(
    payload: ClientUpdate,
    client_id: Optional[str] = Query(None, alias="id"),
    store: StoreClient = Depends(get_store),
):
    updated = writers.update_client(store, _require_id(client_id), payload.to_row()).unwrap()
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return success_envelope(updated)


# PUBLIC_INTERFACE
@router.delete("", summary="Delete Client", responses={400: {"description": "Missing id"}})
def delete_client(
    client_id: Optional[str] = Query(None, alias="id"),
    store: StoreClient = Depends(get_store),
):
    writers.delete_client(store, _require_id(client_id)).unwrap()
    return {"success": True, "message": "Client deleted successfully"}


@router.api_route("", methods=["PATCH"], include_in_schema=False)
def method_not_allowed():
    return utils.method_not_allowed(CRUD_METHODS)
