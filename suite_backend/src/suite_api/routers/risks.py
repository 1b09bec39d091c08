from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .. import readers, utils, writers
from ..schemas import RiskCreate, RiskUpdate
from ..store import StoreClient, get_store
from ..utils import materialize, success_envelope

CRUD_METHODS = ("GET", "POST", "PUT", "DELETE")

router = APIRouter(prefix="/api/risks", tags=["risks"])


def _require_id(risk_id: Optional[str]) -> str:
    if not risk_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Risk ID is required")
    return risk_id


# PUBLIC_INTERFACE
@router.get("", summary="List Risks", description="All risks, highest risk_score first.")
def list_risks(store: StoreClient = Depends(get_store)):
    return success_envelope(materialize(readers.list_risks(store).unwrap()))


# PUBLIC_INTERFACE
@router.post("", summary="Create Risk", description="risk_score is computed as probability * impact.")
def create_risk(payload: RiskCreate, store: StoreClient = Depends(get_store)):
    row = payload.to_row()
    row["risk_score"] = payload.probability * payload.impact
    return success_envelope(writers.create_risk(store, row).unwrap())


# PUBLIC_INTERFACE
@router.put(
    "",
    summary="Update Risk",
    description="Changing probability or impact recomputes risk_score from the stored values.",
)
def update_risk(
    payload: RiskUpdate,
    risk_id: Optional[str] = Query(None, alias="id"),
    store: StoreClient = Depends(get_store),
):
    risk_id = _require_id(risk_id)
    row = payload.to_row()

    if payload.probability is not None or payload.impact is not None:
        current = readers.get_risk(store, risk_id).unwrap()
        if current:
            probability = payload.probability if payload.probability is not None else current.get("probability") or 0
            impact = payload.impact if payload.impact is not None else current.get("impact") or 0
            row["risk_score"] = probability * impact

    updated = writers.update_risk(store, risk_id, row).unwrap()
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Risk not found")
    return success_envelope(updated)


# PUBLIC_INTERFACE
@router.delete("", summary="Delete Risk")
def delete_risk(
    risk_id: Optional[str] = Query(None, alias="id"),
    store: StoreClient = Depends(get_store),
):
    writers.delete_risk(store, _require_id(risk_id)).unwrap()
    return {"success": True, "message": "Risk deleted successfully"}


@router.api_route("", methods=["PATCH"], include_in_schema=False)
def method_not_allowed():
    return utils.method_not_allowed(CRUD_METHODS)
