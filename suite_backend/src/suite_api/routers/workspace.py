from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from .. import readers
from ..assignment import NoAvailableResource, ResourceConflict, assign_resource
from ..auth import require_session
from ..dashboard import get_dashboard_stats
from ..notifications import project_notifications
from ..profiles import SessionIdentity, load_profile
from ..schemas import AssignmentRequest
from ..store import StoreClient, get_store
from ..utils import materialize, success_envelope

router = APIRouter(prefix="/api", tags=["workspace"])


# PUBLIC_INTERFACE
@router.get(
    "/dashboard/stats",
    summary="Dashboard Stats",
    description="Completed tasks, hours tracked, open issues and team size for the caller.",
)
def dashboard_stats(
    session: SessionIdentity = Depends(require_session),
    store: StoreClient = Depends(get_store),
):
    return success_envelope(get_dashboard_stats(store, session.user_id).to_dict())


# PUBLIC_INTERFACE
@router.get(
    "/integrations/notifications",
    summary="Integration Notifications",
    description="The caller's integration actions shown as notifications.",
)
def integration_notifications(
    session: SessionIdentity = Depends(require_session),
    store: StoreClient = Depends(get_store),
):
    actions = materialize(readers.list_integration_actions(store, session.user_id).unwrap())
    notifications = project_notifications(actions)
    return success_envelope(notifications, total=len(notifications))


# PUBLIC_INTERFACE
@router.post(
    "/resources/assign",
    summary="Assign Resource",
    description="Point the lowest-id available resource of the assignee at the target with full allocation.",
    responses={404: {"description": "No available resource"}, 409: {"description": "Lost a concurrent assignment"}},
)
def assign(
    payload: AssignmentRequest,
    session: SessionIdentity = Depends(require_session),
    store: StoreClient = Depends(get_store),
):
    assignee_id = payload.assignee_id or session.user_id
    try:
        resource = assign_resource(store, payload.target_id, assignee_id)
    except NoAvailableResource as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ResourceConflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return success_envelope(resource)


# PUBLIC_INTERFACE
@router.get("/profile", summary="Current Profile", description="The caller's identity and profile row.")
def profile(
    session: SessionIdentity = Depends(require_session),
    store: StoreClient = Depends(get_store),
):
    row = load_profile(store, session.user_id).unwrap()
    return success_envelope({"id": session.user_id, "email": session.email, "profile": row})
