"""
Resource assignment.

Picks an available resource for an assignee and points it at a target
project with full allocation. The claim is a single guarded update: it only
applies if the resource still holds the values that were read, so two callers
racing for the same resource cannot both win.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from .models import ResourceRecord
from .readers import list_resources
from .store import StoreClient

logger = logging.getLogger(__name__)

AVAILABLE = "available"
FULL_ALLOCATION = 100


class AssignmentError(Exception):
    """Base class for assignment failures."""


class NoAvailableResource(AssignmentError):
    def __init__(self, assignee_id: str) -> None:
        super().__init__(f"No available resource for assignee {assignee_id}")
        self.assignee_id = assignee_id


class ResourceConflict(AssignmentError):
    def __init__(self, resource_id: Any) -> None:
        super().__init__(f"Resource {resource_id} was modified by another assignment")
        self.resource_id = resource_id


def _id_key(resource: ResourceRecord) -> tuple:
    # Numeric ids, including digit-only strings, sort numerically and come
    # first; everything else by its string form
    rid = resource.get("id")
    if isinstance(rid, int) and not isinstance(rid, bool):
        return (0, rid, "")
    if isinstance(rid, str) and rid.strip().isdigit():
        return (0, int(rid), "")
    return (1, 0, str(rid))


# PUBLIC_INTERFACE
def select_resource(resources: Iterable[ResourceRecord]) -> Optional[ResourceRecord]:
    """
    Return the available resource with the lowest id, or None.
    Digit-only string ids compare as numbers, so "9" comes before "10".

    The order the store returns rows in plays no part in the choice.
    """
    candidates = [r for r in resources if r.get("availability") == AVAILABLE]
    if not candidates:
        return None
    return min(candidates, key=_id_key)


# PUBLIC_INTERFACE
def claim_resource(store: StoreClient, resource: ResourceRecord, target_id: str) -> ResourceRecord:
    """
    Point `resource` at `target_id` with full allocation, guarded by the values
    it was read with. Raises ResourceConflict if the row changed in between.
    """
    guard = {
        "id": resource["id"],
        "availability": resource.get("availability"),
        "allocation": resource.get("allocation"),
        "current_project_id": resource.get("current_project_id"),
    }
    updated = store.update(
        "resources",
        {"current_project_id": target_id, "allocation": FULL_ALLOCATION},
        guard,
    )
    if not updated:
        logger.warning("Assignment of resource %s to %s lost a race", resource["id"], target_id)
        raise ResourceConflict(resource["id"])
    return updated[0]


# PUBLIC_INTERFACE
def assign_resource(store: StoreClient, target_id: str, assignee_id: str) -> ResourceRecord:
    """
    Assign one of `assignee_id`'s available resources to `target_id`.

    One read and one write. Raises NoAvailableResource (nothing is mutated)
    when the assignee has no available resource, ResourceConflict when a
    concurrent assignment got there first, and StoreError on remote failure.
    """
    resources = list_resources(store, assignee_id).unwrap()
    chosen = select_resource(resources)
    if chosen is None:
        raise NoAvailableResource(assignee_id)
    return claim_resource(store, chosen, target_id)
