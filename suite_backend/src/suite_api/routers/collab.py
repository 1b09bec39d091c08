from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from fastapi import APIRouter, Depends, Query

from .. import readers, writers
from ..auth import require_session
from ..profiles import SessionIdentity
from ..schemas import MessageCreate
from ..store import StoreClient, get_store
from ..utils import materialize, success_envelope

router = APIRouter(prefix="/api/collab", tags=["collab"])


def with_member_counts(
    channels: Iterable[Mapping[str, Any]],
    authors: Iterable[Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Attach `member_count` to each channel: the number of distinct message
    authors, never less than 1 (the creator).
    """
    members: Dict[Any, Set[Any]] = defaultdict(set)
    for row in authors:
        members[row.get("channel_id")].add(row.get("user_id"))
    return [{**c, "member_count": max(1, len(members.get(c.get("id"), ())))} for c in channels]


def message_view(message: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": message.get("id"),
        "channel_id": message.get("channel_id"),
        "user_id": message.get("user_id"),
        "content": message.get("content") or "Message content",
        "message_type": message.get("type") or "text",
        "thread_id": message.get("parent_id"),
        "mentions": message.get("mentions") or [],
        "created_at": message.get("created_at"),
    }


# PUBLIC_INTERFACE
@router.get(
    "/channels",
    summary="List Channels",
    description="Channels, newest first, each with a member count from one batched message query.",
)
def list_channels(store: StoreClient = Depends(get_store)):
    channels = materialize(readers.list_channels(store).unwrap())
    authors = readers.list_message_authors(store, [c["id"] for c in channels]).unwrap()
    enriched = with_member_counts(channels, materialize(authors))
    return success_envelope(enriched, total=len(enriched))


# PUBLIC_INTERFACE
@router.get("/messages", summary="List Messages", description="Latest 100 messages, optionally for one channel.")
def list_messages(
    channel_id: Optional[str] = Query(None, description="Only messages in this channel"),
    store: StoreClient = Depends(get_store),
):
    messages = [message_view(m) for m in materialize(readers.list_messages(store, channel_id).unwrap())]
    return success_envelope(messages, total=len(messages))


# PUBLIC_INTERFACE
@router.post("/messages", summary="Send Message")
def send_message(
    payload: MessageCreate,
    session: SessionIdentity = Depends(require_session),
    store: StoreClient = Depends(get_store),
):
    created = writers.send_message(store, payload.channel_id, session.user_id, payload.content).unwrap()
    return success_envelope(message_view(created))
