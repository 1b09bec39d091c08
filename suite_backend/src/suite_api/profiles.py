from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .readers import run_query
from .store import Query, QueryResult, StoreClient

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Missing or invalid session; surfaced as HTTP 401."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)
        self.message = message


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class SessionIdentity:
    """Who is calling, as reported by the store's auth service."""

    user_id: str
    email: Optional[str] = None


# PUBLIC_INTERFACE
def resolve_session(store: StoreClient, token: Optional[str]) -> SessionIdentity:
    """
    Exchange a bearer token for the caller's identity.

    Raises:
        AuthenticationError if the token is missing or the store does not
        recognise it. StoreError propagates for any other remote failure.
    """
    if not token:
        raise AuthenticationError("Not authenticated")

    user = store.get_user(token)
    if not user or not user.get("id"):
        logger.info("Rejected session token")
        raise AuthenticationError("Invalid or expired session")
    return SessionIdentity(user_id=str(user["id"]), email=user.get("email"))


# PUBLIC_INTERFACE
def load_profile(store: StoreClient, user_id: str) -> QueryResult:
    """Return the user's profile row (or None if there is none)."""
    result = run_query(store, Query("profiles", eq={"id": user_id}, limit=1))
    if not result.ok:
        return result
    return QueryResult(data=result.data[0] if result.data else None)
