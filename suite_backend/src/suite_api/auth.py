from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .profiles import SessionIdentity, resolve_session
from .store import StoreClient, get_store

_security = HTTPBearer(auto_error=False)


# PUBLIC_INTERFACE
def bearer_token(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
) -> Optional[str]:
    """Return the bearer token sent with the request, if any."""
    if creds is None or not creds.credentials:
        return None
    return creds.credentials


# PUBLIC_INTERFACE
def require_session(
    token: Optional[str] = Depends(bearer_token),
    store: StoreClient = Depends(get_store),
) -> SessionIdentity:
    """
    FastAPI dependency enforcing a valid store session.

    Usage:
        @router.get("/stats")
        def stats(session: SessionIdentity = Depends(require_session)): ...

    Raises:
        AuthenticationError (mapped to 401 with WWW-Authenticate: Bearer) if
        the token is missing or invalid.
    """
    return resolve_session(store, token)
