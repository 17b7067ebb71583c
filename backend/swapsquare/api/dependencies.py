"""Route Dependencies: marketplace access and bearer-token sessions.

Invariants:
    - Every authenticated route resolves its user through get_current_user
    - A missing, malformed or revoked token raises AuthError (401)
    - get_marketplace raises InfrastructureError until startup has built one

Design Decisions:
    - _sessions as module-level dict: single-process uvicorn, tokens are lost
      on restart and users sign in again
"""

import secrets

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from swapsquare.core.entities import UserRef
from swapsquare.core.errors import AuthError, InfrastructureError
from swapsquare.services.marketplace import Marketplace

_bearer = HTTPBearer(auto_error=False)

# Singleton (initialized on startup)
marketplace: Marketplace | None = None

_sessions: dict[str, UserRef] = {}


def init_marketplace(instance: Marketplace) -> Marketplace:
    global marketplace
    marketplace = instance
    return marketplace


def get_marketplace() -> Marketplace:
    if marketplace is None:
        raise InfrastructureError("Marketplace not initialized", "startup")
    return marketplace


def issue_token(user: UserRef) -> str:
    token = secrets.token_urlsafe(32)
    _sessions[token] = user
    return token


def revoke_token(token: str) -> UserRef | None:
    """Drop `token`; returns its user when no other token of theirs remains."""
    user = _sessions.pop(token, None)
    if user is None:
        return None
    if any(u.id == user.id for u in _sessions.values()):
        return None
    return user


def get_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthError("Not signed in")
    return credentials.credentials


def get_current_user(token: str = Depends(get_token)) -> UserRef:
    user = _sessions.get(token)
    if user is None:
        raise AuthError("Session expired, please sign in again")
    return user
