"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Bearer tokens only: Authorization: Bearer <jwt>. The token is verified with
the app's TokenIssuer (signature, iss, aud, exp) and the subject is looked up
in the UserStore, so a soft-deleted user's outstanding tokens stop working.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises ResultError (401 envelope) if
unauthenticated.

Layer rule: no imports from api/ or cache/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import User
from core.messages import MessageKey
from core.results import Result, ResultError, StatusCode


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def try_get_current_user(request: Request) -> User | None:
    """Authenticate the request via its Bearer token. Never raises."""
    token = _bearer_token(request)
    if token is None:
        return None
    payload = request.app.state.token_issuer.decode(token)
    if payload is None:
        return None
    return request.app.state.user_store.get_by_id(payload["sub"])


def get_current_user(request: Request) -> User:
    """Require authentication.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise ResultError(
            Result.fail(StatusCode.UNAUTHORIZED, MessageKey.UNAUTHORIZED),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
