"""
auth/dependencies.py -- FastAPI Depends() helper for bearer-token authentication.

The client keeps its token locally and sends it as
    Authorization: Bearer <token>
on every protected request. get_current_user() validates the token (pure
signature + expiry check), then loads the identity it names from the store.

Failures raise auth.errors exceptions; api/main.py turns them into the
{success: false, message} envelope with the right status.

Layer rule: no imports from api/ or client/.
  This module may import from fastapi (for Request) because it is part of the
  FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.credentials import get_profile
from auth.errors import AuthenticationError
from auth.models import User
from auth.tokens import validate_token

NO_TOKEN_MESSAGE = "Not authorized, no token"


def bearer_token(request: Request) -> str | None:
    """Return the raw token from the Authorization header, or None if absent."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def get_current_user(request: Request) -> User:
    """Require a valid bearer token and return the User it resolves to.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)): ...

    Raises AuthenticationError (401) when the header is missing or the token
    is invalid/expired, NotFoundError (404) when the user no longer exists.
    """
    token = bearer_token(request)
    if token is None:
        raise AuthenticationError(NO_TOKEN_MESSAGE)
    user_id = validate_token(token)
    return get_profile(request.app.state.user_store, user_id)
