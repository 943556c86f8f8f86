"""
api/routes/v1/auth.py -- Registration, login, and profile REST endpoints.

Routes (mounted under /api):
  POST /api/auth/register  -- create account; returns profile + token (201)
  POST /api/auth/login     -- identifier (email or username) + password; returns profile + token
  GET  /api/auth/me        -- current profile (requires Authorization: Bearer)
  POST /api/auth/logout    -- stateless acknowledgement; the client drops its token

Security:
  check_credentials() (via login_user) provides timing equalization -- never
  inline a lookup + verify_password() here.
  Unknown identifier and wrong password return the same 401 body.
  Cache-Control: no-store on every response that carries a token.

Errors are raised as auth.errors exceptions and rendered by the handlers in
api/main.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import (
    LoginData,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    ProfileData,
    RegisterData,
    RegisterRequest,
    RegisterResponse,
)
from auth.credentials import login_user, register_user
from auth.dependencies import get_current_user
from auth.models import User
from auth.store import UserStore

# Auth policy:
# - POST /api/auth/register: public
# - POST /api/auth/login:    public
# - POST /api/auth/logout:   public -- nothing to revoke server side
# - GET  /api/auth/me:       requires a valid bearer token (get_current_user)
router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and return its public fields plus a session token.

    400 for missing/invalid fields and for a taken email or username (the
    message says which). The password and its hash never appear in the body.
    """
    user_store: UserStore = request.app.state.user_store
    user, token = register_user(user_store, body.full_name, body.email, body.username, body.password)
    resp = JSONResponse(
        status_code=201,
        content=RegisterResponse(data=RegisterData(**user.public_fields(), token=token)).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username or email and password; return a fresh token."""
    user_store: UserStore = request.app.state.user_store
    user, token = login_user(user_store, body.identifier, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(data=LoginData(**user.public_fields(), token=token)).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
async def logout() -> MessageResponse:
    """Acknowledge a logout. Tokens are not tracked, so there is nothing to revoke."""
    return MessageResponse(message="Logged out")


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return the profile of the user the bearer token belongs to."""
    return MeResponse(data=ProfileData(**current_user.public_fields()))

