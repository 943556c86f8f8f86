"""
api/main.py -- FastAPI application entry point for authgate.

Run with:  uvicorn asgi:app --reload --port 5000

Middleware stack (outermost to innermost):
  1. CORSMiddleware  -- the browser front end runs on a different origin
  2. log_requests    -- method, path, status, latency per request

Lifespan opens the UserStore on startup and disposes of it on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from auth.errors import (
    AuthenticationError,
    AuthError,
    ConflictError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from auth.store import UserStore
from core.config import get_settings

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("authgate.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the user store for the lifetime of the server."""
    logger.info("authgate API starting up")
    app.state.user_store = UserStore(_settings.database_url)
    logger.info("User store initialized")

    yield

    app.state.user_store.close()
    logger.info("authgate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="authgate API",
    description="Username/email and password registration, login, and profile lookup.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same {success: false, message} envelope so clients
# can show the message without inspecting the status code first.
# ---------------------------------------------------------------------------

_STATUS_BY_ERROR: dict[type[AuthError], int] = {
    ValidationError: 400,
    ConflictError: 400,
    AuthenticationError: 401,
    NotFoundError: 404,
    UnexpectedError: 500,
}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render a credential-service error with the status its class maps to."""
    status_code = _STATUS_BY_ERROR.get(type(exc), 500)
    if status_code == 401:
        logger.info("Authentication failure on %s %s", request.method, request.url.path)
    return _error_response(status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or oversized fields -- same 400 envelope as service validation."""
    logger.info("Request validation failed on %s: %s", request.url.path, exc.errors())
    return _error_response(400, "Invalid request body")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (404 route, 405 method) in the standard envelope."""
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback is logged server side only; the client receives a generic
    message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness and whether the user store answers a query."""
    components = {"app": "ok", "database": "ok"}
    try:
        request.app.state.user_store.get_by_id("")
    except SQLAlchemyError:
        logger.exception("Health check: database unavailable")
        components["database"] = "error"
    return HealthResponse(version=VERSION, components=components)
