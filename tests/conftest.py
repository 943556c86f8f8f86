"""
tests/conftest.py -- Shared test fixtures for authgate.

This module provides:
  - _make_test_store(): isolated in-memory UserStore
  - _patch_lifespan(): wires the test store into app.state, bypassing real startup
  - api_client: TestClient over the real FastAPI app
  - store: a fresh plain in-memory UserStore for unit tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
app fixture because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread.

The DEBUG env var must be set before any auth module import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import UserStore

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_store() -> UserStore:
    """Create a named shared-memory store unique to the calling fixture."""
    return UserStore(db_url=f"sqlite:///file:test_auth_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(user_store: UserStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    """Fresh in-memory UserStore per test."""
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def api_client() -> Generator[tuple[TestClient, UserStore], None, None]:
    """Yield (client, user_store) backed by an empty, isolated store.

    Function-scoped: registration tests mutate the store, so every test
    starts from zero users.
    """
    user_store = _make_test_store()
    app.router.lifespan_context = _patch_lifespan(user_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, user_store

    user_store.close()


ANN = {"full_name": "Ann Lee", "email": "ann@x.com", "username": "annlee", "password": "secret1"}


@pytest.fixture
def registered(api_client) -> tuple[TestClient, UserStore, dict]:
    """api_client with Ann already registered. Yields (client, store, register response data)."""
    client, user_store = api_client
    resp = client.post("/api/auth/register", json=ANN)
    assert resp.status_code == 201
    return client, user_store, resp.json()["data"]
