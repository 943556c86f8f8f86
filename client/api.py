"""
client/api.py -- HTTP client for the authgate API.

AuthClient is transport only: it sends requests and unwraps the
{success, message, data} envelope. Persisting the token is SessionGuard's
job, not this module's.

Every failure surfaces as ClientError. The message is the server's envelope
message when there is one, otherwise a per-operation fallback. Transport
errors (connection refused, timeout) are logged and converted the same way.

The http session is injectable: production uses a requests.Session; tests
pass FastAPI's TestClient, which speaks the same get/post interface.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

logger = logging.getLogger("authgate.client")

_TIMEOUT = 10


class ClientError(Exception):
    """A failed API call. status_code is None when no response was received."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthClient:
    """Thin wrapper over the /auth endpoints.

    Usage:
        client = AuthClient("http://localhost:5000/api")
        envelope = client.login("annlee", "secret1")
        token = envelope["data"]["token"]
        profile = client.get_current_user(token)
    """

    def __init__(self, base_url: str, session: Any = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._session = session if session is not None else requests.Session()

    def register(self, full_name: str, email: str, username: str, password: str) -> dict:
        """POST /auth/register. Returns the full success envelope."""
        body = {"full_name": full_name, "email": email, "username": username, "password": password}
        return self._call("post", "/auth/register", "Registration failed", json=body)

    def login(self, identifier: str, password: str) -> dict:
        """POST /auth/login. identifier may be a username or an email."""
        body = {"identifier": identifier, "password": password}
        return self._call("post", "/auth/login", "Login failed", json=body)

    def get_current_user(self, token: str) -> dict:
        """GET /auth/me with the bearer token. Returns the full success envelope."""
        if not token:
            raise ClientError("No token found")
        headers = {"Authorization": f"Bearer {token}"}
        return self._call("get", "/auth/me", "Failed to get user data", headers=headers)

    def _call(self, method: str, path: str, fallback: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            resp = getattr(self._session, method)(url, timeout=_TIMEOUT, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method.upper(), path, exc)
            raise ClientError(fallback) from exc

        try:
            payload = resp.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if resp.status_code >= 400 or not payload.get("success"):
            raise ClientError(payload.get("message") or fallback, resp.status_code)
        return payload
