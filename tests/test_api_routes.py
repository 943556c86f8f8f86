"""
tests/test_api_routes.py -- Integration tests for the /api/auth routes.

These tests exercise the full stack: FastAPI routing -> credential service ->
UserStore -> response envelope. Unit testing the route functions alone would
miss the exception handlers that shape every error body.

Coverage:
  - Register: 201 happy path, stored password hashed, 400 for duplicates and bad input
  - Login: 200 by username and email, identical 401 for wrong password and unknown user
  - Me: 200 with bearer token, 401 without/with bad or expired token, 404 for vanished user
  - Unexpected storage failures -> 500 with a generic message
  - Health: 200, no auth

Fixtures used (from conftest.py):
  - api_client: (client, user_store) -- TestClient over an empty store
  - registered: (client, user_store, data) -- Ann already registered
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from auth.tokens import create_access_token, validate_token

ANN = {"full_name": "Ann Lee", "email": "ann@x.com", "username": "annlee", "password": "secret1"}


class TestRegister:
    def test_scenario_a_register_created(self, api_client) -> None:
        """Register Ann -> 201, token present, stored password is not the plaintext."""
        client, user_store = api_client
        resp = client.post("/api/auth/register", json=ANN)
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        data = body["data"]
        assert set(data) == {"_id", "full_name", "email", "username", "created_at", "token"}
        assert data["token"]
        assert data["username"] == "annlee"
        stored = user_store.get_by_id(data["_id"])
        assert stored.hashed_password != "secret1"
        assert resp.headers["cache-control"] == "no-store"

    def test_response_never_contains_password(self, api_client) -> None:
        client, _ = api_client
        resp = client.post("/api/auth/register", json=ANN)
        assert "secret1" not in resp.text
        assert "password" not in resp.text

    def test_scenario_b_duplicate_username(self, registered) -> None:
        client, _, _ = registered
        resp = client.post("/api/auth/register", json={**ANN, "email": "other@x.com"})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Username already taken"}

    def test_duplicate_email(self, registered) -> None:
        client, _, _ = registered
        resp = client.post("/api/auth/register", json={**ANN, "username": "someoneelse"})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Email already registered"}

    def test_missing_field(self, api_client) -> None:
        client, _ = api_client
        body = {k: v for k, v in ANN.items() if k != "full_name"}
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Please provide all required fields"

    def test_short_password(self, api_client) -> None:
        client, _ = api_client
        resp = client.post("/api/auth/register", json={**ANN, "password": "12345"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Password must be at least 6 characters long"

    def test_username_shaped_like_email_rejected(self, registered) -> None:
        client, _, _ = registered
        body = {"full_name": "Mal", "email": "mal@x.com", "username": "ann@x.com", "password": "secret2"}
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Username cannot contain @"}

    def test_malformed_body(self, api_client) -> None:
        client, _ = api_client
        resp = client.post(
            "/api/auth/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_storage_failure_returns_generic_500(self, api_client) -> None:
        client, user_store = api_client
        with patch.object(
            user_store, "get_by_email", side_effect=OperationalError("SELECT", {}, Exception("disk I/O error"))
        ):
            resp = client.post("/api/auth/register", json=ANN)
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Server error during registration"}
        assert "disk" not in resp.text


class TestLogin:
    def test_scenario_c_wrong_password(self, registered) -> None:
        client, _, _ = registered
        resp = client.post("/api/auth/login", json={"identifier": "annlee", "password": "wrong"})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Invalid credentials"}

    def test_unknown_identifier_same_body_as_wrong_password(self, registered) -> None:
        client, _, _ = registered
        wrong_pw = client.post("/api/auth/login", json={"identifier": "annlee", "password": "wrong"})
        unknown = client.post("/api/auth/login", json={"identifier": "nobody", "password": "secret1"})
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.json() == unknown.json()

    def test_scenario_d_login_by_email(self, registered) -> None:
        client, _, data = registered
        resp = client.post("/api/auth/login", json={"identifier": "ann@x.com", "password": "secret1"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert set(body["data"]) == {"_id", "full_name", "email", "username", "token"}
        assert validate_token(body["data"]["token"]) == data["_id"]
        assert resp.headers["cache-control"] == "no-store"

    def test_login_by_username(self, registered) -> None:
        client, _, data = registered
        resp = client.post("/api/auth/login", json={"identifier": "annlee", "password": "secret1"})
        assert resp.status_code == 200
        assert resp.json()["data"]["_id"] == data["_id"]

    def test_missing_password(self, registered) -> None:
        client, _, _ = registered
        resp = client.post("/api/auth/login", json={"identifier": "annlee"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Please provide username/email and password"

    def test_oversized_password_is_invalid_credentials(self, registered) -> None:
        client, _, _ = registered
        resp = client.post("/api/auth/login", json={"identifier": "annlee", "password": "x" * 200})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Invalid credentials"}


class TestMe:
    def test_returns_profile(self, registered) -> None:
        client, _, data = registered
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"] == {
            "_id": data["_id"],
            "full_name": "Ann Lee",
            "email": "ann@x.com",
            "username": "annlee",
            "created_at": data["created_at"],
        }

    def test_no_token(self, registered) -> None:
        client, _, _ = registered
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Not authorized, no token"}

    def test_garbage_token(self, registered) -> None:
        client, _, _ = registered
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
        assert resp.status_code == 401
        assert resp.json()["success"] is False

    def test_scenario_e_expired_token(self, registered) -> None:
        client, _, data = registered
        issued = datetime.now(timezone.utc) - timedelta(days=31)
        expired = create_access_token(data["_id"], now=issued)
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Invalid or expired token"}

    def test_vanished_user(self, api_client) -> None:
        client, _ = api_client
        token = create_access_token("0" * 32)
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "User not found"}


class TestMisc:
    def test_logout_acknowledged(self, api_client) -> None:
        client, _ = api_client
        resp = client.post("/api/auth/logout")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Logged out"}

    def test_health_no_auth(self, api_client: tuple[TestClient, object]) -> None:
        client, _ = api_client
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["components"] == {"app": "ok", "database": "ok"}

    def test_unknown_route_uses_envelope(self, api_client) -> None:
        client, _ = api_client
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.json()["success"] is False
