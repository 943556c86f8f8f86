"""
client/guard.py -- Client-side session state and view gating.

SessionGuard decides whether a protected view may render. It owns three
collaborators, all injected so tests can swap them:

  client   -- AuthClient (network)
  storage  -- SessionStorage (token + snapshot)
  navigate -- callable taking a path; the UI's router

Session states:

  ANONYMOUS --submit--> AUTHENTICATING --ok--> AUTHENTICATED
      ^                       |                     |
      +-------- error --------+     logout / token rejected

is_authenticated() only asks "is a token cached?". The server is the source
of truth: on_protected_view_enter() renders the cached snapshot first, then
asks /auth/me, and tears the session down if the server says no.

Each logout, login, or teardown bumps a generation counter. A /auth/me
response that comes back after the generation moved on is dropped, and so
is a delayed redirect scheduled before it moved.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from client.api import AuthClient, ClientError
from client.forms import validate_login_form, validate_register_form
from client.storage import SessionStorage, trim_snapshot

logger = logging.getLogger("authgate.client")

SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."
IN_FLIGHT_MESSAGE = "A request is already in progress"

Scheduler = Callable[[float, Callable[[], None]], None]


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass
class FormResult:
    """Outcome of a login or register submission, ready to show on the form."""

    ok: bool
    message: str = ""
    field_errors: dict[str, str] = field(default_factory=dict)
    profile: dict | None = None


def _timer_schedule(delay: float, callback: Callable[[], None]) -> None:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()


class SessionGuard:
    def __init__(
        self,
        client: AuthClient,
        storage: SessionStorage,
        navigate: Callable[[str], None],
        *,
        schedule: Scheduler | None = None,
        redirect_delay: float = 2.0,
        login_path: str = "/login",
        home_path: str = "/dashboard",
    ) -> None:
        self.client = client
        self.storage = storage
        self.navigate = navigate
        self.schedule = schedule or _timer_schedule
        self.redirect_delay = redirect_delay
        self.login_path = login_path
        self.home_path = home_path
        self._submit_lock = threading.Lock()
        self._generation = 0
        self._state = SessionState.AUTHENTICATED if storage.get_token() else SessionState.ANONYMOUS

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def submitting(self) -> bool:
        """True while a login/register call is in flight. The submit button should be disabled."""
        return self._submit_lock.locked()

    def is_authenticated(self) -> bool:
        """True iff a token is cached. Advisory only -- no signature or expiry check."""
        return bool(self.storage.get_token())

    # ------------------------------------------------------------------
    # Entry views (login / register)
    # ------------------------------------------------------------------

    def on_entry_view_enter(self) -> bool:
        """Send an already-signed-in user straight to the protected view.

        Returns True when a redirect happened.
        """
        if self.is_authenticated():
            self.navigate(self.home_path)
            return True
        return False

    def submit_login(self, identifier: str, password: str) -> FormResult:
        errors = validate_login_form(identifier, password)
        if errors:
            return FormResult(ok=False, field_errors=errors)
        return self._submit(
            lambda: self.client.login(identifier.strip(), password),
            "Login failed. Please check your credentials.",
        )

    def submit_register(
        self,
        full_name: str,
        email: str,
        username: str,
        password: str,
        confirm_password: str,
    ) -> FormResult:
        errors = validate_register_form(full_name, email, username, password, confirm_password)
        if errors:
            return FormResult(ok=False, field_errors=errors)
        return self._submit(
            lambda: self.client.register(full_name.strip(), email.strip(), username.strip(), password),
            "Registration failed. Please try again.",
        )

    def on_login_or_register_success(self, data: dict) -> None:
        """Persist the token and a trimmed snapshot, then open the protected view."""
        self.storage.set_token(data["token"])
        self.storage.set_snapshot(trim_snapshot(data))
        self._generation += 1
        self._state = SessionState.AUTHENTICATED
        self.navigate(self.home_path)

    # ------------------------------------------------------------------
    # Protected view
    # ------------------------------------------------------------------

    def on_protected_view_enter(
        self,
        render: Callable[[dict], None],
        show_error: Callable[[str], None],
    ) -> dict | None:
        """Gate a protected view.

        No token: redirect to login at once, no network call.
        Token: render the snapshot (if any), then confirm with the server.
        Confirmed profile replaces the snapshot and is rendered again and
        returned. Rejection clears local state, shows the expiry message and
        schedules the redirect after redirect_delay seconds.
        """
        token = self.storage.get_token()
        if not token:
            self._state = SessionState.ANONYMOUS
            self.navigate(self.login_path)
            return None

        generation = self._generation
        snapshot = self.storage.get_snapshot()
        if snapshot:
            render(snapshot)

        try:
            envelope = self.client.get_current_user(token)
        except ClientError as exc:
            if generation != self._generation:
                return None
            logger.info("Stored session rejected (%s): %s", exc.status_code, exc.message)
            self._end_session()
            show_error(SESSION_EXPIRED_MESSAGE)
            self.schedule(self.redirect_delay, self._redirect_to_login_if_current(self._generation))
            return None

        if generation != self._generation:
            return None
        profile = envelope.get("data") or {}
        self.storage.set_snapshot(profile)
        self._state = SessionState.AUTHENTICATED
        render(profile)
        return profile

    def logout(self) -> None:
        """Drop the local session unconditionally and return to the entry view."""
        self._end_session()
        self.navigate(self.login_path)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _submit(self, call: Callable[[], dict], fallback: str) -> FormResult:
        if not self._submit_lock.acquire(blocking=False):
            return FormResult(ok=False, message=IN_FLIGHT_MESSAGE)
        try:
            self._state = SessionState.AUTHENTICATING
            try:
                envelope = call()
            except ClientError as exc:
                self._state = SessionState.ANONYMOUS
                return FormResult(ok=False, message=exc.message or fallback)
            data = envelope.get("data") or {}
            self.on_login_or_register_success(data)
            return FormResult(ok=True, message=envelope.get("message", ""), profile=trim_snapshot(data))
        finally:
            self._submit_lock.release()

    def _redirect_to_login_if_current(self, generation: int) -> Callable[[], None]:
        # A login during the delay moves the generation on; the redirect is then dropped.
        def redirect() -> None:
            if generation == self._generation:
                self.navigate(self.login_path)

        return redirect

    def _end_session(self) -> None:
        self.storage.clear()
        self._generation += 1
        self._state = SessionState.ANONYMOUS
