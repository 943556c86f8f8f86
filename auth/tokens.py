"""
auth/tokens.py -- JWT issuance/validation and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       exactly two claims: the user id and the expiry. Nothing else goes in
       the payload -- the token is a bearer credential, not a profile cache.
       Validation is a pure function of the token and the key; the store is
       never consulted.

  Expiry: checked here rather than by jose so the boundary is exact. A token
       is honoured while now < exp and refused from exp onward. jose's own
       check accepts now == exp.

  Passwords: bcrypt directly (no passlib wrapper). The _DUMMY_HASH constant
       enables timing equalization in check_credentials() so response time
       does not reveal whether an identifier exists.

Layer rule: no imports from api/ or client/. Import from core/ is allowed.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.errors import AuthenticationError
from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

_settings = get_settings()

_ALGORITHM = "HS256"

INVALID_TOKEN_MESSAGE = "Invalid or expired token"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt refuses inputs over 72 bytes; register_user() rejects such
    passwords before they get here. The salt is generated per call.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash or oversized input -- treat as a mismatch.
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("authgate_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: str, now: datetime | None = None, expire_seconds: int = 0) -> str:
    """Encode a signed JWT carrying only the user id and an expiry.

    Args:
        user_id:        Opaque user identifier.
        now:            Issuance time. Defaults to the current UTC time; tests
                        pass a fixed instant to probe the expiry boundary.
        expire_seconds: Validity window. If 0 (default), uses
                        Settings.token_expire_seconds (30 days).
    """
    issued = now or datetime.now(timezone.utc)
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    expire = issued + timedelta(seconds=duration)
    payload = {
        "id": user_id,
        # Rounded up so a sub-second issue time still gets the full window.
        "exp": math.ceil(expire.timestamp()),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def validate_token(token: str, now: datetime | None = None) -> str:
    """Verify a JWT and return the user id it encodes.

    Raises AuthenticationError when the token is malformed, signed with a
    different key, lacks a string id, or is at or past its expiry. The
    message is the same in every case.
    """
    if not token:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)
    try:
        payload = jwt.decode(
            token,
            _settings.secret_key,
            algorithms=[_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError as exc:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE) from exc

    user_id = payload.get("id")
    exp = payload.get("exp")
    if not isinstance(user_id, str) or not user_id or not isinstance(exp, int):
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)

    current = now or datetime.now(timezone.utc)
    if current.timestamp() >= exp:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)
    return user_id


# ---------------------------------------------------------------------------
# Credential check (constant-time)
# ---------------------------------------------------------------------------


def check_credentials(store: UserStore, identifier: str, password: str) -> User | None:
    """Look up a user by email or username and verify the password.

    Always runs bcrypt whether or not the user exists:
    - Unknown identifier: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    An identifier can match one account by email and another by username
    (rows stored before usernames were barred from containing "@"); the
    password is checked against each candidate.

    Returns the User on success, None on any failure.
    """
    candidates = [u for u in store.find_by_identifier(identifier) if u.hashed_password is not None]
    if not candidates:
        verify_password(password, _DUMMY_HASH)
        return None
    for user in candidates:
        if verify_password(password, user.hashed_password):
            return user
    return None
