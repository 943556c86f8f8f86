"""
auth/credentials.py -- Registration, login, and profile lookup.

These are the operations the HTTP routes call. Each one is stateless: all
shared state lives in the UserStore, and token validity is checked against
the signing key alone (see auth/tokens.py).

Errors are raised from auth.errors. Storage failures are logged here with
their traceback and re-raised as UnexpectedError carrying a generic message,
so nothing about the database reaches the client.

Layer rule: no imports from api/ or client/.
"""

from __future__ import annotations

import logging
import re

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import AuthenticationError, ConflictError, NotFoundError, UnexpectedError, ValidationError
from auth.models import User
from auth.store import UserStore
from auth.tokens import check_credentials, create_access_token, hash_password

logger = logging.getLogger("authgate.auth")

MIN_PASSWORD_LENGTH = 6
MIN_USERNAME_LENGTH = 3
# bcrypt input limit
MAX_PASSWORD_BYTES = 72

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
EMAIL_TAKEN_MESSAGE = "Email already registered"
USERNAME_TAKEN_MESSAGE = "Username already taken"
USERNAME_AT_SIGN_MESSAGE = "Username cannot contain @"

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")


def register_user(store: UserStore, full_name: str, email: str, username: str, password: str) -> tuple[User, str]:
    """Create a new identity and issue its first token.

    Returns (user, token). user.hashed_password is populated because the
    caller may need the stored record; routes must use User.public_fields()
    when building a response.
    """
    full_name = (full_name or "").strip()
    email = (email or "").strip().lower()
    username = (username or "").strip()
    if not full_name or not email or not username or not password:
        raise ValidationError("Please provide all required fields")
    if not _EMAIL_PATTERN.match(email):
        raise ValidationError("Please provide a valid email")
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters long")
    if "@" in username:
        # Login resolves an identifier against both columns; a username
        # shaped like an email could shadow another account's email.
        raise ValidationError(USERNAME_AT_SIGN_MESSAGE)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError("Password is too long")

    try:
        _raise_if_taken(store, email, username)
        user = User(
            full_name=full_name,
            email=email,
            username=username,
            hashed_password=hash_password(password),
        )
        try:
            store.create_user(user)
        except IntegrityError:
            # A concurrent registration claimed the email or username between
            # the pre-check and the insert. Re-check to name the field.
            _raise_if_taken(store, email, username)
            raise
    except SQLAlchemyError as exc:
        logger.exception("Registration failed for username=%s", username)
        raise UnexpectedError("Server error during registration") from exc

    logger.info("Registered user id=%s username=%s", user.id, user.username)
    return user, create_access_token(user.id)


def login_user(store: UserStore, identifier: str, password: str) -> tuple[User, str]:
    """Verify an identifier (email or username) and password; issue a fresh token.

    Unknown identifier and wrong password raise the same AuthenticationError.
    """
    identifier = (identifier or "").strip()
    if not identifier or not password:
        raise ValidationError("Please provide username/email and password")

    try:
        user = check_credentials(store, identifier, password)
    except SQLAlchemyError as exc:
        logger.exception("Login lookup failed")
        raise UnexpectedError("Server error during login") from exc

    if user is None:
        logger.info("Failed login attempt")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    logger.info("Login succeeded for user id=%s", user.id)
    return user, create_access_token(user.id)


def get_profile(store: UserStore, user_id: str) -> User:
    """Load the identity a validated token points at."""
    try:
        user = store.get_by_id(user_id)
    except SQLAlchemyError as exc:
        logger.exception("Profile lookup failed for user id=%s", user_id)
        raise UnexpectedError("Server error retrieving user data") from exc
    if user is None:
        raise NotFoundError("User not found")
    return user


def _raise_if_taken(store: UserStore, email: str, username: str) -> None:
    # Email is checked first; when both collide the email message wins.
    if store.get_by_email(email) is not None:
        raise ConflictError("email", EMAIL_TAKEN_MESSAGE)
    if store.get_by_username(username) is not None:
        raise ConflictError("username", USERNAME_TAKEN_MESSAGE)
