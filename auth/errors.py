"""
auth/errors.py -- Error taxonomy for the credential service.

Every error carries a human-readable message that is safe to show to the
client. api/main.py maps each class to an HTTP status; nothing in auth/ knows
about status codes.

  ValidationError     -- missing or malformed input, raised before storage is touched
  ConflictError       -- duplicate email or username (field says which)
  AuthenticationError -- bad credentials or invalid/expired token
  NotFoundError       -- identity vanished between token validation and lookup
  UnexpectedError     -- storage failures and anything else; detail is logged, not returned
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for all credential-service errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthError):
    pass


class ConflictError(AuthError):
    """Raised when a unique identity field is already taken.

    field is "email" or "username" so callers can point at the right input.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class AuthenticationError(AuthError):
    pass


class NotFoundError(AuthError):
    pass


class UnexpectedError(AuthError):
    pass
