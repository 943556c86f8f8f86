"""
auth/models.py -- Domain dataclass for the authenticated identity.

Pattern: Data class (pure data container, zero logic beyond projections).
The store does the persistence work; routes do the HTTP shaping.

Layer rule: no imports from api/, core/, or client/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered identity.

    id is an opaque 32-char hex string assigned by the store on insert.
    email is stored lower-cased so lookups are case-insensitive.
    hashed_password is the bcrypt hash -- the plaintext is never kept.
    """

    full_name: str
    email: str
    username: str
    hashed_password: str | None = None
    id: str | None = None
    created_at: str | None = None

    def public_fields(self) -> dict:
        """Return the fields safe to send to a client. Never includes the hash."""
        return {
            "_id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "username": self.username,
            "created_at": self.created_at,
        }
