"""
API request and response models for the authgate REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclass in auth/models.py, which owns the
internal domain representation. Route handlers map between the two.

Every response uses the same envelope: {success, message, data}. Request
fields are optional at this layer so a missing field reaches the credential
service and comes back as the service's own 400 message rather than a
framework-shaped validation error.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Coarse cap on new passwords; register_user() applies the exact bcrypt byte
# limit. Login bodies are not capped: an oversized password is just a mismatch.
_MAX_PASSWORD = 128


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    full_name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    username: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=_MAX_PASSWORD)


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login. identifier is a username or email."""

    identifier: Optional[str] = None
    password: Optional[str] = None


# ---------------------------------------------------------------------------
# Data payloads
# ---------------------------------------------------------------------------


class ProfileData(BaseModel):
    """Public identity fields. Serialized with the `_id` key clients expect."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(alias="_id")
    full_name: str
    email: str
    username: str
    created_at: str


class RegisterData(ProfileData):
    token: str


class LoginData(BaseModel):
    """Login echoes identity fields and the token but not created_at."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(alias="_id")
    full_name: str
    email: str
    username: str
    token: str


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "User registered successfully"
    data: RegisterData


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    data: LoginData


class MeResponse(BaseModel):
    success: bool = True
    data: ProfileData


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Standard error envelope returned by every exception handler."""

    success: bool = False
    message: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=lambda: {"app": "ok"})
