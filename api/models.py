"""
API request and response models for the WeatherForecast REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
core/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models accept empty strings on purpose: emptiness is a domain rule
checked by auth/validation.py, which answers with the ValidationFailed
envelope. Pydantic only guards types and upper bounds here.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

# Character bound only. The 72-byte bcrypt rule is auth/validation.py.
_MAX_PASSWORD = 72

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=_MAX_PASSWORD)


class RegisterRequest(CredentialsRequest):
    """Request body for POST /api/v1/auth/register."""


class LoginRequest(CredentialsRequest):
    """Request body for POST /api/v1/auth/login."""


class ChangePasswordRequest(BaseModel):
    """Request body for POST /api/v1/auth/change-password."""

    model_config = ConfigDict(extra="ignore")

    current_password: str = Field(default="", max_length=_MAX_PASSWORD)
    new_password: str = Field(default="", max_length=_MAX_PASSWORD)


# ---------------------------------------------------------------------------
# Response payloads
# ---------------------------------------------------------------------------


class AuthData(BaseModel):
    """Payload of a successful register or login."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class MeData(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    created_at: str


class WeatherData(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str
    temperature: float
    condition: str


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class ResultResponse(BaseModel, Generic[T]):
    """Every API response, success or failure, uses this envelope.

    status_code mirrors the HTTP status. message_key is stable for clients
    to branch on; message is the display string resolved from it.
    """

    success: bool
    status_code: int
    message_key: str
    message: str
    data: Optional[T] = None


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
