"""
API request and response models for the credential service REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Request fields are all Optional: a missing or empty field is a domain-level
INVALID_INPUT decided by AuthFlow, not a schema error, so the check order
stays in one place.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from auth.models import User

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Body of POST /auth/register."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    profile_image_url: Optional[str] = None


class LoginRequest(BaseModel):
    """Body of POST /auth/login."""

    email: Optional[str] = None
    password: Optional[str] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public projection of a user. There is deliberately no password field."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    phone_number: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: str


class AuthResponse(BaseModel):
    """Successful register or login."""

    model_config = ConfigDict(frozen=True)

    message: str
    user: UserResponse
    token: str


class ProfileResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: UserResponse


class ErrorResponse(BaseModel):
    """Error envelope returned on 4xx/5xx responses.

    error is a stable machine-readable code (e.g. INVALID_CREDENTIALS).
    message is omitted from the JSON when there is nothing to add.
    """

    model_config = ConfigDict(frozen=True)

    error: str
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        phone_number=user.phone_number,
        profile_image_url=user.profile_image_url,
        created_at=user.created_at or "",
    )
