"""Account request/response Pydantic v2 schemas.

JSON field names are camelCase (``fullName``, ``isActive``...).  Request
fields are all optional at the schema level; presence and length rules are
enforced by ``mdth_api.lib.validators`` so that every input problem maps to
a 400 response.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mdth_api.core.security import TokenClaims


class CamelModel(BaseModel):
    """Base schema serialising field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RegisterRequest(CamelModel):
    """Registration request."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    full_name: str | None = None


class LoginRequest(CamelModel):
    """Login request.  ``username`` may hold either a username or an email."""

    username: str | None = None
    password: str | None = None


class ProfileUpdateRequest(CamelModel):
    """Partial profile update (all fields optional)."""

    full_name: str | None = None
    email: str | None = None


class UserPublic(CamelModel):
    """Public view of a user returned alongside tokens."""

    id: UUID
    username: str
    email: str
    full_name: str | None = None
    role: str


class UserProfile(UserPublic):
    """Full user view without the password hash."""

    is_active: bool
    created_at: datetime
    updated_at: datetime


class AuthResponse(CamelModel):
    """Response for successful registration or login."""

    message: str
    token: str
    user: UserPublic


class VerifyTokenResponse(CamelModel):
    """Claims echoed back for a valid token."""

    valid: bool = True
    user: TokenClaims


class ProfileResponse(CamelModel):
    user: UserProfile


class ProfileUpdateResponse(CamelModel):
    message: str
    user: UserProfile


class UserListResponse(CamelModel):
    users: list[UserProfile]


class MessageResponse(CamelModel):
    message: str


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str = Field(description="Human-readable error message")
    fields: dict[str, str] | None = Field(default=None, description="Per-field validation errors")
