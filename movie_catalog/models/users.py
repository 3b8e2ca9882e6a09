"""Pydantic models for users and authentication."""

from datetime import datetime
from enum import IntEnum
from typing import Optional

from pydantic import ConfigDict, EmailStr, Field

from .base import CamelModel


class Role(IntEnum):
    """User roles; a lower value grants more privileges."""

    ADMIN = 0
    PAID_USER = 1
    USER = 2


class UserCreate(CamelModel):
    """Model for creating a new user."""

    email: EmailStr = Field(description="User email", examples=["test@test.com"])
    password: str = Field(..., min_length=1, max_length=72, description="Plain text password")
    role: Role = Field(default=Role.USER, description="0: admin, 1: paid user, 2: user")


class UserUpdate(CamelModel):
    """Model for updating a user; omitted fields are left unchanged."""

    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=1, max_length=72)
    role: Optional[Role] = None


class User(CamelModel):
    """Public user model (never carries the password hash)."""

    id: int = Field(description="User ID")
    email: str = Field(description="User email")
    role: Role = Field(description="User role")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "email": "test@test.com",
                "role": 2,
                "createdAt": "2024-01-01T12:00:00Z",
                "updatedAt": "2024-01-01T12:00:00Z"
            }
        }
    )


# Database row model (for internal use)
class UserRow(User):
    """Model representing a user database row."""

    password: str

    def to_user(self) -> User:
        """Convert to public User model."""
        return User.model_validate(self.model_dump(exclude={"password"}))


class TokenPair(CamelModel):
    """Access and refresh tokens issued at login."""

    access_token: str
    refresh_token: str


class AccessToken(CamelModel):
    """A freshly rotated access token."""

    access_token: str


class BlockTokenRequest(CamelModel):
    """Body for revoking a token."""

    token: str = Field(..., min_length=1)
