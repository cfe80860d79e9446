"""User domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """User response model. The stored password is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    email: str

    # External platform identity
    platform_type: str | None = None
    platform_id: str | None = None

    permissions: str | None = None
    is_admin: bool = False

    # Timestamps
    created_at: datetime
    updated_at: datetime


class UserCreateParams(BaseModel):
    """Parameters for creating a user."""

    username: str
    email: str
    password: str
    platform_type: str | None = None
    platform_id: str | None = None
    permissions: str | None = None


class UserUpdateParams(BaseModel):
    """Parameters for updating a user. Only explicitly set fields are written."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    platform_type: str | None = None
    platform_id: str | None = None
    permissions: str | None = None
