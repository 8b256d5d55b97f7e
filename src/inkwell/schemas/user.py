"""User and authentication Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _flatten_user(data: object) -> object:
    """Copy ORM attributes into a dict, exposing the role under its name."""
    if isinstance(data, dict):
        return data
    return {
        "user_id": getattr(data, "user_id", None),
        "username": getattr(data, "username", None),
        "user_email": getattr(data, "user_email", None),
        "role_name": getattr(data, "role_name", None),
        "profile_picture": getattr(data, "profile_picture", None),
        "bio": getattr(data, "bio", None),
        "phone": getattr(data, "phone", None),
        "location": getattr(data, "location", None),
        "created_at": getattr(data, "created_at", None),
    }


class LoginRequest(BaseModel):
    """Credentials posted to ``/auth/login``."""

    userEmail: str | None = None
    password: str | None = None


class UserProfile(BaseModel):
    """Profile of the authenticated user."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str
    email: str
    role: str | None = None
    profile_picture: str | None = None
    bio: str | None = None
    phone: str | None = None
    location: str | None = None
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _from_user(cls, data: object) -> object:
        data = _flatten_user(data)
        if isinstance(data, dict) and "email" not in data:
            data = {**data, "email": data.get("user_email"), "role": data.get("role_name")}
        return data


class UserAdminRow(BaseModel):
    """User row as listed on the admin screen."""

    user_id: int
    username: str
    user_email: str
    profile_picture: str | None = None
    bio: str | None = None
    phone: str | None = None
    location: str | None = None
    created_at: datetime
    role_name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_user(cls, data: object) -> object:
        return _flatten_user(data)


class ProfileUpdate(BaseModel):
    """Partial profile update; ``name`` maps onto the username."""

    name: str | None = Field(None, max_length=100)
    bio: str | None = None
    phone: str | None = Field(None, max_length=20)
    location: str | None = Field(None, max_length=100)


class RoleUpdate(BaseModel):
    """Admin request to change a user's role."""

    role: str | None = None
