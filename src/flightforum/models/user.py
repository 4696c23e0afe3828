"""User-management payloads.

Profiles come from the profile store; ``email`` is owned by the identity
service and only appears when a lookup went through it.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


def username_from_email(email: str) -> str:
    """Default username: lowercased local part of the email address."""
    return email.split("@", 1)[0].lower()


class SoftMiss(BaseModel):
    """Successful tool call whose payload reports a domain-level miss."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error: str = Field(..., min_length=1, examples=["Flight not found", "User not found"])


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    email: str | None = None
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CreateUserResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool
    user_id: str = Field(..., alias="userId")
    email: str
    username: str | None = None
    warning: str | None = Field(default=None, description="Profile write failed after the identity record was created")


class UpdateUserResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    user: UserProfile


class DeleteUserResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    message: str = "User deleted successfully"
    warning: str | None = Field(default=None, description="Profile delete failed after the identity record was removed")
