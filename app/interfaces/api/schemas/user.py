"""Pydantic models for user push registration payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PushTokenUpdate(BaseModel):
    """Device address reported by the mobile client."""

    token: str = Field(..., min_length=1, max_length=255)


class UserGroupsUpdate(BaseModel):
    """Notification groups assigned to a user."""

    groups: list[str] = Field(default_factory=list)


class UserPushRead(BaseModel):
    """Push-related view of a user."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    email: str
    role: str
    push_token: str | None = Field(default=None, alias="pushToken")
    user_groups: list[str] = Field(default_factory=list, alias="userGroups")


__all__ = ["PushTokenUpdate", "UserGroupsUpdate", "UserPushRead"]
