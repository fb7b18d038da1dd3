"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr

from app.domain.entities import NotificationPriority

NotificationDataValue = Union[
    StrictStr, StrictBool, StrictInt, StrictFloat, datetime, dict[str, Any], list[Any], None
]


class NotificationCreate(BaseModel):
    """Broadcast authored by an admin."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=120)
    body: str = Field(..., min_length=1)
    data: dict[str, NotificationDataValue] | None = None
    sent_by: str | None = Field(
        default=None,
        alias="sentBy",
        max_length=64,
        description="Issuing admin; defaults to the authenticated user",
    )
    category: str | None = Field(default=None, max_length=50)
    priority: NotificationPriority = NotificationPriority.NORMAL
    receiver_groups: list[str] | None = Field(
        default=None,
        alias="receiverGroups",
        description="Target groups; empty or missing means every user",
    )


class NotificationCreated(BaseModel):
    """Identifier of the stored broadcast plus an optional delivery warning."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    fcm_warning: str | None = Field(default=None, alias="fcmWarning")


class NotificationRead(BaseModel):
    """Stored broadcast as listed in the admin history."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)
    sent_by: str = Field(alias="sentBy")
    category: str | None = None
    priority: NotificationPriority = NotificationPriority.NORMAL
    receiver_groups: list[str] = Field(default_factory=list, alias="receiverGroups")
    sent_at: datetime | None = Field(default=None, alias="sentAt")


class TokenCountRead(BaseModel):
    count: int
    android: int
    ios: int
    web: int
    unknown: int
    tokens: list[str] = Field(default_factory=list, description="Masked sample of tokens")


class ProviderStatusRead(BaseModel):
    provider: str
    configured: bool
    error: str | None = None


class DeliveryConfigRead(BaseModel):
    initialized: bool
    providers: list[ProviderStatusRead]


class DiagnosticSendRead(BaseModel):
    success: bool
    message: str
    result: str | None = None


class MinimalNotificationCreate(BaseModel):
    """Optional overrides for the debug broadcast."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default="Debug Test", min_length=1, max_length=120)
    body: str = Field(default="This is a debug test notification", min_length=1)
    sent_by: str = Field(default="debug-user", alias="sentBy", max_length=64)


class MinimalTestRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    id: str | None = None
    fcm_warning: str | None = Field(default=None, alias="fcmWarning")
    message: str | None = None
    error: str | None = None


__all__ = [
    "DeliveryConfigRead",
    "MinimalNotificationCreate",
    "MinimalTestRead",
    "NotificationCreate",
    "NotificationCreated",
    "NotificationDataValue",
    "NotificationRead",
    "ProviderStatusRead",
    "DiagnosticSendRead",
    "TokenCountRead",
]
