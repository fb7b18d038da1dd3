"""Domain entities exposed by the application."""

from .delivery import (
    DeliveryOutcome,
    DeliveryProvider,
    DeliveryResult,
    DispatchResult,
    DispatchStage,
    NormalizedMessage,
)
from .notification import DataValue, NotificationPriority, NotificationRecord
from .user import ROLE_ADMIN, ROLE_USER, User

__all__ = [
    "DataValue",
    "DeliveryOutcome",
    "DeliveryProvider",
    "DeliveryResult",
    "DispatchResult",
    "DispatchStage",
    "NormalizedMessage",
    "NotificationPriority",
    "NotificationRecord",
    "ROLE_ADMIN",
    "ROLE_USER",
    "User",
]
