from .notification import (
    DeliveryConfigRead,
    DiagnosticSendRead,
    MinimalNotificationCreate,
    MinimalTestRead,
    NotificationCreate,
    NotificationCreated,
    NotificationDataValue,
    NotificationRead,
    ProviderStatusRead,
    TokenCountRead,
)
from .user import PushTokenUpdate, UserGroupsUpdate, UserPushRead

__all__ = [
    "DeliveryConfigRead",
    "DiagnosticSendRead",
    "MinimalNotificationCreate",
    "MinimalTestRead",
    "NotificationCreate",
    "NotificationCreated",
    "NotificationDataValue",
    "NotificationRead",
    "ProviderStatusRead",
    "PushTokenUpdate",
    "TokenCountRead",
    "UserGroupsUpdate",
    "UserPushRead",
]
