"""Admin broadcast notifications: persistence, fan-out and token cleanup."""

from .diagnostics import (
    DiagnosticSendReport,
    ProviderStatus,
    TokenStatistics,
    describe_delivery_configuration,
    get_token_statistics,
    send_test_notification,
)
from .dispatch import NotificationDispatcher, NotificationStoreError, ScheduleCallback
from .history import DEFAULT_HISTORY_LIMIT, list_notifications
from .payload import PLACEHOLDER, normalize_data, normalize_value
from .recipients import RecipientResolver
from .reconciliation import TokenReconciler
from .tokens import TokenBatches, classify_addresses, describe_platform, is_expo_token

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "DiagnosticSendReport",
    "NotificationDispatcher",
    "NotificationStoreError",
    "PLACEHOLDER",
    "ProviderStatus",
    "RecipientResolver",
    "ScheduleCallback",
    "TokenBatches",
    "TokenReconciler",
    "TokenStatistics",
    "classify_addresses",
    "describe_delivery_configuration",
    "describe_platform",
    "get_token_statistics",
    "is_expo_token",
    "list_notifications",
    "normalize_data",
    "normalize_value",
    "send_test_notification",
]
