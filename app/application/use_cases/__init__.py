"""Aggregate application use cases."""

from .notifications import NotificationDispatcher, list_notifications
from .users import clear_push_token, register_push_token, update_user_groups

__all__ = [
    "NotificationDispatcher",
    "clear_push_token",
    "list_notifications",
    "register_push_token",
    "update_user_groups",
]
