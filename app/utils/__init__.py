"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_app_timezone,
    from_epoch_seconds,
    get_app_timezone,
    now_in_app_naive_datetime,
    now_in_app_timezone,
    to_iso8601,
)

__all__ = [
    "ensure_app_timezone",
    "from_epoch_seconds",
    "get_app_timezone",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
    "to_iso8601",
]
