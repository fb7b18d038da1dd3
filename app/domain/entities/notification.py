"""Domain entity representing an admin-authored broadcast notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Union

DataValue = Union[str, bool, int, float, datetime, date, dict[str, Any], list[Any], None]
"""Closed set of value variants accepted in a notification ``data`` mapping."""


class NotificationPriority(str, Enum):
    """Delivery urgency requested by the admin."""

    NORMAL = "normal"
    HIGH = "high"


@dataclass
class NotificationRecord:
    """Broadcast message persisted for audit and history.

    ``id`` and ``sent_at`` stay ``None`` until the repository stores the record;
    both are assigned by the store and never changed afterwards.
    """

    id: str | None
    title: str
    body: str
    sent_by: str
    data: dict[str, DataValue] = field(default_factory=dict)
    category: str | None = None
    priority: NotificationPriority = NotificationPriority.NORMAL
    receiver_groups: list[str] = field(default_factory=list)
    sent_at: datetime | None = None

    @property
    def targets_everyone(self) -> bool:
        """Return ``True`` when no receiver group narrows the audience."""

        return not self.receiver_groups


__all__ = ["DataValue", "NotificationPriority", "NotificationRecord"]
