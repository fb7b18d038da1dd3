"""Transient value objects describing a push delivery attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .notification import NotificationPriority


class DeliveryProvider(str, Enum):
    """Push networks a broadcast fans out to."""

    EXPO = "expo"
    FCM = "fcm"


class DeliveryResult(str, Enum):
    """Per-address verdict returned by a delivery adapter."""

    OK = "ok"
    INVALID = "invalid"
    TRANSIENT_ERROR = "transient-error"


class DispatchStage(str, Enum):
    """Progress of a broadcast through the dispatcher."""

    CREATED = "created"
    RESOLVED = "resolved"
    CLASSIFIED = "classified"
    DISPATCHING = "dispatching"
    AGGREGATED = "aggregated"
    RECONCILING = "reconciling"
    DONE = "done"


@dataclass(frozen=True)
class NormalizedMessage:
    """Message content shared by every address of a broadcast."""

    title: str
    body: str
    data: dict[str, str] = field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.NORMAL

    @property
    def is_high_priority(self) -> bool:
        return self.priority is NotificationPriority.HIGH


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of handing a message to one provider for one device address.

    ``configuration_error`` marks outcomes produced because the provider's
    credentials or setup are unusable, rather than because of the address.
    """

    address: str
    provider: DeliveryProvider
    result: DeliveryResult
    error_detail: str | None = None
    configuration_error: bool = False

    @property
    def is_ok(self) -> bool:
        return self.result is DeliveryResult.OK

    @property
    def is_invalid(self) -> bool:
        return self.result is DeliveryResult.INVALID


@dataclass
class DispatchResult:
    """Caller-facing summary of a broadcast."""

    notification_id: str
    fcm_warning: str | None = None
    outcomes: list[DeliveryOutcome] = field(default_factory=list)
    stage: DispatchStage = DispatchStage.CREATED

    @property
    def invalid_outcomes(self) -> list[DeliveryOutcome]:
        return [outcome for outcome in self.outcomes if outcome.is_invalid]


__all__ = [
    "DeliveryOutcome",
    "DeliveryProvider",
    "DeliveryResult",
    "DispatchResult",
    "DispatchStage",
    "NormalizedMessage",
]
