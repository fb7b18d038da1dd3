"""Operational checks for the push delivery setup."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from anyio import to_thread
from sqlalchemy.orm import Session

from app.domain.entities import DeliveryOutcome, NormalizedMessage
from app.infrastructure.notifications import mask_token
from app.infrastructure.repositories import UserRepository
from app.utils import now_in_app_timezone

from .dispatch import NotificationDispatcher
from .tokens import describe_platform

TOKEN_SAMPLE_SIZE = 3


@dataclass
class TokenStatistics:
    count: int
    android: int = 0
    ios: int = 0
    web: int = 0
    unknown: int = 0
    sample: list[str] = field(default_factory=list)


@dataclass
class ProviderStatus:
    provider: str
    configured: bool
    error: str | None = None


@dataclass
class DiagnosticSendReport:
    success: bool
    message: str
    outcome: DeliveryOutcome | None = None


def _registered_tokens(session: Session) -> list[str]:
    users = UserRepository(session).list_with_push_token()
    return [user.push_token for user in users if user.push_token]


def get_token_statistics(session: Session) -> TokenStatistics:
    """Count registered device addresses per client platform."""

    tokens = _registered_tokens(session)
    platforms = Counter(describe_platform(token) for token in tokens)
    return TokenStatistics(
        count=len(tokens),
        android=platforms["android"],
        ios=platforms["ios"],
        web=platforms["web"],
        unknown=platforms["unknown"],
        sample=[mask_token(token) for token in tokens[:TOKEN_SAMPLE_SIZE]],
    )


def describe_delivery_configuration(dispatcher: NotificationDispatcher) -> list[ProviderStatus]:
    return [
        ProviderStatus(
            provider=adapter.provider.value,
            configured=adapter.configured,
            error=adapter.configuration_error,
        )
        for adapter in dispatcher.adapters
    ]


async def send_test_notification(
    session: Session, dispatcher: NotificationDispatcher
) -> DiagnosticSendReport:
    """Send a fixed test message to the first registered device.

    Nothing is persisted and invalid tokens are not cleaned up.
    """

    tokens = await to_thread.run_sync(_registered_tokens, session)
    if not tokens:
        return DiagnosticSendReport(success=False, message="No push tokens found to test")

    token = tokens[0]
    adapter = dispatcher.adapter_for(token)
    message = NormalizedMessage(
        title="Test Notification",
        body="This is a test notification from the server",
        data={"test": "true", "timestamp": now_in_app_timezone().isoformat()},
    )
    outcomes = await adapter.send([token], message)
    outcome = outcomes[0]
    if outcome.is_ok:
        return DiagnosticSendReport(
            success=True,
            message=f"Test notification sent to token {mask_token(token)}",
            outcome=outcome,
        )
    return DiagnosticSendReport(
        success=False,
        message=f"Failed to send test notification: {outcome.error_detail}",
        outcome=outcome,
    )


__all__ = [
    "ProviderStatus",
    "DiagnosticSendReport",
    "TokenStatistics",
    "describe_delivery_configuration",
    "get_token_statistics",
    "send_test_notification",
]
