"""Remove device addresses that a provider reported as permanently invalid."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import DeliveryOutcome, DeliveryProvider
from app.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)


class TokenReconciler:
    """Clear ``push_token`` on users whose token a provider declared dead.

    Each provider's tokens are cleared with one bulk update. A failing update
    is retried up to ``max_attempts`` times; after that the provider's tokens
    are logged and skipped while the other providers are still cleared.
    Clearing is idempotent, so running it twice for the same token changes
    nothing the second time.
    """

    def __init__(
        self, session_factory: Callable[[], Session], *, max_attempts: int = 2
    ) -> None:
        self._session_factory = session_factory
        self._max_attempts = max(1, max_attempts)

    def reconcile(self, outcomes: Iterable[DeliveryOutcome]) -> int:
        """Clear the addresses of ``invalid`` outcomes and return how many were cleared."""

        by_provider: dict[DeliveryProvider, list[str]] = {}
        for outcome in outcomes:
            if not outcome.is_invalid or not outcome.address:
                continue
            tokens = by_provider.setdefault(outcome.provider, [])
            if outcome.address not in tokens:
                tokens.append(outcome.address)

        cleared = 0
        for provider, tokens in by_provider.items():
            try:
                count = self._clear_with_retry(tokens)
            except SQLAlchemyError as exc:
                logger.error(
                    "Error cleaning up %d invalid %s tokens: %s",
                    len(tokens),
                    provider.value,
                    exc,
                )
                continue
            logger.info("Cleaned up %d invalid %s tokens", count, provider.value)
            cleared += count
        return cleared

    def _clear_with_retry(self, tokens: list[str]) -> int:
        attempt = 1
        while True:
            try:
                with self._session_factory() as session:
                    return UserRepository(session).clear_push_tokens(tokens)
            except SQLAlchemyError as exc:
                if attempt >= self._max_attempts:
                    raise
                logger.warning(
                    "Token cleanup attempt %d/%d failed, retrying: %s",
                    attempt,
                    self._max_attempts,
                    exc,
                )
                attempt += 1


__all__ = ["TokenReconciler"]
