"""Coordinate persistence, fan-out and token cleanup for admin broadcasts."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any

from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    DeliveryOutcome,
    DispatchResult,
    DispatchStage,
    NormalizedMessage,
    NotificationRecord,
)
from app.infrastructure.notifications import DeliveryAdapter
from app.infrastructure.repositories import NotificationRepository

from .payload import normalize_data
from .recipients import RecipientResolver
from .reconciliation import TokenReconciler
from .tokens import classify_addresses, is_expo_token

logger = logging.getLogger(__name__)

ScheduleCallback = Callable[..., Any]
"""Callable with the signature of ``BackgroundTasks.add_task``."""


class NotificationStoreError(RuntimeError):
    """The broadcast could not be recorded, so it is considered not sent."""


class NotificationDispatcher:
    """Persist a broadcast and deliver it through Expo and FCM.

    Only the initial persist can fail the call. Recipient lookup, delivery and
    token reconciliation degrade to partial results and log entries.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        expo: DeliveryAdapter,
        fcm: DeliveryAdapter,
        resolver: RecipientResolver | None = None,
        reconciler: TokenReconciler | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.expo = expo
        self.fcm = fcm
        self._resolver = resolver or RecipientResolver(session_factory)
        self._reconciler = reconciler or TokenReconciler(session_factory)

    @property
    def adapters(self) -> tuple[DeliveryAdapter, DeliveryAdapter]:
        return (self.expo, self.fcm)

    def adapter_for(self, address: str) -> DeliveryAdapter:
        return self.expo if is_expo_token(address) else self.fcm

    async def create_notification(
        self,
        record: NotificationRecord,
        *,
        schedule: ScheduleCallback | None = None,
    ) -> DispatchResult:
        """Store ``record`` and broadcast it to the resolved recipients.

        When ``schedule`` is given, token reconciliation is handed to it and
        runs after the caller has its result; otherwise it runs before
        returning.

        Raises:
            NotificationStoreError: the record could not be persisted.
        """

        saved = await self._persist(record)
        assert saved.id is not None
        result = DispatchResult(notification_id=saved.id)
        self._advance(result, DispatchStage.CREATED)

        if not any(adapter.configured for adapter in self.adapters):
            reasons = "; ".join(
                f"{adapter.provider.value}: {adapter.configuration_error}"
                for adapter in self.adapters
            )
            logger.warning(
                "No push provider configured, notification %s saved but not sent (%s)",
                saved.id,
                reasons,
            )
            result.fcm_warning = (
                "Notification saved but not sent due to FCM configuration issues"
            )
            self._advance(result, DispatchStage.DONE)
            return result

        groups = None if saved.targets_everyone else saved.receiver_groups
        addresses = await to_thread.run_sync(self._resolver.resolve, groups)
        self._advance(result, DispatchStage.RESOLVED)
        if not addresses:
            logger.info("No push recipients found for notification %s", saved.id)
            self._advance(result, DispatchStage.DONE)
            return result

        batches = classify_addresses(addresses)
        logger.debug(
            "Notification %s: %d unique addresses (%d expo, %d fcm)",
            saved.id,
            len(batches),
            len(batches.expo),
            len(batches.fcm),
        )
        self._advance(result, DispatchStage.CLASSIFIED)

        message = NormalizedMessage(
            title=saved.title,
            body=saved.body,
            data=normalize_data(record.data),
            priority=saved.priority,
        )
        self._advance(result, DispatchStage.DISPATCHING)
        expo_outcomes, fcm_outcomes = await asyncio.gather(
            self._deliver(self.expo, batches.expo, message),
            self._deliver(self.fcm, batches.fcm, message),
        )
        result.outcomes = [*expo_outcomes, *fcm_outcomes]
        result.fcm_warning = self._configuration_warning(result.outcomes)
        self._advance(result, DispatchStage.AGGREGATED)
        logger.info(
            "Notification %s delivered to %d/%d devices",
            saved.id,
            sum(1 for outcome in result.outcomes if outcome.is_ok),
            len(result.outcomes),
        )

        invalid = result.invalid_outcomes
        if invalid:
            self._advance(result, DispatchStage.RECONCILING)
            if schedule is not None:
                schedule(self.reconcile, invalid)
            else:
                await to_thread.run_sync(self.reconcile, invalid)

        self._advance(result, DispatchStage.DONE)
        return result

    def reconcile(self, outcomes: Sequence[DeliveryOutcome]) -> int:
        """Run token reconciliation without letting failures escape."""

        try:
            return self._reconciler.reconcile(outcomes)
        except Exception:
            logger.exception("Token reconciliation failed")
            return 0

    async def _persist(self, record: NotificationRecord) -> NotificationRecord:
        try:
            return await to_thread.run_sync(self._store, record)
        except SQLAlchemyError as exc:
            logger.error("Error creating notification: %s", exc)
            raise NotificationStoreError(f"Database error: {exc}") from exc

    def _store(self, record: NotificationRecord) -> NotificationRecord:
        with self._session_factory() as session:
            return NotificationRepository(session).create(record)

    @staticmethod
    async def _deliver(
        adapter: DeliveryAdapter, batch: list[str], message: NormalizedMessage
    ) -> list[DeliveryOutcome]:
        if not batch:
            return []
        try:
            return await adapter.send(batch, message)
        except Exception:
            logger.exception("%s delivery failed unexpectedly", adapter.provider.value)
            return adapter.fail_all(batch, "Unexpected delivery failure")

    @staticmethod
    def _configuration_warning(outcomes: Sequence[DeliveryOutcome]) -> str | None:
        providers = sorted(
            {outcome.provider.value.upper() for outcome in outcomes if outcome.configuration_error}
        )
        if not providers:
            return None
        return (
            "Notification saved but not delivered via %s due to configuration or "
            "permission issues" % " and ".join(providers)
        )

    @staticmethod
    def _advance(result: DispatchResult, stage: DispatchStage) -> None:
        result.stage = stage
        logger.debug("Notification %s -> %s", result.notification_id, stage.value)


__all__ = ["NotificationDispatcher", "NotificationStoreError", "ScheduleCallback"]
