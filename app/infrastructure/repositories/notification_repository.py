"""Persistence helpers for broadcast notification records."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from app.domain.entities import NotificationPriority, NotificationRecord
from app.infrastructure.models import NotificationModel
from app.utils import ensure_app_timezone, to_iso8601


class NotificationRepository:
    """Create and list :class:`NotificationRecord` objects.

    Records are append-only: there is no update or delete operation.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, record: NotificationRecord) -> NotificationRecord:
        """Store ``record`` and return it with its generated id and ``sent_at``."""

        model = NotificationModel(
            id=uuid4().hex,
            title=record.title,
            body=record.body,
            data=_jsonable(record.data or {}),
            sent_by=record.sent_by,
            category=record.category,
            priority=record.priority.value,
            receiver_groups=list(record.receiver_groups or []),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: str) -> NotificationRecord | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_recent(self, *, limit: int | None = 50) -> Sequence[NotificationRecord]:
        query = self.session.query(NotificationModel).order_by(
            NotificationModel.sent_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    @staticmethod
    def _to_entity(model: NotificationModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            title=model.title,
            body=model.body,
            sent_by=model.sent_by,
            data=dict(model.data or {}),
            category=model.category,
            priority=NotificationPriority(model.priority),
            receiver_groups=list(model.receiver_groups or []),
            sent_at=ensure_app_timezone(model.sent_at),
        )


def _jsonable(value: Any) -> Any:
    """Return ``value`` with nested dates converted into ISO strings."""

    if isinstance(value, date):
        return to_iso8601(value)
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


__all__ = ["NotificationRepository"]
