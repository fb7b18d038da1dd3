"""Use case for listing previously sent broadcasts."""

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import NotificationRecord
from app.infrastructure.repositories import NotificationRepository

DEFAULT_HISTORY_LIMIT = 50


def list_notifications(
    session: Session, *, limit: int = DEFAULT_HISTORY_LIMIT
) -> Sequence[NotificationRecord]:
    """Return the most recent broadcasts, newest first."""

    if limit < 1:
        raise ValueError("limit must be a positive integer")
    return NotificationRepository(session).list_recent(limit=limit)
