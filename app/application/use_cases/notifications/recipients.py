"""Resolve which device addresses a broadcast should reach."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.infrastructure.repositories import UserRepository

logger = logging.getLogger(__name__)


class RecipientResolver:
    """Read device addresses from the user store, optionally filtered by group."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def resolve(self, groups: Iterable[str] | None = None) -> list[str]:
        """Return the addresses of users in any of ``groups`` (everyone if empty).

        Store failures are logged and produce an empty list.
        """

        wanted = {group.strip() for group in groups or () if group and group.strip()}
        try:
            with self._session_factory() as session:
                users = UserRepository(session).list_with_push_token()
        except SQLAlchemyError as exc:
            logger.warning("Recipient lookup failed, nobody will be notified: %s", exc)
            return []

        addresses: list[str] = []
        for user in users:
            if wanted and not user.belongs_to_any(wanted):
                continue
            address = (user.push_token or "").strip()
            if address:
                addresses.append(address)

        logger.debug(
            "Resolved %d recipients for groups %s", len(addresses), sorted(wanted) or "all"
        )
        return addresses


__all__ = ["RecipientResolver"]
