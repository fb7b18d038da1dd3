"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


settings = get_settings()

logger = logging.getLogger(__name__)

_IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def _engine_options(database_url: str) -> dict[str, Any]:
    """Return ``create_engine`` keyword arguments suited to ``database_url``."""

    if not database_url.startswith("sqlite"):
        return {"pool_pre_ping": True}

    # Sessions are handed to worker threads by the async dispatcher.
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if database_url in _IN_MEMORY_SQLITE_URLS:
        options["poolclass"] = StaticPool
    return options


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def initialize_database() -> None:
    """Ensure all ORM models have corresponding database tables."""

    from app.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.debug("Database schema ensured for %s", engine.url.render_as_string())


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
