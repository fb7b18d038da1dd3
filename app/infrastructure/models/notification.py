"""SQLAlchemy model for persisted broadcast notifications."""

from sqlalchemy import JSON, Column, DateTime, String, Text

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation of an admin broadcast."""

    __tablename__ = "notification"

    id = Column(String(32), primary_key=True)
    title = Column(String(120), nullable=False)
    body = Column(Text, nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    sent_by = Column(String(64), nullable=False)
    category = Column(String(50), nullable=True)
    priority = Column(String(10), nullable=False, default="normal")
    receiver_groups = Column(JSON, nullable=False, default=list)
    sent_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )


__all__ = ["NotificationModel"]
