"""SQLAlchemy model for the user table."""

from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, String, func

from app.infrastructure.database import Base


class UserModel(Base):
    """Database representation of a festival app user."""

    __tablename__ = "user"

    id = Column(String(32), primary_key=True, default=lambda: uuid4().hex)
    name = Column(String(80), nullable=False)
    email = Column(String(120), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default="user")
    push_token = Column(String(255), nullable=True, index=True)
    user_groups = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["UserModel"]
