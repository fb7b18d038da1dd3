"""Persistence layer for user data."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from app.domain.entities import User
from app.infrastructure.models import UserModel
from app.utils import ensure_app_timezone


class UserRepository:
    """Provide the user operations needed for push delivery."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = (
            self.session.query(UserModel).filter(UserModel.email == email).one_or_none()
        )
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel(
            name=user.name,
            email=user.email,
            role=user.role,
            push_token=user.push_token,
            user_groups=list(user.user_groups or []),
        )
        if user.id is not None:
            model.id = user.id
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_with_push_token(self) -> Sequence[User]:
        """Return users that currently have a device address registered."""

        query = (
            self.session.query(UserModel)
            .filter(UserModel.push_token.is_not(None))
            .filter(UserModel.push_token != "")
            .order_by(UserModel.created_at.asc(), UserModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def set_push_token(self, user_id: str, push_token: str | None) -> User:
        model = self._require_model(user_id)
        model.push_token = push_token
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def set_user_groups(self, user_id: str, groups: Iterable[str]) -> User:
        model = self._require_model(user_id)
        model.user_groups = list(groups)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def clear_push_tokens(self, push_tokens: Iterable[str]) -> int:
        """Null out ``push_token`` on every user holding one of ``push_tokens``.

        Runs as a single ``UPDATE`` statement and returns the number of rows
        changed. Tokens that were already cleared simply do not match.
        """

        tokens = [token for token in push_tokens if token]
        if not tokens:
            return 0
        cleared = (
            self.session.query(UserModel)
            .filter(UserModel.push_token.in_(tokens))
            .update({UserModel.push_token: None}, synchronize_session=False)
        )
        self.session.commit()
        return int(cleared or 0)

    def _require_model(self, user_id: str) -> UserModel:
        model = self.session.get(UserModel, user_id)
        if model is None:
            msg = f"User with id {user_id} not found"
            raise ValueError(msg)
        return model

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            role=model.role,
            push_token=model.push_token,
            user_groups=list(model.user_groups or []),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["UserRepository"]
