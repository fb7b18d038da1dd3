"""Use cases for managing a user's device address and notification groups."""

from collections.abc import Iterable

from sqlalchemy.orm import Session

from app.domain.entities import User
from app.infrastructure.repositories import UserRepository


def register_push_token(session: Session, user_id: str, push_token: str) -> User:
    """Attach ``push_token`` to the user, detaching it from any previous owner."""

    token = (push_token or "").strip()
    if not token:
        raise ValueError("Push token is required")

    repository = UserRepository(session)
    if repository.get(user_id) is None:
        raise ValueError("User not found")

    # A device address belongs to a single user at a time.
    repository.clear_push_tokens([token])
    return repository.set_push_token(user_id, token)


def clear_push_token(session: Session, user_id: str) -> User:
    """Forget the device address of the user, e.g. on sign-out."""

    repository = UserRepository(session)
    if repository.get(user_id) is None:
        raise ValueError("User not found")
    return repository.set_push_token(user_id, None)


def update_user_groups(session: Session, user_id: str, groups: Iterable[str]) -> User:
    """Replace the notification groups the user belongs to."""

    unique: list[str] = []
    for group in groups:
        name = (group or "").strip()
        if name and name not in unique:
            unique.append(name)

    repository = UserRepository(session)
    if repository.get(user_id) is None:
        raise ValueError("User not found")
    return repository.set_user_groups(user_id, unique)
