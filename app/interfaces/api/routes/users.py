"""Routes for registering device addresses and notification groups."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.application.use_cases.users import (
    clear_push_token as clear_push_token_uc,
    register_push_token as register_push_token_uc,
    update_user_groups as update_user_groups_uc,
)
from app.domain.entities import User
from app.infrastructure.database import get_db
from app.interfaces.api.dependencies import get_current_user, require_admin
from app.interfaces.api.schemas import PushTokenUpdate, UserGroupsUpdate, UserPushRead

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


def _to_read_model(user: User) -> UserPushRead:
    return UserPushRead.model_validate(user)


def _raise_for_value_error(exc: ValueError) -> None:
    message = str(exc)
    code = (
        status.HTTP_404_NOT_FOUND
        if message == "User not found"
        else status.HTTP_400_BAD_REQUEST
    )
    raise HTTPException(status_code=code, detail=message) from exc


@router.put("/me/push-token", response_model=UserPushRead)
def register_push_token(
    payload: PushTokenUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Store the device address of the authenticated user."""

    try:
        user = register_push_token_uc(db, current_user.id, payload.token)
    except ValueError as exc:
        _raise_for_value_error(exc)
    logger.info("Push token registered for user %s", user.id)
    return _to_read_model(user)


@router.delete("/me/push-token", response_model=UserPushRead)
def clear_push_token(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Forget the device address of the authenticated user."""

    try:
        user = clear_push_token_uc(db, current_user.id)
    except ValueError as exc:
        _raise_for_value_error(exc)
    return _to_read_model(user)


@router.put("/{user_id}/groups", response_model=UserPushRead)
def update_user_groups(
    user_id: str,
    payload: UserGroupsUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """Replace the notification groups of a user."""

    try:
        user = update_user_groups_uc(db, user_id, payload.groups)
    except ValueError as exc:
        _raise_for_value_error(exc)
    return _to_read_model(user)
