"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import NotificationDispatcher
from app.domain.entities import User
from app.infrastructure.database import get_db
from app.infrastructure.repositories import UserRepository
from app.infrastructure.security import decode_access_token

bearer_scheme = HTTPBearer()


def _credentials_exception(detail: str = "Invalid credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_current_user(token: str, db: Session) -> User:
    """Resolve the authenticated user for the provided token."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _credentials_exception() from exc

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise _credentials_exception()

    user = UserRepository(db).get(user_id)
    if user is None:
        raise _credentials_exception("User not found")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user from the provided token."""

    return resolve_current_user(credentials.credentials, db)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the authenticated user has administrator privileges."""

    if not current_user.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden - requires admin role",
        )
    return current_user


def get_notification_dispatcher(request: Request) -> NotificationDispatcher:
    """Return the dispatcher built by the application's composition root."""

    dispatcher = getattr(request.app.state, "notification_dispatcher", None)
    if dispatcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification delivery is not initialized",
        )
    return dispatcher
