"""Construction of the Firebase Admin app used for FCM delivery."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import uuid4

import firebase_admin
from firebase_admin import App, credentials

from app.config import Settings

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME_PREFIX = "festival-push"


@dataclass
class FirebaseAppStatus:
    """Firebase app built for this process, or the reason it is unavailable."""

    app: App | None
    error: str | None = None

    @property
    def initialized(self) -> bool:
        return self.app is not None


def build_firebase_app(settings: Settings) -> FirebaseAppStatus:
    """Initialize a dedicated, named Firebase app from the configured credentials.

    The app is never registered as the SDK's default app; callers pass it
    explicitly to every ``firebase_admin`` call.
    """

    if not settings.fcm_credentials_path:
        logger.info("FCM_CREDENTIALS_PATH not set; FCM delivery disabled")
        return FirebaseAppStatus(app=None, error="Firebase credentials are not configured")

    options: dict[str, object] = {"httpTimeout": settings.fcm_request_timeout}
    if settings.fcm_project_id:
        options["projectId"] = settings.fcm_project_id

    try:
        credential = credentials.Certificate(settings.fcm_credentials_path)
        app = firebase_admin.initialize_app(
            credential,
            options=options,
            name=f"{FIREBASE_APP_NAME_PREFIX}-{uuid4().hex[:8]}",
        )
    except (OSError, ValueError) as exc:
        logger.error("Firebase Admin SDK could not be initialized: %s", exc)
        return FirebaseAppStatus(app=None, error=f"Firebase Admin SDK not initialized: {exc}")

    logger.info("Firebase app %s initialized for project %s", app.name, app.project_id)
    return FirebaseAppStatus(app=app)


def close_firebase_app(status: FirebaseAppStatus) -> None:
    """Release the app created by :func:`build_firebase_app`."""

    if status.app is not None:
        firebase_admin.delete_app(status.app)
        status.app = None


__all__ = ["FirebaseAppStatus", "build_firebase_app", "close_firebase_app"]
