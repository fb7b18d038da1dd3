import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.use_cases.notifications import NotificationDispatcher, TokenReconciler
from app.config import get_settings
from app.infrastructure.database import SessionLocal, engine, initialize_database
from app.infrastructure.notifications import (
    ExpoPushAdapter,
    FcmPushAdapter,
    build_firebase_app,
    close_firebase_app,
)
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def create_app(*, dispatcher: NotificationDispatcher | None = None) -> FastAPI:
    """Build the FastAPI application and wire the push delivery adapters.

    A pre-built ``dispatcher`` skips provider initialization entirely.
    """

    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        initialize_database()
        if dispatcher is not None:
            app.state.notification_dispatcher = dispatcher
            try:
                yield
            finally:
                engine.dispose()
            return

        firebase_status = build_firebase_app(settings)
        expo = ExpoPushAdapter.from_settings(settings)
        fcm = FcmPushAdapter.from_status(firebase_status)
        app.state.notification_dispatcher = NotificationDispatcher(
            session_factory=SessionLocal,
            expo=expo,
            fcm=fcm,
            reconciler=TokenReconciler(
                SessionLocal, max_attempts=settings.reconciliation_max_attempts
            ),
        )
        if not firebase_status.initialized:
            logger.warning("FCM delivery unavailable: %s", firebase_status.error)
        try:
            yield
        finally:
            expo.close()
            close_firebase_app(firebase_status)
            engine.dispose()

    app = FastAPI(title="Festival Push Notifications", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
