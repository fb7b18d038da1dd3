"""Endpoints to broadcast admin notifications and inspect push delivery."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    DEFAULT_HISTORY_LIMIT,
    NotificationDispatcher,
    NotificationStoreError,
    describe_delivery_configuration,
    get_token_statistics,
    list_notifications as list_notifications_uc,
    send_test_notification,
)
from app.domain.entities import NotificationRecord, User
from app.infrastructure.database import get_db
from app.interfaces.api.dependencies import get_notification_dispatcher, require_admin
from app.interfaces.api.schemas import (
    DeliveryConfigRead,
    DiagnosticSendRead,
    MinimalNotificationCreate,
    MinimalTestRead,
    NotificationCreate,
    NotificationCreated,
    NotificationRead,
    ProviderStatusRead,
    TokenCountRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)

MAX_HISTORY_LIMIT = 500


def _notification_to_schema(record: NotificationRecord) -> NotificationRead:
    return NotificationRead(
        id=record.id or "",
        title=record.title,
        body=record.body,
        data=record.data or {},
        sent_by=record.sent_by,
        category=record.category,
        priority=record.priority,
        receiver_groups=record.receiver_groups,
        sent_at=record.sent_at,
    )


@router.post(
    "/",
    response_model=NotificationCreated,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_notification(
    payload: NotificationCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> NotificationCreated:
    """Record a broadcast and send it to every matching device."""

    record = NotificationRecord(
        id=None,
        title=payload.title,
        body=payload.body,
        sent_by=payload.sent_by or str(current_user.id),
        data=dict(payload.data or {}),
        category=payload.category,
        priority=payload.priority,
        receiver_groups=list(payload.receiver_groups or []),
    )
    try:
        result = await dispatcher.create_notification(
            record, schedule=background_tasks.add_task
        )
    except NotificationStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="The notification could not be saved",
        ) from exc

    if result.fcm_warning:
        logger.warning("Notification %s: %s", result.notification_id, result.fcm_warning)
    return NotificationCreated(id=result.notification_id, fcm_warning=result.fcm_warning)


@router.get("/", response_model=list[NotificationRead], response_model_exclude_none=True)
def list_notifications(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=MAX_HISTORY_LIMIT),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> list[NotificationRead]:
    """Return the most recent broadcasts, newest first."""

    records = list_notifications_uc(db, limit=limit)
    return [_notification_to_schema(record) for record in records]


@router.get("/debug/token-count", response_model=TokenCountRead)
def get_token_count(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> TokenCountRead:
    """Count registered push tokens by client platform."""

    stats = get_token_statistics(db)
    return TokenCountRead(
        count=stats.count,
        android=stats.android,
        ios=stats.ios,
        web=stats.web,
        unknown=stats.unknown,
        tokens=stats.sample,
    )


@router.get("/debug/delivery-config", response_model=DeliveryConfigRead)
def get_delivery_config(
    _: User = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> DeliveryConfigRead:
    """Report whether each push provider is ready to send."""

    statuses = describe_delivery_configuration(dispatcher)
    return DeliveryConfigRead(
        initialized=all(item.configured for item in statuses),
        providers=[
            ProviderStatusRead(
                provider=item.provider, configured=item.configured, error=item.error
            )
            for item in statuses
        ],
    )


@router.post("/debug/test-send", response_model=DiagnosticSendRead)
async def post_test_send(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> DiagnosticSendRead:
    """Send a test message to the first registered device."""

    report = await send_test_notification(db, dispatcher)
    return DiagnosticSendRead(
        success=report.success,
        message=report.message,
        result=report.outcome.result.value if report.outcome else None,
    )


@router.post(
    "/debug/minimal-test",
    response_model=MinimalTestRead,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def post_minimal_test(
    background_tasks: BackgroundTasks,
    payload: MinimalNotificationCreate | None = Body(default=None),
    current_user: User = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> MinimalTestRead:
    """Broadcast a bare notification through the regular creation path."""

    payload = payload or MinimalNotificationCreate()
    try:
        created = await create_notification(
            NotificationCreate(title=payload.title, body=payload.body, sent_by=payload.sent_by),
            background_tasks,
            current_user=current_user,
            dispatcher=dispatcher,
        )
    except HTTPException as exc:
        logger.error("Minimal test notification failed: %s", exc.detail)
        return MinimalTestRead(success=False, error=str(exc.detail))

    return MinimalTestRead(
        success=True,
        id=created.id,
        fcm_warning=created.fcm_warning,
        message="Minimal test notification created successfully",
    )
