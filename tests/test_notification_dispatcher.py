"""End-to-end tests for storing and broadcasting admin notifications."""

from datetime import datetime, timezone

import pytest
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging
from sqlalchemy.exc import OperationalError

from app.application.use_cases.notifications import (
    NotificationDispatcher,
    NotificationStoreError,
)
from app.domain.entities import (
    DeliveryResult,
    DispatchStage,
    NotificationPriority,
    NotificationRecord,
)
from app.infrastructure.notifications import ExpoPushAdapter, FcmPushAdapter
from app.infrastructure.repositories import NotificationRepository

pytestmark = pytest.mark.anyio


class DisabledExpoAdapter(ExpoPushAdapter):
    @property
    def configuration_error(self):
        return "Expo delivery disabled"


def _record(**overrides) -> NotificationRecord:
    values = {
        "id": None,
        "title": "Headliner moved",
        "body": "Nova now plays at 22:00",
        "sent_by": "admin-1",
    }
    values.update(overrides)
    return NotificationRecord(**values)


def _stored(session_factory, notification_id):
    with session_factory() as session:
        return NotificationRepository(session).get(notification_id)


async def test_broadcast_reaches_both_providers(
    dispatcher, create_user, expo_session, fcm_sender, session_factory
):
    create_user("ana@example.com", push_token="ExponentPushToken[ana]")
    create_user("ben@example.com", push_token="fcm-ben")

    result = await dispatcher.create_notification(
        _record(data={"stage": "main", "day": 2, "moved": True})
    )

    assert result.fcm_warning is None
    assert result.stage is DispatchStage.DONE
    assert sorted(outcome.address for outcome in result.outcomes) == [
        "ExponentPushToken[ana]",
        "fcm-ben",
    ]
    assert all(outcome.result is DeliveryResult.OK for outcome in result.outcomes)
    assert expo_session.sent_addresses == ["ExponentPushToken[ana]"]
    assert fcm_sender.sent_tokens == ["fcm-ben"]

    sent_data = {"stage": "main", "day": "2", "moved": "true"}
    assert expo_session.requests[0]["json"][0]["data"] == sent_data
    assert fcm_sender.calls[0].message.data == sent_data

    stored = _stored(session_factory, result.notification_id)
    assert stored is not None
    assert stored.title == "Headliner moved"
    assert stored.data == {"stage": "main", "day": 2, "moved": True}
    assert stored.sent_at is not None


async def test_invalid_tokens_are_cleared(
    dispatcher, create_user, expo_session, fcm_sender, stored_token
):
    dead_expo = create_user("ana@example.com", push_token="ExponentPushToken[dead]")
    dead_fcm = create_user("ben@example.com", push_token="fcm-dead")
    alive = create_user("cy@example.com", push_token="fcm-alive")
    expo_session.tickets = {
        "ExponentPushToken[dead]": {
            "status": "error",
            "message": "gone",
            "details": {"error": "DeviceNotRegistered"},
        }
    }
    fcm_sender.errors = {"fcm-dead": messaging.UnregisteredError("Requested entity was not found.")}

    result = await dispatcher.create_notification(_record())

    assert len(result.invalid_outcomes) == 2
    assert stored_token(dead_expo.id) is None
    assert stored_token(dead_fcm.id) is None
    assert stored_token(alive.id) == "fcm-alive"


async def test_reconciliation_can_be_scheduled(
    dispatcher, create_user, fcm_sender, stored_token
):
    user = create_user("ana@example.com", push_token="fcm-dead")
    fcm_sender.errors = {"fcm-dead": messaging.UnregisteredError("Requested entity was not found.")}
    scheduled = []

    result = await dispatcher.create_notification(
        _record(), schedule=lambda func, *args: scheduled.append((func, args))
    )

    assert result.stage is DispatchStage.DONE
    assert stored_token(user.id) == "fcm-dead"
    assert len(scheduled) == 1

    func, args = scheduled[0]
    assert func(*args) == 1
    assert stored_token(user.id) is None


async def test_receiver_groups_limit_the_audience(
    dispatcher, create_user, expo_session, fcm_sender
):
    create_user("ana@example.com", push_token="ExponentPushToken[ana]", groups=["staff"])
    create_user("ben@example.com", push_token="fcm-ben", groups=["visitors"])
    create_user("cy@example.com", push_token="fcm-cy", groups=["staff", "press"])

    result = await dispatcher.create_notification(_record(receiver_groups=["staff"]))

    assert sorted(outcome.address for outcome in result.outcomes) == [
        "ExponentPushToken[ana]",
        "fcm-cy",
    ]
    assert fcm_sender.sent_tokens == ["fcm-cy"]


async def test_missing_fcm_configuration_is_reported(
    session_factory, expo_adapter, expo_session, create_user
):
    create_user("ana@example.com", push_token="ExponentPushToken[ana]")
    create_user("ben@example.com", push_token="fcm-ben")
    dispatcher = NotificationDispatcher(
        session_factory=session_factory,
        expo=expo_adapter,
        fcm=FcmPushAdapter(None, unavailable_reason="Firebase credentials are not configured"),
    )

    result = await dispatcher.create_notification(_record())

    assert result.fcm_warning == (
        "Notification saved but not delivered via FCM due to configuration or "
        "permission issues"
    )
    assert expo_session.sent_addresses == ["ExponentPushToken[ana]"]
    by_address = {outcome.address: outcome for outcome in result.outcomes}
    assert by_address["ExponentPushToken[ana]"].is_ok
    assert by_address["fcm-ben"].configuration_error is True


async def test_no_configured_provider_skips_delivery(
    session_factory, expo_session, create_user, fcm_sender
):
    create_user("ana@example.com", push_token="ExponentPushToken[ana]")
    dispatcher = NotificationDispatcher(
        session_factory=session_factory,
        expo=DisabledExpoAdapter(session=expo_session),
        fcm=FcmPushAdapter(None),
    )

    result = await dispatcher.create_notification(_record())

    assert result.fcm_warning == (
        "Notification saved but not sent due to FCM configuration issues"
    )
    assert result.outcomes == []
    assert expo_session.requests == []
    assert fcm_sender.calls == []
    assert _stored(session_factory, result.notification_id) is not None


async def test_no_recipients_is_a_silent_success(
    dispatcher, create_user, expo_session, fcm_sender, session_factory
):
    create_user("ana@example.com")

    result = await dispatcher.create_notification(
        _record(priority=NotificationPriority.HIGH, category="alerts")
    )

    assert result.fcm_warning is None
    assert result.outcomes == []
    assert expo_session.requests == []
    assert fcm_sender.calls == []
    stored = _stored(session_factory, result.notification_id)
    assert stored.priority is NotificationPriority.HIGH
    assert stored.category == "alerts"


async def test_provider_crash_does_not_fail_the_broadcast(
    dispatcher, create_user, expo_adapter, fcm_sender, monkeypatch
):
    create_user("ana@example.com", push_token="ExponentPushToken[ana]")
    create_user("ben@example.com", push_token="fcm-ben")

    async def explode(batch, message):
        raise RuntimeError("boom")

    monkeypatch.setattr(expo_adapter, "send", explode)

    result = await dispatcher.create_notification(_record())

    by_address = {outcome.address: outcome for outcome in result.outcomes}
    assert by_address["ExponentPushToken[ana]"].result is DeliveryResult.TRANSIENT_ERROR
    assert by_address["fcm-ben"].is_ok
    assert result.fcm_warning is None


async def test_datetime_data_is_stored_and_sent_as_iso(dispatcher, create_user, expo_session):
    create_user("ana@example.com", push_token="ExponentPushToken[ana]")
    moment = datetime(2026, 7, 4, 18, 0, tzinfo=timezone.utc)

    await dispatcher.create_notification(_record(data={"startsAt": moment}))

    assert expo_session.requests[0]["json"][0]["data"] == {
        "startsAt": "2026-07-04T18:00:00+00:00"
    }


async def test_store_failure_raises(expo_adapter, fcm_adapter, expo_session):
    def broken_factory():
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    dispatcher = NotificationDispatcher(
        session_factory=broken_factory, expo=expo_adapter, fcm=fcm_adapter
    )

    with pytest.raises(NotificationStoreError, match="Database error"):
        await dispatcher.create_notification(_record())

    assert expo_session.requests == []


async def test_group_without_members_sends_nothing(
    dispatcher, create_user, expo_session, fcm_sender, session_factory
):
    create_user("ana@example.com", push_token="ExponentPushToken[ana]", groups=["staff"])
    create_user("ben@example.com", push_token="fcm-ben", groups=["visitors"])
    create_user("cy@example.com", push_token="fcm-cy")

    result = await dispatcher.create_notification(_record(receiver_groups=["vip"]))

    assert result.stage is DispatchStage.DONE
    assert result.fcm_warning is None
    assert result.outcomes == []
    assert expo_session.requests == []
    assert fcm_sender.calls == []
    assert _stored(session_factory, result.notification_id).receiver_groups == ["vip"]


async def test_rejected_expo_credentials_keep_every_token(
    dispatcher, create_user, expo_session, fcm_sender, stored_token, fake_response
):
    expo_user = create_user("ana@example.com", push_token="ExponentPushToken[ana]")
    fcm_user = create_user("ben@example.com", push_token="fcm-ben")
    expo_session.responses = [
        fake_response(401, {"errors": [{"code": "UNAUTHORIZED", "message": "bad token"}]})
    ]

    result = await dispatcher.create_notification(_record())

    assert result.fcm_warning == (
        "Notification saved but not delivered via EXPO due to configuration or "
        "permission issues"
    )
    by_address = {outcome.address: outcome for outcome in result.outcomes}
    assert by_address["ExponentPushToken[ana]"].result is DeliveryResult.TRANSIENT_ERROR
    assert by_address["ExponentPushToken[ana]"].configuration_error is True
    assert by_address["fcm-ben"].is_ok
    assert fcm_sender.sent_tokens == ["fcm-ben"]
    assert result.invalid_outcomes == []
    assert stored_token(expo_user.id) == "ExponentPushToken[ana]"
    assert stored_token(fcm_user.id) == "fcm-ben"


async def test_cleared_tokens_are_skipped_by_the_next_broadcast(
    dispatcher, create_user, fcm_sender, stored_token
):
    first = create_user("ana@example.com", push_token="garbage-1")
    second = create_user("ben@example.com", push_token="garbage-2")
    alive = create_user("cy@example.com", push_token="fcm-cy")
    error = firebase_exceptions.InvalidArgumentError(
        "The registration token is not a valid FCM registration token"
    )
    fcm_sender.errors = {"garbage-1": error, "garbage-2": error}

    result = await dispatcher.create_notification(_record())

    assert sorted(outcome.address for outcome in result.invalid_outcomes) == [
        "garbage-1",
        "garbage-2",
    ]
    assert stored_token(first.id) is None
    assert stored_token(second.id) is None
    assert stored_token(alive.id) == "fcm-cy"

    fcm_sender.calls.clear()
    again = await dispatcher.create_notification(_record())

    assert fcm_sender.sent_tokens == ["fcm-cy"]
    assert [outcome.address for outcome in again.outcomes] == ["fcm-cy"]
    assert again.invalid_outcomes == []
