"""Tests for the Firebase Cloud Messaging delivery adapter."""

import pytest
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from app.domain.entities import DeliveryResult, NormalizedMessage, NotificationPriority
from app.infrastructure.notifications import FcmPushAdapter
from app.infrastructure.notifications.firebase import FirebaseAppStatus

pytestmark = pytest.mark.anyio

MESSAGE = NormalizedMessage(title="Gates open", body="Welcome!", data={"screen": "map"})


async def test_sends_multicast_on_the_configured_app(fcm_adapter, fcm_sender, firebase_app):
    outcomes = await fcm_adapter.send(["tok-a", "tok-b"], MESSAGE)

    assert [outcome.result for outcome in outcomes] == [DeliveryResult.OK] * 2
    call = fcm_sender.calls[0]
    assert call.app is firebase_app
    assert call.message.tokens == ["tok-a", "tok-b"]
    assert call.message.data == {"screen": "map"}
    assert call.message.notification.title == "Gates open"
    assert call.message.android is None
    assert call.message.apns.payload.aps.sound == "default"


async def test_high_priority_sets_android_priority(fcm_adapter, fcm_sender):
    message = NormalizedMessage(title="t", body="b", priority=NotificationPriority.HIGH)

    await fcm_adapter.send(["tok-a"], message)

    assert fcm_sender.calls[0].message.android.priority == "high"


async def test_per_token_errors_are_classified(fcm_adapter, fcm_sender):
    fcm_sender.errors = {
        "tok-gone": messaging.UnregisteredError("Requested entity was not found."),
        "tok-bad": firebase_exceptions.InvalidArgumentError("The registration token is not valid"),
        "tok-busy": firebase_exceptions.UnavailableError("Service unavailable"),
        "tok-other": messaging.SenderIdMismatchError("Sender id does not match"),
    }

    outcomes = await fcm_adapter.send(
        ["tok-ok", "tok-gone", "tok-bad", "tok-busy", "tok-other"], MESSAGE
    )

    assert [outcome.result for outcome in outcomes] == [
        DeliveryResult.OK,
        DeliveryResult.INVALID,
        DeliveryResult.INVALID,
        DeliveryResult.TRANSIENT_ERROR,
        DeliveryResult.TRANSIENT_ERROR,
    ]
    assert [outcome.configuration_error for outcome in outcomes] == [
        False,
        False,
        False,
        False,
        True,
    ]
    assert outcomes[1].error_detail.startswith("NOT_FOUND")


async def test_permission_failure_marks_every_token_as_configuration_error(
    fcm_adapter, fcm_sender
):
    fcm_sender.raise_error = firebase_exceptions.PermissionDeniedError(
        "cloudmessaging.messages.create denied"
    )

    outcomes = await fcm_adapter.send(["tok-a", "tok-b"], MESSAGE)

    assert all(outcome.result is DeliveryResult.TRANSIENT_ERROR for outcome in outcomes)
    assert all(outcome.configuration_error for outcome in outcomes)
    assert "permission denied" in outcomes[0].error_detail


async def test_request_failure_is_transient(fcm_adapter, fcm_sender):
    fcm_sender.raise_error = firebase_exceptions.UnavailableError("backend down")

    outcomes = await fcm_adapter.send(["tok-a"], MESSAGE)

    assert outcomes[0].result is DeliveryResult.TRANSIENT_ERROR
    assert outcomes[0].configuration_error is False


async def test_malformed_tokens_are_invalid_even_when_all_fail(fcm_adapter, fcm_sender):
    error = firebase_exceptions.InvalidArgumentError(
        "The registration token is not a valid FCM registration token"
    )
    fcm_sender.errors = {"garbage-1": error, "garbage-2": error}

    outcomes = await fcm_adapter.send(["garbage-1", "garbage-2"], MESSAGE)

    assert [outcome.result for outcome in outcomes] == [DeliveryResult.INVALID] * 2


@pytest.mark.parametrize("tokens", [["tok-a"], ["tok-a", "tok-b"]])
async def test_payload_rejection_keeps_tokens(fcm_adapter, fcm_sender, tokens):
    error = firebase_exceptions.InvalidArgumentError("Message is too big")
    fcm_sender.errors = {token: error for token in tokens}

    outcomes = await fcm_adapter.send(tokens, MESSAGE)

    assert [outcome.result for outcome in outcomes] == [DeliveryResult.TRANSIENT_ERROR] * len(
        tokens
    )
    assert not any(outcome.configuration_error for outcome in outcomes)


async def test_large_batches_are_split(fcm_adapter, fcm_sender):
    tokens = [f"tok-{index}" for index in range(501)]

    outcomes = await fcm_adapter.send(tokens, MESSAGE)

    assert [len(call.message.tokens) for call in fcm_sender.calls] == [500, 1]
    assert len(outcomes) == 501


async def test_unconfigured_adapter_sends_nothing(fcm_sender):
    status = FirebaseAppStatus(app=None, error="Firebase credentials are not configured")
    adapter = FcmPushAdapter.from_status(status)

    outcomes = await adapter.send(["tok-a"], MESSAGE)

    assert status.initialized is False
    assert adapter.configured is False
    assert fcm_sender.calls == []
    assert outcomes[0].result is DeliveryResult.TRANSIENT_ERROR
    assert outcomes[0].configuration_error is True
    assert outcomes[0].error_detail == "Firebase credentials are not configured"
