"""Delivery adapter for Firebase Cloud Messaging registration tokens."""

from __future__ import annotations

import logging

from firebase_admin import App, messaging
from firebase_admin import exceptions as firebase_exceptions
from google.auth import exceptions as google_auth_exceptions

from app.domain.entities import DeliveryOutcome, DeliveryProvider, DeliveryResult, NormalizedMessage

from .base import DeliveryAdapter, ProviderConfigurationError, ProviderRequestError, mask_token
from .firebase import FirebaseAppStatus

logger = logging.getLogger(__name__)

FCM_MAX_TOKENS_PER_MULTICAST = 500

# Raised for the whole request when the service account cannot send.
_CONFIGURATION_ERRORS = (
    messaging.SenderIdMismatchError,
    messaging.ThirdPartyAuthError,
    firebase_exceptions.PermissionDeniedError,
    firebase_exceptions.UnauthenticatedError,
    google_auth_exceptions.GoogleAuthError,
)

# Reported per token when the app instance is gone.
_UNREGISTERED_ERRORS = (messaging.UnregisteredError,)

# INVALID_ARGUMENT also covers payload problems; only these messages blame the token.
_MALFORMED_TOKEN_MARKERS = (
    "registration token is not a valid",
    "registration token is not valid",
    "invalid registration token",
)

# Reported per token when the token belongs to another sender.
_TOKEN_CREDENTIAL_ERRORS = (
    messaging.SenderIdMismatchError,
    messaging.ThirdPartyAuthError,
)


class FcmPushAdapter(DeliveryAdapter):
    """Send notifications with ``send_each_for_multicast`` on an explicit app."""

    provider = DeliveryProvider.FCM
    max_batch_size = FCM_MAX_TOKENS_PER_MULTICAST

    def __init__(self, app: App | None, *, unavailable_reason: str | None = None) -> None:
        self._app = app
        self._unavailable_reason = unavailable_reason

    @classmethod
    def from_status(cls, status: FirebaseAppStatus) -> "FcmPushAdapter":
        return cls(status.app, unavailable_reason=status.error)

    @property
    def configuration_error(self) -> str | None:
        if self._app is None:
            return self._unavailable_reason or "Firebase app is not initialized"
        return None

    @staticmethod
    def _build_message(chunk: list[str], message: NormalizedMessage) -> messaging.MulticastMessage:
        return messaging.MulticastMessage(
            tokens=chunk,
            notification=messaging.Notification(title=message.title, body=message.body),
            data=message.data,
            android=messaging.AndroidConfig(priority="high")
            if message.is_high_priority
            else None,
            apns=messaging.APNSConfig(
                payload=messaging.APNSPayload(aps=messaging.Aps(sound="default", badge=1))
            ),
        )

    def _send_chunk(
        self, chunk: list[str], message: NormalizedMessage
    ) -> list[DeliveryOutcome]:
        multicast = self._build_message(chunk, message)
        try:
            response = messaging.send_each_for_multicast(multicast, app=self._app)
        except _CONFIGURATION_ERRORS as exc:
            raise ProviderConfigurationError(
                f"FCM permission denied, the service account cannot send messages: {exc}"
            ) from exc
        except (firebase_exceptions.FirebaseError, ValueError) as exc:
            raise ProviderRequestError(f"FCM multicast failed: {exc}") from exc

        responses = list(response.responses)
        if len(responses) != len(chunk):
            raise ProviderRequestError(
                f"FCM returned {len(responses)} responses for {len(chunk)} tokens"
            )

        outcomes = [
            self._response_outcome(token, item) for token, item in zip(chunk, responses)
        ]
        sent = sum(1 for outcome in outcomes if outcome.is_ok)
        logger.info("FCM: successfully sent %d/%d", sent, len(chunk))
        return outcomes

    def _response_outcome(self, token: str, item: messaging.SendResponse) -> DeliveryOutcome:
        if item.success:
            return self.outcome(token, DeliveryResult.OK)

        error = item.exception
        detail = str(error) if error else "Unknown FCM error"
        code = getattr(error, "code", None)
        if code:
            detail = f"{code}: {detail}"

        if isinstance(error, _UNREGISTERED_ERRORS) or _is_malformed_token_error(error):
            logger.info("FCM: removing %s due to %s", mask_token(token), detail)
            return self.outcome(token, DeliveryResult.INVALID, detail)
        if isinstance(error, _TOKEN_CREDENTIAL_ERRORS):
            return self.outcome(
                token, DeliveryResult.TRANSIENT_ERROR, detail, configuration_error=True
            )
        logger.warning("FCM: delivery to %s failed: %s", mask_token(token), detail)
        return self.outcome(token, DeliveryResult.TRANSIENT_ERROR, detail)


def _is_malformed_token_error(error: BaseException | None) -> bool:
    if not isinstance(error, firebase_exceptions.InvalidArgumentError):
        return False
    message = str(error).lower()
    return any(marker in message for marker in _MALFORMED_TOKEN_MARKERS)


__all__ = ["FcmPushAdapter", "FCM_MAX_TOKENS_PER_MULTICAST"]
