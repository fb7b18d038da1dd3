"""Delivery adapter for Expo push tokens."""

from __future__ import annotations

import json
import logging
from typing import Any

import requests

from app.config import Settings
from app.domain.entities import DeliveryOutcome, DeliveryProvider, DeliveryResult, NormalizedMessage

from .base import DeliveryAdapter, ProviderConfigurationError, ProviderRequestError, mask_token

logger = logging.getLogger(__name__)

EXPO_PUSH_API_URL = "https://exp.host/--/api/v2/push/send"
EXPO_MAX_MESSAGES_PER_REQUEST = 100

# Ticket error codes documented by Expo.
_UNREGISTERED_ERRORS = frozenset({"DeviceNotRegistered"})
_CREDENTIAL_ERRORS = frozenset({"InvalidCredentials"})


def _extract_expo_error_details(body: Any) -> str | None:
    """Return a human readable description for an Expo error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, (bytes, str)):
        try:
            parsed = json.loads(body)
        except (TypeError, ValueError, UnicodeDecodeError):
            text = body.decode("utf-8", "replace") if isinstance(body, bytes) else body
            return text.strip() or None
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                code = item.get("code")
                message = item.get("message")
                if code and message:
                    messages.append(f"{code}: {message}")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
    return None


class ExpoPushAdapter(DeliveryAdapter):
    """Send notifications through the Expo push API over HTTP."""

    provider = DeliveryProvider.EXPO
    max_batch_size = EXPO_MAX_MESSAGES_PER_REQUEST

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        push_url: str = EXPO_PUSH_API_URL,
        access_token: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._session = session or requests.Session()
        self._push_url = push_url
        self._access_token = access_token
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExpoPushAdapter":
        return cls(
            push_url=settings.expo_push_url,
            access_token=settings.expo_access_token,
            timeout=settings.expo_request_timeout,
        )

    def close(self) -> None:
        self._session.close()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    @staticmethod
    def _build_message(address: str, message: NormalizedMessage) -> dict[str, Any]:
        return {
            "to": address,
            "title": message.title,
            "body": message.body,
            "data": message.data,
            "sound": "default",
            "priority": "high" if message.is_high_priority else "default",
        }

    def _send_chunk(
        self, chunk: list[str], message: NormalizedMessage
    ) -> list[DeliveryOutcome]:
        payload = [self._build_message(address, message) for address in chunk]
        try:
            response = self._session.post(
                self._push_url,
                json=payload,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            raise ProviderRequestError(
                f"Expo push request timed out after {self._timeout}s"
            ) from exc
        except requests.RequestException as exc:
            raise ProviderRequestError(f"Expo push request failed: {exc}") from exc

        status_code = response.status_code
        details = _extract_expo_error_details(getattr(response, "content", None))
        if status_code in (401, 403):
            raise ProviderConfigurationError(
                f"Expo rejected the push credentials (status {status_code})"
                + (f": {details}" if details else "")
            )
        if not 200 <= status_code < 300:
            raise ProviderRequestError(
                f"Expo push API responded with status {status_code}"
                + (f": {details}" if details else "")
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderRequestError("Expo push API returned a non-JSON body") from exc

        tickets = body.get("data") if isinstance(body, dict) else None
        if not isinstance(tickets, list) or len(tickets) != len(chunk):
            raise ProviderRequestError(
                "Expo push API returned %s tickets for %d messages"
                % (len(tickets) if isinstance(tickets, list) else "no", len(chunk))
            )

        outcomes = [
            self._ticket_outcome(address, ticket) for address, ticket in zip(chunk, tickets)
        ]
        sent = sum(1 for outcome in outcomes if outcome.is_ok)
        logger.info("Expo: successfully sent %d/%d", sent, len(chunk))
        return outcomes

    def _ticket_outcome(self, address: str, ticket: Any) -> DeliveryOutcome:
        if not isinstance(ticket, dict):
            return self.outcome(address, DeliveryResult.TRANSIENT_ERROR, "Malformed Expo ticket")

        if ticket.get("status") == "ok":
            return self.outcome(address, DeliveryResult.OK)

        details = ticket.get("details") if isinstance(ticket.get("details"), dict) else {}
        error_code = str(details.get("error") or "")
        detail = error_code or str(ticket.get("message") or "Unknown Expo error")

        if error_code in _UNREGISTERED_ERRORS:
            logger.info("Expo: %s is no longer registered", mask_token(address))
            return self.outcome(address, DeliveryResult.INVALID, detail)
        if error_code in _CREDENTIAL_ERRORS:
            return self.outcome(
                address,
                DeliveryResult.TRANSIENT_ERROR,
                detail,
                configuration_error=True,
            )
        logger.warning("Expo: delivery to %s failed: %s", mask_token(address), detail)
        return self.outcome(address, DeliveryResult.TRANSIENT_ERROR, detail)


__all__ = ["ExpoPushAdapter", "EXPO_PUSH_API_URL", "EXPO_MAX_MESSAGES_PER_REQUEST"]
