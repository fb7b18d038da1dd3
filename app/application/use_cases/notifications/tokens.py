"""Split device addresses between the Expo and FCM delivery networks."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

EXPO_TOKEN_PREFIXES = (
    "ExponentPushToken[",
    "ExponentPushToken:",
    "ExpoPushToken[",
    "ExpoPushToken:",
)
WEB_TOKEN_PREFIX = "fcm:"


@dataclass(frozen=True)
class TokenBatches:
    """Disjoint per-provider batches produced by :func:`classify_addresses`."""

    expo: list[str] = field(default_factory=list)
    fcm: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.expo) + len(self.fcm)


def is_expo_token(address: str) -> bool:
    """Return ``True`` when ``address`` has the shape of an Expo push token.

    This is a prefix heuristic, not a validation: anything else is assumed to
    be a raw FCM registration token.
    """

    return address.startswith(EXPO_TOKEN_PREFIXES)


def classify_addresses(addresses: Iterable[str | None]) -> TokenBatches:
    """Partition ``addresses`` into Expo and FCM batches.

    Blank entries are dropped and duplicates keep their first position, so
    each address lands in exactly one batch once.
    """

    expo: list[str] = []
    fcm: list[str] = []
    seen: set[str] = set()
    for raw in addresses:
        address = (raw or "").strip()
        if not address or address in seen:
            continue
        seen.add(address)
        (expo if is_expo_token(address) else fcm).append(address)
    return TokenBatches(expo=expo, fcm=fcm)


def describe_platform(address: str) -> str:
    """Guess the client platform that registered ``address``."""

    if address.startswith(("ExponentPushToken[", "ExpoPushToken[")):
        return "android"
    if address.startswith(("ExponentPushToken:", "ExpoPushToken:")):
        return "ios"
    if address.startswith(WEB_TOKEN_PREFIX):
        return "web"
    return "unknown"


__all__ = [
    "EXPO_TOKEN_PREFIXES",
    "TokenBatches",
    "classify_addresses",
    "describe_platform",
    "is_expo_token",
]
