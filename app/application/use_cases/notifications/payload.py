"""Conversion of notification ``data`` into the string-only map push APIs accept."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import date
from functools import singledispatch
from typing import Any

from app.domain.entities import DataValue
from app.utils import from_epoch_seconds, to_iso8601

logger = logging.getLogger(__name__)

PLACEHOLDER = "[Object]"

_TIMESTAMP_KEY_PAIRS = (("seconds", "nanoseconds"), ("_seconds", "_nanoseconds"))


def normalize_data(data: Mapping[str, DataValue] | None) -> dict[str, str]:
    """Return ``data`` with every value rendered as a string.

    ``None`` values are dropped. A value that cannot be serialized becomes
    :data:`PLACEHOLDER` instead of failing the whole broadcast.
    """

    if not data:
        return {}

    result: dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            continue
        try:
            result[str(key)] = normalize_value(value)
        except (TypeError, ValueError, OverflowError, RecursionError) as exc:
            logger.warning("Could not serialize value for key %s: %s", key, exc)
            result[str(key)] = PLACEHOLDER
    return result


@singledispatch
def normalize_value(value: Any) -> str:
    """Render a single ``data`` value; unknown types are JSON encoded."""

    return _to_json(value)


@normalize_value.register
def _(value: str) -> str:
    return value


@normalize_value.register
def _(value: bool) -> str:
    return "true" if value else "false"


@normalize_value.register(int)
@normalize_value.register(float)
def _(value: int | float) -> str:
    return str(value)


@normalize_value.register
def _(value: date) -> str:
    return to_iso8601(value)


@normalize_value.register(Mapping)
def _(value: Mapping) -> str:
    for seconds_key, nanos_key in _TIMESTAMP_KEY_PAIRS:
        if seconds_key in value and nanos_key in value:
            stamp = from_epoch_seconds(value[seconds_key], int(value[nanos_key] or 0))
            return stamp.isoformat()
    return _to_json(value)


def _to_json(value: Any) -> str:
    return json.dumps(value, default=_json_default, separators=(",", ":"))


def _json_default(value: Any) -> str:
    if isinstance(value, date):
        return to_iso8601(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


__all__ = ["PLACEHOLDER", "normalize_data", "normalize_value"]
