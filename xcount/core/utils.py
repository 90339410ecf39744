"""
Shared utility functions for the X count proxy.

Contains the clock and timestamp helpers used across the resolver,
the cache and the API layer.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any
import json


def utc_now() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.

    This is the default clock of the resolver; tests substitute their own.
    """
    return datetime.now(timezone.utc)


def get_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        ISO-formatted UTC timestamp string
    """
    return datetime.now(timezone.utc).isoformat()


def to_iso(moment: datetime) -> str:
    """
    Format an instant the way the X API expects it.

    Always UTC, millisecond precision, with a trailing ``Z``
    (e.g. ``2024-05-01T12:00:00.000Z``).
    """
    moment = moment.astimezone(timezone.utc)
    millis = moment.microsecond // 1000
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"


def ceil_seconds(delta: timedelta) -> int:
    """Round a duration up to whole seconds."""
    return math.ceil(delta.total_seconds())


def parse_number(raw: str | None) -> float | None:
    """
    Parse a numeric header value.

    Returns:
        The value as a float, or None when the header is absent, blank
        or not a finite number
    """
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def safe_json_loads(data: str | bytes, default: Any = None) -> Any:
    """
    Safely parse JSON with error handling.

    Args:
        data: JSON string or bytes to parse
        default: Value to return if parsing fails

    Returns:
        Parsed JSON data or default value on failure
    """
    try:
        if isinstance(data, bytes):
            data = data.decode('utf-8')
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        return default
