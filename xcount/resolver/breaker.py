"""
Rate-lock derivation for upstream 429 responses.

The X API may say when to come back through ``retry-after`` (seconds)
or ``x-rate-limit-reset`` (unix seconds). Either hint is trusted only
down to a small floor, and the final lock never drops below the
configured minimum.
"""

import logging
from datetime import datetime, timedelta
from typing import Mapping

from ..core.config import ResolverConfig
from ..core.utils import parse_number

# Configure logging
logger = logging.getLogger(__name__)


def lock_duration(
    headers: Mapping[str, str],
    now: datetime,
    config: ResolverConfig
) -> timedelta:
    """
    Compute how long to suppress upstream calls after a 429.

    Preference order: ``retry-after``, then ``x-rate-limit-reset``
    minus ``now`` (only if in the future), then the freshness window.

    Args:
        headers: Upstream response headers (case-insensitive mapping)
        now: Current instant
        config: Resolver tuning

    Returns:
        Lock duration, at least ``config.min_lock``
    """
    duration = config.freshness

    retry_after = parse_number(headers.get("retry-after"))
    reset_at = parse_number(headers.get("x-rate-limit-reset"))

    if retry_after is not None:
        duration = max(config.hint_floor, timedelta(seconds=retry_after))
        source = "retry-after"
    elif reset_at is not None and reset_at > now.timestamp():
        duration = max(config.hint_floor, timedelta(seconds=reset_at - now.timestamp()))
        source = "x-rate-limit-reset"
    else:
        source = "default"

    duration = max(config.min_lock, duration)
    logger.debug(f"Rate lock of {duration.total_seconds():.0f}s derived from {source}")
    return duration
