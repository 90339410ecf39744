"""Tests for rate-lock derivation."""

from datetime import datetime, timedelta, timezone

import httpx

from xcount.core.config import ResolverConfig
from xcount.resolver.breaker import lock_duration

START = datetime(2026, 1, 2, 12, 0, 0, tzinfo=timezone.utc)
CONFIG = ResolverConfig()


def headers(**values) -> httpx.Headers:
    return httpx.Headers({k.replace("_", "-"): v for k, v in values.items()})


class TestLockDuration:
    def test_no_hints_uses_freshness(self):
        assert lock_duration(headers(), START, CONFIG) == timedelta(minutes=15)

    def test_retry_after_preferred_over_reset(self):
        reset = str(int(START.timestamp()) + 3600)
        assert lock_duration(headers(retry_after="1200", x_rate_limit_reset=reset), START, CONFIG) == timedelta(seconds=1200)

    def test_reset_header(self):
        reset = str(int(START.timestamp()) + 1800)
        assert lock_duration(headers(x_rate_limit_reset=reset), START, CONFIG) == timedelta(seconds=1800)

    def test_reset_in_past_falls_back_to_freshness(self):
        reset = str(int(START.timestamp()) - 10)
        assert lock_duration(headers(x_rate_limit_reset=reset), START, CONFIG) == timedelta(minutes=15)

    def test_short_hint_floored_at_minimum_lock(self):
        assert lock_duration(headers(retry_after="0"), START, CONFIG) == timedelta(minutes=5)
        assert lock_duration(headers(retry_after="60"), START, CONFIG) == timedelta(minutes=5)

    def test_non_numeric_hint_ignored(self):
        assert lock_duration(headers(retry_after="soon"), START, CONFIG) == timedelta(minutes=15)

    def test_custom_minimum(self):
        config = ResolverConfig(min_lock_seconds=30)
        assert lock_duration(headers(retry_after="1"), START, config) == timedelta(seconds=30)
        assert lock_duration(headers(retry_after="45"), START, config) == timedelta(seconds=45)
