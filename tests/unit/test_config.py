"""Tests for environment-driven settings."""

from datetime import datetime, timedelta, timezone

from xcount.core.config import Settings
from xcount.core.utils import ceil_seconds, parse_number, to_iso


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("X_BEARER_TOKEN", "X_COUNT_FRESHNESS_SECONDS", "X_COUNT_CASHTAG_ALIASES", "X_COUNT_SINGLE_FLIGHT"):
            monkeypatch.delenv(name, raising=False)
        s = Settings()

        assert s.upstream.counts_url == "https://api.twitter.com/2/tweets/counts/recent"
        assert s.upstream.headers == {"Authorization": "Bearer "}
        assert s.resolver.freshness == timedelta(minutes=15)
        assert s.resolver.min_lock == timedelta(minutes=5)
        assert s.resolver.buffer == timedelta(seconds=15)
        assert s.resolver.cashtag_aliases == ('"Horizen"', "Zcash")
        assert s.resolver.single_flight is True

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("X_BEARER_TOKEN", "abc")
        monkeypatch.setenv("X_API_BASE_URL", "https://example.test/2/")
        monkeypatch.setenv("X_COUNT_FRESHNESS_SECONDS", "60")
        monkeypatch.setenv("X_COUNT_CASHTAG_ALIASES", "Foo, Bar ,")
        monkeypatch.setenv("X_COUNT_SINGLE_FLIGHT", "off")
        s = Settings()

        assert s.upstream.headers == {"Authorization": "Bearer abc"}
        assert s.upstream.counts_url == "https://example.test/2/tweets/counts/recent"
        assert s.resolver.freshness_seconds == 60
        assert s.cdn.cache_control == "public, s-maxage=60, stale-while-revalidate=60"
        assert s.resolver.cashtag_aliases == ("Foo", "Bar")
        assert s.resolver.single_flight is False


class TestUtils:
    def test_to_iso_milliseconds(self):
        moment = datetime(2026, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        assert to_iso(moment) == "2026-01-02T03:04:05.678Z"

    def test_to_iso_converts_to_utc(self):
        moment = datetime(2026, 1, 2, 5, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso(moment) == "2026-01-02T03:00:00.000Z"

    def test_ceil_seconds(self):
        assert ceil_seconds(timedelta(seconds=1.2)) == 2
        assert ceil_seconds(timedelta(seconds=300)) == 300

    def test_parse_number(self):
        assert parse_number("12") == 12.0
        assert parse_number(" 1.5 ") == 1.5
        assert parse_number("") is None
        assert parse_number(None) is None
        assert parse_number("nan") is None
        assert parse_number("later") is None
