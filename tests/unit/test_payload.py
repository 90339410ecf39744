"""Tests for turning X API count responses into payloads."""

from datetime import timedelta

import pytest

from xcount.core.utils import to_iso
from xcount.models.schemas import CountPayload
from xcount.resolver.resolver import build_payload
from xcount.upstream.client import UpstreamUnavailableError

from tests.fakes import START

END = START - timedelta(seconds=15)
BEGIN = END - timedelta(hours=24)


def buckets(*counts):
    return {"data": [{"start": f"s{i}", "end": f"e{i}", "tweet_count": c} for i, c in enumerate(counts)]}


class TestBuildPayload:
    def test_sums_counts(self):
        payload = build_payload(buckets(3, 5, 0), "q", BEGIN, END)
        assert payload.total == 8
        assert [b.count for b in payload.per_hour] == [3, 5, 0]

    def test_empty_buckets(self):
        assert build_payload(buckets(), "q", BEGIN, END).total == 0

    def test_missing_data_key(self):
        payload = build_payload({"meta": {"total_tweet_count": 0}}, "q", BEGIN, END)
        assert payload.total == 0

    def test_malformed_bucket_raises_unavailable(self):
        with pytest.raises(UpstreamUnavailableError):
            build_payload({"data": [{"end": "x", "tweet_count": 1}]}, "q", BEGIN, END)

    def test_non_object_bucket_raises_unavailable(self):
        with pytest.raises(UpstreamUnavailableError):
            build_payload({"data": ["oops"]}, "q", BEGIN, END)
        assert payload.per_hour == []

    def test_missing_counts_are_zero(self):
        data = {"data": [{"start": "a", "end": "b"}, {"start": "b", "end": "c", "tweet_count": 4}]}
        payload = build_payload(data, "q", BEGIN, END)
        assert payload.total == 4
        assert payload.per_hour[0].count is None

    def test_keeps_bucket_order_and_bounds(self):
        payload = build_payload(buckets(1, 2), "q", BEGIN, END)
        assert [(b.start, b.end) for b in payload.per_hour] == [("s0", "e0"), ("s1", "e1")]

    def test_window_formatting(self):
        payload = build_payload(buckets(), "q", BEGIN, END)
        assert payload.end_time == "2026-01-02T11:59:45.000Z"
        assert payload.start_time == "2026-01-01T11:59:45.000Z"


class TestSerialization:
    def test_note_omitted_when_unset(self):
        body = build_payload(buckets(1), "q", BEGIN, END).to_response()
        assert "note" not in body
        assert set(body) == {"query", "start_time", "end_time", "total", "per_hour"}

    def test_stub_keeps_null_total(self):
        stub = CountPayload(query="q", start_time=to_iso(BEGIN), end_time=to_iso(END), note="stub")
        body = stub.to_response()
        assert body["total"] is None
        assert body["per_hour"] == []
        assert body["note"] == "stub"
        assert stub.is_stub
