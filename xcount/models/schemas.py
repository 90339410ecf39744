"""
Pydantic models for the count payload and API responses.

Defines the data contracts for the API. Field names match the JSON
wire format consumed by the public count display.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional


# ============================================================
# Count Payload
# ============================================================

class HourBucket(BaseModel):
    """
    One hour of the counted window.

    ``start`` and ``end`` are passed through exactly as the X API
    returns them; ``count`` may be null if the upstream omitted it.
    """
    start: str
    end: str
    count: Optional[int] = None


class CountPayload(BaseModel):
    """
    Tweet volume for one query over a 24-hour window.

    A payload with ``total`` set to None is a stub: a placeholder cached
    while no real data is available (rate limited or upstream down).

    Attributes:
        query: The query actually sent upstream (possibly rewritten)
        start_time: ISO-8601 start of the window
        end_time: ISO-8601 end of the window
        total: Sum of all bucket counts, or None for a stub
        per_hour: Chronological hourly buckets covering the window
        note: Optional explanation of a fallback or rate limit
    """
    query: str
    start_time: str
    end_time: str
    total: Optional[int] = None
    per_hour: list[HourBucket] = Field(default_factory=list)
    note: Optional[str] = None

    @property
    def is_stub(self) -> bool:
        return self.total is None

    def to_response(self) -> dict[str, Any]:
        """Serialize for the wire; ``note`` is left out when unset."""
        data = self.model_dump()
        if data["note"] is None:
            del data["note"]
        return data

    class Config:
        json_schema_extra = {
            "example": {
                "query": "#21MWITHPRIVACY -is:retweet",
                "start_time": "2026-01-01T11:59:45.000Z",
                "end_time": "2026-01-02T11:59:45.000Z",
                "total": 8,
                "per_hour": [
                    {"start": "2026-01-01T11:59:45.000Z", "end": "2026-01-01T12:00:00.000Z", "count": 3},
                    {"start": "2026-01-01T12:00:00.000Z", "end": "2026-01-01T13:00:00.000Z", "count": 5},
                ],
            }
        }


# ============================================================
# Error Responses
# ============================================================

class UpstreamErrorResponse(BaseModel):
    """Returned when the X API fails and nothing cached can stand in."""
    error: str = "X API error"
    status: int
    detail: str


class RateLimitedResponse(BaseModel):
    """Returned when rate limited with no stale or stub payload to serve."""
    error: str = "rate_limited"
    detail: str
    retry_after_seconds: int


class ErrorResponse(BaseModel):
    """Generic error response."""
    error: str
    detail: Optional[str] = None
    timestamp: str


# ============================================================
# Operational Responses
# ============================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "x-count-proxy"
    version: str
    upstream_configured: bool
    cached_queries: int
    timestamp: str


class CacheStatsResponse(BaseModel):
    """Snapshot of the in-process count cache."""
    cached_queries: int
    rate_locked_queries: int
    stub_queries: int
    inflight_requests: int
    timestamp: str
