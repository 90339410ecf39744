"""
Models module containing Pydantic schemas.
"""

from .schemas import (
    HourBucket,
    CountPayload,
    UpstreamErrorResponse,
    RateLimitedResponse,
    ErrorResponse,
    HealthResponse,
    CacheStatsResponse
)

__all__ = [
    "HourBucket",
    "CountPayload",
    "UpstreamErrorResponse",
    "RateLimitedResponse",
    "ErrorResponse",
    "HealthResponse",
    "CacheStatsResponse"
]
