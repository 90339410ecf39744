"""
Resolver module: query rewriting, rate locks and fallback policies.
"""

from .breaker import lock_duration
from .policy import (
    CacheStub,
    FallbackChains,
    FallbackContext,
    FallbackPolicy,
    Resolution,
    ServeStale,
    SurfaceRateLimited,
    SurfaceUpstreamError,
)
from .query import cashtags_to_hashtags, normalize_query, rewrite_bare_cashtag
from .resolver import QueryResolver, build_payload

__all__ = [
    "QueryResolver",
    "Resolution",
    "build_payload",
    "lock_duration",
    "normalize_query",
    "rewrite_bare_cashtag",
    "cashtags_to_hashtags",
    "FallbackChains",
    "FallbackContext",
    "FallbackPolicy",
    "ServeStale",
    "CacheStub",
    "SurfaceRateLimited",
    "SurfaceUpstreamError",
]
