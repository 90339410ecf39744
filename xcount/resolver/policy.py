"""
Fallback policies applied when the upstream cannot give fresh data.

Each failure kind (rate limited, upstream error, transport failure)
maps to an ordered list of policies. The resolver tries them in order
and uses the first one that produces a resolution. New strategies slot
into a chain without touching the resolver's control flow.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence, Union

from ..cache.store import CacheEntry, CountCache
from ..core.utils import to_iso
from ..models.schemas import CountPayload, RateLimitedResponse, UpstreamErrorResponse

# Configure logging
logger = logging.getLogger(__name__)

RATE_LIMITED_NOTE = "Rate-limited by X; showing no data until retry window passes."
UNAVAILABLE_NOTE = "Upstream unavailable; temporary stub cached."


@dataclass
class Resolution:
    """
    Outcome of resolving one query.

    Attributes:
        body: A count payload, or an error body as a plain dict
        status_code: HTTP status to answer with
        retry_after: Advisory retry delay in whole seconds, if any
    """
    body: Union[CountPayload, dict[str, Any]]
    status_code: int = 200
    retry_after: Optional[int] = None

    def to_response(self) -> dict[str, Any]:
        if isinstance(self.body, CountPayload):
            return self.body.to_response()
        return self.body


@dataclass
class FallbackContext:
    """
    Everything a policy may need to decide on a substitute answer.

    ``lock_until``/``retry_after`` are set for rate limits and transport
    failures; ``upstream_status``/``upstream_detail`` for error replies.
    """
    key: str
    now: datetime
    start: datetime
    end: datetime
    entry: Optional[CacheEntry] = None
    lock_until: Optional[datetime] = None
    retry_after: Optional[int] = None
    upstream_status: Optional[int] = None
    upstream_detail: str = ""


class FallbackPolicy(ABC):
    """Base class; ``apply`` returns a resolution or None to pass."""

    @abstractmethod
    def apply(self, ctx: FallbackContext, cache: CountCache) -> Optional[Resolution]:
        """Produce a substitute answer, or None to let the next policy try."""


class ServeStale(FallbackPolicy):
    """
    Re-serve the last known payload for the key.

    With ``extend_lock`` the entry is also put under the context's rate
    lock so later calls skip the upstream until it expires.
    """

    def __init__(self, extend_lock: bool = False):
        self.extend_lock = extend_lock

    def apply(self, ctx: FallbackContext, cache: CountCache) -> Optional[Resolution]:
        if ctx.entry is None or ctx.entry.payload is None:
            return None

        retry_after = None
        if self.extend_lock and ctx.lock_until is not None:
            ctx.entry.rate_locked_until = ctx.lock_until
            cache.set(ctx.key, ctx.entry)
            retry_after = ctx.retry_after

        logger.info(f"Serving stale payload for {ctx.key!r}")
        return Resolution(ctx.entry.payload, 200, retry_after)


class CacheStub(FallbackPolicy):
    """Cache and return a ``total=None`` placeholder under the context's lock."""

    def __init__(self, note: str):
        self.note = note

    def apply(self, ctx: FallbackContext, cache: CountCache) -> Optional[Resolution]:
        if ctx.lock_until is None:
            return None

        stub = CountPayload(
            query=ctx.key,
            start_time=to_iso(ctx.start),
            end_time=to_iso(ctx.end),
            total=None,
            per_hour=[],
            note=self.note,
        )
        cache.set(ctx.key, CacheEntry(timestamp=ctx.now, payload=stub, rate_locked_until=ctx.lock_until))
        logger.warning(f"Cached stub for {ctx.key!r} until {ctx.lock_until.isoformat()}")
        return Resolution(stub, 200, ctx.retry_after)


class SurfaceRateLimited(FallbackPolicy):
    """Tell the caller to come back later, with the lock's retry delay."""

    def apply(self, ctx: FallbackContext, cache: CountCache) -> Optional[Resolution]:
        if ctx.retry_after is None:
            return None
        body = RateLimitedResponse(
            detail="Rate-limited by X and no cached data is available.",
            retry_after_seconds=ctx.retry_after,
        )
        return Resolution(body.model_dump(), 429, ctx.retry_after)


class SurfaceUpstreamError(FallbackPolicy):
    """Pass the upstream's status code and error text through verbatim."""

    def apply(self, ctx: FallbackContext, cache: CountCache) -> Optional[Resolution]:
        if ctx.upstream_status is None:
            return None
        body = UpstreamErrorResponse(status=ctx.upstream_status, detail=ctx.upstream_detail)
        return Resolution(body.model_dump(), ctx.upstream_status)


@dataclass
class FallbackChains:
    """Ordered policies per failure kind."""
    rate_limited: Sequence[FallbackPolicy]
    upstream_error: Sequence[FallbackPolicy]
    transport_failure: Sequence[FallbackPolicy]

    @classmethod
    def default(cls) -> "FallbackChains":
        return cls(
            rate_limited=(
                ServeStale(extend_lock=True),
                CacheStub(RATE_LIMITED_NOTE),
                SurfaceRateLimited(),
            ),
            upstream_error=(
                ServeStale(),
                SurfaceUpstreamError(),
            ),
            transport_failure=(
                ServeStale(),
                CacheStub(UNAVAILABLE_NOTE),
            ),
        )


def run_chain(
    chain: Sequence[FallbackPolicy],
    ctx: FallbackContext,
    cache: CountCache
) -> Optional[Resolution]:
    """Return the first resolution produced by ``chain``, or None if exhausted."""
    for policy in chain:
        resolution = policy.apply(ctx, cache)
        if resolution is not None:
            return resolution
    return None
