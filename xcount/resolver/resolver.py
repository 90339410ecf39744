"""
Query Resolver - Cache, rate lock and upstream fallback for count queries.

This is the decision logic of the service. A resolution either serves
the cached payload (fresh, or frozen under a rate lock) or calls the
X API once, with one conditional retry for cashtag queries, and then
walks the matching fallback chain if the call does not succeed.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from ..cache.store import CacheEntry, CountCache
from ..core.config import ResolverConfig
from ..core.utils import ceil_seconds, get_timestamp, safe_json_loads, to_iso, utc_now
from ..models.schemas import CountPayload, HourBucket
from ..upstream.client import CountsClient, UpstreamUnavailableError
from .breaker import lock_duration
from .policy import FallbackChains, FallbackContext, Resolution, run_chain
from .query import cashtags_to_hashtags, fallback_note, has_cashtag, normalize_query

# Configure logging
logger = logging.getLogger(__name__)


def build_payload(
    data: dict[str, Any],
    query: str,
    start: datetime,
    end: datetime,
    note: Optional[str] = None
) -> CountPayload:
    """
    Convert an X API counts response into a ``CountPayload``.

    Buckets keep upstream order. Missing or falsy ``tweet_count`` values
    count as zero towards ``total``.

    Raises:
        UpstreamUnavailableError: If the buckets do not have the expected shape
    """
    try:
        buckets = [
            HourBucket(start=b.get("start"), end=b.get("end"), count=b.get("tweet_count"))
            for b in (data.get("data") or [])
        ]
    except (ValidationError, AttributeError, TypeError) as e:
        raise UpstreamUnavailableError(f"Malformed counts buckets: {e}") from e
    total = sum(b.count or 0 for b in buckets)
    return CountPayload(
        query=query,
        start_time=to_iso(start),
        end_time=to_iso(end),
        total=total,
        per_hour=buckets,
        note=note,
    )


def _parse_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a 2xx body, treating anything but a JSON object as a broken response."""
    data = safe_json_loads(response.content, default=None)
    if not isinstance(data, dict):
        raise UpstreamUnavailableError(f"Malformed counts response ({response.status_code})")
    return data


class QueryResolver:
    """
    Resolves a query to a count payload.

    The cache, the upstream client and the clock are injected; the
    resolver holds no global state of its own besides the in-flight
    table used for single-flight deduplication.
    """

    def __init__(
        self,
        cache: CountCache,
        client: CountsClient,
        config: ResolverConfig,
        chains: Optional[FallbackChains] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.cache = cache
        self.client = client
        self.config = config
        self.chains = chains or FallbackChains.default()
        self.clock = clock
        self._inflight: dict[str, asyncio.Task] = {}

    def normalize(self, query: Optional[str]) -> str:
        return normalize_query(query, self.config.default_query, self.config.cashtag_aliases)

    async def resolve(self, query: Optional[str], now: Optional[datetime] = None) -> Resolution:
        """
        Resolve ``query`` at instant ``now``.

        Args:
            query: Raw ``q`` parameter (None means the default query)
            now: Current timezone-aware instant; defaults to the resolver's clock

        Returns:
            The payload or error body, HTTP status and optional retry delay

        Raises:
            ValueError: If ``now`` is a naive datetime
        """
        key = self.normalize(query)
        now = now or self.clock()
        if now.tzinfo is None or now.utcoffset() is None:
            raise ValueError("now must be timezone-aware")

        entry = self.cache.get(key)
        if entry is not None and entry.payload is not None:
            locked = entry.is_rate_locked(now)
            if locked or entry.is_fresh(now, self.config.freshness):
                retry_after = None
                if locked:
                    retry_after = max(1, ceil_seconds(entry.rate_locked_until - now))
                return Resolution(entry.payload, 200, retry_after)

        if not self.config.single_flight:
            return await self._refresh(key, now, entry)

        task = self._inflight.get(key)
        if task is not None and not task.done():
            logger.debug(f"Joining in-flight request for {key!r}")
            return await asyncio.shield(task)

        task = asyncio.ensure_future(self._refresh(key, now, entry))
        self._inflight[key] = task
        task.add_done_callback(lambda t: self._forget(key, t))
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    @property
    def inflight(self) -> int:
        return sum(1 for task in self._inflight.values() if not task.done())

    async def _refresh(self, key: str, now: datetime, entry: Optional[CacheEntry]) -> Resolution:
        """Call the upstream for ``key`` and update the cache with the outcome."""
        end = now - self.config.buffer
        start = end - self.config.window
        ctx = FallbackContext(key=key, now=now, start=start, end=end, entry=entry)

        try:
            response = await self.client.fetch_counts(key, start, end)

            if response.status_code == 429:
                return self._rate_limited(ctx, response)

            if response.status_code == 400 and has_cashtag(key):
                resolution = await self._cashtag_fallback(ctx)
                if resolution is not None:
                    return resolution

            if not response.is_success:
                ctx.upstream_status = response.status_code
                ctx.upstream_detail = response.text
                logger.warning(f"X API error {response.status_code} for {key!r}")
                return self._fallback(self.chains.upstream_error, ctx)

            payload = build_payload(_parse_body(response), key, start, end)
        except UpstreamUnavailableError as e:
            logger.warning(f"Upstream unavailable for {key!r}: {e.message}")
            ctx.lock_until = now + self.config.min_lock
            ctx.retry_after = ceil_seconds(self.config.min_lock)
            ctx.upstream_detail = e.message
            return self._fallback(self.chains.transport_failure, ctx)

        self.cache.set(key, CacheEntry(timestamp=now, payload=payload, rate_locked_until=None))
        logger.info(f"Cached {payload.total} tweets for {key!r}")
        return Resolution(payload, 200)

    def _rate_limited(self, ctx: FallbackContext, response: httpx.Response) -> Resolution:
        duration = lock_duration(response.headers, ctx.now, self.config)
        ctx.lock_until = ctx.now + duration
        ctx.retry_after = ceil_seconds(duration)
        logger.warning(f"Rate limited on {ctx.key!r}; locking for {ctx.retry_after}s")
        return self._fallback(self.chains.rate_limited, ctx)

    async def _cashtag_fallback(self, ctx: FallbackContext) -> Optional[Resolution]:
        """Retry once with hashtags in place of cashtags; None if that fails too."""
        fallback_query = cashtags_to_hashtags(ctx.key)
        logger.info(f"Retrying {ctx.key!r} as {fallback_query!r}")

        response = await self.client.fetch_counts(fallback_query, ctx.start, ctx.end)
        if not response.is_success:
            logger.warning(f"Hashtag fallback failed with {response.status_code} for {ctx.key!r}")
            return None

        payload = build_payload(
            _parse_body(response),
            fallback_query,
            ctx.start,
            ctx.end,
            note=fallback_note(ctx.key, fallback_query),
        )
        self.cache.set(ctx.key, CacheEntry(timestamp=ctx.now, payload=payload, rate_locked_until=None))
        return Resolution(payload, 200)

    def _fallback(self, chain, ctx: FallbackContext) -> Resolution:
        resolution = run_chain(chain, ctx, self.cache)
        if resolution is not None:
            return resolution

        logger.error(f"No fallback available for {ctx.key!r}")
        return Resolution(
            {
                "error": "Internal server error",
                "detail": ctx.upstream_detail or "An unexpected error occurred. Please try again.",
                "timestamp": get_timestamp(),
            },
            500,
        )
