"""
API Routes - FastAPI endpoints for tweet counts and service status.

- GET /api/x-count: Hourly counts for ``q`` over the last 24 hours
- OPTIONS /api/x-count: CORS preflight
- GET /health, GET /cache/stats: Operational endpoints

The count endpoint never decides anything itself; it hands the query
to the injected ``QueryResolver`` and decorates the answer with CORS
and CDN cache headers.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse

from ..core.config import settings
from ..core.utils import get_timestamp
from ..models.schemas import (
    CountPayload,
    UpstreamErrorResponse,
    RateLimitedResponse,
    ErrorResponse,
    HealthResponse,
    CacheStatsResponse
)
from ..resolver.resolver import QueryResolver

# Configure logging
logger = logging.getLogger(__name__)

# Create the router
router = APIRouter()


def get_resolver(request: Request) -> QueryResolver:
    """Resolver built by the application lifespan."""
    return request.app.state.resolver


def apply_cors_headers(response: Response) -> None:
    """Permissive CORS headers, set on every count response."""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
    response.headers["Access-Control-Expose-Headers"] = ", ".join(settings.cdn.expose_headers)


def apply_cdn_headers(response: Response) -> None:
    response.headers["Cache-Control"] = settings.cdn.cache_control
    response.headers["CDN-Cache-Control"] = settings.cdn.cdn_cache_control


# ============================================================
# Count Endpoints
# ============================================================

@router.get(
    "/api/x-count",
    response_model=CountPayload,
    summary="Get tweet counts",
    description="""
    Count posts matching ``q`` over the trailing 24 hours, by hour.

    Results are cached in-process for the freshness window. When the
    X API rate limits the service, the last known payload (or a stub
    with ``total: null``) is served and a ``Retry-After`` header says
    when fresh data can be expected.

    A bare cashtag such as ``$ZEN`` is rewritten to a hashtag/term
    query because the cashtag operator needs a paid API tier.
    """,
    responses={
        200: {"description": "Counts, a stale copy, or a stub"},
        429: {"model": RateLimitedResponse, "description": "Rate limited with nothing cached"},
        500: {"model": ErrorResponse, "description": "Upstream unreachable with nothing cached"},
        "default": {"model": UpstreamErrorResponse, "description": "Upstream error passed through"}
    }
)
async def get_counts(
    q: Optional[str] = Query(default=None, description="X search query"),
    resolver: QueryResolver = Depends(get_resolver)
) -> JSONResponse:
    """
    Resolve the query and return its count payload.

    The upstream status is passed through only when the X API fails
    and nothing cached can stand in for it.
    """
    resolution = await resolver.resolve(q)

    response = JSONResponse(
        status_code=resolution.status_code,
        content=resolution.to_response()
    )
    apply_cors_headers(response)
    apply_cdn_headers(response)
    if resolution.retry_after is not None:
        response.headers["Retry-After"] = str(resolution.retry_after)

    if resolution.status_code != status.HTTP_200_OK:
        logger.warning(f"Count request for {q!r} answered {resolution.status_code}")
    return response


@router.options(
    "/api/x-count",
    summary="CORS preflight",
    include_in_schema=False
)
async def preflight_counts() -> Response:
    """Empty 200 carrying only the CORS headers."""
    response = Response(status_code=status.HTTP_200_OK)
    apply_cors_headers(response)
    return response


# ============================================================
# Utility Endpoints
# ============================================================

@router.get(
    "/cache/stats",
    response_model=CacheStatsResponse,
    summary="Get cache statistics",
    description="Number of cached queries, how many are rate locked or stubs."
)
async def get_cache_stats(resolver: QueryResolver = Depends(get_resolver)) -> CacheStatsResponse:
    """
    Get current cache statistics.

    Useful for operators to see whether the service is riding out a
    rate limit.
    """
    now = resolver.clock()
    entries = [entry for _, entry in resolver.cache.entries()]
    return CacheStatsResponse(
        cached_queries=len(entries),
        rate_locked_queries=sum(1 for e in entries if e.is_rate_locked(now)),
        stub_queries=sum(1 for e in entries if e.payload.is_stub),
        inflight_requests=resolver.inflight,
        timestamp=get_timestamp()
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health of the API and its configuration."
)
async def health_check(resolver: QueryResolver = Depends(get_resolver)) -> HealthResponse:
    """
    Perform a health check.

    Does not call the X API.
    """
    configured = resolver.client.has_token

    return HealthResponse(
        status="healthy" if configured else "degraded",
        service="x-count-proxy",
        version=settings.api_version,
        upstream_configured=configured,
        cached_queries=len(resolver.cache),
        timestamp=get_timestamp()
    )
