"""
FastAPI Application Entry Point

This is the main application module that wires together the count
cache, the X API client and the query resolver, and serves them over
HTTP.

The API is designed to:
- Answer from the in-process cache whenever it is fresh or rate locked
- Call the X API at most once per query per freshness window
- Prefer stale or stub payloads over errors on the public count display

Run with: uvicorn xcount.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from .core.config import settings
from .core.utils import get_timestamp
from .api.routes import router
from .cache.store import InMemoryCountCache
from .resolver.resolver import QueryResolver
from .upstream.client import CountsClient

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_resolver() -> QueryResolver:
    """Construct the cache, client and resolver for one serving process."""
    return QueryResolver(
        cache=InMemoryCountCache(),
        client=CountsClient(settings.upstream),
        config=settings.resolver,
    )


# ============================================================
# Application Lifespan Handler
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Build the resolver and its cache, log configuration
    - Shutdown: Drop the cache
    """
    # ---- Startup ----
    logger.info("=" * 60)
    logger.info("X COUNT PROXY STARTING")
    logger.info("=" * 60)
    logger.info(f"Server Port: {settings.server_port}")
    logger.info(f"API Version: {settings.api_version}")
    logger.info(f"Upstream: {settings.upstream.counts_url}")
    logger.info(f"Freshness: {settings.resolver.freshness_seconds}s")
    logger.info(f"Minimum rate lock: {settings.resolver.min_lock_seconds}s")
    logger.info(f"Single-flight: {settings.resolver.single_flight}")

    app.state.resolver = build_resolver()
    if app.state.resolver.client.has_token:
        logger.info("✓ X bearer token configured")
    else:
        logger.warning("⚠ X_BEARER_TOKEN is not set; upstream calls will be rejected")

    logger.info("=" * 60)
    logger.info(f"API ready to accept requests on port {settings.server_port}")
    logger.info("=" * 60)

    yield  # Application runs here

    # ---- Shutdown ----
    logger.info("API shutting down...")
    app.state.resolver.cache.clear()


# ============================================================
# FastAPI Application Instance
# ============================================================

app = FastAPI(
    title=settings.api_title,
    description=settings.api_description,
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# ============================================================
# Exception Handlers
# ============================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
):
    """
    Handle validation errors with a clean response.

    Returns 422 with details about what failed validation.
    """
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation failed",
            "detail": exc.errors(),
            "timestamp": get_timestamp()
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler so every failure still yields a JSON body.

    The error is logged with its traceback; the caller gets a generic
    500 without internals.
    """
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred. Please try again.",
            "timestamp": get_timestamp()
        }
    )


# ============================================================
# Route Registration
# ============================================================

app.include_router(router, tags=["Counts"])


# ============================================================
# Root Endpoint
# ============================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint with API information.

    Provides basic info and links to documentation.
    """
    return {
        "service": settings.api_title,
        "version": settings.api_version,
        "description": settings.api_description,
        "endpoints": {
            "counts": "GET /api/x-count?q=<query>",
            "cache_stats": "GET /cache/stats",
            "health": "GET /health",
            "docs": "GET /docs"
        },
        "timestamp": get_timestamp()
    }


# ============================================================
# Run Configuration (for direct execution)
# ============================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "xcount.main:app",
        host="0.0.0.0",
        port=settings.server_port,
        reload=False,
        workers=1,
        log_level="info"
    )
