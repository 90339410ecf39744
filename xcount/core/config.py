"""
Configuration module for the X count proxy.

Manages environment variables for the upstream X API connection and
the resolver's caching and rate-lock tuning. The bearer token should
always be supplied through the environment in production deployments.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Read a comma-separated list from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class UpstreamConfig:
    """
    Immutable configuration for the X API v2 connection.

    Attributes:
        base_url: The X API v2 base URL
        bearer_token: App-only bearer token forwarded on every call
        timeout: Request timeout for upstream calls (seconds)
    """
    base_url: str
    bearer_token: str
    timeout: float = 10.0

    @property
    def headers(self) -> dict[str, str]:
        """Returns the authorization headers for the X API."""
        return {"Authorization": f"Bearer {self.bearer_token}"}

    @property
    def counts_url(self) -> str:
        """Full URL of the recent tweet counts endpoint."""
        return f"{self.base_url.rstrip('/')}/tweets/counts/recent"


@dataclass(frozen=True)
class ResolverConfig:
    """
    Tuning for the query resolver's cache and circuit breaker.

    Attributes:
        freshness_seconds: How long a cached payload is served without revalidation
        buffer_seconds: Gap kept between the window end and "now"
        min_lock_seconds: Lower bound for any rate lock
        hint_floor_seconds: Lower bound applied to upstream retry hints
        window_hours: Length of the counted window
        default_query: Query used when the caller sends none
        cashtag_aliases: Extra terms OR-ed into a rewritten bare cashtag
        single_flight: Share one upstream call between concurrent misses
    """
    freshness_seconds: int = 15 * 60
    buffer_seconds: int = 15
    min_lock_seconds: int = 5 * 60
    hint_floor_seconds: int = 5
    window_hours: int = 24
    default_query: str = "#21MWITHPRIVACY -is:retweet"
    cashtag_aliases: tuple[str, ...] = ('"Horizen"', "Zcash")
    single_flight: bool = True

    @property
    def freshness(self) -> timedelta:
        return timedelta(seconds=self.freshness_seconds)

    @property
    def buffer(self) -> timedelta:
        return timedelta(seconds=self.buffer_seconds)

    @property
    def min_lock(self) -> timedelta:
        return timedelta(seconds=self.min_lock_seconds)

    @property
    def hint_floor(self) -> timedelta:
        return timedelta(seconds=self.hint_floor_seconds)

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.window_hours)


@dataclass(frozen=True)
class CdnConfig:
    """
    Cache-control directives sent to the CDN in front of the service.

    Attributes:
        max_age: s-maxage for shared caches (seconds)
        stale_while_revalidate: Background refresh hint (seconds)
        expose_headers: Response headers readable by browser callers
    """
    max_age: int = 15 * 60
    stale_while_revalidate: int = 60
    expose_headers: tuple[str, ...] = field(
        default=("x-vercel-cache", "age", "retry-after")
    )

    @property
    def cache_control(self) -> str:
        return f"public, s-maxage={self.max_age}, stale-while-revalidate={self.stale_while_revalidate}"

    @property
    def cdn_cache_control(self) -> str:
        return f"public, s-maxage={self.max_age}"


class Settings:
    """
    Central settings manager that aggregates all configuration.

    Loads configuration from environment variables with fallbacks
    to default values for development.
    """

    def __init__(self):
        self.upstream = UpstreamConfig(
            base_url=os.getenv("X_API_BASE_URL", "https://api.twitter.com/2"),
            bearer_token=os.getenv("X_BEARER_TOKEN", ""),
            timeout=float(os.getenv("X_API_TIMEOUT", "10.0")),
        )

        freshness = int(os.getenv("X_COUNT_FRESHNESS_SECONDS", str(15 * 60)))
        self.resolver = ResolverConfig(
            freshness_seconds=freshness,
            buffer_seconds=int(os.getenv("X_COUNT_BUFFER_SECONDS", "15")),
            min_lock_seconds=int(os.getenv("X_COUNT_MIN_LOCK_SECONDS", str(5 * 60))),
            default_query=os.getenv("X_COUNT_DEFAULT_QUERY", "#21MWITHPRIVACY -is:retweet"),
            cashtag_aliases=_env_list("X_COUNT_CASHTAG_ALIASES", ('"Horizen"', "Zcash")),
            single_flight=_env_bool("X_COUNT_SINGLE_FLIGHT", True),
        )

        self.cdn = CdnConfig(
            max_age=freshness,
            stale_while_revalidate=int(os.getenv("X_COUNT_STALE_REVALIDATE_SECONDS", "60")),
        )

    @property
    def server_port(self) -> int:
        """Server port from environment variable."""
        return int(os.getenv("PORT", "8000"))

    @property
    def log_level(self) -> str:
        """Root log level from environment variable."""
        return os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def api_title(self) -> str:
        """API title for OpenAPI documentation."""
        return "X Count Proxy"

    @property
    def api_version(self) -> str:
        """API version string."""
        return "1.0.0"

    @property
    def api_description(self) -> str:
        """API description for OpenAPI documentation."""
        return (
            "Hourly tweet-volume counts for a search query over the last 24 hours, "
            "cached in-process and shielded from X API rate limits."
        )


# Global settings instance - imported throughout the application
settings = Settings()
