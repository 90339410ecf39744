"""
Counts Client - Calls the X API v2 recent tweet counts endpoint.

This module owns the single outbound call of the service. It returns
the raw HTTP response so the resolver can inspect status codes and
rate-limit headers; only transport-level failures are raised.
"""

import httpx
import logging
from datetime import datetime
from typing import Optional

from ..core.config import UpstreamConfig
from ..core.utils import to_iso

# Configure logging
logger = logging.getLogger(__name__)


class UpstreamUnavailableError(Exception):
    """The X API could not be reached (connect error, timeout, broken response)."""

    def __init__(self, message: str = "Upstream unavailable"):
        self.message = message
        super().__init__(self.message)


class CountsClient:
    """
    Thin async wrapper around ``GET /2/tweets/counts/recent``.

    A new ``httpx.AsyncClient`` is opened per request. ``transport``
    lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: UpstreamConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the client with X API configuration."""
        self.url = config.counts_url
        self.headers = config.headers
        self.timeout = config.timeout
        self.has_token = bool(config.bearer_token)
        self._transport = transport
        self.request_count = 0

    async def fetch_counts(
        self,
        query: str,
        start: datetime,
        end: datetime,
        granularity: str = "hour"
    ) -> httpx.Response:
        """
        Request tweet counts for ``query`` between ``start`` and ``end``.

        Args:
            query: X search query
            start: Window start
            end: Window end
            granularity: Bucket size accepted by the X API

        Returns:
            The upstream response, whatever its status code

        Raises:
            UpstreamUnavailableError: If no response could be obtained
        """
        params = {
            "query": query,
            "granularity": granularity,
            "start_time": to_iso(start),
            "end_time": to_iso(end),
        }
        self.request_count += 1
        logger.info(f"Requesting counts for {query!r} ({params['start_time']} -> {params['end_time']})")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url, headers=self.headers, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout while requesting counts for {query!r}")
            raise UpstreamUnavailableError(f"Timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Error requesting counts for {query!r}: {str(e)}")
            raise UpstreamUnavailableError(str(e) or e.__class__.__name__) from e

        logger.info(f"X API answered {response.status_code} for {query!r}")
        return response
