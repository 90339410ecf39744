"""
Upstream module for X API access.
"""

from .client import CountsClient, UpstreamUnavailableError

__all__ = ["CountsClient", "UpstreamUnavailableError"]
