"""
Core module containing configuration and utilities.
"""

from .config import settings, Settings, UpstreamConfig, ResolverConfig, CdnConfig
from .utils import utc_now, get_timestamp, to_iso, ceil_seconds, parse_number, safe_json_loads

__all__ = [
    "settings",
    "Settings",
    "UpstreamConfig",
    "ResolverConfig",
    "CdnConfig",
    "utc_now",
    "get_timestamp",
    "to_iso",
    "ceil_seconds",
    "parse_number",
    "safe_json_loads",
]
