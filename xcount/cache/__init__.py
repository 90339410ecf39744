"""
Cache module for resolved count payloads.
"""

from .store import CacheEntry, CountCache, InMemoryCountCache

__all__ = ["CacheEntry", "CountCache", "InMemoryCountCache"]
