"""
Count Cache - Process-local storage for resolved count payloads.

The resolver talks to the cache only through the ``CountCache``
interface. The application builds one instance at startup and injects
it, so tests can hand the resolver a fresh cache and clear it freely.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional

from ..models.schemas import CountPayload

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """
    Last known result for one normalized query.

    Attributes:
        timestamp: When ``payload`` was computed
        payload: The cached payload, possibly a stub
        rate_locked_until: Upstream calls for this key are suppressed until then
    """
    timestamp: datetime
    payload: CountPayload
    rate_locked_until: Optional[datetime] = None

    def is_fresh(self, now: datetime, freshness) -> bool:
        return now - self.timestamp < freshness

    def is_rate_locked(self, now: datetime) -> bool:
        return self.rate_locked_until is not None and now < self.rate_locked_until


class CountCache(ABC):
    """
    Storage interface for cache entries keyed by normalized query.

    Implementations hold at most one entry per key. There is no
    eviction; entries live until ``clear`` or the end of the process.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key``, or None."""

    @abstractmethod
    def set(self, key: str, entry: CacheEntry) -> None:
        """Store ``entry`` under ``key``, replacing any existing one."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry."""

    @abstractmethod
    def entries(self) -> Iterator[tuple[str, CacheEntry]]:
        """Iterate over ``(key, entry)`` pairs."""

    @abstractmethod
    def __len__(self) -> int:
        ...


class InMemoryCountCache(CountCache):
    """Dict-backed cache for a single serving process."""

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is not None:
            logger.debug(f"Cache hit: {key!r}")
        return entry

    def set(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry
        logger.debug(f"Cache saved: {key!r} (locked until {entry.rate_locked_until})")

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Count cache cleared")

    def entries(self) -> Iterator[tuple[str, CacheEntry]]:
        return iter(list(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)
