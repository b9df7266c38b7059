# src/cache/base_cache_store.py - v2
"""Abstract durable store behind the analysis cache."""

from __future__ import annotations

from abc import ABC, abstractmethod

from aiexplorer.cache.models import CacheEntry


class BaseCacheStore(ABC):
    """Persistence interface for cache entries.

    The in-memory index lives in AnalysisCache; a store only loads and
    writes whole snapshots of it.
    """

    @abstractmethod
    async def load(self) -> dict[str, CacheEntry]:
        """Load all persisted entries keyed by cache key."""

    @abstractmethod
    async def save(self, entries: list[CacheEntry]) -> None:
        """Persist a snapshot of entries, replacing the previous one."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove all persisted entries."""

    @property
    def location(self) -> str | None:
        """Human-readable location of the store, if any."""
        return None
