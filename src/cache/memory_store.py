# src/cache/memory_store.py - v1
"""Process-local cache store (CACHE_BACKEND=memory).

Nothing survives a restart. Used for ephemeral runs and in tests.
"""

from __future__ import annotations

from aiexplorer.cache.base_cache_store import BaseCacheStore
from aiexplorer.cache.models import CacheEntry


class MemoryCacheStore(BaseCacheStore):
    """Keeps the last saved snapshot in memory."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self.save_count = 0

    async def load(self) -> dict[str, CacheEntry]:
        return dict(self._entries)

    async def save(self, entries: list[CacheEntry]) -> None:
        self._entries = {e.key: e for e in entries}
        self.save_count += 1

    async def clear(self) -> None:
        self._entries.clear()
