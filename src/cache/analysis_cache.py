# src/cache/analysis_cache.py - v2
"""Fingerprint- and TTL-guarded analysis cache with debounced persistence.

The in-memory index is authoritative while the process runs; the durable
store is loaded once and then receives debounced snapshots. A read only
returns an entry for the same target, in a format the live analyzers
still produce, whose TTL has not expired and whose stored fingerprint
matches the target's current fingerprint. Stale entries are deleted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Callable, Collection, Literal

from aiexplorer.cache.base_cache_store import BaseCacheStore
from aiexplorer.cache.fingerprint import (
    DEFAULT_HASH_MAX_BYTES,
    cache_key,
    compute_fingerprint,
    target_identity,
)
from aiexplorer.cache.models import CacheEntry, CacheInfo, CacheStats
from aiexplorer.core.models import AnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 7 * 24 * 3600.0


class AnalysisCache:
    """Per-workspace cache mapping a target path to its last result.

    Args:
        store: Durable store receiving snapshots.
        default_ttl_seconds: TTL used when ``set`` gets none.
        max_entries: Bound on the in-memory index.
        eviction: ``"lru"`` evicts the least recently read entry,
            ``"fifo"`` the oldest inserted one.
        flush_debounce_s: Quiet period before a snapshot is written.
        hash_max_bytes: Content-hash threshold for fingerprints.
        clock: Wall-clock source (seconds), injectable for tests.
    """

    def __init__(
        self,
        store: BaseCacheStore,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = 1000,
        eviction: Literal["lru", "fifo"] = "lru",
        flush_debounce_s: float = 5.0,
        hash_max_bytes: int = DEFAULT_HASH_MAX_BYTES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._default_ttl = default_ttl_seconds
        self._max_entries = max_entries
        self._eviction = eviction
        self._debounce = flush_debounce_s
        self._hash_max_bytes = hash_max_bytes
        self._clock = clock

        self._index: OrderedDict[str, CacheEntry] = OrderedDict()
        self._load_task: asyncio.Future[None] | None = None
        self._flush_handle: asyncio.TimerHandle | None = None
        self._flush_tasks: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(
        self, target: str, schema_versions: Collection[str] | None = None
    ) -> AnalysisResult | None:
        """Return the cached result for ``target`` if it is still valid.

        Args:
            target: File or directory path.
            schema_versions: Result formats still produced by the live
                analyzers. An entry in any other format is dropped. None
                accepts every format.
        """
        await self._ensure_loaded()
        key = cache_key(target)
        entry = self._index.get(key)
        if entry is None:
            return None

        # Case variants share a key; on a case-sensitive filesystem they
        # are different entries and must not serve each other.
        if target_identity(entry.result.target) != target_identity(target):
            logger.debug("Cache entry belongs to %s, not %s", entry.result.target, target)
            return None

        if schema_versions is not None and entry.result.schema_version not in schema_versions:
            logger.debug("Cache entry format %s is stale: %s", entry.result.schema_version, target)
            self._remove(key)
            return None

        if entry.is_expired(self._clock()):
            logger.debug("Cache entry expired: %s", target)
            self._remove(key)
            return None

        try:
            current = compute_fingerprint(target, self._hash_max_bytes)
        except OSError:
            logger.debug("Cache target inaccessible, dropping: %s", target)
            self._remove(key)
            return None

        if current != entry.fingerprint:
            logger.debug("Cache fingerprint changed: %s", target)
            self._remove(key)
            return None

        if self._eviction == "lru":
            self._index.move_to_end(key)
        return entry.result

    async def set(self, result: AnalysisResult, ttl: float | None = None) -> bool:
        """Store ``result`` under its target, fingerprinted now.

        Returns:
            False if the target could not be fingerprinted; such an entry
            could never validate, so it is not stored.
        """
        await self._ensure_loaded()
        try:
            fingerprint = compute_fingerprint(result.target, self._hash_max_bytes)
        except OSError as e:
            logger.debug("Not caching %s: %s", result.target, e)
            return False

        key = cache_key(result.target)
        entry = CacheEntry(
            key=key,
            result=result,
            fingerprint=fingerprint,
            cached_at=self._clock(),
            ttl_seconds=self._default_ttl if ttl is None else ttl,
        )
        if self._eviction == "lru":
            self._index.pop(key, None)
        self._index[key] = entry
        self._enforce_bound()
        self._schedule_flush()
        return True

    async def delete(self, target: str) -> None:
        """Drop the entry for ``target`` if present."""
        await self._ensure_loaded()
        self._remove(cache_key(target))

    async def cleanup(self) -> int:
        """Sweep expired entries and persist immediately if any were removed."""
        await self._ensure_loaded()
        now = self._clock()
        expired = [k for k, e in self._index.items() if e.is_expired(now)]
        for key in expired:
            del self._index[key]
        if expired:
            logger.info("Removed %d expired cache entries", len(expired))
            await self.flush()
        return len(expired)

    async def clear(self) -> None:
        """Empty the index and the durable store."""
        await self._ensure_loaded()
        self._cancel_timer()
        await self._drain_flushes()
        self._index.clear()
        await self._store.clear()
        logger.info("Cache cleared")

    async def get_stats(self) -> CacheStats:
        """Count entries by the tier that produced them."""
        await self._ensure_loaded()
        stats = CacheStats()
        for entry in self._index.values():
            stats.total += 1
            tier = entry.result.tier
            setattr(stats, tier, getattr(stats, tier) + 1)
        return stats

    async def export(self) -> dict[str, AnalysisResult]:
        """Return all cached results keyed by target, for debugging."""
        await self._ensure_loaded()
        return {e.result.target: e.result for e in self._index.values()}

    def info(self) -> CacheInfo:
        return CacheInfo(
            memory_entries=len(self._index),
            max_entries=self._max_entries,
            eviction=self._eviction,
            cache_file=self._store.location,
            pending_flush=self._flush_handle is not None or bool(self._flush_tasks),
        )

    async def flush(self) -> None:
        """Write the current snapshot now, cancelling any pending timer."""
        self._cancel_timer()
        await self._drain_flushes()
        await self._write_snapshot()

    async def close(self) -> None:
        """Flush pending state; call before the owning loop shuts down."""
        if self._load_task is None:
            return
        await self.flush()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _ensure_loaded(self) -> None:
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load())
        await self._load_task

    async def _load(self) -> None:
        loaded = await self._store.load()
        for key, entry in loaded.items():
            self._index.setdefault(key, entry)
        self._enforce_bound()

    def _remove(self, key: str) -> None:
        if self._index.pop(key, None) is not None:
            self._schedule_flush()

    def _enforce_bound(self) -> None:
        while len(self._index) > self._max_entries:
            evicted, _ = self._index.popitem(last=False)
            logger.debug("Evicted cache entry %s (%s)", evicted, self._eviction)

    def _schedule_flush(self) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._flush_handle = loop.call_later(self._debounce, self._start_flush)

    def _start_flush(self) -> None:
        self._flush_handle = None
        task = asyncio.ensure_future(self._write_snapshot())
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)

    def _cancel_timer(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

    async def _drain_flushes(self) -> None:
        if self._flush_tasks:
            await asyncio.gather(*self._flush_tasks, return_exceptions=True)

    async def _write_snapshot(self) -> None:
        # Snapshot taken when the write actually happens: last write wins.
        try:
            await self._store.save(list(self._index.values()))
        except OSError as e:
            logger.warning("Failed to save cache to disk: %s", e)
