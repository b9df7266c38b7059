# src/cache/models.py - v2
"""Cache domain models: CacheEntry, CacheStats, CacheInfo."""

from __future__ import annotations

from pydantic import BaseModel

from aiexplorer.core.models import AnalysisResult


class CacheEntry(BaseModel):
    """Single cache entry linking a target key to its last analysis result."""

    key: str
    result: AnalysisResult
    fingerprint: str
    cached_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        """TTL check, independent of the fingerprint check.

        A zero TTL is expired immediately.
        """
        return now - self.cached_at >= self.ttl_seconds


class CacheStats(BaseModel):
    """Count of cached entries per producing tier."""

    total: int = 0
    heuristic: int = 0
    structural: int = 0
    model: int = 0


class CacheInfo(BaseModel):
    """Size and location of the cache, for diagnostics."""

    memory_entries: int
    max_entries: int
    eviction: str
    cache_file: str | None = None
    pending_flush: bool = False
