# src/cache/cache_factory.py - v3
"""Factory for cache store and analysis cache instantiation."""

from __future__ import annotations

from pathlib import Path

from aiexplorer.cache.analysis_cache import AnalysisCache
from aiexplorer.cache.base_cache_store import BaseCacheStore
from aiexplorer.config.settings import Settings

# Relative to the workspace root when cache_root is not configured.
DEFAULT_CACHE_SUBDIR = Path("analysis") / ".ai"


def resolve_cache_root(settings: Settings) -> Path:
    """Return the per-workspace directory holding the durable cache."""
    if settings.cache_root is not None:
        return Path(settings.cache_root).expanduser()
    return Path(settings.workspace_root).expanduser() / DEFAULT_CACHE_SUBDIR


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured durable cache backend.

    Args:
        settings: Application settings. Defaults to the JSONL backend under
            the current directory.

    Returns:
        Configured BaseCacheStore implementation.
    """
    settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]

    if settings.cache_backend == "memory":
        from aiexplorer.cache.memory_store import MemoryCacheStore

        return MemoryCacheStore()

    from aiexplorer.cache.jsonl_store import JsonlCacheStore

    return JsonlCacheStore(cache_root=resolve_cache_root(settings))


def create_analysis_cache(
    settings: Settings | None = None,
    store: BaseCacheStore | None = None,
) -> AnalysisCache:
    """Build an AnalysisCache over the configured (or given) store."""
    settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]
    return AnalysisCache(
        store=store or create_cache_store(settings),
        default_ttl_seconds=settings.cache_ttl_hours * 3600,
        max_entries=settings.cache_max_entries,
        eviction=settings.cache_eviction,
        flush_debounce_s=settings.cache_flush_debounce_s,
        hash_max_bytes=settings.fingerprint_hash_max_bytes,
    )
