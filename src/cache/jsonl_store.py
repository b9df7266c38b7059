# src/cache/jsonl_store.py - v2
"""JSON Lines cache store (default CACHE_BACKEND=jsonl).

One self-contained JSON object per line. Lines are read in order and a
later line for the same key overrides an earlier one, so appending to the
file is always valid. Snapshots are written to a temp file and swapped in.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from aiexplorer.cache.base_cache_store import BaseCacheStore
from aiexplorer.cache.models import CacheEntry

logger = logging.getLogger(__name__)

CACHE_FILENAME = "cache.jsonl"


class JsonlCacheStore(BaseCacheStore):
    """File-based cache store using a JSONL log under a per-workspace dir."""

    def __init__(self, cache_root: Path) -> None:
        self._root = Path(cache_root).expanduser()
        self._file = self._root / CACHE_FILENAME

    @property
    def location(self) -> str:
        return str(self._file)

    async def load(self) -> dict[str, CacheEntry]:
        """Load entries, skipping corrupt lines individually."""
        entries: dict[str, CacheEntry] = {}
        try:
            text = self._file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return entries
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cache file %s unreadable, starting empty: %s", self._file, e)
            return entries

        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                entry = CacheEntry.model_validate_json(line)
            except (ValidationError, ValueError) as e:
                logger.warning("Skipping corrupt cache line %d in %s: %s", lineno, self._file, e)
                continue
            entries.pop(entry.key, None)
            entries[entry.key] = entry

        logger.debug("Loaded %d cache entries from %s", len(entries), self._file)
        return entries

    async def save(self, entries: list[CacheEntry]) -> None:
        """Write a full snapshot atomically."""
        self._root.mkdir(parents=True, exist_ok=True)
        tmp = self._file.with_suffix(".jsonl.tmp")
        lines = [entry.model_dump_json() for entry in entries]
        tmp.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
        os.replace(tmp, self._file)
        logger.debug("Wrote %d cache entries to %s", len(entries), self._file)

    async def clear(self) -> None:
        """Remove the cache file."""
        if self._file.exists():
            self._file.unlink()
