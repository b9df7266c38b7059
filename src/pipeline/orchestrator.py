# src/pipeline/orchestrator.py - v3
"""Analysis orchestrator: cache check, tier sequencing and model gating.

Drives one target through the tiers:
  Tier 1: Heuristic (always, cached)
  Tier 2: Structural (cached; on failure the heuristic result stands in)
  Tier 3: Model (gated; on failure the structural result stands)

Concurrent requests for the same target share one pipeline run. Every
tier's result is written to the cache as soon as it exists, so a crash
or a failing model backend never loses the work already done.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from typing import TYPE_CHECKING

from aiexplorer.cache.fingerprint import target_identity
from aiexplorer.core.models import AnalysisResult, degenerate_result
from aiexplorer.logging.context import set_target_context, set_tier_context

if TYPE_CHECKING:
    from aiexplorer.cache.analysis_cache import AnalysisCache
    from aiexplorer.cache.models import CacheStats
    from aiexplorer.config.settings import Settings
    from aiexplorer.llm.models import BackendStatus
    from aiexplorer.llm.router import ModelRouter
    from aiexplorer.pipeline.analyzers.heuristic import HeuristicAnalyzer
    from aiexplorer.pipeline.analyzers.model_analyzer import ModelAnalyzer
    from aiexplorer.pipeline.analyzers.structural import StructuralAnalyzer

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """Coordinate the three tiers, the cache and in-flight requests.

    Args:
        settings: Application settings (model gating thresholds).
        cache: Analysis cache shared by all tiers.
        heuristic: Tier 1 analyzer.
        structural: Tier 2 analyzer.
        model: Tier 3 analyzer, or None to disable the model tier.
        router: Router behind the model analyzer, for status reporting.
    """

    def __init__(
        self,
        settings: Settings,
        cache: AnalysisCache,
        heuristic: HeuristicAnalyzer,
        structural: StructuralAnalyzer,
        model: ModelAnalyzer | None = None,
        router: ModelRouter | None = None,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._heuristic = heuristic
        self._structural = structural
        self._model = model
        self._router = router
        self._binary_extensions = settings.model_binary_extensions_set
        # Cached results in any other format predate the live analyzers.
        self._schema_versions = frozenset(
            analyzer.schema_version
            for analyzer in (heuristic, structural, model)
            if analyzer is not None
        )

        self._in_flight: dict[str, asyncio.Task[AnalysisResult]] = {}
        self._background: set[asyncio.Task[AnalysisResult]] = set()

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    async def analyze(self, target: str, force_refresh: bool = False) -> AnalysisResult:
        """Analyze ``target``, reusing any run already in flight for it.

        Args:
            target: File or directory path.
            force_refresh: Skip the cache lookup.

        Returns:
            The best result obtainable; never raises for I/O or backend
            failures.

        Raises:
            ValueError: If ``target`` is empty.
        """
        _require_target(target)
        key = target_identity(target)
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run_shared(key, target, force_refresh))
            self._in_flight[key] = task
        else:
            logger.debug("Joining in-flight analysis for %s", target)
        # Shielded: a cancelled caller must not cancel the shared run.
        return await asyncio.shield(task)

    async def quick_analyze(self, target: str) -> AnalysisResult:
        """Return a cached or heuristic result now; full analysis continues
        in the background."""
        _require_target(target)
        try:
            cached = await self._cache.get(target, self._schema_versions)
            if cached is not None:
                return cached
            result = await self._heuristic.analyze(target)
        except Exception:
            logger.exception("Quick analysis failed for %s", target)
            return degenerate_result(target)

        task = asyncio.ensure_future(self.analyze(target))
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return result

    def should_use_model(self, target: str, structural: AnalysisResult) -> bool:
        """Decide whether the model tier is worth calling for ``target``."""
        if self._model is None or not self._settings.model_enabled:
            return False

        ext = os.path.splitext(target)[1].lower()
        if ext in self._binary_extensions:
            logger.debug("Model tier skipped, binary type: %s", target)
            return False

        try:
            st = os.stat(target)
        except OSError:
            return False
        if not stat.S_ISDIR(st.st_mode) and st.st_size > self._settings.model_max_file_bytes:
            logger.debug("Model tier skipped, %d bytes: %s", st.st_size, target)
            return False

        if self._settings.model_skip_when_complete and structural.is_structurally_complete():
            logger.debug("Model tier skipped, structural result complete: %s", target)
            return False
        return True

    async def list_related(self, target: str) -> list[str]:
        """Analyze ``target`` and return its related entries."""
        result = await self.analyze(target)
        return list(result.related)

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------

    async def get_cached(self, target: str) -> AnalysisResult | None:
        """Cache-only lookup; never triggers analysis."""
        _require_target(target)
        return await self._cache.get(target, self._schema_versions)

    async def get_stats(self) -> CacheStats:
        return await self._cache.get_stats()

    async def clear_cache(self, target: str | None = None) -> None:
        """Drop one target's entry, or everything when ``target`` is None."""
        if target:
            await self._cache.delete(target)
        else:
            await self._cache.clear()

    async def cleanup_cache(self) -> int:
        return await self._cache.cleanup()

    async def export_cache(self) -> dict[str, AnalysisResult]:
        return await self._cache.export()

    def router_status(self) -> list[BackendStatus]:
        if self._router is None:
            return []
        return self._router.get_status()

    async def aclose(self) -> None:
        """Wait for background and in-flight work, then flush the cache."""
        pending = list(self._background) + list(self._in_flight.values())
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        await self._cache.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run_shared(self, key: str, target: str, force_refresh: bool) -> AnalysisResult:
        try:
            return await self._run_pipeline(target, force_refresh)
        finally:
            self._in_flight.pop(key, None)

    async def _run_pipeline(self, target: str, force_refresh: bool) -> AnalysisResult:
        set_target_context(target)
        try:
            if not force_refresh:
                cached = await self._cache.get(target, self._schema_versions)
                if cached is not None:
                    logger.debug("Cache hit (%s tier)", cached.tier)
                    return cached

            set_tier_context("heuristic")
            result = await self._heuristic.analyze(target)
            await self._cache.set(result)

            set_tier_context("structural")
            try:
                result = await self._structural.analyze(target, result)
            except Exception as e:
                # The heuristic result stands in for the structural one.
                logger.warning("Structural analysis failed for %s: %s", target, e)
            else:
                await self._cache.set(result)

            if self._model is None or not self.should_use_model(target, result):
                return result

            set_tier_context("model")
            try:
                modeled = await self._model.analyze(target, result)
            except Exception as e:
                logger.warning("Model analysis failed for %s: %s", target, e)
                return result
            if modeled.tier != "model":
                return result
            await self._cache.set(modeled)
            return modeled
        except Exception:
            logger.exception("Analysis failed for %s", target)
            return degenerate_result(target)
        finally:
            set_tier_context(None)

    def _on_background_done(self, task: asyncio.Task[AnalysisResult]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background analysis failed: %s", exc)


def _require_target(target: str) -> None:
    if not target or not str(target).strip():
        raise ValueError("target must be a non-empty path")
