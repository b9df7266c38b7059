# src/api/facade.py - v2
"""Public API facade: build a fully wired AnalysisOrchestrator.

Usage:
    from aiexplorer.api.facade import create_orchestrator
    orchestrator = create_orchestrator(load_settings(workspace_root="."))
    result = await orchestrator.analyze("src/app.ts")
    await orchestrator.aclose()

There is no module-level instance: each caller owns the orchestrator it
creates and is responsible for closing it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiexplorer.cache.cache_factory import create_analysis_cache
from aiexplorer.config.settings import Settings, load_settings
from aiexplorer.llm.client_factory import create_llm_client
from aiexplorer.llm.config import resolve_backends
from aiexplorer.llm.router import ModelRouter
from aiexplorer.pipeline.analyzers.heuristic import HeuristicAnalyzer
from aiexplorer.pipeline.analyzers.model_analyzer import ModelAnalyzer
from aiexplorer.pipeline.analyzers.structural import StructuralAnalyzer
from aiexplorer.pipeline.orchestrator import AnalysisOrchestrator
from aiexplorer.pipeline.prompts import PromptLibrary

if TYPE_CHECKING:
    from aiexplorer.cache.base_cache_store import BaseCacheStore
    from aiexplorer.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


def create_orchestrator(
    settings: Settings | None = None,
    *,
    primary: BaseLLMClient | None = None,
    secondary: BaseLLMClient | None = None,
    cache_store: BaseCacheStore | None = None,
    router: ModelRouter | None = None,
) -> AnalysisOrchestrator:
    """Assemble cache, analyzers and router from settings.

    Args:
        settings: Global settings. Loaded from .env if None.
        primary: Override for the primary backend client.
        secondary: Override for the secondary backend client.
        cache_store: Durable store override (e.g. MemoryCacheStore in tests).
        router: Fully built router override; ``primary`` and ``secondary``
            are ignored when given.

    Returns:
        A new AnalysisOrchestrator owned by the caller.

    Raises:
        ConfigurationError: If settings are inconsistent.
        UnsupportedProviderError: If a configured provider is unknown.
    """
    settings = settings or load_settings()

    if router is None:
        primary_assignment, secondary_assignment = resolve_backends(settings)
        if primary is None:
            primary = create_llm_client(
                primary_assignment.provider, primary_assignment.model, settings
            )
        if secondary is None:
            secondary = create_llm_client(
                secondary_assignment.provider, secondary_assignment.model, settings
            )
        router = ModelRouter(
            primary,
            secondary,
            health_check_interval_s=settings.router_health_interval_s,
            large_input_chars=settings.router_large_input_chars,
            batch_file_count=settings.router_batch_file_count,
        )

    heuristic = HeuristicAnalyzer()
    structural = StructuralAnalyzer(heuristic)
    model = ModelAnalyzer(
        router,
        prompts=PromptLibrary(settings.resolved_prompts_dir),
        max_content_chars=settings.model_max_content_chars,
        truncate_chars=settings.model_truncate_chars,
        structural=structural,
    )

    logger.debug(
        "Orchestrator created: workspace=%s, cache=%s, model_enabled=%s",
        settings.workspace_root, settings.cache_backend, settings.model_enabled,
    )
    return AnalysisOrchestrator(
        settings=settings,
        cache=create_analysis_cache(settings, store=cache_store),
        heuristic=heuristic,
        structural=structural,
        model=model,
        router=router,
    )
