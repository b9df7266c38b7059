# src/pipeline/plugin_kit/base_analyzer.py - v1
"""Standard analyzer interface for the three pipeline tiers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from aiexplorer.core.models import AnalysisResult, Tier


class BaseAnalyzer(ABC):
    """Standard interface for all tier analyzers.

    ``analyze`` must return a usable result or raise; the orchestrator,
    not the analyzer, decides what to fall back to on an exception.
    """

    @property
    @abstractmethod
    def tier(self) -> Tier:
        """Tier this analyzer produces (heuristic, structural, model)."""

    @property
    @abstractmethod
    def version(self) -> str:
        """Analyzer version, e.g. 'v1'. Bump to invalidate cached results."""

    @property
    def schema_version(self) -> str:
        return f"{self.tier}.{self.version}"

    @abstractmethod
    async def analyze(
        self, target: str, previous: AnalysisResult | None = None
    ) -> AnalysisResult:
        """Analyze ``target``, building on the previous tier's result.

        Args:
            target: File or directory path.
            previous: Result of the previous tier, None for the first tier.

        Returns:
            AnalysisResult tagged with this analyzer's tier.
        """
