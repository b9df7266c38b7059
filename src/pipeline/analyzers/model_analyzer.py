# src/pipeline/analyzers/model_analyzer.py - v1
"""Tier 3: natural-language summary from a routed model backend.

Only invoked when the orchestrator's gate allows it. Files send a
truncated code excerpt plus the structural result as a hint; directories
send a short listing and an extension histogram. Every non-empty field in
the model's answer overrides the previous tier's value.
"""

from __future__ import annotations

import logging
import os
import stat
from collections import Counter
from pathlib import Path
from typing import Any, Protocol

from aiexplorer.core.models import AnalysisResult, Tier
from aiexplorer.pipeline.analyzers.response_parser import parse_model_response
from aiexplorer.pipeline.analyzers.structural import StructuralAnalyzer
from aiexplorer.pipeline.plugin_kit.base_analyzer import BaseAnalyzer
from aiexplorer.pipeline.prompts import PromptLibrary

logger = logging.getLogger(__name__)

# Directory listing sent to the model.
LISTING_ENTRIES = 20
# Entries counted into the extension histogram.
HISTOGRAM_ENTRIES = 50

TRUNCATION_MARKER = "\n\n/* ... content truncated ... */\n\n"
_HEAD_RATIO = 0.7
_MARKER_ALLOWANCE = 100


class ModelCaller(Protocol):
    async def call(self, prompt: str, inputs: dict[str, Any]) -> str: ...


def truncate_content(content: str, max_chars: int) -> str:
    """Keep 70% head and the tail of ``content``, joined by a marker."""
    if len(content) <= max_chars:
        return content
    head_len = int(max_chars * _HEAD_RATIO)
    tail_len = max(max_chars - head_len - _MARKER_ALLOWANCE, 0)
    tail = content[len(content) - tail_len:] if tail_len else ""
    return content[:head_len] + TRUNCATION_MARKER + tail


class ModelAnalyzer(BaseAnalyzer):
    """Summarize a target through the model router.

    Args:
        router: Object exposing ``call(prompt, inputs)``, normally ModelRouter.
        prompts: Prompt template library.
        max_content_chars: Files with more characters are skipped.
        truncate_chars: Excerpt length sent to the model.
    """

    def __init__(
        self,
        router: ModelCaller,
        prompts: PromptLibrary | None = None,
        max_content_chars: int = 50_000,
        truncate_chars: int = 8000,
        structural: StructuralAnalyzer | None = None,
    ) -> None:
        self._router = router
        self._prompts = prompts or PromptLibrary()
        self._max_content_chars = max_content_chars
        self._truncate_chars = truncate_chars
        self._structural = structural or StructuralAnalyzer()

    @property
    def tier(self) -> Tier:
        return "model"

    @property
    def version(self) -> str:
        return "v1"

    async def analyze(
        self, target: str, previous: AnalysisResult | None = None
    ) -> AnalysisResult:
        """Ask the model about ``target``.

        Returns ``previous`` unchanged when a file is empty or too large.

        Raises:
            OSError: If the target cannot be read.
            UnparseableModelResponse: If the answer holds no JSON object.
            NoBackendAvailableError: If the router has no healthy backend.
        """
        if previous is None:
            previous = await self._structural.analyze(target)

        if stat.S_ISDIR(os.stat(target).st_mode):
            inputs = self._directory_inputs(target, previous)
            kind = "directory"
        else:
            content = Path(target).read_text(encoding="utf-8", errors="replace")
            if not content.strip() or len(content) > self._max_content_chars:
                logger.debug("Skipping model tier for %s (%d chars)", target, len(content))
                return previous
            inputs = {
                "path": target,
                "code": truncate_content(content, self._truncate_chars),
                "partial": _partial(previous),
            }
            kind = "file"

        prompt = self._prompts.render(kind, inputs)  # type: ignore[arg-type]
        raw = await self._router.call(prompt, inputs)
        parsed = parse_model_response(raw)

        base = previous.model_dump(
            exclude={"summary", "roles", "language", "exports", "dependencies",
                     "related", "schema_version", "tier", "produced_at"}
        )
        return AnalysisResult(
            **base,
            summary=parsed.summary or previous.summary,
            roles=set(parsed.roles) or previous.roles,
            language=parsed.language or previous.language,
            exports=parsed.exports or previous.exports,
            dependencies=parsed.dependencies or previous.dependencies,
            related=parsed.related or previous.related,
            schema_version=self.schema_version,
            tier=self.tier,
        )

    @staticmethod
    def _directory_inputs(target: str, previous: AnalysisResult) -> dict[str, Any]:
        entries = sorted(os.listdir(target))
        histogram = Counter(
            os.path.splitext(name)[1].lower() or "(none)"
            for name in entries[:HISTOGRAM_ENTRIES]
        )
        return {
            "path": target,
            "files": entries[:LISTING_ENTRIES],
            "file_types": dict(histogram),
            "partial": _partial(previous),
        }


def _partial(previous: AnalysisResult) -> dict[str, Any]:
    return {
        "summary": previous.summary,
        "roles": sorted(previous.roles),
        "exports": previous.exports,
        "dependencies": previous.dependencies,
    }
