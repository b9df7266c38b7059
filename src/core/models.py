# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

AnalysisResult is the unit of work of the pipeline and the value stored in
the cache. No module redefines it; all imports come from core.models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

Tier = Literal["heuristic", "structural", "model"]

TIERS: tuple[str, ...] = ("heuristic", "structural", "model")

# Upper bound for exports / dependencies / related.
MAX_LIST_ITEMS = 10

ERROR_SCHEMA_VERSION = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisResult(BaseModel):
    """Structured summary of a single file or directory.

    ``tier`` records which analyzer produced the value and is always set
    explicitly by that analyzer, never inferred from the other fields.
    """

    target: str
    summary: str = ""
    roles: set[str] = Field(default_factory=set)
    language: str | None = None
    exports: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    related: list[str] = Field(default_factory=list)
    schema_version: str
    produced_at: datetime = Field(default_factory=_utcnow)
    tier: Tier

    @field_validator("roles", mode="before")
    @classmethod
    def _clean_roles(cls, v: Any) -> set[str]:
        if v is None:
            return set()
        if isinstance(v, str):
            v = [v]
        return {str(r).strip() for r in v if str(r).strip()}

    @field_validator("exports", "dependencies", "related", mode="before")
    @classmethod
    def _bound_sequence(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        items: list[str] = []
        for raw in v:
            item = str(raw).strip()
            if item and item not in items:
                items.append(item)
            if len(items) >= MAX_LIST_ITEMS:
                break
        return items

    @property
    def is_degenerate(self) -> bool:
        """True for the minimal fallback produced when every tier failed."""
        return self.schema_version == ERROR_SCHEMA_VERSION

    def is_structurally_complete(self) -> bool:
        """Summary, exports and dependencies are all present.

        The orchestrator uses this to decide that a model call would add
        too little to be worth its cost.
        """
        return bool(self.summary.strip() and self.exports and self.dependencies)


def degenerate_result(target: str) -> AnalysisResult:
    """Build the always-safe result returned when analysis itself crashed."""
    return AnalysisResult(
        target=target,
        summary=f"Path: {target}",
        roles=set(),
        schema_version=ERROR_SCHEMA_VERSION,
        tier="heuristic",
    )
