# src/llm/config.py - v2
"""Backend assignment for the two routed model slots.

Each slot is configured as ``provider:model``:
  MODEL_PRIMARY   (default openai:gpt-4o-mini, quality first)
  MODEL_SECONDARY (default hunyuan:hunyuan-lite, cheaper, long inputs)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from aiexplorer.config.settings import Settings


@dataclass(frozen=True)
class BackendAssignment:
    """Resolved provider:model for a router slot."""

    slot: Literal["primary", "secondary"]
    provider: str
    model: str

    @property
    def key(self) -> str:
        """Return 'provider:model' string."""
        return f"{self.provider}:{self.model}"


def parse_assignment(value: str) -> tuple[str, str] | None:
    """Parse 'provider:model' string. Returns None if malformed."""
    if not value or ":" not in value:
        return None
    provider, model = value.split(":", 1)
    provider, model = provider.strip().lower(), model.strip()
    if not provider or not model:
        return None
    return (provider, model)


def resolve_backends(settings: Settings) -> tuple[BackendAssignment, BackendAssignment]:
    """Resolve the primary and secondary backend assignments.

    Settings validation guarantees both values are well formed.
    """
    primary = parse_assignment(settings.model_primary)
    secondary = parse_assignment(settings.model_secondary)
    assert primary is not None and secondary is not None
    return (
        BackendAssignment(slot="primary", provider=primary[0], model=primary[1]),
        BackendAssignment(slot="secondary", provider=secondary[0], model=secondary[1]),
    )
