# src/logging/context.py - v2
"""Contextual logging support: attach target, tier and backend to log records.

Context variables are copied into every asyncio task, so concurrent
pipeline runs for different targets keep separate values.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_target: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "target", default=None
)
_tier: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "tier", default=None
)
_backend: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "backend", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    target: str | None = None
    tier: str | None = None
    backend: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        target=_target.get(),
        tier=_tier.get(),
        backend=_backend.get(),
    )


def set_target_context(target: str) -> None:
    """Set target-level context (called once per pipeline run)."""
    _target.set(target)
    _tier.set(None)
    _backend.set(None)


def set_tier_context(tier: str | None) -> None:
    """Set the tier currently executing."""
    _tier.set(tier)


def set_backend_context(backend: str | None) -> None:
    """Set the model backend currently being called."""
    _backend.set(backend)


def clear_context() -> None:
    """Reset all context variables."""
    _target.set(None)
    _tier.set(None)
    _backend.set(None)
