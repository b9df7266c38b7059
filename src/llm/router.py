# src/llm/router.py - v1
"""Two-backend model router with health tracking and single failover.

Policy:
  - Health is a configuration-presence check, re-evaluated at most once
    per interval; a failed call marks its backend unhealthy immediately.
  - Large inputs (long code) and batched inputs (many files) prefer the
    cheaper secondary backend; everything else prefers the primary.
  - A failed call is retried once on the other backend if it is healthy.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from aiexplorer.llm.base_client import BaseLLMClient
from aiexplorer.llm.models import BackendStatus
from aiexplorer.logging.context import set_backend_context

logger = logging.getLogger(__name__)


class NoBackendAvailableError(RuntimeError):
    """Neither backend is healthy."""


class ModelRouter:
    """Route model calls between a primary and a secondary backend.

    Args:
        primary: Preferred backend for ordinary inputs.
        secondary: Cheaper backend, preferred for large or batched inputs.
        health_check_interval_s: Minimum delay between health checks.
        large_input_chars: ``inputs["code"]`` longer than this prefers secondary.
        batch_file_count: ``inputs["files"]`` longer than this prefers secondary.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        primary: BaseLLMClient,
        secondary: BaseLLMClient,
        health_check_interval_s: float = 60.0,
        large_input_chars: int = 5000,
        batch_file_count: int = 5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backends: dict[str, BaseLLMClient] = {
            "primary": primary,
            "secondary": secondary,
        }
        self._healthy: dict[str, bool] = {"primary": True, "secondary": True}
        self._interval = health_check_interval_s
        self._large_input_chars = large_input_chars
        self._batch_file_count = batch_file_count
        self._clock = clock
        self._last_check: float | None = None
        self._last_checked_at: datetime | None = None

    async def call(self, prompt: str, inputs: dict[str, Any]) -> str:
        """Call the best available backend, failing over once.

        Raises:
            NoBackendAvailableError: If no backend is healthy.
            Exception: Whatever the last attempted backend raised.
        """
        self._check_health()

        preferred = "secondary" if self.prefers_secondary(inputs) else "primary"
        other = _other(preferred)
        slot = preferred if self._healthy[preferred] else other
        if not self._healthy[slot]:
            raise NoBackendAvailableError(
                "No model backend available: "
                f"{self._backends['primary'].name} and "
                f"{self._backends['secondary'].name} are both unhealthy"
            )

        try:
            return await self._call_slot(slot, prompt, inputs)
        except Exception as first_error:
            self.mark_unhealthy(slot)
            fallback = _other(slot)
            if not self._healthy[fallback]:
                raise
            logger.warning(
                "Backend %s failed (%s), failing over to %s",
                self._backends[slot].name, first_error, self._backends[fallback].name,
            )
            try:
                return await self._call_slot(fallback, prompt, inputs)
            except Exception:
                self.mark_unhealthy(fallback)
                raise

    def prefers_secondary(self, inputs: dict[str, Any]) -> bool:
        """Large or batched inputs go to the cheaper backend."""
        code = inputs.get("code") or ""
        if isinstance(code, str) and len(code) > self._large_input_chars:
            return True
        files = inputs.get("files")
        if isinstance(files, (list, tuple)) and len(files) > self._batch_file_count:
            return True
        return False

    def mark_unhealthy(self, slot: str) -> None:
        if self._healthy[slot]:
            logger.warning("Marking backend %s unhealthy", self._backends[slot].name)
        self._healthy[slot] = False

    def get_status(self) -> list[BackendStatus]:
        """Current health of both backends."""
        self._check_health()
        return [
            BackendStatus(
                role=slot,  # type: ignore[arg-type]
                name=backend.name,
                provider=backend.provider_name,
                healthy=self._healthy[slot],
                last_checked=self._last_checked_at,
            )
            for slot, backend in self._backends.items()
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_health(self) -> None:
        now = self._clock()
        if self._last_check is not None and now - self._last_check < self._interval:
            return
        self._last_check = now
        self._last_checked_at = datetime.now(timezone.utc)
        for slot, backend in self._backends.items():
            self._healthy[slot] = backend.is_configured
        logger.debug(
            "Backend health: primary=%s secondary=%s",
            self._healthy["primary"], self._healthy["secondary"],
        )

    async def _call_slot(self, slot: str, prompt: str, inputs: dict[str, Any]) -> str:
        backend = self._backends[slot]
        set_backend_context(backend.name)
        try:
            return await backend.call(prompt, inputs)
        finally:
            set_backend_context(None)


def _other(slot: str) -> str:
    return "secondary" if slot == "primary" else "primary"
