# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides settings bound to a temp workspace, an in-memory cache store,
a scripted fake model backend and a controllable clock. No network:
every backend is a fake or a mock.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from aiexplorer.cache.analysis_cache import AnalysisCache
from aiexplorer.cache.memory_store import MemoryCacheStore
from aiexplorer.config.settings import Settings
from aiexplorer.core.models import AnalysisResult
from aiexplorer.llm.base_client import BaseLLMClient
from aiexplorer.llm.models import LLMResponse, Message


# === Helpers ===


class FakeClock:
    """Manually advanced clock usable as ``clock=`` for cache and router."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend(BaseLLMClient):
    """Scripted backend: returns ``reply`` or raises ``error``; records calls."""

    def __init__(
        self,
        provider: str = "fake",
        model: str = "m1",
        reply: str = '{"summary": "fake summary"}',
        error: Exception | None = None,
        configured: bool = True,
    ) -> None:
        self._provider = provider
        self._model = model
        self.reply = reply
        self.error = error
        self.configured = configured
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        self.calls.append({"messages": messages, "system": system, "json_mode": json_mode})
        if self.error is not None:
            raise self.error
        return LLMResponse(
            content=self.reply,
            model=self._model,
            provider=self._provider,
            latency_ms=1,
        )

    @property
    def provider_name(self) -> str:
        return self._provider

    @property
    def is_configured(self) -> bool:
        return self.configured


def make_result(target: str = "/tmp/x.py", tier: str = "heuristic", **kwargs: Any) -> AnalysisResult:
    defaults: dict[str, Any] = {
        "summary": f"{tier} summary",
        "schema_version": f"{tier}.v1",
    }
    defaults.update(kwargs)
    return AnalysisResult(target=target, tier=tier, **defaults)  # type: ignore[arg-type]


# === FIXTURES ===


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings bound to a temp workspace, memory cache, fast flush."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        workspace_root=tmp_path,
        cache_backend="memory",
        cache_flush_debounce_s=0.01,
        openai_api_key="sk-test",
        hunyuan_api_key="hy-test",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def cache(memory_store: MemoryCacheStore, clock: FakeClock) -> AnalysisCache:
    return AnalysisCache(
        store=memory_store,
        default_ttl_seconds=3600,
        max_entries=100,
        flush_debounce_s=0.01,
        clock=clock,
    )


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    p = tmp_path / "sample.py"
    p.write_text("def hello():\n    return 1\n", encoding="utf-8")
    return p


@pytest.fixture
def fake_backend() -> type[FakeBackend]:
    """The FakeBackend class, for tests building their own backends."""
    return FakeBackend


@pytest.fixture
def result_factory():
    """Build an AnalysisResult with tier-derived defaults."""
    return make_result
