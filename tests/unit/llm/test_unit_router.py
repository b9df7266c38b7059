# tests/unit/llm/test_unit_router.py - v1
"""Tests for llm/router.py - preference, health, failover."""

from __future__ import annotations

import pytest

from aiexplorer.llm.router import ModelRouter, NoBackendAvailableError


def _router(primary, secondary, clock=None, **kwargs):
    if clock is not None:
        kwargs["clock"] = clock
    return ModelRouter(primary, secondary, **kwargs)


class TestPreference:
    @pytest.mark.asyncio
    async def test_small_input_uses_primary(self, fake_backend):
        primary, secondary = fake_backend(reply="p"), fake_backend(reply="s")
        assert await _router(primary, secondary).call("prompt", {"code": "x"}) == "p"
        assert len(primary.calls) == 1
        assert secondary.calls == []

    @pytest.mark.asyncio
    async def test_large_code_prefers_secondary(self, fake_backend):
        primary, secondary = fake_backend(reply="p"), fake_backend(reply="s")
        router = _router(primary, secondary)
        assert await router.call("prompt", {"code": "x" * 5001}) == "s"

    @pytest.mark.asyncio
    async def test_code_at_threshold_stays_primary(self, fake_backend):
        primary, secondary = fake_backend(reply="p"), fake_backend(reply="s")
        assert await _router(primary, secondary).call("prompt", {"code": "x" * 5000}) == "p"

    @pytest.mark.asyncio
    async def test_many_files_prefers_secondary(self, fake_backend):
        primary, secondary = fake_backend(reply="p"), fake_backend(reply="s")
        router = _router(primary, secondary)
        assert await router.call("prompt", {"files": list("abcdef")}) == "s"
        assert await router.call("prompt", {"files": list("abcde")}) == "p"

    @pytest.mark.asyncio
    async def test_prompt_sent_as_system(self, fake_backend):
        primary = fake_backend()
        await _router(primary, fake_backend()).call("SYSTEM", {"path": "a.py"})
        call = primary.calls[0]
        assert call["system"] == "SYSTEM"
        assert call["json_mode"] is True
        assert "path: a.py" in call["messages"][0].content


class TestHealth:
    @pytest.mark.asyncio
    async def test_unconfigured_preferred_falls_to_other(self, fake_backend):
        primary = fake_backend(reply="p", configured=False)
        secondary = fake_backend(reply="s")
        assert await _router(primary, secondary).call("prompt", {}) == "s"

    @pytest.mark.asyncio
    async def test_none_healthy_raises(self, fake_backend):
        router = _router(fake_backend(configured=False), fake_backend(configured=False))
        with pytest.raises(NoBackendAvailableError):
            await router.call("prompt", {})

    @pytest.mark.asyncio
    async def test_health_check_coalesced(self, fake_backend, clock):
        primary = fake_backend(reply="p", error=RuntimeError("down"))
        secondary = fake_backend(reply="s")
        router = _router(primary, secondary, clock=clock)

        assert await router.call("prompt", {}) == "s"
        primary.error = None
        # Still inside the interval: primary stays marked unhealthy.
        clock.advance(30)
        assert await router.call("prompt", {}) == "s"
        # Interval elapsed: presence check restores the primary.
        clock.advance(31)
        assert await router.call("prompt", {}) == "p"

    def test_status(self, fake_backend):
        router = _router(fake_backend("openai", "gpt"), fake_backend("hunyuan", "lite", configured=False))
        primary, secondary = router.get_status()
        assert (primary.role, primary.name, primary.healthy) == ("primary", "openai:gpt", True)
        assert (secondary.role, secondary.provider, secondary.healthy) == ("secondary", "hunyuan", False)
        assert primary.last_checked is not None


class TestFailover:
    @pytest.mark.asyncio
    async def test_retry_once_on_other(self, fake_backend):
        primary = fake_backend(error=TimeoutError("slow"))
        secondary = fake_backend(reply="s")
        router = _router(primary, secondary)
        assert await router.call("prompt", {}) == "s"
        assert [s.healthy for s in router.get_status()] == [False, True]

    @pytest.mark.asyncio
    async def test_both_fail_propagates(self, fake_backend):
        primary = fake_backend(error=RuntimeError("p down"))
        secondary = fake_backend(error=RuntimeError("s down"))
        router = _router(primary, secondary)
        with pytest.raises(RuntimeError, match="s down"):
            await router.call("prompt", {})
        assert len(primary.calls) == 1
        assert len(secondary.calls) == 1
        with pytest.raises(NoBackendAvailableError):
            await router.call("prompt", {})

    @pytest.mark.asyncio
    async def test_no_retry_when_other_unhealthy(self, fake_backend):
        primary = fake_backend(error=RuntimeError("p down"))
        secondary = fake_backend(configured=False)
        router = _router(primary, secondary)
        with pytest.raises(RuntimeError, match="p down"):
            await router.call("prompt", {})
        assert secondary.calls == []
