# src/llm/adapters/openai_adapter.py - v2
"""OpenAI chat adapter implementing BaseLLMClient.

Uses the official openai SDK. Also serves OpenAI-compatible endpoints
(Tencent Hunyuan, vLLM, ...) through ``base_url`` and ``provider``.
"""

from __future__ import annotations

import time
from typing import Any

from aiexplorer.llm.base_client import BaseLLMClient
from aiexplorer.llm.models import LLMResponse, Message


class OpenAIAdapter(BaseLLMClient):
    """OpenAI (or OpenAI-compatible) chat completions adapter."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: str = "",
        base_url: str = "",
        provider: str = "openai",
        timeout_s: float = 30.0,
        max_tokens: int = 4000,
        temperature: float = 0.1,
        **kwargs: Any,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._base_url = base_url
        self._provider = provider
        self._timeout_s = timeout_s
        self._max_tokens = max_tokens
        self._temperature = temperature
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init OpenAI client (only on first API call)."""
        if self.__client is None:
            import openai

            init_kwargs: dict[str, Any] = {
                "api_key": self._api_key,
                "timeout": self._timeout_s,
                "max_retries": 0,
            }
            if self._base_url:
                init_kwargs["base_url"] = self._base_url
            self.__client = openai.AsyncOpenAI(**init_kwargs)
        return self.__client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        for m in messages:
            oai_messages.append({"role": m.role, "content": m.content})

        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": oai_messages,
            "max_tokens": max_tokens or self._max_tokens,
            "temperature": self._temperature if temperature is None else temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        t0 = time.monotonic()
        resp = await self._client.chat.completions.create(**kwargs)
        latency = int((time.monotonic() - t0) * 1000)

        choice = resp.choices[0]
        usage = resp.usage
        return LLMResponse(
            content=choice.message.content or "{}",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=self._model,
            provider=self._provider,
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return self._provider

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)
