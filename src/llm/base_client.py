# src/llm/base_client.py - v2
"""Abstract LLM client interface.

Every backend the router can use implements ``complete``; the router
itself only relies on ``call(prompt, inputs) -> text`` and
``is_configured``, so new providers plug in without touching routing.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

from aiexplorer.llm.models import LLMResponse, Message


def format_inputs(inputs: dict[str, Any]) -> str:
    """Render structured inputs as ``key: value`` blocks for the user turn."""
    blocks = []
    for key, value in inputs.items():
        rendered = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
        blocks.append(f"{key}: {rendered}")
    return "\n\n".join(blocks)


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Text completion.

        ``max_tokens`` and ``temperature`` default to the values the adapter
        was constructed with.
        """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (openai, hunyuan, anthropic, ollama)."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Cheap presence check of the credentials this backend needs."""

    @property
    def name(self) -> str:
        """Display name, ``provider:model``."""
        return f"{self.provider_name}:{getattr(self, '_model', '?')}"

    async def call(self, prompt: str, inputs: dict[str, Any]) -> str:
        """Send ``prompt`` as the system message and ``inputs`` as the user turn.

        Returns:
            Raw response text, ideally a JSON object.
        """
        response = await self.complete(
            messages=[Message(role="user", content=format_inputs(inputs))],
            system=prompt,
            json_mode=True,
        )
        return response.content
