# src/llm/client_factory.py - v3
"""Factory: instantiate an LLM backend from a provider name.

Called by the facade to build the router's two backends from the
``provider:model`` assignments resolved in llm/config.py.
"""

from __future__ import annotations

import importlib
import logging

from aiexplorer.config.settings import Settings
from aiexplorer.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

# Registry of provider name -> adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "openai": "aiexplorer.llm.adapters.openai_adapter.OpenAIAdapter",
    "hunyuan": "aiexplorer.llm.adapters.openai_adapter.OpenAIAdapter",
    "anthropic": "aiexplorer.llm.adapters.anthropic_adapter.AnthropicAdapter",
    "ollama": "aiexplorer.llm.adapters.ollama_adapter.OllamaAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier (openai, hunyuan, anthropic, ollama).
        model: Model name (e.g. gpt-4o-mini).
        settings: Application settings (API keys, endpoints, limits).
        **kwargs: Additional provider-specific arguments.

    Returns:
        Configured BaseLLMClient instance.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model

    if settings is not None:
        init_kwargs.setdefault("timeout_s", settings.model_timeout_s)
        init_kwargs.setdefault("max_tokens", settings.model_max_tokens)
        init_kwargs.setdefault("temperature", settings.model_temperature)
        if provider == "openai":
            init_kwargs.setdefault("api_key", settings.openai_api_key)
            init_kwargs.setdefault("base_url", settings.openai_base_url)
        elif provider == "hunyuan":
            init_kwargs.setdefault("api_key", settings.hunyuan_api_key)
            init_kwargs.setdefault("base_url", settings.hunyuan_base_url)
        elif provider == "anthropic":
            init_kwargs.setdefault("api_key", settings.anthropic_api_key)
        elif provider == "ollama":
            init_kwargs.setdefault("host", settings.ollama_base_url)

    if provider == "hunyuan":
        init_kwargs.setdefault("provider", "hunyuan")

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
