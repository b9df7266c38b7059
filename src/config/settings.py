# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: cache
location and policy, model-tier gating, backend credentials, router
heuristics and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


DEFAULT_BINARY_EXTENSIONS = (
    ".jpg,.jpeg,.png,.gif,.bmp,.ico,.webp,.svg,.pdf,.zip,.tar,.gz,.7z,.rar,"
    ".exe,.dll,.so,.dylib,.bin,.mp3,.wav,.flac,.ogg,.mp4,.mov,.avi,.mkv,.webm,"
    ".woff,.woff2,.ttf,.otf,.psd,.sqlite,.db"
)


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    # === Workspace ===
    workspace_root: Path = Path(".")
    prompts_dir: Path | None = None  # default: <workspace_root>/prompts

    # === Cache ===
    cache_backend: Literal["jsonl", "memory"] = "jsonl"
    cache_root: Path | None = None  # default: <workspace_root>/analysis/.ai
    cache_ttl_hours: float = 24 * 7
    cache_max_entries: int = 1000
    cache_eviction: Literal["lru", "fifo"] = "lru"
    cache_flush_debounce_s: float = 5.0
    fingerprint_hash_max_bytes: int = 1024 * 1024

    # === Model tier gating ===
    model_enabled: bool = True
    model_max_file_bytes: int = 1024 * 1024
    model_binary_extensions: str = DEFAULT_BINARY_EXTENSIONS
    model_skip_when_complete: bool = True
    model_max_content_chars: int = 50_000
    model_truncate_chars: int = 8000

    # === Model backends ("provider:model") ===
    model_primary: str = "openai:gpt-4o-mini"
    model_secondary: str = "hunyuan:hunyuan-lite"
    model_timeout_s: float = 30.0
    model_max_tokens: int = 4000
    model_temperature: float = 0.1

    # Provider credentials
    openai_api_key: str = ""
    openai_base_url: str = ""
    hunyuan_api_key: str = ""
    hunyuan_base_url: str = "https://api.hunyuan.cloud.tencent.com/v1"
    anthropic_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # === Router ===
    router_health_interval_s: float = 60.0
    router_large_input_chars: int = 5000
    router_batch_file_count: int = 5

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("cache_max_entries")
    @classmethod
    def validate_cache_max_entries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache_max_entries must be >= 1")
        return v

    @field_validator("cache_ttl_hours", "cache_flush_debounce_s", "router_health_interval_s")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        for name in ("model_primary", "model_secondary"):
            value = getattr(self, name)
            if ":" not in value or not all(p.strip() for p in value.split(":", 1)):
                errors.append(f"{name.upper()} must be 'provider:model', got {value!r}")

        if self.model_truncate_chars > self.model_max_content_chars:
            errors.append("MODEL_TRUNCATE_CHARS must be <= MODEL_MAX_CONTENT_CHARS")

        if self.model_truncate_chars < 200:
            errors.append("MODEL_TRUNCATE_CHARS must be >= 200")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def model_binary_extensions_set(self) -> frozenset[str]:
        """Parse comma-separated extensions, normalized to '.ext' lowercase."""
        exts = set()
        for raw in self.model_binary_extensions.split(","):
            ext = raw.strip().lower()
            if not ext:
                continue
            exts.add(ext if ext.startswith(".") else f".{ext}")
        return frozenset(exts)

    @property
    def resolved_prompts_dir(self) -> Path:
        if self.prompts_dir is not None:
            return Path(self.prompts_dir).expanduser()
        return Path(self.workspace_root).expanduser() / "prompts"


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
