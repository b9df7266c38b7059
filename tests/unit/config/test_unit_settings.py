# tests/unit/config/test_unit_settings.py - v3
"""Tests for config/settings.py - defaults, validation, helpers."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from aiexplorer.config.settings import ConfigurationError, Settings, load_settings


class TestDefaults:
    def test_cache_defaults(self):
        s = Settings(_env_file=None)
        assert s.cache_ttl_hours == 168
        assert s.cache_max_entries == 1000
        assert s.cache_eviction == "lru"
        assert s.cache_flush_debounce_s == 5.0
        assert s.fingerprint_hash_max_bytes == 1024 * 1024

    def test_model_defaults(self):
        s = Settings(_env_file=None)
        assert s.model_max_content_chars == 50_000
        assert s.model_truncate_chars == 8000
        assert s.router_large_input_chars == 5000
        assert s.router_batch_file_count == 5
        assert s.router_health_interval_s == 60.0

    def test_load_settings_overrides(self, tmp_path):
        s = load_settings(_env_file=None, workspace_root=tmp_path, cache_max_entries=3)
        assert s.workspace_root == tmp_path
        assert s.cache_max_entries == 3


class TestValidation:
    def test_cache_max_entries_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_max_entries=0)

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_ttl_hours=-1)

    def test_invalid_eviction_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_eviction="random")

    def test_malformed_model_slot(self):
        with pytest.raises(ConfigurationError, match="MODEL_PRIMARY"):
            Settings(_env_file=None, model_primary="gpt-4o")

    def test_truncate_larger_than_max_content(self):
        with pytest.raises(ConfigurationError, match="MODEL_TRUNCATE_CHARS"):
            Settings(_env_file=None, model_truncate_chars=9000, model_max_content_chars=8000)

    def test_truncate_too_small(self):
        with pytest.raises(ConfigurationError):
            Settings(_env_file=None, model_truncate_chars=50)


class TestHelpers:
    def test_binary_extensions_normalized(self):
        s = Settings(_env_file=None, model_binary_extensions="MP4, .png,,zip")
        assert s.model_binary_extensions_set == frozenset({".mp4", ".png", ".zip"})

    def test_default_binary_extensions(self):
        exts = Settings(_env_file=None).model_binary_extensions_set
        assert ".mp4" in exts
        assert ".py" not in exts

    def test_prompts_dir_defaults_under_workspace(self, tmp_path):
        s = Settings(_env_file=None, workspace_root=tmp_path)
        assert s.resolved_prompts_dir == tmp_path / "prompts"

    def test_prompts_dir_explicit(self, tmp_path):
        s = Settings(_env_file=None, prompts_dir=tmp_path / "p")
        assert s.resolved_prompts_dir == Path(tmp_path / "p")
