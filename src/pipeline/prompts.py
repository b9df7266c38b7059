# src/pipeline/prompts.py - v1
"""System prompt templates for the model tier.

Templates are read from ``<prompts_dir>/file_summary.system.txt`` and
``<prompts_dir>/dir_summary.system.txt``. A missing, unreadable or blank
file falls back to the built-in default, so a prompt is never empty.
Placeholders use ``{{name}}`` and are filled from the request inputs.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Literal

logger = logging.getLogger(__name__)

PromptKind = Literal["file", "directory"]

_PROMPT_FILES: dict[str, str] = {
    "file": "file_summary.system.txt",
    "directory": "dir_summary.system.txt",
}

DEFAULT_FILE_PROMPT = """\
You classify what a source file is for. Input: the file path, a code
excerpt and a partial analysis from cheaper tools.
Reply with strict JSON only:
{"summary", "roles", "language", "exports", "dependencies", "related"}

Rules:
- summary: one plain sentence (at most 30 words) a non-programmer understands
- roles: array chosen from ["entry", "page", "component", "service",
  "utility", "config", "types", "style", "test", "script"]
- language: programming language, lowercase
- exports: main exported functions or classes (at most 5)
- dependencies: important external packages (at most 8)
- related: related file names (at most 5)

Do not invent anything: leave arrays empty when the information is not
visible. No text outside the JSON object.

File path: {{path}}"""

DEFAULT_DIR_PROMPT = """\
You classify what a directory is for. Input: the directory path, a file
listing, a file type histogram and a partial analysis.
Reply with strict JSON only:
{"summary", "roles", "language", "exports", "dependencies", "related"}

Rules:
- summary: what the directory is for (at most 25 words)
- roles: array chosen from ["source", "test", "document", "config",
  "build", "asset", "utility"]
- exports: subdirectory names
- related: important file names (at most 5)

Directory path: {{path}}"""

_DEFAULTS: dict[str, str] = {"file": DEFAULT_FILE_PROMPT, "directory": DEFAULT_DIR_PROMPT}

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def render(template: str, values: dict[str, Any]) -> str:
    """Fill ``{{name}}`` placeholders; unknown names are left as-is."""

    def _sub(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        value = values[name]
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, default=str)

    return _PLACEHOLDER.sub(_sub, template)


class PromptLibrary:
    """Load system prompts by kind, with non-empty built-in fallbacks.

    Args:
        prompts_dir: Directory holding template overrides, or None to
            always use the built-ins.
    """

    def __init__(self, prompts_dir: Path | str | None = None) -> None:
        self._dir = Path(prompts_dir) if prompts_dir is not None else None
        self._cache: dict[str, str] = {}

    def get(self, kind: PromptKind) -> str:
        """Return the template for ``kind`` (loaded once)."""
        if kind not in self._cache:
            self._cache[kind] = self._load(kind)
        return self._cache[kind]

    def render(self, kind: PromptKind, values: dict[str, Any]) -> str:
        return render(self.get(kind), values)

    def _load(self, kind: str) -> str:
        if self._dir is None:
            return _DEFAULTS[kind]
        path = self._dir / _PROMPT_FILES[kind]
        try:
            text = path.read_text(encoding="utf-8")
        except OSError:
            logger.debug("Prompt %s not found, using built-in default", path)
            return _DEFAULTS[kind]
        if not text.strip():
            logger.warning("Prompt %s is blank, using built-in default", path)
            return _DEFAULTS[kind]
        return text
