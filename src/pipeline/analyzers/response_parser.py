# src/pipeline/analyzers/response_parser.py - v1
"""Two-stage parsing of model responses into a typed summary.

Backends are asked for strict JSON but are tolerated when they wrap it in
markdown fences or prose. Stage one parses the whole text, stage two the
first ``{...}`` span; if both fail the caller gets a typed error instead
of a silently empty result.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator


class UnparseableModelResponse(ValueError):
    """No JSON object could be recovered from a model response."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class ModelSummary(BaseModel):
    """Fields a model may return; every field is optional."""

    summary: str = ""
    roles: list[str] = Field(default_factory=list, validation_alias=AliasChoices("roles", "role"))
    language: str | None = None
    exports: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("dependencies", "deps")
    )
    related: list[str] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def _coerce_summary(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("language", mode="before")
    @classmethod
    def _coerce_language(cls, v: Any) -> str | None:
        if isinstance(v, str) and v.strip():
            return v.strip().lower()
        return None

    @field_validator("roles", "exports", "dependencies", "related", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return []
        return [str(item).strip() for item in v if isinstance(item, (str, int, float)) and str(item).strip()]


_FENCE = re.compile(r"^\s*```[\w-]*\s*$", re.MULTILINE)


def parse_strict(text: str) -> dict[str, Any] | None:
    """Parse ``text`` as a JSON object; None if it is not one."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Recover the first JSON object embedded in fences or prose."""
    stripped = _FENCE.sub("", text).strip()
    data = parse_strict(stripped)
    if data is not None:
        return data

    start = stripped.find("{")
    end = stripped.rfind("}")
    while start != -1 and end > start:
        data = parse_strict(stripped[start:end + 1])
        if data is not None:
            return data
        # Shrink from the right to find the first complete object.
        end = stripped.rfind("}", start, end)
    return None


def parse_model_response(text: str) -> ModelSummary:
    """Parse a raw model response.

    Raises:
        UnparseableModelResponse: If no JSON object can be recovered.
    """
    data = parse_strict(text)
    if data is None:
        data = extract_json_object(text)
    if data is None:
        raise UnparseableModelResponse(
            f"No JSON object in model response ({len(text)} chars)", raw=text
        )
    try:
        return ModelSummary.model_validate(data)
    except ValidationError as e:
        raise UnparseableModelResponse(f"Invalid model response: {e}", raw=text) from e
