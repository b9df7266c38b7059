# tests/unit/pipeline/test_unit_response_parser.py - v1
"""Tests for pipeline/analyzers/response_parser.py."""

from __future__ import annotations

import pytest

from aiexplorer.pipeline.analyzers.response_parser import (
    UnparseableModelResponse,
    extract_json_object,
    parse_model_response,
    parse_strict,
)


class TestParseStrict:
    def test_object(self):
        assert parse_strict('{"a": 1}') == {"a": 1}

    def test_non_object(self):
        assert parse_strict("[1, 2]") is None
        assert parse_strict("nope") is None


class TestExtractJsonObject:
    def test_markdown_fence(self):
        text = '```json\n{"summary": "x"}\n```'
        assert extract_json_object(text) == {"summary": "x"}

    def test_prose_around(self):
        text = 'Sure! Here you go: {"summary": "x", "roles": ["a"]} Hope it helps.'
        assert extract_json_object(text) == {"summary": "x", "roles": ["a"]}

    def test_first_object_of_two(self):
        text = 'A: {"summary": "first"} B: {"summary": "second"}'
        assert extract_json_object(text) == {"summary": "first"}

    def test_nothing(self):
        assert extract_json_object("no braces here") is None


class TestParseModelResponse:
    def test_full(self):
        parsed = parse_model_response(
            '{"summary": " Login page ", "roles": ["page", "component"], "language": "TypeScript",'
            ' "exports": ["Login"], "dependencies": ["react"], "related": ["auth.ts"]}'
        )
        assert parsed.summary == "Login page"
        assert parsed.roles == ["page", "component"]
        assert parsed.language == "typescript"
        assert parsed.dependencies == ["react"]

    def test_short_field_names_accepted(self):
        parsed = parse_model_response('{"role": "config", "deps": ["vite"]}')
        assert parsed.roles == ["config"]
        assert parsed.dependencies == ["vite"]

    def test_wrong_types_coerced_to_empty(self):
        parsed = parse_model_response('{"summary": 5, "exports": "one", "related": {"x": 1}}')
        assert parsed.summary == ""
        assert parsed.exports == ["one"]
        assert parsed.related == []

    def test_unparseable(self):
        with pytest.raises(UnparseableModelResponse) as exc_info:
            parse_model_response("I cannot help with that.")
        assert exc_info.value.raw == "I cannot help with that."
