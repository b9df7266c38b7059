# tests/unit/pipeline/test_unit_structural.py - v2
"""Tests for pipeline/analyzers/structural.py - per-format parsers."""

from __future__ import annotations

import json

import pytest

from aiexplorer.pipeline.analyzers.heuristic import HeuristicAnalyzer
from aiexplorer.pipeline.analyzers.structural import StructuralAnalyzer


@pytest.fixture
def analyzer() -> StructuralAnalyzer:
    return StructuralAnalyzer()


async def _analyze(analyzer: StructuralAnalyzer, path) -> object:
    previous = await HeuristicAnalyzer().analyze(str(path))
    return await analyzer.analyze(str(path), previous)


class TestMarkdown:
    @pytest.mark.asyncio
    async def test_headings_and_links(self, analyzer, tmp_path):
        p = tmp_path / "readme.md"
        p.write_text(
            "# Demo Project\n\nIntro.\n\n## Install\n\nSee [Guide](docs/guide.md) "
            "and [API](docs/api.md).\n",
            encoding="utf-8",
        )
        r = await _analyze(analyzer, p)
        assert r.summary == "Document: Demo Project"
        assert r.exports == ["Demo Project", "Install"]
        assert r.related == ["Guide", "API"]
        assert r.roles == {"document"}
        assert r.tier == "structural"
        assert r.schema_version == "structural.v1"

    @pytest.mark.asyncio
    async def test_no_heading(self, analyzer, tmp_path):
        p = tmp_path / "notes.md"
        p.write_text("just text\n", encoding="utf-8")
        assert (await _analyze(analyzer, p)).summary == "Markdown document"

    @pytest.mark.asyncio
    async def test_fenced_code_comments_are_not_headings(self, analyzer, tmp_path):
        p = tmp_path / "readme.md"
        p.write_text(
            "```bash\n# install\npip install demo\n```\n\n# Demo\n\n"
            "~~~\n## not a heading either\n~~~\n## Usage\n",
            encoding="utf-8",
        )
        r = await _analyze(analyzer, p)
        assert r.summary == "Document: Demo"
        assert r.exports == ["Demo", "Usage"]

    @pytest.mark.asyncio
    async def test_unclosed_fence_runs_to_end(self, analyzer, tmp_path):
        p = tmp_path / "notes.md"
        p.write_text("# Title\n\n```\n# comment\n", encoding="utf-8")
        assert (await _analyze(analyzer, p)).exports == ["Title"]


class TestJson:
    @pytest.mark.asyncio
    async def test_package_json(self, analyzer, tmp_path):
        p = tmp_path / "package.json"
        p.write_text(json.dumps({
            "name": "demo",
            "scripts": {"build": "tsc"},
            "dependencies": {"react": "^18.0.0"},
            "devDependencies": {"typescript": "^5.0.0"},
        }), encoding="utf-8")
        r = await _analyze(analyzer, p)
        assert r.exports == ["build"]
        assert r.dependencies == ["react", "typescript"]
        assert "demo" in r.summary
        assert r.summary == "demo - project configuration"

    @pytest.mark.asyncio
    async def test_tsconfig(self, analyzer, tmp_path):
        p = tmp_path / "tsconfig.json"
        p.write_text('{"compilerOptions": {"strict": true, "target": "es2020"}}', encoding="utf-8")
        r = await _analyze(analyzer, p)
        assert r.summary == "TypeScript compiler configuration"
        assert r.exports == ["strict", "target"]

    @pytest.mark.asyncio
    async def test_generic_json(self, analyzer, tmp_path):
        p = tmp_path / "data.json"
        p.write_text('{"a": 1, "b": 2}', encoding="utf-8")
        r = await _analyze(analyzer, p)
        assert r.exports == ["a", "b"]
        assert "a, b" in r.summary

    @pytest.mark.asyncio
    async def test_malformed_json(self, analyzer, tmp_path):
        p = tmp_path / "bad.json"
        p.write_text("{not json", encoding="utf-8")
        assert (await _analyze(analyzer, p)).summary == "JSON file (malformed)"


class TestScripts:
    @pytest.mark.asyncio
    async def test_js_exports_imports(self, analyzer, tmp_path):
        p = tmp_path / "button.ts"
        p.write_text(
            "import React from 'react';\n"
            "import { helper } from './utils/helper';\n"
            "const lodash = require('lodash');\n"
            "export const Button = () => null;\n"
            "export function useThing() {}\n"
            "export { a as b, c };\n",
            encoding="utf-8",
        )
        r = await _analyze(analyzer, p)
        assert r.exports == ["Button", "useThing", "a", "c"]
        assert r.dependencies == ["react", "lodash"]
        assert r.related == ["helper"]
        assert r.summary.startswith("button - module, exports: Button, useThing, a")

    @pytest.mark.asyncio
    async def test_js_service_summary(self, analyzer, tmp_path):
        p = tmp_path / "api.js"
        p.write_text("export class UserService {}\n", encoding="utf-8")
        assert "service module" in (await _analyze(analyzer, p)).summary

    @pytest.mark.asyncio
    async def test_js_test_trait(self, analyzer, tmp_path):
        p = tmp_path / "math.test.js"
        p.write_text("describe('math', () => {\n  it('adds', () => {});\n});\n", encoding="utf-8")
        assert (await _analyze(analyzer, p)).summary.endswith(", contains tests")

    @pytest.mark.asyncio
    async def test_python(self, analyzer, tmp_path):
        p = tmp_path / "tools.py"
        p.write_text(
            "import os\n"
            "import json, sys\n"
            "from typing import Any\n"
            "from .sibling import thing\n"
            "from . import other\n\n"
            "def public():\n    pass\n\n"
            "def _private():\n    pass\n\n"
            "class Widget:\n    def method(self):\n        pass\n\n"
            "async def fetch():\n    pass\n",
            encoding="utf-8",
        )
        r = await _analyze(analyzer, p)
        assert r.exports == ["public", "Widget", "fetch"]
        assert r.dependencies == ["os", "json", "sys", "typing"]
        assert r.related == ["sibling"]
        assert r.language == "python"

    @pytest.mark.asyncio
    async def test_python_dunder_all(self, analyzer, tmp_path):
        p = tmp_path / "pkg.py"
        p.write_text("__all__ = ['alpha', \"beta\"]\n\ndef gamma():\n    pass\n", encoding="utf-8")
        assert (await _analyze(analyzer, p)).exports == ["alpha", "beta"]

    @pytest.mark.asyncio
    async def test_python_tests_trait(self, analyzer, tmp_path):
        p = tmp_path / "checks.py"
        p.write_text("def test_one():\n    assert True\n", encoding="utf-8")
        assert (await _analyze(analyzer, p)).summary.endswith(", contains tests")

    @pytest.mark.asyncio
    async def test_vue(self, analyzer, tmp_path):
        p = tmp_path / "MyButton.vue"
        p.write_text(
            "<script>\nimport Icon from './Icon.vue';\nimport { ref } from 'vue';\n"
            "export default {\n  name: 'MyButton',\n  props: { label: String, size: Number },\n}\n"
            "</script>\n",
            encoding="utf-8",
        )
        r = await _analyze(analyzer, p)
        assert r.summary == "Vue component: MyButton"
        assert r.exports == ["MyButton", "label", "size"]
        assert r.dependencies == ["vue"]
        assert r.related == ["Icon.vue"]


class TestOtherFiles:
    @pytest.mark.asyncio
    async def test_binary_not_read(self, analyzer, tmp_path):
        p = tmp_path / "logo.png"
        p.write_bytes(b"\x89PNG\r\n\x1a\n\x00\xff")
        r = await _analyze(analyzer, p)
        assert r.summary == "Image file"
        assert r.exports == []
        assert r.tier == "structural"

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, analyzer, tmp_path):
        with pytest.raises(OSError):
            await _analyze(analyzer, tmp_path / "gone.ts")

    @pytest.mark.asyncio
    async def test_without_previous_runs_heuristic(self, analyzer, tmp_path):
        p = tmp_path / "readme.md"
        p.write_text("# Title\n", encoding="utf-8")
        r = await analyzer.analyze(str(p))
        assert r.roles == {"document"}
        assert r.summary == "Document: Title"


class TestDirectories:
    @pytest.mark.asyncio
    async def test_listing_and_traits(self, analyzer, tmp_path):
        d = tmp_path / "src"
        d.mkdir()
        (d / "lib").mkdir()
        (d / "HeaderComponent.js").write_text("", encoding="utf-8")
        (d / "app.test.js").write_text("", encoding="utf-8")
        (d / "settings.json").write_text("{}", encoding="utf-8")
        r = await _analyze(analyzer, d)
        assert r.exports == ["lib"]
        assert r.related == ["HeaderComponent.js", "app.test.js", "settings.json"]
        assert r.summary.startswith("Source code directory")
        assert "contains components" in r.summary
        assert "contains tests" in r.summary
        assert "contains config files" in r.summary

    @pytest.mark.asyncio
    async def test_related_bounded(self, analyzer, tmp_path):
        d = tmp_path / "many"
        d.mkdir()
        for i in range(25):
            (d / f"f{i:02d}.txt").write_text("", encoding="utf-8")
        r = await _analyze(analyzer, d)
        assert len(r.related) == 10
        assert r.related[0] == "f00.txt"
