# src/pipeline/analyzers/structural.py - v2
"""Tier 2: lightweight parsing of file contents and directory listings.

Regex based on purpose: no language toolchain is required, and the output
only has to be good enough to seed the model tier or stand on its own.
Unlike the other tiers this analyzer raises on I/O failure so that the
orchestrator can fall back to the heuristic result.
"""

from __future__ import annotations

import json
import logging
import os
import re
import stat
from pathlib import Path
from typing import Any, NamedTuple

from aiexplorer.core.models import AnalysisResult, Tier
from aiexplorer.pipeline.analyzers.heuristic import HeuristicAnalyzer, language_for
from aiexplorer.pipeline.plugin_kit.base_analyzer import BaseAnalyzer

logger = logging.getLogger(__name__)

# Directory entries inspected per listing.
MAX_DIR_ENTRIES = 20
# Headings / links kept from a markdown document.
MAX_MARKDOWN_ITEMS = 5


class ParsedStructure(NamedTuple):
    summary: str = ""
    exports: list[str] = []
    dependencies: list[str] = []
    related: list[str] = []
    traits: list[str] = []


# --- JavaScript / TypeScript ---

_JS_EXPORT_DECL = re.compile(
    r"export\s+(?:default\s+)?(?:async\s+)?"
    r"(?:class|function\*?|const|let|var|interface|type|enum)\s+(\w+)"
)
_JS_NAMED_EXPORTS = re.compile(r"export\s*\{\s*([^}]+)\s*\}")
_JS_IMPORT_FROM = re.compile(r"import\s+(?:[\w*{}\s,]+\s+from\s+)?['\"]([^'\"]+)['\"]")
_JS_REQUIRE = re.compile(r"require\(\s*['\"]([^'\"]+)['\"]\s*\)")
_JS_TEST_CALL = re.compile(r"^\s*(?:describe|it|test)\s*\(", re.MULTILINE)

# --- Python ---

_PY_DEF = re.compile(r"^(?:async\s+)?def\s+([A-Za-z_]\w*)|^class\s+([A-Za-z_]\w*)", re.MULTILINE)
_PY_ALL = re.compile(r"^__all__\s*=\s*[\[(]([^\])]*)[\])]", re.MULTILINE)
_PY_IMPORT = re.compile(r"^import\s+([\w.]+(?:\s*,\s*[\w.]+)*)", re.MULTILINE)
_PY_FROM = re.compile(r"^from\s+(\.*)([\w.]*)\s+import\s", re.MULTILINE)
_PY_TEST_DEF = re.compile(r"^\s*(?:async\s+)?def\s+test_\w*\s*\(", re.MULTILINE)

# --- Vue / Markdown ---

_VUE_NAME = re.compile(r"name\s*:\s*['\"]([^'\"]+)['\"]")
_VUE_PROPS = re.compile(r"props\s*:\s*\{([^}]+)\}")
_VUE_PROP_KEY = re.compile(r"(\w+)\s*:")
_MD_HEADING = re.compile(r"^#+\s+(.+?)\s*#*\s*$", re.MULTILINE)
_MD_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_MD_FENCE = re.compile(r"^[ \t]*(`{3,}|~{3,}).*?(?:^[ \t]*\1[ \t]*$|\Z)", re.MULTILINE | re.DOTALL)

_JS_EXTENSIONS = frozenset({".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"})


class StructuralAnalyzer(BaseAnalyzer):
    """Extract exports, dependencies and related entries from contents.

    Args:
        heuristic: Used to seed the result when no previous tier is given.
    """

    def __init__(self, heuristic: HeuristicAnalyzer | None = None) -> None:
        self._heuristic = heuristic or HeuristicAnalyzer()

    @property
    def tier(self) -> Tier:
        return "structural"

    @property
    def version(self) -> str:
        return "v1"

    async def analyze(
        self, target: str, previous: AnalysisResult | None = None
    ) -> AnalysisResult:
        """Parse ``target``.

        Raises:
            OSError: If the target cannot be stat'ed, listed or read.
        """
        if previous is None:
            previous = await self._heuristic.analyze(target)

        st = os.stat(target)
        if stat.S_ISDIR(st.st_mode):
            parsed = self._parse_directory(target)
        else:
            parsed = self._parse_file(target)

        summary = parsed.summary or previous.summary
        for trait in parsed.traits:
            summary = f"{summary}, {trait}"

        ext = os.path.splitext(target)[1].lower()
        base = previous.model_dump(
            exclude={"summary", "exports", "dependencies", "related",
                     "schema_version", "tier", "produced_at", "language"}
        )
        return AnalysisResult(
            **base,
            summary=summary,
            language=previous.language or language_for(ext),
            exports=parsed.exports,
            dependencies=parsed.dependencies,
            related=parsed.related,
            schema_version=self.schema_version,
            tier=self.tier,
        )

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def _parse_directory(self, target: str) -> ParsedStructure:
        subdirs: list[str] = []
        files: list[str] = []
        for name in sorted(os.listdir(target))[:MAX_DIR_ENTRIES]:
            try:
                child = os.stat(os.path.join(target, name))
            except OSError:
                continue
            if stat.S_ISDIR(child.st_mode):
                subdirs.append(name)
            else:
                files.append(name)

        lowered = [f.lower() for f in files]
        traits: list[str] = []
        if any("component" in f for f in lowered):
            traits.append("contains components")
        if any("test" in f or "spec" in f for f in lowered):
            traits.append("contains tests")
        if any("config" in f or f.endswith(".json") for f in lowered):
            traits.append("contains config files")
        return ParsedStructure(exports=subdirs, related=files, traits=traits)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def _parse_file(self, target: str) -> ParsedStructure:
        path = Path(target)
        ext = path.suffix.lower()
        if ext in _JS_EXTENSIONS:
            return _parse_script(path.stem, path.read_text(encoding="utf-8", errors="replace"))
        if ext == ".py":
            return _parse_python(path.stem, path.read_text(encoding="utf-8", errors="replace"))
        if ext == ".json":
            return _parse_json(path.name.lower(), path.read_text(encoding="utf-8", errors="replace"))
        if ext == ".vue":
            return _parse_vue(path.read_text(encoding="utf-8", errors="replace"))
        if ext in (".md", ".markdown"):
            return _parse_markdown(path.read_text(encoding="utf-8", errors="replace"))
        # Binary, media and unknown types are not read.
        return ParsedStructure()


def _parse_script(stem: str, content: str) -> ParsedStructure:
    exports = [m.group(1) for m in _JS_EXPORT_DECL.finditer(content)]
    for match in _JS_NAMED_EXPORTS.finditer(content):
        for raw in match.group(1).split(","):
            name = re.split(r"\s+as\s+", raw.strip())[0].strip()
            if name:
                exports.append(name)

    dependencies: list[str] = []
    related: list[str] = []
    specifiers = [m.group(1) for m in _JS_IMPORT_FROM.finditer(content)]
    specifiers += [m.group(1) for m in _JS_REQUIRE.finditer(content)]
    for module in specifiers:
        if module.startswith((".", "/")):
            related.append(os.path.basename(module.rstrip("/")))
        else:
            dependencies.append(module)

    summary = ""
    if exports:
        shown = ", ".join(exports[:3])
        more = " and more" if len(exports) > 3 else ""
        if any(re.search(r"Component|Widget", e) for e in exports):
            summary = f"{stem} - UI component, exports: {shown}{more}"
        elif any(re.search(r"Service|API|Client", e) for e in exports):
            summary = f"{stem} - service module, provides: {shown}{more}"
        elif any(re.search(r"util|helper|tool", e, re.IGNORECASE) for e in exports):
            summary = f"{stem} - utility functions: {shown}{more}"
        elif any(re.search(r"Type|Interface|Model", e) for e in exports):
            summary = f"{stem} - type definitions: {shown}{more}"
        else:
            summary = f"{stem} - module, exports: {shown}{more}"

    traits = ["contains tests"] if _JS_TEST_CALL.search(content) else []
    return ParsedStructure(summary, exports, dependencies, related, traits)


def _parse_python(stem: str, content: str) -> ParsedStructure:
    all_match = _PY_ALL.search(content)
    if all_match:
        exports = re.findall(r"['\"](\w+)['\"]", all_match.group(1))
    else:
        exports = [
            m.group(1) or m.group(2)
            for m in _PY_DEF.finditer(content)
            if not (m.group(1) or m.group(2)).startswith("_")
        ]

    dependencies: list[str] = []
    related: list[str] = []
    for match in _PY_IMPORT.finditer(content):
        for module in match.group(1).split(","):
            dependencies.append(module.strip().split(".")[0])
    for match in _PY_FROM.finditer(content):
        dots, module = match.groups()
        if dots:
            if module:
                related.append(module.split(".")[-1])
        elif module:
            dependencies.append(module.split(".")[0])

    summary = ""
    if exports:
        shown = ", ".join(exports[:3])
        more = " and more" if len(exports) > 3 else ""
        summary = f"{stem} - Python module, defines: {shown}{more}"

    traits = ["contains tests"] if _PY_TEST_DEF.search(content) else []
    return ParsedStructure(summary, exports, dependencies, related, traits)


def _parse_json(name: str, content: str) -> ParsedStructure:
    try:
        data: Any = json.loads(content)
    except json.JSONDecodeError:
        return ParsedStructure(summary="JSON file (malformed)")

    if not isinstance(data, dict):
        return ParsedStructure(summary="JSON data file")

    if name == "package.json":
        deps = {**(data.get("dependencies") or {}), **(data.get("devDependencies") or {})}
        summary = (
            f"{data.get('name') or 'Node.js project'} - "
            f"{data.get('description') or 'project configuration'}"
        )
        return ParsedStructure(
            summary=summary,
            exports=list(data.get("scripts") or {}),
            dependencies=list(deps),
        )
    if name == "tsconfig.json":
        return ParsedStructure(
            summary="TypeScript compiler configuration",
            exports=list(data.get("compilerOptions") or {}),
        )
    keys = list(data)[:5]
    return ParsedStructure(
        summary=f"JSON configuration with keys: {', '.join(keys)}" if keys else "Empty JSON object",
        exports=keys,
    )


def _parse_vue(content: str) -> ParsedStructure:
    exports: list[str] = []
    summary = "Vue component"
    name = _VUE_NAME.search(content)
    if name:
        exports.append(name.group(1))
        summary = f"Vue component: {name.group(1)}"
    props = _VUE_PROPS.search(content)
    if props:
        exports.extend(_VUE_PROP_KEY.findall(props.group(1)))

    dependencies: list[str] = []
    related: list[str] = []
    for match in _JS_IMPORT_FROM.finditer(content):
        module = match.group(1)
        if module.startswith("."):
            related.append(os.path.basename(module))
        else:
            dependencies.append(module)
    return ParsedStructure(summary, exports, dependencies, related)


def _parse_markdown(content: str) -> ParsedStructure:
    # Shell comments in fenced code look like headings.
    content = _MD_FENCE.sub("", content)
    headings = [h.strip() for h in _MD_HEADING.findall(content)][:MAX_MARKDOWN_ITEMS]
    summary = f"Document: {headings[0]}" if headings else "Markdown document"
    links = [text.strip() for text, _ in _MD_LINK.findall(content) if text.strip()]
    return ParsedStructure(
        summary=summary,
        exports=headings,
        related=links[:MAX_MARKDOWN_ITEMS],
    )
