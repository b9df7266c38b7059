# src/pipeline/analyzers/heuristic.py - v1
"""Tier 1: name, path and extension based classification.

Sub-millisecond and side-effect free apart from one ``stat`` call to tell
files from directories. Rules are checked in priority order (exact file
name, then path keywords, then extension) and the first match wins.
"""

from __future__ import annotations

import os
import re
import stat
from typing import NamedTuple

from aiexplorer.core.models import AnalysisResult, Tier
from aiexplorer.pipeline.plugin_kit.base_analyzer import BaseAnalyzer


class Classification(NamedTuple):
    summary: str
    roles: tuple[str, ...]
    language: str | None = None


# --- Exact file names (lowercase) ---

_EXACT_FILES: dict[str, Classification] = {
    "package.json": Classification("Node.js project manifest", ("config",), "json"),
    "package-lock.json": Classification("npm dependency lock file", ("config",), "json"),
    "tsconfig.json": Classification("TypeScript compiler configuration", ("config",), "json"),
    "pyproject.toml": Classification("Python project configuration", ("config",), "toml"),
    "setup.py": Classification("Python packaging script", ("config",), "python"),
    "requirements.txt": Classification("Python dependency list", ("config",)),
    "cargo.toml": Classification("Rust crate manifest", ("config",), "toml"),
    "go.mod": Classification("Go module definition", ("config",), "go"),
    "webpack.config.js": Classification("Webpack bundler configuration", ("config",), "javascript"),
    "vite.config.js": Classification("Vite build configuration", ("config",), "javascript"),
    "vite.config.ts": Classification("Vite build configuration", ("config",), "typescript"),
    "rollup.config.js": Classification("Rollup bundler configuration", ("config",), "javascript"),
    "jest.config.js": Classification("Jest test framework configuration", ("config",), "javascript"),
    ".eslintrc.js": Classification("ESLint lint configuration", ("config",), "javascript"),
    ".prettierrc": Classification("Prettier formatting configuration", ("config",), "json"),
    ".gitignore": Classification("Git ignore rules", ("config",)),
    ".gitattributes": Classification("Git attributes configuration", ("config",)),
    ".env": Classification("Environment variables", ("config",)),
    ".env.example": Classification("Environment variables template", ("config",)),
    "dockerfile": Classification("Docker image definition", ("config",)),
    "docker-compose.yml": Classification("Docker Compose configuration", ("config",), "yaml"),
    "makefile": Classification("Make build script", ("script",)),
    "readme.md": Classification("Project readme", ("document",), "markdown"),
    "changelog.md": Classification("Change log", ("document",), "markdown"),
    "contributing.md": Classification("Contribution guide", ("document",), "markdown"),
    "license": Classification("Open source license", ("document",)),
}

# --- Path keywords, checked against the file name and parent directories ---

_TEST_TOKENS = frozenset({"test", "tests", "spec", "specs", "conftest", "__tests__"})
_CONFIG_TOKENS = frozenset({"config", "configs", "conf", "setting", "settings"})

# --- Extensions ---

_EXTENSION_LANGUAGES: dict[str, str] = {
    ".js": "javascript", ".mjs": "javascript", ".cjs": "javascript",
    ".jsx": "javascript", ".ts": "typescript", ".tsx": "typescript",
    ".vue": "vue", ".py": "python", ".java": "java", ".rs": "rust",
    ".go": "go", ".php": "php", ".rb": "ruby", ".css": "css",
    ".scss": "scss", ".sass": "sass", ".less": "less", ".html": "html",
    ".htm": "html", ".md": "markdown", ".markdown": "markdown",
    ".json": "json", ".yml": "yaml", ".yaml": "yaml", ".toml": "toml",
    ".sql": "sql", ".sh": "shell", ".c": "c", ".h": "c", ".cpp": "cpp",
    ".cs": "csharp", ".kt": "kotlin", ".swift": "swift",
}

_EXTENSION_RULES: dict[str, Classification] = {
    ".jsx": Classification("React component", ("component",), "javascript"),
    ".tsx": Classification("React component", ("component",), "typescript"),
    ".vue": Classification("Vue component", ("component",), "vue"),
    ".css": Classification("Stylesheet", ("style",), "css"),
    ".scss": Classification("Stylesheet", ("style",), "scss"),
    ".sass": Classification("Stylesheet", ("style",), "sass"),
    ".less": Classification("Stylesheet", ("style",), "less"),
    ".html": Classification("HTML page", ("page",), "html"),
    ".htm": Classification("HTML page", ("page",), "html"),
    ".md": Classification("Markdown document", ("document",), "markdown"),
    ".markdown": Classification("Markdown document", ("document",), "markdown"),
    ".rst": Classification("reStructuredText document", ("document",)),
    ".txt": Classification("Plain text file", ("document",)),
    ".json": Classification("JSON data file", ("config",), "json"),
    ".yml": Classification("YAML configuration", ("config",), "yaml"),
    ".yaml": Classification("YAML configuration", ("config",), "yaml"),
    ".toml": Classification("TOML configuration", ("config",), "toml"),
    ".ini": Classification("INI configuration", ("config",)),
    ".sql": Classification("SQL database script", ("script",), "sql"),
    ".sh": Classification("Shell script", ("script",), "shell"),
    ".py": Classification("Python module", ("source",), "python"),
    ".java": Classification("Java class", ("class",), "java"),
    ".kt": Classification("Kotlin source file", ("source",), "kotlin"),
    ".rs": Classification("Rust source file", ("source",), "rust"),
    ".go": Classification("Go source file", ("source",), "go"),
    ".c": Classification("C source file", ("source",), "c"),
    ".h": Classification("C header file", ("types",), "c"),
    ".cpp": Classification("C++ source file", ("source",), "cpp"),
    ".cs": Classification("C# source file", ("source",), "csharp"),
    ".swift": Classification("Swift source file", ("source",), "swift"),
    ".php": Classification("PHP script", ("script",), "php"),
    ".rb": Classification("Ruby script", ("script",), "ruby"),
    ".pdf": Classification("PDF document", ("document",)),
}

_MEDIA_KINDS: dict[str, frozenset[str]] = {
    "Image file": frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp", ".svg"}),
    "Video file": frozenset({".mp4", ".mov", ".avi", ".mkv", ".webm"}),
    "Audio file": frozenset({".mp3", ".wav", ".flac", ".ogg"}),
    "Font file": frozenset({".woff", ".woff2", ".ttf", ".otf"}),
    "Archive": frozenset({".zip", ".tar", ".gz", ".7z", ".rar"}),
}

# --- Directory keywords, first match wins ---

_DIRECTORY_RULES: tuple[tuple[frozenset[str], Classification], ...] = (
    (_TEST_TOKENS, Classification("Test directory", ("test",))),
    (frozenset({"doc", "docs", "documentation"}), Classification("Documentation directory", ("document",))),
    (_CONFIG_TOKENS, Classification("Configuration directory", ("config",))),
    (frozenset({"asset", "assets", "resource", "resources", "static", "public", "media", "images"}),
     Classification("Static assets directory", ("asset",))),
    (frozenset({"build", "dist", "out", "target"}), Classification("Build output directory", ("build",))),
    (frozenset({"script", "scripts", "bin"}), Classification("Scripts directory", ("script",))),
    (frozenset({"src", "source", "sources"}), Classification("Source code directory", ("source",))),
    (frozenset({"lib", "libs", "library", "vendor"}), Classification("Library directory", ("library",))),
    (frozenset({"util", "utils", "helper", "helpers", "tool", "tools"}),
     Classification("Utilities directory", ("utility",))),
    (frozenset({"component", "components", "widget", "widgets", "ui"}),
     Classification("UI components directory", ("component",))),
    (frozenset({"service", "services", "api", "server"}), Classification("Service layer directory", ("service",))),
    (frozenset({"model", "models", "entity", "entities", "schema", "schemas", "types"}),
     Classification("Data model directory", ("types",))),
)

_TOKEN_SPLIT = re.compile(r"[^a-z0-9_]+|_(?=[a-z0-9])")


def tokens(name: str) -> set[str]:
    """Split a lowercase name into keyword tokens ('test_api.py' -> {test, api, py})."""
    parts = {p for p in _TOKEN_SPLIT.split(name.lower()) if p}
    parts.add(name.lower())
    return parts


def language_for(ext: str) -> str | None:
    return _EXTENSION_LANGUAGES.get(ext.lower())


class HeuristicAnalyzer(BaseAnalyzer):
    """Fast classification from the path alone."""

    @property
    def tier(self) -> Tier:
        return "heuristic"

    @property
    def version(self) -> str:
        return "v1"

    async def analyze(
        self, target: str, previous: AnalysisResult | None = None
    ) -> AnalysisResult:
        classification = self.classify(target)
        return AnalysisResult(
            target=target,
            summary=classification.summary,
            roles=set(classification.roles),
            language=classification.language,
            schema_version=self.schema_version,
            tier=self.tier,
        )

    def classify(self, target: str) -> Classification:
        name = os.path.basename(os.path.normpath(target))
        if _is_directory(target):
            return self._classify_directory(name)
        return self._classify_file(target, name)

    @staticmethod
    def _classify_directory(name: str) -> Classification:
        name_tokens = tokens(name)
        for keywords, classification in _DIRECTORY_RULES:
            if name_tokens & keywords:
                return classification
        return Classification("Directory", ())

    def _classify_file(self, target: str, name: str) -> Classification:
        lower = name.lower()
        ext = os.path.splitext(lower)[1]
        language = language_for(ext)

        # 1. exact file name
        exact = _EXACT_FILES.get(lower)
        if exact is not None:
            return exact

        # 2. path keywords: file name tokens, then parent directory names
        stem_tokens = tokens(os.path.splitext(lower)[0])
        parent_names = [p.lower() for p in re.split(r"[\\/]+", os.path.dirname(target)) if p]
        if stem_tokens & _TEST_TOKENS or lower.startswith("test") or any(
            p in _TEST_TOKENS for p in parent_names
        ):
            return Classification("Test file", ("test",), language)
        if stem_tokens & _CONFIG_TOKENS or ".conf." in lower:
            return Classification("Configuration module", ("config",), language)

        # 3. extension
        if ext in (".js", ".ts", ".mjs", ".cjs"):
            return self._classify_script_module(lower, language or "javascript")
        rule = _EXTENSION_RULES.get(ext)
        if rule is not None:
            return rule
        for kind, extensions in _MEDIA_KINDS.items():
            if ext in extensions:
                return Classification(kind, ("asset",))
        return Classification(f"{ext or 'Unknown type'} file", (), language)

    @staticmethod
    def _classify_script_module(lower: str, language: str) -> Classification:
        stem = os.path.splitext(lower)[0]
        if "util" in stem or "helper" in stem:
            return Classification("Utility functions module", ("utility",), language)
        if "service" in stem or "api" in stem:
            return Classification("Service layer logic", ("service",), language)
        if "component" in stem or "widget" in stem:
            return Classification("Component module", ("component",), language)
        if "model" in stem or "entity" in stem or "type" in stem:
            return Classification("Data model definitions", ("types",), language)
        if "router" in stem or "route" in stem:
            return Classification("Route configuration", ("config",), language)
        if stem in ("index", "main", "app", "extension"):
            return Classification("Entry point", ("entry",), language)
        label = "TypeScript" if language == "typescript" else "JavaScript"
        return Classification(f"{label} module", (), language)


def _is_directory(target: str) -> bool:
    """Stat the target; if that fails, a name without extension is a directory
    unless it is a well-known extensionless file (Dockerfile, LICENSE)."""
    try:
        return stat.S_ISDIR(os.stat(target).st_mode)
    except (OSError, ValueError):
        name = os.path.basename(os.path.normpath(target)).lower()
        return name not in _EXACT_FILES and not os.path.splitext(name)[1]
