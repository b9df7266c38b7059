# tests/unit/test_main.py - v1
"""Tests for main.py - argument parsing and command dispatch."""

from __future__ import annotations

import json
import logging

import pytest

from aiexplorer.main import _build_parser, main
from aiexplorer.version import __version__


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Isolated workspace: no .env, no model calls, logging restored after."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MODEL_ENABLED", "false")
    monkeypatch.setenv("CACHE_BACKEND", "jsonl")
    monkeypatch.setenv("CACHE_FLUSH_DEBOUNCE_S", "0.01")
    yield tmp_path
    root = logging.getLogger("aiexplorer")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


def _json_out(capsys):
    return json.loads(capsys.readouterr().out)


class TestParser:
    def test_analyze_flags(self):
        args = _build_parser().parse_args(["-v", "-w", "/ws", "analyze", "src/app.py", "--force"])
        assert args.command == "analyze"
        assert args.path == "src/app.py"
        assert args.force is True
        assert args.quick is False
        assert args.verbose is True
        assert str(args.workspace) == "/ws"

    def test_clear_cache_path_optional(self):
        assert _build_parser().parse_args(["clear-cache"]).path is None
        assert _build_parser().parse_args(["clear-cache", "a.py"]).path == "a.py"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()


class TestCommands:
    def test_stats_empty(self, workspace, capsys):
        assert main(["-w", str(workspace), "stats"]) == 0
        assert _json_out(capsys) == {"heuristic": 0, "model": 0, "structural": 0, "total": 0}

    def test_analyze_then_summary(self, workspace, capsys):
        target = workspace / "app.py"
        target.write_text("import os\n\ndef run():\n    pass\n", encoding="utf-8")

        assert main(["-w", str(workspace), "analyze", str(target)]) == 0
        analyzed = _json_out(capsys)
        assert analyzed["tier"] == "structural"
        assert analyzed["exports"] == ["run"]

        # A fresh process sees the persisted result.
        assert main(["-w", str(workspace), "summary", str(target)]) == 0
        assert _json_out(capsys)["summary"] == analyzed["summary"]
        assert (workspace / "analysis" / ".ai").is_dir()

    def test_quick_analyze(self, workspace, capsys):
        target = workspace / "readme.md"
        target.write_text("# Demo\n", encoding="utf-8")
        assert main(["-w", str(workspace), "analyze", "--quick", str(target)]) == 0
        assert _json_out(capsys)["tier"] == "heuristic"

    def test_summary_miss(self, workspace, capsys):
        assert main(["-w", str(workspace), "summary", str(workspace / "nope.py")]) == 1

    def test_related(self, workspace, capsys):
        target = workspace / "index.ts"
        target.write_text("import { a } from './alpha';\nexport const x = 1;\n", encoding="utf-8")
        assert main(["-w", str(workspace), "related", str(target)]) == 0
        assert _json_out(capsys) == ["alpha"]

    def test_clear_and_cleanup(self, workspace, capsys):
        assert main(["-w", str(workspace), "clear-cache"]) == 0
        assert _json_out(capsys) == {"cleared": "all"}
        assert main(["-w", str(workspace), "cleanup"]) == 0
        assert _json_out(capsys) == {"removed": 0}

    def test_backends(self, workspace, capsys):
        assert main(["-w", str(workspace), "backends"]) == 0
        roles = [b["role"] for b in _json_out(capsys)]
        assert roles == ["primary", "secondary"]

    def test_fatal_error_exit_code(self, workspace, monkeypatch):
        def boom(settings):
            raise RuntimeError("wiring failed")

        monkeypatch.setattr("aiexplorer.api.facade.create_orchestrator", boom)
        assert main(["-w", str(workspace), "stats"]) == 1
