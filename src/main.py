# src/main.py - v2
"""CLI entry point: analyze, summary, related, stats and cache commands.

Usage:
    aiexplorer analyze <path> [--force] [--quick]
    aiexplorer summary <path>
    aiexplorer related <path>
    aiexplorer stats | clear-cache [path] | cleanup | backends

Results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from aiexplorer.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="aiexplorer",
        description=f"aiexplorer v{__version__} - progressive file and directory analyzer",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "-w", "--workspace", type=Path, default=None,
        help="Workspace root holding the cache and prompts (default: from .env or .)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- analyze ---
    p_analyze = subparsers.add_parser("analyze", help="Analyze a file or directory")
    p_analyze.add_argument("path", help="Target path")
    p_analyze.add_argument(
        "--force", action="store_true", help="Ignore the cached result",
    )
    p_analyze.add_argument(
        "--quick", action="store_true",
        help="Return the cached or heuristic result without waiting for deeper tiers",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- summary ---
    p_summary = subparsers.add_parser("summary", help="Show the cached result only")
    p_summary.add_argument("path", help="Target path")
    p_summary.set_defaults(func=_cmd_summary)

    # --- related ---
    p_related = subparsers.add_parser("related", help="List entries related to a target")
    p_related.add_argument("path", help="Target path")
    p_related.set_defaults(func=_cmd_related)

    # --- cache management ---
    p_stats = subparsers.add_parser("stats", help="Show cache statistics")
    p_stats.set_defaults(func=_cmd_stats)

    p_clear = subparsers.add_parser("clear-cache", help="Clear one entry or the whole cache")
    p_clear.add_argument("path", nargs="?", default=None, help="Target path (default: all)")
    p_clear.set_defaults(func=_cmd_clear_cache)

    p_cleanup = subparsers.add_parser("cleanup", help="Remove expired cache entries")
    p_cleanup.set_defaults(func=_cmd_cleanup)

    # --- backends ---
    p_backends = subparsers.add_parser("backends", help="Show model backend health")
    p_backends.set_defaults(func=_cmd_backends)

    return parser


async def _run(args: argparse.Namespace) -> int:
    from aiexplorer.api.facade import create_orchestrator
    from aiexplorer.config.settings import load_settings
    from aiexplorer.logging.logger import setup_logging

    overrides: dict[str, Any] = {}
    if args.workspace is not None:
        overrides["workspace_root"] = args.workspace
    settings = load_settings(**overrides)

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    orchestrator = create_orchestrator(settings)
    try:
        return await args.func(orchestrator, args)
    finally:
        await orchestrator.aclose()


async def _cmd_analyze(orchestrator: Any, args: argparse.Namespace) -> int:
    if args.quick:
        result = await orchestrator.quick_analyze(args.path)
    else:
        result = await orchestrator.analyze(args.path, force_refresh=args.force)
    _print_json(result.model_dump(mode="json"))
    return 1 if result.is_degenerate else 0


async def _cmd_summary(orchestrator: Any, args: argparse.Namespace) -> int:
    result = await orchestrator.get_cached(args.path)
    if result is None:
        logger.error("No cached analysis for %s", args.path)
        return 1
    _print_json(result.model_dump(mode="json"))
    return 0


async def _cmd_related(orchestrator: Any, args: argparse.Namespace) -> int:
    _print_json(await orchestrator.list_related(args.path))
    return 0


async def _cmd_stats(orchestrator: Any, args: argparse.Namespace) -> int:
    stats = await orchestrator.get_stats()
    _print_json(stats.model_dump())
    return 0


async def _cmd_clear_cache(orchestrator: Any, args: argparse.Namespace) -> int:
    await orchestrator.clear_cache(args.path)
    _print_json({"cleared": args.path or "all"})
    return 0


async def _cmd_cleanup(orchestrator: Any, args: argparse.Namespace) -> int:
    removed = await orchestrator.cleanup_cache()
    _print_json({"removed": removed})
    return 0


async def _cmd_backends(orchestrator: Any, args: argparse.Namespace) -> int:
    _print_json([s.model_dump(mode="json") for s in orchestrator.router_status()])
    return 0


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, sort_keys=True))


if __name__ == "__main__":
    sys.exit(main())
