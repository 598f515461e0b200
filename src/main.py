# src/main.py — v2
"""CLI entry point — import, reset-cache, status commands.

Usage:
    ink2md import [--config PATH] [--output-root DIR]
    ink2md reset-cache [--source ID]
    ink2md status
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from ink2md.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
    except Exception as exc:
        print(f"Invalid settings: {exc}", file=sys.stderr)
        return 1
    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="ink2md",
        description=f"Ink2MD v{__version__} — handwritten notes to Markdown",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="Import configuration JSON (default: CONFIG_PATH setting)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- import ---
    p_import = subparsers.add_parser(
        "import", help="Import new or changed notes from every configured source",
    )
    p_import.add_argument(
        "-o", "--output-root", type=Path, default=None,
        help="Vault directory output folders are resolved against",
    )
    p_import.set_defaults(func=_cmd_import)

    # --- reset-cache ---
    p_reset = subparsers.add_parser(
        "reset-cache", help="Forget fingerprints so sources are re-imported",
    )
    p_reset.add_argument(
        "--source", default=None,
        help="Only reset records owned by this source configuration id",
    )
    p_reset.set_defaults(func=_cmd_reset_cache)

    # --- status ---
    p_status = subparsers.add_parser(
        "status", help="Show configured sources and cached fingerprints",
    )
    p_status.set_defaults(func=_cmd_status)

    return parser


def _load_settings(args: argparse.Namespace):
    from ink2md.config.settings import Settings

    overrides: dict[str, object] = {}
    if args.config is not None:
        overrides["config_path"] = args.config
    if getattr(args, "output_root", None) is not None:
        overrides["output_root"] = args.output_root
    return Settings(**overrides)


async def _cmd_import(args: argparse.Namespace, settings) -> int:
    """Run one import; Ctrl+C requests a cooperative cancel."""
    from ink2md.pipeline.orchestrator import ImportExecutor

    executor = ImportExecutor(settings, notify=lambda message: print(message))

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, executor.request_cancel)
    except (NotImplementedError, RuntimeError):
        logger.debug("Signal handlers unavailable; Ctrl+C will abort immediately")

    try:
        result = await executor.start_import()
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass

    print(f"\nImport {result.status}:")
    print(f"  Imported:  {result.imported}")
    print(f"  Unchanged: {result.skipped}")
    print(f"  Failed:    {result.failed}")
    if result.status in ("configuration_required", "already_running"):
        return 1
    return 0


async def _cmd_reset_cache(args: argparse.Namespace, settings) -> int:
    """Delete fingerprint records (all, or for one source configuration)."""
    from ink2md.cache.cache_factory import create_cache_store

    store = create_cache_store(settings)
    removed = await store.reset(args.source)
    scope = f" for source {args.source!r}" if args.source else ""
    print(f"Removed {removed} fingerprint record(s){scope}.")
    return 0


async def _cmd_status(args: argparse.Namespace, settings) -> int:
    """Display configured sources and fingerprint counts."""
    from ink2md.cache.cache_factory import create_cache_store
    from ink2md.config.sources import load_import_config

    config = load_import_config(settings.resolved_config_path)
    entries = await create_cache_store(settings).list_entries()

    print(f"\nConfiguration: {settings.resolved_config_path}")
    print(f"Output root:   {settings.resolved_output_root}")
    print(f"Cache:         {settings.cache_backend} ({len(entries)} record(s))")
    for source in config.sources:
        owned = sum(1 for record in entries.values() if record.source_id == source.id)
        preset = config.find_preset(source.llm_preset_id)
        preset_label = preset.label if preset else "<none>"
        print(f"\n  [{source.id}] {source.label}")
        print(f"    Directories: {', '.join(source.directories) or '<none>'}")
        print(f"    Preset:      {preset_label}")
        print(f"    Conflicts:   {source.conflict_policy}")
        print(f"    Cached:      {owned}")
    return 0


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from ink2md.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
