# src/main.py - v2
"""CLI entry point.

Usage:
    smelltrack detect <path>
    smelltrack status
    smelltrack watch
    smelltrack wipe
    smelltrack forget <path>
    smelltrack filters list|enable|disable|enable-all|disable-all|set|reset
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from smelltrack.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="smelltrack",
        description=f"smelltrack v{__version__} - Cached code smell tracking",
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
        help="Workspace root (overrides WORKSPACE_ROOT)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- detect ---
    p_detect = subparsers.add_parser(
        "detect", help="Detect smells in a file or folder",
    )
    p_detect.add_argument("path", type=Path, help="File or folder to analyse")
    p_detect.set_defaults(func=_cmd_detect)

    # --- status ---
    p_status = subparsers.add_parser(
        "status", help="Show cached status of every known file",
    )
    p_status.set_defaults(func=_cmd_status)

    # --- watch ---
    p_watch = subparsers.add_parser(
        "watch", help="Watch the workspace and keep the cache consistent",
    )
    p_watch.set_defaults(func=_cmd_watch)

    # --- wipe ---
    p_wipe = subparsers.add_parser(
        "wipe", help="Delete every cached result for the workspace",
    )
    p_wipe.set_defaults(func=_cmd_wipe)

    # --- forget ---
    p_forget = subparsers.add_parser(
        "forget", help="Delete cached results for one path",
    )
    p_forget.add_argument("path", type=Path, help="File to forget")
    p_forget.set_defaults(func=_cmd_forget)

    # --- filters ---
    p_filters = subparsers.add_parser(
        "filters", help="Inspect or change enabled smells",
    )
    p_filters.add_argument(
        "-y", "--yes", action="store_true",
        help="Do not ask before invalidating cached results",
    )
    f_sub = p_filters.add_subparsers(dest="filters_command")

    f_list = f_sub.add_parser("list", help="List smells and their options")
    f_list.set_defaults(func=_cmd_filters_list)

    f_enable = f_sub.add_parser("enable", help="Enable one smell")
    f_enable.add_argument("key", help="Smell key, e.g. too-many-arguments")
    f_enable.set_defaults(func=_cmd_filters_enable, enabled=True)

    f_disable = f_sub.add_parser("disable", help="Disable one smell")
    f_disable.add_argument("key", help="Smell key")
    f_disable.set_defaults(func=_cmd_filters_enable, enabled=False)

    f_enable_all = f_sub.add_parser("enable-all", help="Enable every smell")
    f_enable_all.set_defaults(func=_cmd_filters_all, enabled=True)

    f_disable_all = f_sub.add_parser("disable-all", help="Disable every smell")
    f_disable_all.set_defaults(func=_cmd_filters_all, enabled=False)

    f_set = f_sub.add_parser("set", help="Change an analyzer option")
    f_set.add_argument("key", help="Smell key")
    f_set.add_argument("option", help="Option name, e.g. max_args")
    f_set.add_argument("value", help="New value")
    f_set.set_defaults(func=_cmd_filters_set)

    f_reset = f_sub.add_parser("reset", help="Restore the default smell catalogue")
    f_reset.set_defaults(func=_cmd_filters_reset)

    return parser


def _build_app(args: argparse.Namespace, confirm_changes: bool = False):
    """Load settings and build the component graph for one command."""
    from smelltrack.app import SmellTrackApp
    from smelltrack.config.settings import load_settings
    from smelltrack.logging.logger import setup_logging

    overrides: dict[str, object] = {}
    if args.workspace is not None:
        overrides["workspace_root"] = args.workspace
    settings = load_settings(**overrides)

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    confirm = _prompt_confirm if confirm_changes else None
    return SmellTrackApp.create(settings, confirm=confirm)


async def _prompt_confirm(message: str) -> str:
    """Interactive yes / no / don't-remind prompt for filter changes."""
    answer = await asyncio.to_thread(
        input, f"{message} [y]es / [n]o / [d]on't remind me again: "
    )
    choice = answer.strip().lower()[:1]
    if choice == "y":
        return "yes"
    if choice == "d":
        return "dont_remind"
    return "no"


async def _cmd_detect(args: argparse.Namespace) -> int:
    """Detect smells in a file or every matching file of a folder."""
    from smelltrack.core.models import FileStatus

    target: Path = args.path
    if not target.exists():
        logger.error("Path not found: %s", target)
        return 1

    app = _build_app(args)
    try:
        await app.start(watch=False)
        if target.is_dir():
            outcomes = await app.detection.detect_folder(target)
        else:
            outcomes = {str(target): await app.detection.detect_file(target)}

        for path, status in outcomes.items():
            _print_file(app, path, status)
    finally:
        await app.stop()

    failed = {FileStatus.FAILED, FileStatus.SERVER_DOWN}
    return 1 if any(status in failed for status in outcomes.values()) else 0


async def _cmd_status(args: argparse.Namespace) -> int:
    """Rebuild status from the cache and print it."""
    app = _build_app(args)
    try:
        summary = await app.start(watch=False)
        stats = await app.results.stats()
        print(f"\nWorkspace: {app.workspace_root or '(not configured)'}")
        print(f"  Backend:        {app.server_status.state.value}")
        print(f"  Cache entries:  {stats.entries}")
        print(f"  Known files:    {stats.known_paths}")
        print(f"  With findings:  {summary.with_findings}")
        print(f"  Clean:          {summary.clean}")
        print(f"  Outdated:       {summary.outdated}")
        print(f"  Removed:        {summary.removed}")
        for path, record in sorted(app.tracker.snapshot().items()):
            print(f"  {record.status.value:<12s} {record.smell_count:>3d}  {path}")
    finally:
        await app.stop()
    return 0


async def _cmd_watch(args: argparse.Namespace) -> int:
    """Watch until interrupted."""
    app = _build_app(args)
    try:
        summary = await app.start()
        if not app.engine.running:
            logger.error("Set WORKSPACE_ROOT or pass --workspace to watch")
            return 1
        logger.info("Bootstrapped %d file(s), watching for changes", summary.valid)
        await asyncio.Event().wait()
    finally:
        await app.stop()
    return 0


async def _cmd_wipe(args: argparse.Namespace) -> int:
    """Clear every cached result for the workspace."""
    app = _build_app(args)
    try:
        await app.results.clear_all()
        app.tracker.reset_all()
    finally:
        await app.stop()
    print("Cache wiped.")
    return 0


async def _cmd_forget(args: argparse.Namespace) -> int:
    """Clear cached results for one path, even if it no longer exists."""
    app = _build_app(args)
    try:
        removed = await app.results.clear_by_known_path(args.path)
        app.tracker.remove_file(args.path)
    finally:
        await app.stop()
    print(f"{'Forgot' if removed else 'Nothing cached for'} {args.path}")
    return 0


async def _cmd_filters_list(args: argparse.Namespace) -> int:
    """Print the smell catalogue with current flags and options."""
    app = _build_app(args)
    try:
        config = app.filters.configuration
        for key, smell in config.smells.items():
            flag = "x" if smell.enabled else " "
            print(f"[{flag}] {key:<24s} {smell.acronym:<5s} {smell.message_id:<7s} {smell.name}")
            for opt_key, opt in smell.analyzer_options.items():
                print(f"      {opt_key} = {opt.value!r}  ({opt.label})")
        if config.suppress_invalidation_warning:
            print("\nInvalidation warning suppressed.")
    finally:
        await app.stop()
    return 0


async def _cmd_filters_enable(args: argparse.Namespace) -> int:
    app = _build_app(args, confirm_changes=not args.yes)
    try:
        applied = await app.filters.set_enabled(args.key, args.enabled)
    except KeyError as e:
        logger.error("%s", e.args[0])
        return 1
    finally:
        await app.stop()
    return _report_filter_change(applied)


async def _cmd_filters_all(args: argparse.Namespace) -> int:
    app = _build_app(args, confirm_changes=not args.yes)
    try:
        applied = await app.filters.set_all_enabled(args.enabled)
    finally:
        await app.stop()
    return _report_filter_change(applied)


async def _cmd_filters_set(args: argparse.Namespace) -> int:
    app = _build_app(args, confirm_changes=not args.yes)
    try:
        applied = await app.filters.update_option(args.key, args.option, args.value)
    except KeyError as e:
        logger.error("%s", e.args[0])
        return 1
    except ValueError as e:
        logger.error("Invalid value for %s.%s: %s", args.key, args.option, e)
        return 1
    finally:
        await app.stop()
    return _report_filter_change(applied)


async def _cmd_filters_reset(args: argparse.Namespace) -> int:
    app = _build_app(args, confirm_changes=not args.yes)
    try:
        applied = await app.filters.reset_to_defaults()
    finally:
        await app.stop()
    return _report_filter_change(applied)


def _report_filter_change(applied: bool) -> int:
    print("Filters updated, cached results invalidated." if applied else "No change.")
    return 0


def _print_file(app: object, path: str, status: object) -> None:
    """Print one file's status and its findings."""
    if status is None:
        print(f"  skipped       {path}")
        return
    print(f"  {status.value:<13s} {path}")
    for smell in app.tracker.get_smells(path) or []:
        lines = ",".join(str(o.line) for o in smell.occurrences)
        print(f"      {smell.symbol} ({smell.message_id}) line {lines}: {smell.message}")


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage until settings are loaded."""
    from smelltrack.logging.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else "INFO")


def entry() -> None:
    """Console script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    entry()
