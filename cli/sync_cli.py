"""Command-line entry point for assetsync."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from assetsync.config import Settings
from assetsync.exceptions import SyncError
from assetsync.services.sync_service import run_sync
from assetsync.upload.registry import SyncTarget, get_strategy, list_targets

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Configure CLI logging."""
    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stderr,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetsync",
        description="Upload assets and generate Lua code that references them",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")
    sync_parser = subparsers.add_parser("sync", help="Upload changed assets and run codegen")
    sync_parser.add_argument(
        "--target",
        "-t",
        choices=list_targets(),
        default=SyncTarget.ROBLOX.value,
        help="Where to upload assets (default: roblox)",
    )
    sync_parser.add_argument(
        "--config",
        "-c",
        dest="config_path",
        help="Config file or folder containing assetsync.toml (default: current directory)",
    )
    sync_parser.add_argument(
        "--auth",
        help="Authentication credential for the asset store (default: $ASSETSYNC_AUTH)",
    )
    # SUPPRESS keeps the subcommand from resetting a top-level --verbose
    sync_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable debug logging",
    )
    return parser


def sync_command(args: argparse.Namespace, settings: Settings) -> None:
    config_path = Path(args.config_path) if args.config_path else Path.cwd()
    strategy = get_strategy(SyncTarget(args.target), settings, auth=args.auth)
    try:
        result = run_sync(config_path, strategy)
    finally:
        strategy.close()

    stats = result.stats
    print(
        f"Sync complete. {stats.uploaded} uploaded, {stats.reused} unchanged, "
        f"{stats.skipped} skipped."
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Error: invalid settings: {exc}")
        sys.exit(1)
    _configure_logging(args.verbose or settings.debug)

    if args.command != "sync":
        parser.print_help()
        return

    try:
        sync_command(args, settings)
    except SyncError as exc:
        logger.debug("Sync failed", exc_info=True)
        print(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
