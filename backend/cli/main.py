"""
Cargomon Command Line Interface.

Watches a Cargo project, rebuilds on change and runs the result.
Requires Python 3.11+.

Usage:
    cargomon [--path DIR] [--debounce SECONDS]
    cargomon help
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from pipeline.control_loop import ControlLoop
from pipeline.relay import OutputRelay
from utils.config import WatchConfig, get_settings
from utils.errors import WatchSetupError
from utils.logger import configure_logging, get_logger
from watcher.file_watcher import ChangeWatcher


DESCRIPTION = (
    "Watch a project directory, rebuild with cargo when files change, "
    "and run the built executable."
)


def _non_negative_seconds(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if seconds < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="cargomon", description=DESCRIPTION)
    parser.add_argument(
        "command",
        nargs="?",
        choices=["help"],
        help="Print this usage text and exit",
    )
    parser.add_argument(
        "--path",
        type=Path,
        default=None,
        help=f"Directory to watch (default: {settings.watcher.root_path})",
    )
    parser.add_argument(
        "--debounce",
        type=_non_negative_seconds,
        default=None,
        help=(
            "Minimum seconds between rebuilds "
            f"(default: {settings.watcher.debounce_seconds:g})"
        ),
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Directory containing the manifest (default: the watched directory)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Diagnostic log level (default: {settings.logging.level})",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the cargomon command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "help":
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(args.log_level)
    logger = get_logger("cargomon")

    config = WatchConfig.from_settings(
        settings,
        root_path=args.path,
        debounce_interval=args.debounce,
        project_root=args.project_root,
    )
    relay = OutputRelay(color=settings.output.color and not args.no_color)
    watcher = ChangeWatcher(
        root_path=config.root_path,
        recursive=settings.watcher.recursive,
        ignore_patterns=settings.watcher.ignore_patterns,
        ignore_dirs=[config.project_root / settings.build.output_dir],
    )

    try:
        watcher.start()
    except WatchSetupError as e:
        logger.error("watch_setup_failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    loop = ControlLoop(
        config=config,
        source=watcher,
        relay=relay,
        build_settings=settings.build,
        run_timeout=settings.run.timeout_seconds,
    )
    try:
        loop.run_forever()
    except KeyboardInterrupt:
        relay.stopped()
    finally:
        watcher.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
