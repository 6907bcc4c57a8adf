"""Command-line front door for vicline.

Parses CLI options, merges them over the persisted settings and dispatches
into the interactive listing runtime.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from .runtime import run_app
from .runtime.config import Settings, load_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _nonnegative_int(value: str) -> int:
    """argparse type for non-negative integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse a directory with vi-style command line, search and filter."
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to open. Defaults to current directory.")
    parser.add_argument(
        "--timeout",
        type=_nonnegative_int,
        default=None,
        metavar="MS",
        help="Milliseconds to wait before resolving an ambiguous key sequence.",
    )
    parser.add_argument(
        "--inc-search",
        action="store_true",
        default=None,
        help="Move through the listing while typing search and filter patterns.",
    )
    parser.add_argument(
        "--no-wrap-scan",
        dest="wrap_scan",
        action="store_false",
        default=None,
        help="Stop searches at the ends of the listing.",
    )
    parser.add_argument(
        "--history-size",
        type=_nonnegative_int,
        default=None,
        metavar="N",
        help="Entries kept per history category (0 disables history).",
    )
    parser.add_argument("--log-file", default=None, help="Write debug logs to this file.")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return ``settings`` with explicitly passed CLI flags applied."""
    changes: dict[str, object] = {}
    if args.timeout is not None:
        changes["timeout_ms"] = args.timeout
    if args.inc_search is not None:
        changes["inc_search"] = args.inc_search
    if args.wrap_scan is not None:
        changes["wrap_scan"] = args.wrap_scan
    if args.history_size is not None:
        changes["history_size"] = args.history_size
        changes["history_sizes"] = {}
    return replace(settings, **changes)


def configure_logging(log_file: str | None) -> None:
    # The terminal is in raw mode; logs only ever go to a file.
    if log_file is None:
        return
    logging.basicConfig(filename=log_file, level=logging.DEBUG, format=LOG_FORMAT)


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch vicline on a directory.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file)

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path or default_path)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    directory = path if path.is_dir() else path.parent

    settings = apply_overrides(load_settings(), args)
    run_app(directory, settings)


if __name__ == "__main__":
    main()
