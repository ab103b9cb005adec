"""Main CLI entry point for pipegif."""

from __future__ import annotations

import argparse
import logging
import sys

from .. import __version__
from .render_cli import build_render_parser
from .scan_cli import build_scan_parser


def _configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pipegif",
        description="Split a stream of concatenated PNG images into an animation",
    )
    parser.add_argument("--version", action="version", version=f"pipegif {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log progress (-v) or every frame (-vv) to stderr",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true",
        help="Only log errors",
    )
    subparsers = parser.add_subparsers(dest="command")
    build_render_parser(subparsers)
    build_scan_parser(subparsers)
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)
    if args.command is None:
        parser.print_help()
        return 0
    return args.func(args)


def cli_entry() -> None:
    sys.exit(main())
