"""
CLI command for listing the frames found in a stream without encoding.

Usage:
    pipegif scan frames.bin
    pipegif scan frames.bin --window-size 8192
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ..driver import Driver
from ..exceptions import DecodeError, FrameTooLargeError, PipeGifError
from .render_cli import add_stream_arguments, build_config, open_input


def cmd_scan(args: argparse.Namespace) -> int:
    """Main handler for ``pipegif scan``."""
    if args.input != "-" and not Path(args.input).is_file():
        print(f"Error: file not found: {args.input}", file=sys.stderr)
        return 1

    try:
        config = build_config(args)
    except PipeGifError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"  {'Frame':>5}  {'Offset':>10}  {'Size':>11}  Mode")
    try:
        with open_input(args.input) as source:
            driver = Driver(source, config)
            for frame in driver.iter_frames():
                w, h = frame.size
                print(f"  {frame.index:>5}  {frame.offset:>10}  {f'{w}x{h}':>11}  {frame.image.mode}")
    except (FrameTooLargeError, DecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except PipeGifError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: I/O error: {exc}", file=sys.stderr)
        return 1

    print(
        f"{driver.frame_count} frames, {driver.bytes_consumed} bytes scanned, "
        f"{driver.trailing_bytes} trailing"
    )
    return 0


def build_scan_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``scan`` subcommand and its arguments."""
    p = subparsers.add_parser(
        "scan",
        help="List the frames found in a stream",
        description="Demux and decode a concatenated image stream, printing one line per frame.",
    )
    p.add_argument(
        "input",
        help="Input stream file, or - for stdin",
    )
    add_stream_arguments(p)
    p.set_defaults(func=cmd_scan)
