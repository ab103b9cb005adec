"""
CLI command for turning a concatenated image stream into an animation.

Usage:
    pipegif render frames.bin out.gif --fps 10
    some-renderer | pipegif render - out.png --format apng --window-size 4096
"""

from __future__ import annotations

import argparse
import contextlib
import dataclasses
import io
import sys
from pathlib import Path
from typing import BinaryIO, Iterator

from ..config import DemuxConfig, delay_from_fps, load_config, signature_from_hex
from ..driver import render_stream
from ..exceptions import (
    DecodeError,
    EmptySequenceError,
    FrameTooLargeError,
    PipeGifError,
)
from ..types import OutputFormat


_FORMAT_MAP = {
    "gif": OutputFormat.GIF,
    "apng": OutputFormat.APNG,
}


@contextlib.contextmanager
def open_input(path: str) -> Iterator[BinaryIO]:
    """Open *path* for binary reading; ``-`` means stdin."""
    if path == "-":
        yield sys.stdin.buffer
        return
    with open(path, "rb") as fh:
        yield fh


def write_output(path: str, data: bytes) -> None:
    """Write *data* to *path* in one go; ``-`` means stdout."""
    if path == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        Path(path).write_bytes(data)


def build_config(args: argparse.Namespace) -> DemuxConfig:
    """Combine an optional YAML config file with command-line overrides."""
    base = load_config(args.config) if getattr(args, "config", None) else DemuxConfig()
    delay_ms = getattr(args, "delay", None)
    fps = getattr(args, "fps", None)
    if fps is not None:
        delay_ms = delay_from_fps(fps)
    signature = signature_from_hex(args.signature) if args.signature else None
    fmt = getattr(args, "format", None)
    config = base.merged(
        signature=signature,
        window_size=args.window_size,
        delay_ms=delay_ms,
        loop_count=getattr(args, "loop", None),
        output_format=_FORMAT_MAP[fmt] if fmt else None,
        keep_partial=True if getattr(args, "keep_partial", False) else None,
    )
    if args.any_format:
        config = dataclasses.replace(config, image_formats=None)
    return config.validate()


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def cmd_render(args: argparse.Namespace) -> int:
    """Main handler for ``pipegif render``."""
    if args.input != "-" and not Path(args.input).is_file():
        return _error(f"file not found: {args.input}")

    try:
        config = build_config(args)
    except PipeGifError as exc:
        return _error(str(exc))

    buffer = io.BytesIO()
    try:
        with open_input(args.input) as source:
            result = render_stream(source, buffer, config)
    except FrameTooLargeError as exc:
        return _error(f"{exc} Retry with a larger --window-size.")
    except DecodeError as exc:
        partial = buffer.getvalue()
        if partial:
            write_output(args.output, partial)
            return _error(f"{exc} ({len(exc.frames)} frames written)")
        return _error(f"{exc} ({len(exc.frames)} frames decoded before the failure)")
    except EmptySequenceError:
        return _error(f"no frames found in {args.input}")
    except PipeGifError as exc:
        return _error(str(exc))
    except OSError as exc:
        return _error(f"I/O error: {exc}")

    try:
        write_output(args.output, buffer.getvalue())
    except OSError as exc:
        return _error(f"cannot write {args.output}: {exc}")

    summary = sys.stderr if args.output == "-" else sys.stdout
    print(f"{result.frame_count} frames rendered", file=summary)
    return 0


def add_stream_arguments(p: argparse.ArgumentParser) -> None:
    """Options shared by every command that demuxes an input stream."""
    p.add_argument(
        "--config", default=None,
        help="YAML file with default settings (command-line flags win)",
    )
    p.add_argument(
        "--window-size", type=int, default=None,
        help="Lookahead window in bytes (default: 1024)",
    )
    p.add_argument(
        "--signature", default=None,
        help="Frame signature as hex (default: PNG, 89 50 4E 47 0D 0A 1A 0A)",
    )
    p.add_argument(
        "--any-format", action="store_true",
        help="Accept any image format Pillow can identify, not just PNG",
    )


def build_render_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``render`` subcommand and its arguments."""
    p = subparsers.add_parser(
        "render",
        help="Render a concatenated image stream into an animation",
        description="Split a stream of back-to-back images and encode them as an animated GIF or APNG.",
    )
    p.add_argument(
        "input",
        help="Input stream file, or - for stdin",
    )
    p.add_argument(
        "output",
        help="Output animation file, or - for stdout",
    )
    add_stream_arguments(p)
    timing = p.add_mutually_exclusive_group()
    timing.add_argument(
        "--delay", type=int, default=None,
        help="Delay per frame in milliseconds (default: 100)",
    )
    timing.add_argument(
        "--fps", type=float, default=None,
        help="Frames per second, alternative to --delay",
    )
    p.add_argument(
        "--loop", type=int, default=None,
        help="Loop count; 0 = forever (default: 0)",
    )
    p.add_argument(
        "--format", choices=sorted(_FORMAT_MAP), default=None,
        help="Output format (default: gif)",
    )
    p.add_argument(
        "--keep-partial", action="store_true",
        help="On a corrupt frame, still write the frames decoded before it",
    )
    p.set_defaults(func=cmd_render)
