"""
pipegif -- Concatenated PNG stream to animated GIF.

Splits a byte stream of back-to-back encoded images (no count, no length
prefix, only each image's signature) into frames, decodes them, and
assembles them into an animation.
"""

__version__ = "0.1.0"

from pipegif.config import DemuxConfig, load_config
from pipegif.driver import Driver, render_file, render_stream
from pipegif.exceptions import (
    DecodeError,
    EmptySequenceError,
    FrameTooLargeError,
    PipeGifError,
)
from pipegif.types import (
    PNG_SIGNATURE,
    AnimationConfig,
    AnimationSequence,
    Frame,
    OutputFormat,
    RunResult,
)

__all__ = [
    "PNG_SIGNATURE",
    "AnimationConfig",
    "AnimationSequence",
    "DecodeError",
    "DemuxConfig",
    "Driver",
    "EmptySequenceError",
    "Frame",
    "FrameTooLargeError",
    "OutputFormat",
    "PipeGifError",
    "RunResult",
    "load_config",
    "render_file",
    "render_stream",
]
