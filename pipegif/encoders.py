"""
Animation encoders.

Each encoder serializes a finished AnimationSequence into one container
format on a writable binary stream.  Both current encoders use Pillow's
multi-frame ``Image.save(save_all=True)`` path.

Note that Pillow merges consecutive identical frames into one frame
whose duration is the sum of theirs, so the container may hold fewer
frames than the sequence while the playback time is unchanged.
"""

from __future__ import annotations

import abc
import logging
from typing import BinaryIO

from PIL import Image

from .exceptions import EmptySequenceError, EncodeError, UnknownFormatError
from .types import AnimationSequence, OutputFormat

logger = logging.getLogger(__name__)

# Modes the GIF writer can quantize directly.
_GIF_MODES = ("1", "L", "P", "RGB", "RGBA")


class AnimationEncoder(abc.ABC):
    """Abstract interface that every animation encoder must implement."""

    format: OutputFormat

    def encode(self, sequence: AnimationSequence, stream: BinaryIO) -> None:
        """Write *sequence* to *stream*.

        Raises EmptySequenceError for a sequence with no frames and
        EncodeError when the image library rejects the frames.  Errors
        from the stream itself propagate unchanged.
        """
        if not sequence.frames:
            raise EmptySequenceError(
                f"Cannot encode an empty animation as {self.format.value.upper()}."
            )
        try:
            self._encode(sequence, stream)
        except (ValueError, KeyError, TypeError) as exc:
            raise EncodeError(
                f"{self.format.value.upper()} encoding failed: {exc}"
            ) from exc
        logger.info(
            "Encoded %d frame(s) as %s (%d ms/frame, loop=%d)",
            len(sequence), self.format.value.upper(),
            sequence.delay_ms, sequence.loop_count,
        )

    @abc.abstractmethod
    def _encode(self, sequence: AnimationSequence, stream: BinaryIO) -> None:
        """Format-specific serialization of a non-empty sequence."""


# ===================================================================
#  GIF
# ===================================================================

class GifEncoder(AnimationEncoder):
    """Animated GIF via Pillow.

    Pillow quantizes each frame to its own palette; no palette
    optimization is attempted.
    """

    format = OutputFormat.GIF

    def __init__(self, disposal: int = 2) -> None:
        self.disposal = disposal         # 2 = restore to background

    @staticmethod
    def _prepare(img: Image.Image) -> Image.Image:
        if img.mode in _GIF_MODES:
            return img
        return img.convert("RGBA")

    def _encode(self, sequence: AnimationSequence, stream: BinaryIO) -> None:
        frames = [self._prepare(img) for img in sequence.images]
        first, rest = frames[0], frames[1:]
        first.save(
            stream,
            format="GIF",
            save_all=True,
            append_images=rest,
            duration=sequence.durations(),   # Per-frame durations (ms)
            loop=sequence.loop_count,        # 0 = infinite
            disposal=self.disposal,
        )


# ===================================================================
#  APNG
# ===================================================================

class ApngEncoder(AnimationEncoder):
    """Animated PNG via Pillow, keeping full 8-bit alpha."""

    format = OutputFormat.APNG

    def _encode(self, sequence: AnimationSequence, stream: BinaryIO) -> None:
        rgba_frames = [img.convert("RGBA") for img in sequence.images]
        first = rgba_frames[0]
        first.save(
            stream,
            format="PNG",
            save_all=True,
            append_images=rgba_frames[1:],
            duration=sequence.durations(),
            loop=sequence.loop_count,
        )


# ===================================================================
#  Registry
# ===================================================================

ENCODERS: dict[OutputFormat, type] = {
    OutputFormat.GIF: GifEncoder,
    OutputFormat.APNG: ApngEncoder,
}


def get_encoder(fmt: OutputFormat | str) -> AnimationEncoder:
    """Instantiate the encoder for *fmt* (an OutputFormat or its value)."""
    if isinstance(fmt, str):
        try:
            fmt = OutputFormat(fmt.lower())
        except ValueError as exc:
            raise UnknownFormatError(
                f"Unsupported output format: {fmt!r}. "
                f"Available: {[f.value for f in ENCODERS]}"
            ) from exc
    encoder_cls = ENCODERS.get(fmt)
    if encoder_cls is None:
        raise UnknownFormatError(f"Unsupported output format: {fmt}")
    return encoder_cls()
