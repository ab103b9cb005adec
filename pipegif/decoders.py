"""
Frame decoders.

A decoder turns the bytes at the reader's current position (always a
frame signature) into one image.  It must consume at least the encoded
image but may leave trailing bytes of it in the stream; the demuxer
skips those before the next decode.

Returning None is the end marker: nothing more can be decoded here.
"""

from __future__ import annotations

import abc
import logging
import struct
import zlib
from typing import Dict, List, Optional, Sequence

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, UnknownDecoderError
from .reader import FrameView, LookaheadReader

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class FrameDecoder(abc.ABC):
    """Abstract interface that every frame decoder must implement."""

    name: str = "abstract"

    @abc.abstractmethod
    def decode_one(self, stream: LookaheadReader) -> Optional[Image.Image]:
        """Decode one image at the current position, or return None."""


# ---------------------------------------------------------------------------
# Pillow
# ---------------------------------------------------------------------------

class PillowFrameDecoder(FrameDecoder):
    """Decode frames with Pillow.

    Pillow rewinds to offset 0 before identifying a file, so it reads
    through a FrameView anchored at the signature.  ``formats`` limits
    which Pillow plugins may claim the frame; a frame identified as some
    other format is rejected.  ``formats=None`` accepts anything Pillow
    can identify.
    """

    name = "pillow"

    def __init__(self, formats: Optional[Sequence[str]] = ("PNG",)) -> None:
        self.formats = list(formats) if formats else None

    def decode_one(self, stream: LookaheadReader) -> Optional[Image.Image]:
        if not stream.peek(1):
            return None
        view = FrameView(stream)
        try:
            with Image.open(view, formats=self.formats) as img:
                img.load()
                fmt = img.format
                frame = img.copy()
        except UnidentifiedImageError as exc:
            raise DecodeError(f"Unrecognized image data: {exc}") from exc
        except (OSError, SyntaxError, ValueError, EOFError,
                struct.error, zlib.error, Image.DecompressionBombError) as exc:
            raise DecodeError(f"Corrupt or truncated frame: {exc}") from exc
        logger.debug(
            "Decoded %s %dx%d %s, consumed %d bytes",
            fmt, frame.width, frame.height, frame.mode, view.tell(),
        )
        return frame


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

DECODERS: List[type] = [
    PillowFrameDecoder,
]

_DECODER_BY_NAME: Dict[str, type] = {cls.name: cls for cls in DECODERS}


def get_decoder_by_name(name: str, **options) -> FrameDecoder:
    """Instantiate a decoder by its short name, passing *options* through."""
    cls = _DECODER_BY_NAME.get(name)
    if cls is None:
        raise UnknownDecoderError(
            f"Unknown decoder '{name}'. "
            f"Available: {list(_DECODER_BY_NAME.keys())}"
        )
    return cls(**options)
