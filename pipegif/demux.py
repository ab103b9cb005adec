"""
Frame boundary recovery for streams of concatenated images.

The input carries no frame count, length prefix or separator.  Before
each decode the demuxer peeks one lookahead window, finds the next
frame signature in it and repositions the reader exactly on it.  The
decoder is not trusted to stop on a frame boundary, so any trailing
bytes it left behind are skipped here.

A window with no signature means one of two different things:

  - fewer than ``window_size`` bytes remained: the input is exhausted
    (possibly with a few bytes of trailing structure or garbage);
  - the window was full and more input follows: some frame is larger
    than the window.

The two are always reported separately.
"""

from __future__ import annotations

import logging

from .reader import LookaheadReader
from .scanner import find_signature
from .types import PNG_SIGNATURE, ScanResult, ScanStatus

logger = logging.getLogger(__name__)


class StreamDemuxer:
    """Locate successive frame signatures on a LookaheadReader."""

    def __init__(
        self,
        reader: LookaheadReader,
        signature: bytes = PNG_SIGNATURE,
        window_size: int | None = None,
    ) -> None:
        if not signature:
            raise ValueError("Signature must not be empty.")
        self.reader = reader
        self.signature = bytes(signature)
        self.window_size = window_size or reader.window_size
        if self.window_size < len(self.signature):
            raise ValueError(
                f"window_size ({self.window_size}) is smaller than the "
                f"signature ({len(self.signature)} bytes)"
            )
        self.frames_located = 0
        self._last_frame_offset: int | None = None

    @property
    def position(self) -> int:
        return self.reader.position

    def locate_next(self) -> ScanResult:
        """Position the reader on the next frame signature.

        Returns FRAME_READY with the signature offset, END_OF_STREAM, or
        FRAME_TOO_LARGE.  For the latter two the reader is left where
        scanning started.
        """
        reader = self.reader
        reader.mark()
        start_pos = reader.position
        window = reader.peek(self.window_size)
        if not window:
            logger.debug("End of stream at offset %d", start_pos)
            return ScanResult(ScanStatus.END_OF_STREAM, start_pos, 0)

        # A decoder that consumed nothing leaves us on the signature we
        # already handed out; look past it.
        start = 1 if start_pos == self._last_frame_offset else 0
        idx = find_signature(window, self.signature, start)
        reader.reset()

        if idx >= 0:
            reader.skip(idx)
            offset = start_pos + idx
            self._last_frame_offset = offset
            self.frames_located += 1
            logger.debug(
                "Frame %d signature at offset %d (skipped %d bytes)",
                self.frames_located - 1, offset, idx,
            )
            return ScanResult(ScanStatus.FRAME_READY, offset, len(window))

        if len(window) < self.window_size or not self._has_more_than_window():
            logger.debug(
                "No signature in final %d bytes at offset %d",
                len(window), start_pos,
            )
            return ScanResult(ScanStatus.END_OF_STREAM, start_pos, len(window))

        logger.debug(
            "Window of %d bytes at offset %d holds no signature",
            self.window_size, start_pos,
        )
        return ScanResult(ScanStatus.FRAME_TOO_LARGE, start_pos, len(window))

    def _has_more_than_window(self) -> bool:
        """True when input continues past a completely filled window."""
        return len(self.reader.peek(self.window_size + 1)) > self.window_size
