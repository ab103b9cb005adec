"""
Bounded lookahead over a forward-only byte source.

``LookaheadReader`` keeps an owned buffer of every byte read since the
last mark, plus a cursor into it.  That is enough to peek ahead, rewind
to the mark, and let a decoder seek around inside the frame it is
reading, even when the underlying source is a pipe.

Positions are absolute offsets from the start of the input.
"""

from __future__ import annotations

import io
from typing import BinaryIO

_MIN_READ = 4096


class LookaheadReader:
    """Mark/peek/reset/skip on top of a readable binary stream."""

    def __init__(self, source: BinaryIO, window_size: int) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        self._source = source
        self.window_size = window_size
        self._buf = bytearray()
        self._base = 0            # absolute offset of _buf[0]
        self._pos = 0             # logical read position
        self._mark = 0
        self._eof = False

    # ---- state ----------------------------------------------------------

    @property
    def position(self) -> int:
        return self._pos

    @property
    def buffered_end(self) -> int:
        """Absolute offset one past the last byte read from the source."""
        return self._base + len(self._buf)

    def _fill(self, upto: int) -> None:
        """Read from the source until *upto* is buffered or input ends."""
        while self.buffered_end < upto and not self._eof:
            chunk = self._source.read(max(upto - self.buffered_end, _MIN_READ))
            if not chunk:
                self._eof = True
                break
            self._buf += chunk

    # ---- mark / reset ----------------------------------------------------

    def mark(self) -> None:
        """Record the current position and drop buffered bytes before it."""
        drop = self._pos - self._base
        if drop > 0:
            del self._buf[:drop]
            self._base = self._pos
        self._mark = self._pos

    def reset(self) -> None:
        """Return to the last mark."""
        self._pos = self._mark

    def peek(self, n: int) -> bytes:
        """Return up to *n* bytes at the current position without consuming them.

        A short result means the source is exhausted.
        """
        if n <= 0:
            return b""
        self._fill(self._pos + n)
        start = self._pos - self._base
        return bytes(self._buf[start:start + n])

    def skip(self, n: int) -> int:
        """Advance past *n* bytes; returns how many were actually skipped."""
        if n <= 0:
            return 0
        self._fill(self._pos + n)
        skipped = min(n, self.buffered_end - self._pos)
        self._pos += skipped
        return skipped

    # ---- file-like surface for decoders ----------------------------------

    def read(self, n: int = -1) -> bytes:
        if n is None or n < 0:
            while not self._eof:
                self._fill(self.buffered_end + _MIN_READ)
            n = self.buffered_end - self._pos
        data = self.peek(n)
        self._pos += len(data)
        return data

    def tell(self) -> int:
        return self._pos

    def seek(self, pos: int) -> int:
        """Move to absolute *pos*; only the bytes since the mark are reachable."""
        if pos < self._mark:
            raise OSError(
                f"Cannot seek to {pos}: before the mark at {self._mark}"
            )
        self._fill(pos)
        self._pos = min(pos, self.buffered_end)
        return self._pos

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True


class FrameView(io.RawIOBase):
    """Read-only window onto a LookaheadReader starting at its current position.

    Offset 0 of the view is the reader position at construction time.
    Image libraries that rewind to 0 before sniffing a format therefore
    land on the frame signature rather than on the start of the input.
    """

    def __init__(self, reader: LookaheadReader) -> None:
        super().__init__()
        self._reader = reader
        self.origin = reader.position

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        data = self._reader.read(len(b))
        b[:len(data)] = data
        return len(data)

    def read(self, size: int = -1) -> bytes:
        return self._reader.read(size)

    def tell(self) -> int:
        return self._reader.tell() - self.origin

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            target = self.origin + offset
        elif whence == io.SEEK_CUR:
            target = self._reader.tell() + offset
        else:
            raise io.UnsupportedOperation("FrameView does not support SEEK_END")
        if target < self.origin:
            raise OSError(f"Cannot seek before the start of the frame ({offset})")
        return self._reader.seek(target) - self.origin
