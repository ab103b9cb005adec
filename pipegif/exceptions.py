"""
Custom exception hierarchy for pipegif.

All pipegif exceptions inherit from PipeGifError so callers can catch
the entire family with a single except clause.  Reaching the end of the
input stream is not an error and has no exception here.
"""

from __future__ import annotations

from typing import Sequence


class PipeGifError(Exception):
    """Base exception for all pipegif errors."""


class ConfigError(PipeGifError):
    """Raised when a configuration value or file is invalid."""


class UnknownDecoderError(ConfigError):
    """Raised when a frame decoder name is not registered."""


class UnknownFormatError(ConfigError):
    """Raised when an output format has no registered encoder."""


class FrameTooLargeError(PipeGifError):
    """Raised when a full lookahead window holds no frame signature.

    More input remained after the window, so some frame is larger than
    ``window_size``.  Retrying with a larger window is up to the caller.

    Only *unconsumed* bytes count.  The Pillow decoder reads a whole PNG
    frame, so frames bigger than the window decode fine with it; this
    error shows up when junk longer than the window sits between frames,
    or when a decoder leaves more than a window of its frame unread.
    """

    def __init__(
        self,
        offset: int,
        window_size: int,
        frames: Sequence | None = None,
    ) -> None:
        self.offset = offset
        self.window_size = window_size
        self.frames = list(frames or [])
        super().__init__(
            f"No frame signature within {window_size} bytes of offset {offset} "
            f"after {len(self.frames)} frame(s); a frame is larger than the "
            f"lookahead window."
        )


class DecodeError(PipeGifError):
    """Raised when the frame decoder rejects bytes at a signature.

    ``frames`` holds every frame decoded before the failure so nothing
    already assembled is lost.
    """

    def __init__(
        self,
        message: str,
        offset: int | None = None,
        frame_index: int | None = None,
        frames: Sequence | None = None,
    ) -> None:
        super().__init__(message)
        self.offset = offset
        self.frame_index = frame_index
        self.frames = list(frames or [])


class EmptySequenceError(PipeGifError):
    """Raised when an encoder is handed an animation with no frames."""


class EncodeError(PipeGifError):
    """Raised when an encoder fails to serialize a non-empty animation."""
