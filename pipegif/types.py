"""
Core data structures shared by the demuxer, assembler and encoders.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from PIL import Image


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
DEFAULT_WINDOW_SIZE = 1024


class ScanStatus(enum.Enum):
    """Outcome of one signature scan over the lookahead window."""
    FRAME_READY = "frame_ready"
    END_OF_STREAM = "end_of_stream"
    FRAME_TOO_LARGE = "frame_too_large"


class DriverState(enum.Enum):
    """States of the read/demux/decode/assemble loop."""
    SCANNING = "scanning"
    DECODING = "decoding"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


class OutputFormat(enum.Enum):
    """Supported animation output formats."""
    GIF = "gif"
    APNG = "apng"


@dataclass(frozen=True)
class ScanResult:
    """Result of locating the next frame.

    ``offset`` is the absolute signature offset for FRAME_READY, and the
    position where scanning started otherwise.  ``available`` is the
    number of bytes the lookahead window could fill.
    """
    status: ScanStatus
    offset: int
    available: int


@dataclass(frozen=True)
class Frame:
    """One decoded image and its place in the animation."""
    index: int                # 0-based emission order
    image: Image.Image
    offset: int = 0           # Byte offset of the frame signature

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


@dataclass(frozen=True)
class AnimationConfig:
    """Sequence-level timing, fixed for a run."""
    delay_ms: int = 100
    loop_count: int = 0       # 0 = loop forever


@dataclass(frozen=True)
class AnimationSequence:
    """Ordered frames plus the timing they are encoded with."""
    frames: tuple[Frame, ...] = ()
    delay_ms: int = 100
    loop_count: int = 0

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def images(self) -> list[Image.Image]:
        return [f.image for f in self.frames]

    def durations(self) -> list[int]:
        """Return per-frame display durations in milliseconds."""
        return [self.delay_ms] * len(self.frames)


@dataclass
class RunResult:
    """Summary of a finished (or cancelled) run."""
    state: DriverState
    frame_count: int
    bytes_consumed: int
    trailing_bytes: int = 0
    sequence: AnimationSequence = field(default_factory=AnimationSequence)

    @property
    def cancelled(self) -> bool:
        return self.state is DriverState.CANCELLED
