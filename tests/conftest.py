"""
Shared fixtures for the pipegif test suite.

Streams are built in memory from real PNGs encoded by Pillow, so every
test exercises the same bytes a renderer writing to a pipe would produce.
"""

from __future__ import annotations

import io
import random
import tempfile
from pathlib import Path

import pytest
from PIL import Image


# ---------------------------------------------------------------------------
# Stream builders (plain helpers, also imported by test modules)
# ---------------------------------------------------------------------------

def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def solid_png(i: int, size: tuple[int, int] = (16, 16)) -> bytes:
    """A small PNG whose colour is unique per *i*."""
    color = ((i * 37) % 256, (i * 91) % 256, (i * 13 + 60) % 256)
    return encode_png(Image.new("RGB", size, color))


def noise_png(seed: int = 0, size: tuple[int, int] = (32, 32)) -> bytes:
    """An incompressible RGB PNG, a few KB for the default size."""
    rng = random.Random(seed)
    data = rng.randbytes(size[0] * size[1] * 3)
    return encode_png(Image.frombytes("RGB", size, data))


def png_stream(n: int, size: tuple[int, int] = (16, 16)) -> bytes:
    """*n* distinct PNGs back to back."""
    return b"".join(solid_png(i, size) for i in range(n))


class ChunkedSource(io.RawIOBase):
    """Read-only stream that returns at most *chunk* bytes per read, like a pipe."""

    def __init__(self, data: bytes, chunk: int = 7) -> None:
        super().__init__()
        self._data = data
        self._pos = 0
        self._chunk = chunk
        self.reads = 0

    def readable(self) -> bool:
        return True

    def read(self, n: int = -1) -> bytes:
        self.reads += 1
        if n is None or n < 0:
            n = len(self._data) - self._pos
        n = min(n, self._chunk)
        out = self._data[self._pos:self._pos + n]
        self._pos += len(out)
        return out


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory(prefix="pipegif_test_") as d:
        yield Path(d)


@pytest.fixture
def three_frame_stream() -> bytes:
    return png_stream(3)


@pytest.fixture
def stream_file(tmp_dir, three_frame_stream) -> Path:
    path = tmp_dir / "frames.bin"
    path.write_bytes(three_frame_stream)
    return path
