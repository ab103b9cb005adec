"""
Tests for the bounded lookahead reader and the decoder-facing FrameView.
"""

from __future__ import annotations

import io

import pytest

from pipegif.reader import FrameView, LookaheadReader

from conftest import ChunkedSource


DATA = bytes(range(256)) * 4


def _reader(data: bytes = DATA, window: int = 64, chunk: int | None = None) -> LookaheadReader:
    source = ChunkedSource(data, chunk) if chunk else io.BytesIO(data)
    return LookaheadReader(source, window)


# ---------------------------------------------------------------------------
# mark / peek / reset / skip
# ---------------------------------------------------------------------------

class TestLookahead:
    def test_peek_does_not_advance(self):
        r = _reader()
        assert r.peek(10) == DATA[:10]
        assert r.position == 0
        assert r.peek(10) == DATA[:10]

    def test_mark_reset_is_idempotent(self):
        r = _reader()
        r.skip(100)
        r.mark()
        first = r.peek(64)
        r.reset()
        assert r.position == 100
        assert r.peek(64) == first == DATA[100:164]

    def test_reset_rereads_skipped_bytes(self):
        r = _reader()
        r.mark()
        r.skip(30)
        r.reset()
        assert r.position == 0
        assert r.read(30) == DATA[:30]

    def test_skip_then_peek(self):
        r = _reader()
        r.mark()
        r.peek(64)
        r.reset()
        assert r.skip(17) == 17
        assert r.peek(4) == DATA[17:21]

    def test_short_peek_at_end_of_input(self):
        r = _reader(b"abcdef")
        assert r.peek(64) == b"abcdef"
        r.skip(4)
        assert r.peek(64) == b"ef"
        r.skip(2)
        assert r.peek(64) == b""

    def test_skip_past_end_reports_actual_count(self):
        r = _reader(b"abcdef")
        assert r.skip(100) == 6
        assert r.position == 6

    def test_zero_and_negative_counts(self):
        r = _reader()
        assert r.peek(0) == b""
        assert r.skip(0) == 0
        assert r.skip(-5) == 0
        assert r.position == 0

    def test_pipe_like_source(self):
        r = _reader(chunk=5)
        r.mark()
        assert r.peek(64) == DATA[:64]
        r.reset()
        r.skip(64)
        r.mark()
        assert r.peek(64) == DATA[64:128]

    def test_mark_discards_earlier_bytes(self):
        r = _reader()
        r.skip(200)
        r.mark()
        with pytest.raises(OSError):
            r.seek(199)

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            LookaheadReader(io.BytesIO(b""), 0)


# ---------------------------------------------------------------------------
# File-like surface
# ---------------------------------------------------------------------------

class TestFileSurface:
    def test_read_advances(self):
        r = _reader()
        assert r.read(5) == DATA[:5]
        assert r.tell() == 5

    def test_read_all(self):
        r = _reader(chunk=9)
        r.skip(1000)
        assert r.read() == DATA[1000:]
        assert r.read() == b""

    def test_seek_within_marked_region(self):
        r = _reader()
        r.skip(10)
        r.mark()
        r.read(50)
        assert r.seek(20) == 20
        assert r.read(2) == DATA[20:22]

    def test_seek_clamps_to_end(self):
        r = _reader(b"abc")
        assert r.seek(10) == 3
        assert r.read(1) == b""


class TestFrameView:
    def test_origin_is_current_position(self):
        r = _reader()
        r.skip(40)
        view = FrameView(r)
        assert view.tell() == 0
        assert view.read(3) == DATA[40:43]
        assert view.tell() == 3

    def test_seek_zero_returns_to_origin(self):
        r = _reader()
        r.skip(40)
        view = FrameView(r)
        view.read(16)
        assert view.seek(0) == 0
        assert view.read(4) == DATA[40:44]

    def test_seek_relative(self):
        r = _reader()
        view = FrameView(r)
        view.read(10)
        assert view.seek(5, io.SEEK_CUR) == 15
        assert r.position == 15

    def test_seek_before_origin_rejected(self):
        r = _reader()
        r.skip(40)
        view = FrameView(r)
        with pytest.raises(OSError):
            view.seek(-1, io.SEEK_CUR)

    def test_seek_end_unsupported(self):
        view = FrameView(_reader())
        with pytest.raises(io.UnsupportedOperation):
            view.seek(0, io.SEEK_END)

    def test_readinto(self):
        r = _reader()
        view = FrameView(r)
        buf = bytearray(8)
        assert view.readinto(buf) == 8
        assert bytes(buf) == DATA[:8]

    def test_reading_through_view_moves_reader(self):
        r = _reader()
        view = FrameView(r)
        view.read(25)
        assert r.position == 25
