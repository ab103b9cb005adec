"""
Tests for the command-line interface.
"""

from __future__ import annotations

import pytest
from PIL import Image

from pipegif.cli.main import main

from conftest import png_stream, solid_png


class TestRender:
    def test_success(self, stream_file, tmp_dir, capsys):
        out = tmp_dir / "out.gif"
        assert main(["render", str(stream_file), str(out)]) == 0
        assert "3 frames rendered" in capsys.readouterr().out
        assert Image.open(out).n_frames == 3

    def test_apng_with_fps(self, stream_file, tmp_dir):
        out = tmp_dir / "out.png"
        rc = main(["render", str(stream_file), str(out), "--format", "apng", "--fps", "25"])
        assert rc == 0
        img = Image.open(out)
        assert img.n_frames == 3
        assert img.info["duration"] == 40

    def test_loop_and_delay(self, stream_file, tmp_dir):
        out = tmp_dir / "out.gif"
        assert main(["render", str(stream_file), str(out), "--delay", "70", "--loop", "2"]) == 0
        img = Image.open(out)
        assert img.info["duration"] == 70
        assert img.info["loop"] == 2

    def test_missing_input(self, tmp_dir, capsys):
        rc = main(["render", str(tmp_dir / "nope.bin"), str(tmp_dir / "out.gif")])
        assert rc == 1
        assert "file not found" in capsys.readouterr().err

    def test_frame_too_large_suggests_window(self, tmp_dir, capsys):
        src = tmp_dir / "big.bin"
        src.write_bytes(solid_png(1) + b"\xaa" * 3000 + solid_png(2))
        out = tmp_dir / "out.gif"
        assert main(["render", str(src), str(out)]) == 1
        assert "--window-size" in capsys.readouterr().err
        assert not out.exists()

    def test_larger_window_flag(self, tmp_dir, capsys):
        src = tmp_dir / "big.bin"
        src.write_bytes(solid_png(1) + b"\xaa" * 3000 + solid_png(2))
        out = tmp_dir / "out.gif"
        assert main(["render", str(src), str(out), "--window-size", "8192"]) == 0
        assert "2 frames rendered" in capsys.readouterr().out

    def test_empty_input(self, tmp_dir, capsys):
        src = tmp_dir / "empty.bin"
        src.write_bytes(b"")
        assert main(["render", str(src), str(tmp_dir / "out.gif")]) == 1
        assert "no frames" in capsys.readouterr().err

    def test_decode_error(self, tmp_dir, capsys):
        src = tmp_dir / "trunc.bin"
        src.write_bytes(png_stream(2) + solid_png(5)[:20])
        out = tmp_dir / "out.gif"
        assert main(["render", str(src), str(out)]) == 1
        assert "2 frames decoded" in capsys.readouterr().err
        assert not out.exists()

    def test_keep_partial(self, tmp_dir, capsys):
        src = tmp_dir / "trunc.bin"
        src.write_bytes(png_stream(2) + solid_png(5)[:20])
        out = tmp_dir / "out.gif"
        assert main(["render", str(src), str(out), "--keep-partial"]) == 1
        assert "2 frames written" in capsys.readouterr().err
        assert Image.open(out).n_frames == 2

    def test_config_file(self, stream_file, tmp_dir):
        cfg = tmp_dir / "pipegif.yaml"
        cfg.write_text("delay_ms: 30\nformat: apng\n", encoding="utf-8")
        out = tmp_dir / "out.png"
        assert main(["render", str(stream_file), str(out), "--config", str(cfg)]) == 0
        assert Image.open(out).format == "PNG"

    def test_bad_config_file(self, stream_file, tmp_dir, capsys):
        cfg = tmp_dir / "pipegif.yaml"
        cfg.write_text("colours: 3\n", encoding="utf-8")
        rc = main(["render", str(stream_file), str(tmp_dir / "o.gif"), "--config", str(cfg)])
        assert rc == 1
        assert "Unknown configuration keys" in capsys.readouterr().err

    def test_bad_fps_in_config_file(self, stream_file, tmp_dir, capsys):
        cfg = tmp_dir / "pipegif.yaml"
        cfg.write_text("fps: fast\n", encoding="utf-8")
        out = tmp_dir / "o.gif"
        rc = main(["render", str(stream_file), str(out), "--config", str(cfg)])
        assert rc == 1
        assert "fps must be a number" in capsys.readouterr().err
        assert not out.exists()

    def test_bad_signature(self, stream_file, tmp_dir, capsys):
        rc = main(["render", str(stream_file), str(tmp_dir / "o.gif"), "--signature", "xyz"])
        assert rc == 1
        assert "Invalid hex signature" in capsys.readouterr().err

    def test_delay_and_fps_are_exclusive(self, stream_file, tmp_dir):
        with pytest.raises(SystemExit):
            main(["render", str(stream_file), str(tmp_dir / "o.gif"), "--delay", "5", "--fps", "5"])


class TestScan:
    def test_lists_frames(self, stream_file, capsys):
        assert main(["scan", str(stream_file)]) == 0
        out = capsys.readouterr().out
        assert "16x16" in out
        assert "3 frames" in out

    def test_scan_error(self, tmp_dir, capsys):
        src = tmp_dir / "big.bin"
        src.write_bytes(solid_png(1) + b"\xaa" * 3000 + solid_png(2))
        assert main(["scan", str(src)]) == 1
        assert "lookahead window" in capsys.readouterr().err

    def test_unknown_decoder_in_config(self, stream_file, tmp_dir, capsys):
        cfg = tmp_dir / "pipegif.yaml"
        cfg.write_text("decoder: nope\n", encoding="utf-8")
        assert main(["scan", str(stream_file), "--config", str(cfg)]) == 1
        assert "nope" in capsys.readouterr().err


class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert "pipegif" in capsys.readouterr().out
