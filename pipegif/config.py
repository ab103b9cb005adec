"""
Run configuration.

A ``DemuxConfig`` is built once per run and never mutated: the
signature and window size drive the demuxer, the timing fields become
the AnimationConfig handed to the assembler and encoder.  Values can
come from keyword arguments, a YAML file, or both (explicit overrides
win over file values).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import ConfigError
from .types import (
    DEFAULT_WINDOW_SIZE,
    PNG_SIGNATURE,
    AnimationConfig,
    OutputFormat,
)


@dataclass(frozen=True)
class DemuxConfig:
    """Full configuration for one demux/assemble/encode run."""
    signature: bytes = PNG_SIGNATURE
    window_size: int = DEFAULT_WINDOW_SIZE   # must cover the largest unconsumed frame tail
    delay_ms: int = 100
    loop_count: int = 0                      # 0 = loop forever
    output_format: OutputFormat = OutputFormat.GIF
    decoder: str = "pillow"
    image_formats: Optional[tuple[str, ...]] = ("PNG",)   # None = any Pillow format
    keep_partial: bool = False               # encode frames decoded before a DecodeError

    @property
    def animation(self) -> AnimationConfig:
        return AnimationConfig(delay_ms=self.delay_ms, loop_count=self.loop_count)

    def validate(self) -> DemuxConfig:
        """Raise ConfigError for out-of-range values; return self."""
        if not self.signature:
            raise ConfigError("signature must not be empty")
        if self.window_size < len(self.signature):
            raise ConfigError(
                f"window_size ({self.window_size}) must be at least the "
                f"signature length ({len(self.signature)})"
            )
        if self.delay_ms < 0:
            raise ConfigError(f"delay_ms must be >= 0, got {self.delay_ms}")
        if self.loop_count < 0:
            raise ConfigError(f"loop_count must be >= 0, got {self.loop_count}")
        return self

    def merged(self, **overrides: Any) -> DemuxConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {sorted(unknown)}")
        return dataclasses.replace(self, **changes)


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------

def signature_from_hex(text: str) -> bytes:
    """Parse ``"89 50 4E 47"``, ``"89504e47"`` or ``"0x89 0x50"`` into bytes."""
    cleaned = text.replace("0x", "").replace("0X", "")
    cleaned = "".join(cleaned.replace(",", " ").replace(":", " ").split())
    try:
        sig = bytes.fromhex(cleaned)
    except ValueError as exc:
        raise ConfigError(f"Invalid hex signature {text!r}: {exc}") from exc
    if not sig:
        raise ConfigError("signature must not be empty")
    return sig


def delay_from_fps(fps: float) -> int:
    """Convert frames per second to a per-frame delay in milliseconds."""
    if fps <= 0:
        raise ConfigError(f"fps must be > 0, got {fps}")
    return int(1000 / fps)


def _parse_format(value: str) -> OutputFormat:
    try:
        return OutputFormat(str(value).lower())
    except ValueError as exc:
        raise ConfigError(
            f"Unknown output format {value!r}. "
            f"Available: {[f.value for f in OutputFormat]}"
        ) from exc


def _parse_signature(value: Any) -> bytes:
    # YAML reads [0x89, 0x50, ...] as a list of ints; strings are hex.
    if isinstance(value, list):
        try:
            sig = bytes(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid signature byte list {value!r}: {exc}") from exc
        if not sig:
            raise ConfigError("signature must not be empty")
        return sig
    if not isinstance(value, str):
        raise ConfigError(
            f"signature must be a quoted hex string or a list of bytes, got {value!r}"
        )
    return signature_from_hex(value)


def _parse_int(data: dict[str, Any], key: str) -> int | None:
    if key not in data:
        return None
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    return value


def _parse_number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    return float(value)


def _parse_formats(value: Any) -> Optional[tuple[str, ...]]:
    # An empty or null list accepts any format Pillow can identify.
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(f, str) for f in value):
        raise ConfigError(
            f"image_formats must be a list of format names or null, got {value!r}"
        )
    return tuple(f.upper() for f in value) or None


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

_FILE_KEYS = {
    "signature", "window_size", "delay_ms", "fps", "loop_count",
    "format", "decoder", "image_formats", "keep_partial",
}


def config_from_mapping(data: dict[str, Any], base: DemuxConfig | None = None) -> DemuxConfig:
    """Build a DemuxConfig from a plain mapping (e.g. parsed YAML)."""
    unknown = set(data) - _FILE_KEYS
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {sorted(unknown)}")
    if "delay_ms" in data and "fps" in data:
        raise ConfigError("Specify either delay_ms or fps, not both")

    overrides: dict[str, Any] = {
        "window_size": _parse_int(data, "window_size"),
        "delay_ms": _parse_int(data, "delay_ms"),
        "loop_count": _parse_int(data, "loop_count"),
    }
    if "fps" in data:
        overrides["delay_ms"] = delay_from_fps(_parse_number(data["fps"], "fps"))
    if "signature" in data:
        overrides["signature"] = _parse_signature(data["signature"])
    if "format" in data:
        overrides["output_format"] = _parse_format(data["format"])
    if "decoder" in data:
        overrides["decoder"] = str(data["decoder"])
    if "keep_partial" in data:
        overrides["keep_partial"] = bool(data["keep_partial"])

    config = (base or DemuxConfig()).merged(**overrides)
    if "image_formats" in data:
        config = dataclasses.replace(
            config, image_formats=_parse_formats(data["image_formats"]),
        )
    return config.validate()


def load_config(path: Path | str, base: DemuxConfig | None = None) -> DemuxConfig:
    """Read a YAML configuration file into a DemuxConfig."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return config_from_mapping(data, base)
