"""
Animation assembly.

Collects decoded frames in the order they arrive and freezes them, with
the run's timing configuration, into an AnimationSequence for an
encoder.  Timing is uniform: every frame is shown for ``delay_ms``.
"""

from __future__ import annotations

from PIL import Image

from .types import AnimationConfig, AnimationSequence, Frame


class AnimationAssembler:
    """Append-only frame collector.

    Usage::

        assembler = AnimationAssembler()
        for image in decoded_images:
            assembler.append(image)
        sequence = assembler.finish(AnimationConfig(delay_ms=80, loop_count=0))
    """

    def __init__(self) -> None:
        self._frames: list[Frame] = []

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def frames(self) -> tuple[Frame, ...]:
        return tuple(self._frames)

    def append(self, image: Image.Image, offset: int = 0) -> Frame:
        """Add *image* as the next frame and return it."""
        frame = Frame(index=len(self._frames), image=image, offset=offset)
        self._frames.append(frame)
        return frame

    def finish(self, config: AnimationConfig) -> AnimationSequence:
        """Freeze the collected frames with *config*'s timing."""
        if config.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {config.delay_ms}")
        if config.loop_count < 0:
            raise ValueError(f"loop_count must be >= 0, got {config.loop_count}")
        return AnimationSequence(
            frames=tuple(self._frames),
            delay_ms=config.delay_ms,
            loop_count=config.loop_count,
        )
