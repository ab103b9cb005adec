"""
Read/demux/decode/assemble loop.

The driver is a small state machine::

    SCANNING --frame ready--> DECODING --image--> SCANNING
    SCANNING --end of stream--> DONE
    SCANNING --window full, no signature--> ERROR (FrameTooLargeError)
    SCANNING --cancel hook--> CANCELLED
    DECODING --end marker--> DONE
    DECODING --decoder rejects frame--> ERROR (DecodeError)

DONE and CANCELLED hand the assembled sequence to the encoder exactly
once.  ERROR raises with the offset and the frames decoded so far.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional

from .assembly import AnimationAssembler
from .config import DemuxConfig
from .decoders import FrameDecoder, get_decoder_by_name
from .demux import StreamDemuxer
from .encoders import AnimationEncoder, get_encoder
from .exceptions import DecodeError, FrameTooLargeError
from .reader import LookaheadReader
from .types import (
    AnimationSequence,
    DriverState,
    Frame,
    RunResult,
    ScanStatus,
)

logger = logging.getLogger(__name__)


class Driver:
    """Drive one input stream through demuxing, decoding and assembly.

    ``should_cancel`` is polled before every scan; when it returns True
    the run stops cleanly and keeps the frames assembled so far.
    """

    def __init__(
        self,
        source: BinaryIO,
        config: DemuxConfig | None = None,
        decoder: FrameDecoder | None = None,
        encoder: AnimationEncoder | None = None,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.config = (config or DemuxConfig()).validate()
        self.reader = LookaheadReader(source, self.config.window_size)
        self.demuxer = StreamDemuxer(
            self.reader, self.config.signature, self.config.window_size,
        )
        if decoder is None:
            decoder = get_decoder_by_name(
                self.config.decoder, formats=self.config.image_formats,
            )
        self.decoder = decoder
        self.encoder = encoder or get_encoder(self.config.output_format)
        self.assembler = AnimationAssembler()
        self.should_cancel = should_cancel
        self.state = DriverState.SCANNING
        self.trailing_bytes = 0

    @property
    def bytes_consumed(self) -> int:
        return self.reader.position

    @property
    def frame_count(self) -> int:
        return self.assembler.frame_count

    def iter_frames(self) -> Iterator[Frame]:
        """Yield frames as they are decoded until DONE, CANCELLED or ERROR."""
        offset = 0
        while True:
            if self.state is DriverState.SCANNING:
                if self.should_cancel is not None and self.should_cancel():
                    self.state = DriverState.CANCELLED
                    logger.warning(
                        "Run cancelled at offset %d after %d frame(s)",
                        self.bytes_consumed, self.frame_count,
                    )
                    return
                scan = self.demuxer.locate_next()
                if scan.status is ScanStatus.FRAME_READY:
                    offset = scan.offset
                    self.state = DriverState.DECODING
                elif scan.status is ScanStatus.END_OF_STREAM:
                    self.trailing_bytes = scan.available
                    self.state = DriverState.DONE
                    if self.frame_count == 0 and scan.available:
                        logger.warning(
                            "No frame signature found in %d byte(s) of input",
                            scan.offset + scan.available,
                        )
                    return
                else:
                    self.state = DriverState.ERROR
                    raise FrameTooLargeError(
                        scan.offset, self.config.window_size,
                        self.assembler.frames,
                    )

            elif self.state is DriverState.DECODING:
                try:
                    image = self.decoder.decode_one(self.reader)
                except DecodeError as exc:
                    self.state = DriverState.ERROR
                    raise DecodeError(
                        f"Frame {self.frame_count} at offset {offset}: {exc}",
                        offset=offset,
                        frame_index=self.frame_count,
                        frames=self.assembler.frames,
                    ) from exc
                if image is None:
                    self.state = DriverState.DONE
                    return
                frame = self.assembler.append(image, offset)
                self.state = DriverState.SCANNING
                yield frame

            else:
                return

    def finish(self) -> AnimationSequence:
        """Freeze whatever has been assembled with the configured timing."""
        return self.assembler.finish(self.config.animation)

    def run(self, output: BinaryIO | None = None) -> RunResult:
        """Consume the whole input, then encode to *output* if given."""
        for _ in self.iter_frames():
            pass
        sequence = self.finish()
        if output is not None:
            self.encoder.encode(sequence, output)
        logger.info(
            "%s: %d frame(s) from %d byte(s)",
            self.state.value, self.frame_count, self.bytes_consumed,
        )
        return RunResult(
            state=self.state,
            frame_count=self.frame_count,
            bytes_consumed=self.bytes_consumed,
            trailing_bytes=self.trailing_bytes,
            sequence=sequence,
        )


# ---------------------------------------------------------------------------
# Convenience entry points
# ---------------------------------------------------------------------------

def render_stream(
    source: BinaryIO,
    output: BinaryIO,
    config: DemuxConfig | None = None,
    decoder: FrameDecoder | None = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> RunResult:
    """Demux *source* and write the animation to *output* in a single write.

    The animation is encoded into memory first, so a failed run writes
    nothing.  With ``config.keep_partial`` a DecodeError still writes
    the frames decoded before it, then re-raises.
    """
    config = config or DemuxConfig()
    driver = Driver(source, config, decoder=decoder, should_cancel=should_cancel)
    buffer = io.BytesIO()
    try:
        result = driver.run(buffer)
    except DecodeError as exc:
        if config.keep_partial and exc.frames:
            driver.encoder.encode(driver.finish(), buffer)
            output.write(buffer.getvalue())
            logger.warning(
                "Wrote %d frame(s) decoded before the failure", len(exc.frames),
            )
        raise
    output.write(buffer.getvalue())
    return result


def render_file(
    input_path: Path | str,
    output_path: Path | str,
    config: DemuxConfig | None = None,
    decoder: FrameDecoder | None = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> RunResult:
    """File-to-file form of render_stream.

    The output file is only created once encoding has succeeded.
    """
    output_path = Path(output_path)
    with open(input_path, "rb") as source:
        buffer = io.BytesIO()
        try:
            result = render_stream(
                source, buffer, config, decoder=decoder, should_cancel=should_cancel,
            )
        finally:
            data = buffer.getvalue()
            if data:
                output_path.write_bytes(data)
    return result
