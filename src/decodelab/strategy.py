"""Decode strategy selection: lossless JPEG passthrough or pixel decoding.

Passthrough is attempted first when the target is JPEG and no pixel re-encode
was requested. A passthrough failure before any bytes were produced switches
the run to pixel decoding exactly once; every later failure is fatal.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum

from .codec import DecodedImage, Decoder, DecodeParams
from .error_handling import DecodeFailure, log_warning_with_context
from .stats import RunStatistics

logger = logging.getLogger(__name__)

PASSTHROUGH_CODEC = "jpeg"


class DecodeState(Enum):
    ATTEMPT_PASSTHROUGH = "attempt_passthrough"
    PIXEL_DECODE = "pixel_decode"


def initial_state(codec: str | None, pixels_requested: bool) -> DecodeState:
    """Pick the starting state for a run.

    Only JPEG targets can take the lossless path, and only if the user did not
    ask for a pixel-level re-encode (``--pixels-to-jpeg`` or an explicit
    quality).
    """
    if codec == PASSTHROUGH_CODEC and not pixels_requested:
        return DecodeState.ATTEMPT_PASSTHROUGH
    return DecodeState.PIXEL_DECODE


@dataclass
class SelectionResult:
    """Terminal state of the selector and what the last repetition produced."""

    state: DecodeState
    jpeg_bytes: bytes = b""
    image: DecodedImage | None = None
    decoded_bytes: int = 0
    fell_back: bool = False


class DecodeStrategySelector:
    """Drives the repetition loop and owns the passthrough → pixel transition."""

    def __init__(
        self, decoder: Decoder, stats: RunStatistics | None = None, quiet: bool = False
    ):
        self.decoder = decoder
        self.stats = stats
        self.quiet = quiet
        self.state: DecodeState | None = None
        self.fell_back = False

    def run(
        self,
        data: bytes,
        num_reps: int,
        start: DecodeState,
        passthrough_params: DecodeParams,
        pixel_params: DecodeParams,
    ) -> SelectionResult:
        self.state = start
        if self.state is DecodeState.ATTEMPT_PASSTHROUGH:
            jpeg_bytes = self._run_passthrough(data, num_reps, passthrough_params)
            if jpeg_bytes is not None:
                logger.info("Reconstructed to JPEG.")
                return SelectionResult(self.state, jpeg_bytes=jpeg_bytes)

        result = self._run_pixels(data, num_reps, pixel_params)
        logger.info("Decoded to pixels.")
        return result

    def _run_passthrough(self, data: bytes, num_reps: int, params: DecodeParams) -> bytes | None:
        """Return the reconstructed bytes, or ``None`` after switching to pixels."""
        jpeg_bytes = b""
        for rep in range(num_reps):
            start = time.perf_counter()
            try:
                result = self.decoder.reconstruct_jpeg(data, params)
            except DecodeFailure as e:
                if jpeg_bytes:
                    raise DecodeFailure(
                        f"Lossless JPEG reconstruction failed on repetition {rep} "
                        "after an earlier repetition succeeded",
                        cause=e,
                        context={"repetition": rep},
                    ) from e
                if not self.quiet:
                    log_warning_with_context(
                        "Warning: could not decode losslessly to JPEG. "
                        "Retrying with --pixels-to-jpeg...",
                        {"repetition": rep},
                        logger=logger,
                    )
                logger.debug(f"Passthrough failure: {e}")
                self.state = DecodeState.PIXEL_DECODE
                self.fell_back = True
                return None

            jpeg_bytes = result.jpeg_bytes
            if self.stats is not None:
                self.stats.notify_elapsed(time.perf_counter() - start)
                self.stats.set_image_size(result.info.xsize, result.info.ysize)
                self.stats.set_file_size(len(jpeg_bytes))
        return jpeg_bytes

    def _run_pixels(self, data: bytes, num_reps: int, params: DecodeParams) -> SelectionResult:
        result = None
        for rep in range(num_reps):
            start = time.perf_counter()
            try:
                result = self.decoder.decode_pixels(data, params)
            except DecodeFailure as e:
                raise DecodeFailure(
                    f"Pixel decoding failed on repetition {rep}",
                    cause=e,
                    context={"repetition": rep},
                ) from e
            if self.stats is not None:
                self.stats.notify_elapsed(time.perf_counter() - start)
                self.stats.set_image_size(result.image.info.xsize, result.image.info.ysize)

        return SelectionResult(
            DecodeState.PIXEL_DECODE,
            image=result.image,
            decoded_bytes=result.decoded_bytes,
            fell_back=self.fell_back,
        )
