"""Run orchestration: from a validated request to written artifacts.

Run-scoped state (statistics and the worker pool) lives in a
:class:`RunContext` that is passed explicitly to every component, so a run can
be driven from tests with fakes for the decoder or a pre-built context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .codec import BIT_DEPTH_FROM_CODESTREAM, BIT_DEPTH_FROM_ENCODER, Decoder, DecodeParams
from .decoders import PillowDecoder
from .emitter import ArtifactEmitter
from .encoders import codec_for_extension, encoder_from_extension, output_extension
from .encoders.base import Encoder
from .io import read_input
from .parallel import WorkerPool
from .pixel_format import negotiate_formats
from .request import DecodeRequest
from .stats import RunStatistics
from .strategy import DecodeState, DecodeStrategySelector, initial_state

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Mutable state scoped to one run."""

    pool: WorkerPool
    stats: RunStatistics = field(default_factory=RunStatistics)


@dataclass
class OutputPlan:
    """Where and how the primary output will be written."""

    request: DecodeRequest
    extension: str
    codec: str | None
    start: DecodeState
    encoder: Encoder | None


@dataclass
class RunResult:
    """Outcome of a successful run."""

    state: DecodeState
    fell_back: bool
    written: list[str]
    decoded_bytes: int
    stats: RunStatistics
    worker_threads: int


def plan_output(request: DecodeRequest) -> OutputPlan:
    """Resolve extension, codec, starting strategy and encoder for *request*.

    Netpbm integer targets keep the codestream bit depth unless the user
    picked a depth or a JPEG quality.

    Raises:
        UnsupportedOutputFormat: If an output is requested for an unknown
            extension.
    """
    output_path = request.output_path if request.writes_output else None
    extension = output_extension(output_path, request.output_format)
    codec = codec_for_extension(extension) if request.writes_output else None

    if (
        codec == "pnm"
        and extension != ".pfm"
        and not request.jpeg_quality_set
        and request.bits_per_sample == BIT_DEPTH_FROM_ENCODER
    ):
        request = replace(request, bits_per_sample=BIT_DEPTH_FROM_CODESTREAM)

    encoder = encoder_from_extension(extension) if request.writes_output else None
    start = initial_state(codec, request.pixels_requested)
    return OutputPlan(request, extension, codec, start, encoder)


class DecodeRunner:
    """Decodes one bitstream and writes every requested artifact."""

    def __init__(self, decoder: Decoder | None = None):
        self.decoder = decoder or PillowDecoder()

    def run(self, request: DecodeRequest) -> RunResult:
        """Validate *request*, create the run context and execute the run."""
        request.validate()
        if request.output_path and request.disable_output and not request.quiet:
            logger.warning("Decoding will be performed, but the result will be discarded.")

        data = request.data if request.data is not None else read_input(request.input_path)
        logger.debug(f"Read {len(data)} compressed bytes.")

        with WorkerPool(request.num_threads) as pool:
            return self.run_with_context(request, data, RunContext(pool=pool))

    def run_with_context(
        self, request: DecodeRequest, data: bytes, context: RunContext
    ) -> RunResult:
        plan = plan_output(request)
        request = plan.request

        negotiated = negotiate_formats(plan.encoder, request.alpha_blend)
        passthrough_params = DecodeParams(
            allow_partial_input=request.allow_partial_files,
            pool=context.pool,
        )
        pixel_params = DecodeParams(
            accepted_formats=negotiated.accepted,
            cmyk_color_space=negotiated.cmyk_color_space,
            bits_per_sample=request.bits_per_sample,
            max_downsampling=request.downsampling,
            display_nits=request.display_nits,
            color_space=request.color_space,
            render_spotcolors=request.render_spotcolors,
            coalescing=request.coalescing,
            allow_partial_input=request.allow_partial_files,
            pool=context.pool,
        )

        selector = DecodeStrategySelector(self.decoder, context.stats, quiet=request.quiet)
        selection = selector.run(
            data, request.num_reps, plan.start, passthrough_params, pixel_params
        )

        emitter = ArtifactEmitter(request, plan.extension, plan.encoder)
        report = emitter.emit(selection)

        return RunResult(
            state=selection.state,
            fell_back=selection.fell_back,
            written=report.written,
            decoded_bytes=selection.decoded_bytes,
            stats=context.stats,
            worker_threads=context.pool.num_worker_threads,
        )
