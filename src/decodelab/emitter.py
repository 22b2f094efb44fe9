"""Artifact emission: encode the decoded image and write every output file."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .alpha_blend import alpha_blend
from .codec import DecodedImage
from .color import parse_background_color
from .encoders.base import EncodedArtifactSet, Encoder
from .error_handling import EncodeFailure, error_context
from .io import write_optional_output, write_output
from .naming import output_filename
from .request import DecodeRequest
from .strategy import DecodeState, SelectionResult

logger = logging.getLogger(__name__)


@dataclass
class EmitReport:
    """Paths written by one emission, in write order."""

    written: list[str] = field(default_factory=list)


class ArtifactEmitter:
    """Writes the outputs of a run once the decode strategy has settled."""

    def __init__(self, request: DecodeRequest, extension: str, encoder: Encoder | None):
        self.request = request
        self.extension = extension
        self.encoder = encoder

    def emit(self, selection: SelectionResult) -> EmitReport:
        if selection.state is DecodeState.ATTEMPT_PASSTHROUGH:
            return self._emit_passthrough(selection.jpeg_bytes)
        if self.encoder is None or selection.image is None:
            # decode-only run, nothing to persist
            return EmitReport()
        return self._emit_pixels(selection.image)

    def _emit_passthrough(self, jpeg_bytes: bytes) -> EmitReport:
        report = EmitReport()
        if self.request.writes_output and jpeg_bytes:
            write_output(self.request.output_path, jpeg_bytes)
            report.written.append(self.request.output_path)
            logger.debug(f"Wrote output to {self.request.output_path}")
        return report

    def prepare_image(self, image: DecodedImage) -> DecodedImage:
        """Apply alpha blending when requested.

        The background is parsed before touching the buffer, so a malformed
        color aborts the blend without producing any output.
        """
        if not self.request.alpha_blend:
            return image
        background = parse_background_color(self.request.background)
        return alpha_blend(image, background)

    def encode(self, image: DecodedImage) -> EncodedArtifactSet:
        self.encoder.set_option("q", str(self.request.jpeg_quality))
        if self.request.use_sjpeg:
            self.encoder.set_option("jpeg_encoder", "sjpeg")
        logger.debug("Encoding decoded image")
        with error_context(
            "encode decoded image",
            EncodeFailure,
            context={"extension": self.extension},
            logger=logger,
        ):
            return self.encoder.encode(image)

    def layer_and_frame_counts(self, encoded: EncodedArtifactSet) -> tuple[int, int]:
        num_layers = (
            1 + len(encoded.extra_channel_bitstreams)
            if self.request.output_extra_channels
            else 1
        )
        num_frames = (
            len(encoded.bitstreams)
            if self.request.output_frames or not self.request.coalescing
            else 1
        )
        return num_layers, num_frames

    def _emit_pixels(self, image: DecodedImage) -> EmitReport:
        image = self.prepare_image(image)
        encoded = self.encode(image)
        if not encoded.bitstreams:
            raise EncodeFailure("Encoder produced no bitstreams")

        report = EmitReport()
        num_layers, num_frames = self.layer_and_frame_counts(encoded)
        for layer in range(num_layers):
            for frame in range(num_frames):
                bitstream = (
                    encoded.bitstreams[frame]
                    if layer == 0
                    else encoded.extra_channel_bitstreams[layer - 1][frame]
                )
                name = output_filename(
                    self.request.output_path,
                    self.extension,
                    layer,
                    frame,
                    num_layers,
                    num_frames,
                )
                write_output(name, bitstream)
                report.written.append(name)
                logger.debug(f"Wrote output to {name}")

        optional = (
            (self.request.preview_out, encoded.preview_bitstream),
            (self.request.icc_out, image.icc),
            (self.request.orig_icc_out, image.orig_icc),
            (self.request.metadata_out, encoded.metadata),
        )
        for path, data in optional:
            if write_optional_output(path, data):
                report.written.append(path)
        return report
