"""Lossy JPEG output via Pillow (libjpeg)."""

from __future__ import annotations

import io
import logging

from ..codec import DecodedImage
from ..config import DEFAULT_DECODE_CONFIG
from ..error_handling import EncodeFailure, error_context
from ..pixel_format import DataType, Endianness, PixelFormat
from .base import EncodedArtifactSet, Encoder, array_to_pil, to_full_range

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("libjpeg",)


class JPEGEncoder(Encoder):
    """Baseline JPEG, one file per frame.

    Options:
        ``q`` -- quality 0-100 (default 95)
        ``jpeg_encoder`` -- backend name; only ``libjpeg`` ships with Pillow
    """

    CODEC = "jpeg"
    EXTENSIONS = (".jpg", ".jpeg")
    DESCRIPTION = "JPEG (lossless reconstruction or re-encoded pixels)"

    def accepted_formats(self) -> list[PixelFormat]:
        return [
            PixelFormat(1, DataType.UINT8, Endianness.BIG),
            PixelFormat(3, DataType.UINT8, Endianness.BIG),
        ]

    def accepts_cmyk(self) -> bool:
        return True

    def _quality(self) -> int:
        raw = self.options.get("q", str(DEFAULT_DECODE_CONFIG.JPEG_QUALITY))
        try:
            quality = int(raw)
        except ValueError as e:
            raise EncodeFailure(f"Invalid JPEG quality {raw!r}", cause=e) from e
        if not 0 <= quality <= 100:
            raise EncodeFailure(f"JPEG quality must be in 0-100, got {quality}")
        return quality

    def encode(self, image: DecodedImage) -> EncodedArtifactSet:
        backend = self.options.get("jpeg_encoder", "libjpeg")
        if backend not in SUPPORTED_BACKENDS:
            raise EncodeFailure(
                f"JPEG encoder backend '{backend}' is not available "
                f"(supported: {', '.join(SUPPORTED_BACKENDS)})",
                context={"jpeg_encoder": backend},
            )

        quality = self._quality()
        params: dict = {"quality": quality}
        if image.icc:
            params["icc_profile"] = image.icc
        if image.metadata.get("exif"):
            params["exif"] = image.metadata["exif"]

        bitstreams = []
        with error_context("encode JPEG", EncodeFailure, logger=logger):
            for frame in image.frames:
                pixels = to_full_range(frame.pixels, image.pixel_format, image.info.bits_per_sample)
                img = array_to_pil(pixels, cmyk=image.info.is_cmyk)
                buffer = io.BytesIO()
                img.save(buffer, format="JPEG", **params)
                bitstreams.append(buffer.getvalue())

        logger.debug(f"Encoded {len(bitstreams)} JPEG frame(s) at quality {quality}")
        return EncodedArtifactSet(bitstreams=bitstreams)
