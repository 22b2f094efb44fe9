"""PNG and animated PNG output via Pillow."""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image

from ..codec import DecodedImage
from ..pixel_format import DataType, Endianness, PixelFormat
from .base import EncodedArtifactSet, Encoder, array_to_pil, to_full_range

logger = logging.getLogger(__name__)


def _save_png(img: Image.Image, **params) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format="PNG", **params)
    return buffer.getvalue()


class PNGEncoder(Encoder):
    """Still PNG: one file per frame, extra channels as grayscale PNGs."""

    CODEC = "png"
    EXTENSIONS = (".png",)
    DESCRIPTION = "Portable Network Graphics, one file per frame"

    def accepted_formats(self) -> list[PixelFormat]:
        formats = [
            PixelFormat(num_channels, DataType.UINT8, Endianness.BIG)
            for num_channels in (1, 2, 3, 4)
        ]
        # Pillow writes 16-bit PNG for grayscale only
        formats.append(PixelFormat(1, DataType.UINT16, Endianness.BIG))
        return formats

    def _save_params(self, image: DecodedImage) -> dict:
        params: dict = {}
        if image.icc:
            params["icc_profile"] = image.icc
        if image.metadata.get("exif"):
            params["exif"] = image.metadata["exif"]
        return params

    def _frame_images(self, image: DecodedImage) -> list[Image.Image]:
        bits = image.info.bits_per_sample
        return [
            array_to_pil(to_full_range(frame.pixels, image.pixel_format, bits))
            for frame in image.frames
        ]

    def _channel_images(self, image: DecodedImage) -> list[list[Image.Image]]:
        result = []
        for channel in image.extra_channels:
            result.append([array_to_pil(plane) for plane in channel.frames])
        return result

    def _preview(self, image: DecodedImage) -> bytes:
        if image.preview is None:
            return b""
        return _save_png(array_to_pil(np.asarray(image.preview)))

    def encode(self, image: DecodedImage) -> EncodedArtifactSet:
        params = self._save_params(image)
        bitstreams = [_save_png(img, **params) for img in self._frame_images(image)]
        extra = [
            [_save_png(img) for img in planes] for planes in self._channel_images(image)
        ]
        logger.debug(
            f"Encoded {len(bitstreams)} PNG frame(s), {len(extra)} extra channel(s)"
        )
        return EncodedArtifactSet(
            bitstreams=bitstreams,
            extra_channel_bitstreams=extra,
            preview_bitstream=self._preview(image),
        )


class APNGEncoder(PNGEncoder):
    """Animated PNG: all frames in a single file."""

    CODEC = "apng"
    EXTENSIONS = (".apng",)
    DESCRIPTION = "Animated PNG, all frames in one file"

    @staticmethod
    def _save_animation(images: list[Image.Image], durations: list[int], **params) -> bytes:
        if len(images) == 1:
            return _save_png(images[0], **params)
        return _save_png(
            images[0],
            save_all=True,
            append_images=images[1:],
            duration=durations,
            loop=0,
            **params,
        )

    def encode(self, image: DecodedImage) -> EncodedArtifactSet:
        durations = [max(frame.duration_ms, 1) for frame in image.frames]
        params = self._save_params(image)
        bitstream = self._save_animation(self._frame_images(image), durations, **params)
        extra = [
            [self._save_animation(planes, durations)]
            for planes in self._channel_images(image)
        ]
        return EncodedArtifactSet(
            bitstreams=[bitstream],
            extra_channel_bitstreams=extra,
            preview_bitstream=self._preview(image),
        )
