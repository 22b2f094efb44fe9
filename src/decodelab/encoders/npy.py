"""NumPy ``.npy`` output with a JSON metadata side-car."""

from __future__ import annotations

import io
import json

import numpy as np

from ..codec import DecodedImage
from ..pixel_format import DataType, Endianness, PixelFormat
from .base import EncodedArtifactSet, Encoder


def _normalized(pixels: np.ndarray, bits_per_sample: int) -> np.ndarray:
    if pixels.dtype.kind == "f":
        return pixels.astype(np.float32)
    return pixels.astype(np.float32) / float((1 << bits_per_sample) - 1)


class NumPyEncoder(Encoder):
    """All frames and extra channels in one ``frames x H x W x C`` float array.

    Extra channels are appended after the color channels. The metadata JSON
    describes frame timing and channel layout.
    """

    CODEC = "npy"
    EXTENSIONS = (".npy",)
    DESCRIPTION = "NumPy float32 array (frames x height x width x channels)"

    def accepted_formats(self) -> list[PixelFormat]:
        return [
            PixelFormat(num_channels, DataType.FLOAT, Endianness.LITTLE)
            for num_channels in (1, 2, 3, 4)
        ]

    def encode(self, image: DecodedImage) -> EncodedArtifactSet:
        bits = image.info.bits_per_sample
        frames = []
        for index, frame in enumerate(image.frames):
            pixels = frame.pixels if frame.pixels.ndim == 3 else frame.pixels[..., np.newaxis]
            planes = [_normalized(pixels, bits)]
            for channel in image.extra_channels:
                plane = _normalized(channel.frames[index], channel.bits_per_sample)
                planes.append(plane[..., np.newaxis])
            frames.append(np.concatenate(planes, axis=-1))

        buffer = io.BytesIO()
        np.save(buffer, np.stack(frames).astype("<f4"), allow_pickle=False)

        metadata = {
            "xsize": image.info.xsize,
            "ysize": image.info.ysize,
            "bits_per_sample": bits,
            "color_channels": image.pixel_format.num_channels,
            "frames": [
                {"duration_ms": frame.duration_ms, "name": frame.name}
                for frame in image.frames
            ],
            "extra_channels": [
                {"name": channel.name, "type": channel.kind, "bits_per_sample": channel.bits_per_sample}
                for channel in image.extra_channels
            ],
        }
        return EncodedArtifactSet(
            bitstreams=[buffer.getvalue()],
            metadata=json.dumps(metadata, indent=2).encode("utf-8"),
        )
