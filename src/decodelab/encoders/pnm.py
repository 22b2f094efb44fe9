"""Netpbm family output: PGM, PPM, PNM, PAM and PFM.

The formats are simple enough to write directly from the numpy buffer, which
also keeps the original bit depth through MAXVAL.
"""

from __future__ import annotations

import numpy as np

from ..codec import DecodedImage
from ..error_handling import EncodeFailure
from ..pixel_format import DataType, Endianness, PixelFormat
from .base import EncodedArtifactSet, Encoder

_PAM_TUPLTYPES = {1: "GRAYSCALE", 2: "GRAYSCALE_ALPHA", 3: "RGB", 4: "RGB_ALPHA"}

_CHANNELS_BY_EXTENSION = {
    ".pgm": (1,),
    ".ppm": (3,),
    ".pnm": (1, 3),
    ".pam": (1, 2, 3, 4),
}


def _maxval(pixels: np.ndarray, bits_per_sample: int) -> int:
    container = pixels.dtype.itemsize * 8
    bits = bits_per_sample if 0 < bits_per_sample <= container else container
    return (1 << bits) - 1


def _samples(pixels: np.ndarray) -> bytes:
    # Netpbm stores multi-byte samples most significant byte first
    if pixels.dtype.itemsize == 2:
        return pixels.astype(">u2").tobytes()
    return pixels.astype(np.uint8).tobytes()


def encode_pnm(pixels: np.ndarray, bits_per_sample: int) -> bytes:
    """Encode a gray (P5) or RGB (P6) plane."""
    if pixels.ndim == 3 and pixels.shape[-1] == 1:
        pixels = pixels[..., 0]
    height, width = pixels.shape[:2]
    magic = "P5" if pixels.ndim == 2 else "P6"
    header = f"{magic}\n{width} {height}\n{_maxval(pixels, bits_per_sample)}\n"
    return header.encode("ascii") + _samples(pixels)


def encode_pam(pixels: np.ndarray, bits_per_sample: int) -> bytes:
    """Encode a 1-4 channel plane as PAM (P7)."""
    if pixels.ndim == 2:
        pixels = pixels[..., np.newaxis]
    height, width, depth = pixels.shape
    header = (
        f"P7\nWIDTH {width}\nHEIGHT {height}\nDEPTH {depth}\n"
        f"MAXVAL {_maxval(pixels, bits_per_sample)}\n"
        f"TUPLTYPE {_PAM_TUPLTYPES[depth]}\nENDHDR\n"
    )
    return header.encode("ascii") + _samples(pixels)


def encode_pfm(pixels: np.ndarray) -> bytes:
    """Encode float samples as PFM, little-endian, bottom row first."""
    if pixels.ndim == 3 and pixels.shape[-1] == 1:
        pixels = pixels[..., 0]
    height, width = pixels.shape[:2]
    magic = "Pf" if pixels.ndim == 2 else "PF"
    header = f"{magic}\n{width} {height}\n-1.0\n"
    return header.encode("ascii") + np.flipud(pixels).astype("<f4").tobytes()


class PNMEncoder(Encoder):
    """Netpbm writer; the extension picks the flavour."""

    CODEC = "pnm"
    EXTENSIONS = (".pgm", ".ppm", ".pnm", ".pam", ".pfm")
    DESCRIPTION = "Netpbm (PGM/PPM/PNM/PAM, PFM for float samples)"

    def accepted_formats(self) -> list[PixelFormat]:
        if self.extension == ".pfm":
            return [
                PixelFormat(num_channels, DataType.FLOAT, endianness)
                for num_channels in (1, 3)
                for endianness in (Endianness.LITTLE, Endianness.BIG)
            ]
        channels = _CHANNELS_BY_EXTENSION.get(self.extension, (1, 3))
        return [
            PixelFormat(num_channels, data_type, Endianness.BIG)
            for num_channels in channels
            for data_type in (DataType.UINT8, DataType.UINT16)
        ]

    def _encode_plane(self, pixels: np.ndarray, bits_per_sample: int) -> bytes:
        if self.extension == ".pfm":
            return encode_pfm(pixels)
        if self.extension == ".pam":
            return encode_pam(pixels, bits_per_sample)
        if pixels.ndim == 3 and pixels.shape[-1] not in (1, 3):
            raise EncodeFailure(
                f"{self.extension} cannot hold {pixels.shape[-1]} channels",
                context={"extension": self.extension},
            )
        return encode_pnm(pixels, bits_per_sample)

    def encode(self, image: DecodedImage) -> EncodedArtifactSet:
        bits = image.info.bits_per_sample
        bitstreams = [self._encode_plane(frame.pixels, bits) for frame in image.frames]

        extra = []
        for channel in image.extra_channels:
            if self.extension == ".pfm":
                scale = float((1 << channel.bits_per_sample) - 1)
                planes = [
                    encode_pfm(plane.astype(np.float32) / scale) for plane in channel.frames
                ]
            else:
                planes = [encode_pnm(plane, channel.bits_per_sample) for plane in channel.frames]
            extra.append(planes)

        preview = b""
        if image.preview is not None and self.extension != ".pfm":
            preview = encode_pam(np.asarray(image.preview), 8)

        return EncodedArtifactSet(
            bitstreams=bitstreams,
            extra_channel_bitstreams=extra,
            preview_bitstream=preview,
        )
