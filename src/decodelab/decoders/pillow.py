"""Pillow-backed decoder.

Decodes any raster bitstream Pillow (or a registered Pillow plugin) can open.
Lossless passthrough is possible when the bitstream is itself a JPEG, in which
case it is returned byte for byte.
"""

from __future__ import annotations

import io
import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import numpy as np
from PIL import Image, ImageFile, ImageSequence

from ..codec import (
    BIT_DEPTH_FROM_CODESTREAM,
    BIT_DEPTH_FROM_ENCODER,
    DecodedImage,
    DecodeParams,
    Decoder,
    ExtraChannel,
    Frame,
    ImageInfo,
    PassthroughResult,
    PixelResult,
)
from ..error_handling import DecodeFailure, ErrorLevel, error_context
from ..pixel_format import DataType, Endianness, PixelFormat, choose_format

logger = logging.getLogger(__name__)

JPEG_EOI = b"\xff\xd9"

# ITU-R 601 luma weights, the same ones Pillow uses for RGB -> L
_LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float32)

_SIXTEEN_BIT_MODES = {"I;16", "I;16B", "I;16L", "I;16N"}


@dataclass
class _Source:
    """Sample layout of the bitstream after mode normalization."""

    mode: str
    channels: int
    bits: int
    float_samples: bool = False

    @property
    def has_alpha(self) -> bool:
        return self.channels in (2, 4)

    @property
    def sample_max(self) -> float:
        return 1.0 if self.float_samples else float((1 << self.bits) - 1)


def _source_layout(img: Image.Image) -> _Source:
    mode = img.mode
    if mode in _SIXTEEN_BIT_MODES or mode == "I":
        return _Source(mode, 1, 16)
    if mode == "F":
        return _Source(mode, 1, 32, float_samples=True)
    if mode in ("1", "L"):
        return _Source("L", 1, 8)
    if mode in ("LA", "La"):
        return _Source("LA", 2, 8)
    if mode == "RGB":
        return _Source("RGB", 3, 8)
    if mode in ("RGBA", "RGBa", "PA"):
        return _Source("RGBA", 4, 8)
    if "transparency" in img.info:
        return _Source("RGBA", 4, 8)
    return _Source("RGB", 3, 8)


def _to_float(img: Image.Image, src: _Source) -> np.ndarray:
    """Return samples of *img* as ``H x W x C`` floats in [0, 1]."""
    if img.mode != src.mode and src.mode in ("L", "LA", "RGB", "RGBA"):
        img = img.convert(src.mode)
    arr = np.asarray(img)
    if src.bits == 16 and not src.float_samples:
        arr = np.clip(arr, 0, 65535)
    arr = arr.astype(np.float32) / src.sample_max
    if arr.ndim == 2:
        arr = arr[..., np.newaxis]
    return arr


def _adapt_channels(arr: np.ndarray, target: int) -> np.ndarray:
    """Add/drop alpha and convert gray <-> color to reach *target* channels."""
    channels = arr.shape[-1]
    has_alpha = channels in (2, 4)
    color = arr[..., : channels - 1] if has_alpha else arr
    alpha = arr[..., -1:] if has_alpha else np.ones(arr.shape[:2] + (1,), np.float32)

    want_color = 3 if target in (3, 4) else 1
    if color.shape[-1] == 1 and want_color == 3:
        color = np.repeat(color, 3, axis=-1)
    elif color.shape[-1] == 3 and want_color == 1:
        color = (color @ _LUMA)[..., np.newaxis]

    if target in (2, 4):
        return np.concatenate([color, alpha], axis=-1)
    return color


def _quantize(arr: np.ndarray, fmt: PixelFormat, bits: int) -> np.ndarray:
    if fmt.data_type.is_float:
        return arr.astype(fmt.numpy_dtype())
    maxval = float((1 << bits) - 1)
    return np.rint(np.clip(arr, 0.0, 1.0) * maxval).astype(fmt.numpy_dtype())


def _output_bits(fmt: PixelFormat, src: _Source, policy: int) -> int:
    if fmt.data_type.is_float:
        return 32 if fmt.data_type is DataType.FLOAT else 16
    container = 8 if fmt.data_type is DataType.UINT8 else 16
    if policy == BIT_DEPTH_FROM_ENCODER:
        return container
    if policy == BIT_DEPTH_FROM_CODESTREAM:
        return min(src.bits, container)
    return min(policy, container)


class PillowDecoder(Decoder):
    """Decoder backed by Pillow's image plugins."""

    NAME = "pillow"

    @contextmanager
    def _open(
        self,
        data: bytes,
        params: DecodeParams,
        operation: str,
        level: ErrorLevel = ErrorLevel.ERROR,
    ) -> Any:
        previous = ImageFile.LOAD_TRUNCATED_IMAGES
        ImageFile.LOAD_TRUNCATED_IMAGES = params.allow_partial_input
        try:
            with error_context(operation, DecodeFailure, level, logger=logger):
                with Image.open(io.BytesIO(data)) as img:
                    yield img
        finally:
            ImageFile.LOAD_TRUNCATED_IMAGES = previous

    # ------------------------------------------------------------------
    # Passthrough
    # ------------------------------------------------------------------
    def reconstruct_jpeg(self, data: bytes, params: DecodeParams) -> PassthroughResult:
        # the caller falls back to pixels on failure and reports it
        with self._open(data, params, "reconstruct JPEG", ErrorLevel.DEBUG) as img:
            if img.format != "JPEG":
                raise DecodeFailure(
                    f"{img.format or 'unknown'} bitstream carries no JPEG reconstruction data"
                )
            if not params.allow_partial_input and not data.rstrip(b"\x00").endswith(JPEG_EOI):
                raise DecodeFailure("JPEG bitstream is truncated")
            src = _source_layout(img)
            info = ImageInfo(
                xsize=img.width,
                ysize=img.height,
                bits_per_sample=8,
                num_color_channels=1 if src.channels <= 2 else 3,
                is_cmyk=img.mode == "CMYK",
            )
        return PassthroughResult(jpeg_bytes=bytes(data), info=info)

    # ------------------------------------------------------------------
    # Pixel decoding
    # ------------------------------------------------------------------
    def decode_pixels(self, data: bytes, params: DecodeParams) -> PixelResult:
        with self._open(data, params, "decode pixels") as img:
            if params.max_downsampling > 1 and img.format == "JPEG":
                ratio = params.max_downsampling
                img.draft(img.mode, (math.ceil(img.width / ratio), math.ceil(img.height / ratio)))

            if params.color_space:
                logger.debug(f"Passing color space {params.color_space} through unchanged")
            if params.display_nits:
                logger.debug("Tone mapping is not applied by the pillow backend")
            if not params.coalescing:
                logger.debug("Pillow always returns coalesced frames")

            pil_frames = [
                (frame.copy(), int(frame.info.get("duration", 0) or 0))
                for frame in ImageSequence.Iterator(img)
            ]
            # chunks after the image data are only parsed once frames are loaded
            icc = img.info.get("icc_profile") or b""
            metadata = self._metadata_boxes(img)

        image = self._pack(pil_frames, params)
        image.icc = icc
        image.orig_icc = icc
        image.metadata = metadata
        image.color_space = params.color_space
        return PixelResult(image=image, decoded_bytes=len(data))

    @staticmethod
    def _metadata_boxes(img: Image.Image) -> dict[str, bytes]:
        boxes: dict[str, bytes] = {}
        exif = img.info.get("exif")
        if exif:
            boxes["exif"] = bytes(exif)
        xmp = img.info.get("xmp") or img.info.get("XML:com.adobe.xmp")
        if xmp:
            boxes["xmp"] = xmp.encode("utf-8") if isinstance(xmp, str) else bytes(xmp)
        return boxes

    def _pack(self, pil_frames: list[tuple[Image.Image, int]], params: DecodeParams) -> DecodedImage:
        first = pil_frames[0][0]
        is_cmyk = first.mode == "CMYK"
        if is_cmyk and params.cmyk_color_space is None:
            return self._pack_cmyk(pil_frames, params)

        src = _source_layout(first)
        fmt = choose_format(
            params.accepted_formats, src.channels, src.bits, src.float_samples
        )
        bits = _output_bits(fmt, src, params.bits_per_sample)
        alpha_to_extra = src.has_alpha and not fmt.has_alpha
        alpha_fmt = PixelFormat(
            1, DataType.UINT8 if bits <= 8 else DataType.UINT16, Endianness.BIG
        )
        alpha_bits = min(bits, 16)

        def convert(item: tuple[Image.Image, int]) -> tuple[Frame, np.ndarray | None]:
            pil_img, duration = item
            arr = _to_float(pil_img, _source_layout(pil_img))
            if arr.shape[-1] != src.channels:
                arr = _adapt_channels(arr, src.channels)
            pixels = _quantize(_adapt_channels(arr, fmt.num_channels), fmt, bits)
            alpha = None
            if alpha_to_extra:
                alpha = _quantize(arr[..., -1], alpha_fmt, alpha_bits)
            return Frame(pixels, duration), alpha

        pool = params.pool
        converted = pool.map(convert, pil_frames) if pool else [convert(f) for f in pil_frames]

        extra_channels = []
        if alpha_to_extra:
            extra_channels.append(
                ExtraChannel(
                    name="alpha",
                    kind="alpha",
                    frames=[alpha for _, alpha in converted],
                    bits_per_sample=alpha_bits,
                )
            )

        info = ImageInfo(
            xsize=first.width,
            ysize=first.height,
            bits_per_sample=bits,
            float_samples=fmt.data_type.is_float,
            num_color_channels=3 if fmt.num_channels >= 3 else 1,
            has_alpha=src.has_alpha,
            is_cmyk=False,
        )
        logger.debug(
            f"Decoded {len(converted)} frame(s) {info.xsize}x{info.ysize} into {fmt}"
        )
        return DecodedImage(
            info=info,
            pixel_format=fmt,
            frames=[frame for frame, _ in converted],
            extra_channels=extra_channels,
        )

    @staticmethod
    def _pack_cmyk(pil_frames: list[tuple[Image.Image, int]], params: DecodeParams) -> DecodedImage:
        fmt = PixelFormat(4, DataType.UINT8, Endianness.BIG)
        frames = [
            Frame(np.asarray(pil_img.convert("CMYK"), dtype=np.uint8), duration)
            for pil_img, duration in pil_frames
        ]
        first = pil_frames[0][0]
        info = ImageInfo(
            xsize=first.width,
            ysize=first.height,
            bits_per_sample=8,
            num_color_channels=4,
            is_cmyk=True,
        )
        return DecodedImage(info=info, pixel_format=fmt, frames=frames)
