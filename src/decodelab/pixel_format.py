"""Pixel format candidates and their negotiation with the output encoder.

The encoder declares which sample layouts it can write; the negotiator widens
that list where alpha blending needs an alpha channel and hands the result to
the decoder, which picks one candidate per image with :func:`choose_format`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from .config import DEFAULT_DECODE_CONFIG
from .error_handling import DecodeFailure

if TYPE_CHECKING:
    from .encoders.base import Encoder


class DataType(Enum):
    """Sample type of one channel."""

    UINT8 = "uint8"
    UINT16 = "uint16"
    FLOAT16 = "float16"
    FLOAT = "float32"

    @property
    def is_float(self) -> bool:
        return self in (DataType.FLOAT16, DataType.FLOAT)


class Endianness(Enum):
    """Byte order of multi-byte samples."""

    NATIVE = "native"
    LITTLE = "little"
    BIG = "big"


@dataclass(frozen=True)
class PixelFormat:
    """One acceptable sample layout: channels, type, byte order, row alignment."""

    num_channels: int
    data_type: DataType
    endianness: Endianness = Endianness.NATIVE
    align: int = 0

    def numpy_dtype(self) -> np.dtype:
        """Return the numpy dtype with this format's byte order applied."""
        dtype = np.dtype(self.data_type.value)
        if dtype.itemsize == 1 or self.endianness is Endianness.NATIVE:
            return dtype
        return dtype.newbyteorder("<" if self.endianness is Endianness.LITTLE else ">")

    @property
    def has_alpha(self) -> bool:
        return self.num_channels in (2, 4)


@dataclass(frozen=True)
class NegotiatedFormats:
    """Result of format negotiation handed to the decoder."""

    accepted: tuple[PixelFormat, ...]
    accepts_cmyk: bool
    cmyk_color_space: str | None = None


def add_formats_with_alpha(formats: Sequence[PixelFormat]) -> list[PixelFormat]:
    """Return *formats* extended with an alpha variant of each gray/color entry.

    A 1- or 3-channel candidate gains a 2- or 4-channel twin with the same
    sample type, byte order and alignment, unless an equal candidate is
    already present. Order of the original entries is preserved.
    """
    result = list(formats)
    for fmt in formats:
        if fmt.num_channels in (1, 3):
            widened = replace(fmt, num_channels=fmt.num_channels + 1)
            if widened not in result:
                result.append(widened)
    return result


def discard_formats() -> list[PixelFormat]:
    """Float formats for every channel count, used when no file is written."""
    return [
        PixelFormat(num_channels, DataType.FLOAT, endianness, align=0)
        for num_channels in (1, 2, 3, 4)
        for endianness in (Endianness.BIG, Endianness.LITTLE)
    ]


def negotiate_formats(
    encoder: Encoder | None,
    alpha_blend: bool,
    cmyk_fallback: str = DEFAULT_DECODE_CONFIG.CMYK_FALLBACK_COLOR_SPACE,
) -> NegotiatedFormats:
    """Build the candidate list passed to the decoder.

    Without an encoder (decode-only mode) the encoder's formats are irrelevant
    and :func:`discard_formats` is used instead.
    """
    if encoder is None:
        return NegotiatedFormats(
            accepted=tuple(discard_formats()),
            accepts_cmyk=False,
            cmyk_color_space=cmyk_fallback,
        )

    accepted = list(dict.fromkeys(encoder.accepted_formats()))
    if alpha_blend:
        accepted = add_formats_with_alpha(accepted)

    accepts_cmyk = encoder.accepts_cmyk()
    return NegotiatedFormats(
        accepted=tuple(accepted),
        accepts_cmyk=accepts_cmyk,
        cmyk_color_space=None if accepts_cmyk else cmyk_fallback,
    )


# Channel counts to try, best first, for a source with N channels
_CHANNEL_PREFERENCE = {
    1: (1, 2, 3, 4),
    2: (2, 1, 4, 3),
    3: (3, 4, 1, 2),
    4: (4, 3, 2, 1),
}


def _type_preference(bits_per_sample: int, float_samples: bool) -> tuple[DataType, ...]:
    if float_samples or bits_per_sample > 16:
        return (DataType.FLOAT, DataType.FLOAT16, DataType.UINT16, DataType.UINT8)
    if bits_per_sample > 8:
        return (DataType.UINT16, DataType.FLOAT, DataType.FLOAT16, DataType.UINT8)
    return (DataType.UINT8, DataType.UINT16, DataType.FLOAT, DataType.FLOAT16)


def choose_format(
    accepted: Iterable[PixelFormat],
    num_channels: int,
    bits_per_sample: int = 8,
    float_samples: bool = False,
) -> PixelFormat:
    """Pick the accepted candidate that best fits a source image.

    An exact channel match wins; otherwise alpha is dropped or added, then
    gray and color are swapped. Within a channel count the narrowest sample
    type that still holds *bits_per_sample* is preferred.
    """
    candidates = list(accepted)
    if not candidates:
        raise DecodeFailure("No accepted pixel formats to decode into")

    types = _type_preference(bits_per_sample, float_samples)
    for channels in _CHANNEL_PREFERENCE.get(num_channels, (num_channels,)):
        matching = [c for c in candidates if c.num_channels == channels]
        if not matching:
            continue
        for data_type in types:
            for candidate in matching:
                if candidate.data_type is data_type:
                    return candidate
        return matching[0]

    return candidates[0]
