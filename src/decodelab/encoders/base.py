"""Output encoder interface.

Each target format gets one concrete :class:`Encoder`. Encoders declare the
pixel formats they can write so that the decoder produces a buffer they can
consume without conversion, and are selected by file extension through
:mod:`decodelab.encoders.registry`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np
from PIL import Image

from ..codec import DecodedImage
from ..pixel_format import DataType, PixelFormat


@dataclass
class EncodedArtifactSet:
    """Bitstreams produced by one encode call."""

    #: One entry per output frame
    bitstreams: list[bytes] = field(default_factory=list)
    #: Outer list per extra channel, inner list per frame
    extra_channel_bitstreams: list[list[bytes]] = field(default_factory=list)
    preview_bitstream: bytes = b""
    metadata: bytes = b""


class Encoder(ABC):
    """Common behaviour for every output encoder.

    Sub-classes should stay cheap to construct; options are applied with
    :meth:`set_option` before :meth:`encode` is called.
    """

    #: Codec family, e.g. ``"png"`` or ``"jpeg"``
    CODEC: str = "encoder"
    #: Lower-case file extensions (with leading dot) handled by this encoder
    EXTENSIONS: tuple[str, ...] = ()
    #: One-line description used by ``decodelab formats``
    DESCRIPTION: str = ""

    def __init__(self, extension: str | None = None) -> None:
        self.extension = extension or (self.EXTENSIONS[0] if self.EXTENSIONS else "")
        self.options: dict[str, str] = {}

    @abstractmethod
    def accepted_formats(self) -> list[PixelFormat]:
        """Return the pixel formats this encoder can write, best first."""

    def accepts_cmyk(self) -> bool:
        return False

    def set_option(self, key: str, value: str) -> None:
        """Store an encoder option; unknown keys are ignored by encoders."""
        self.options[key] = value

    @abstractmethod
    def encode(self, image: DecodedImage) -> EncodedArtifactSet:
        """Encode *image* into bitstreams."""


# ---------------------------------------------------------------------------
# Helpers shared by the Pillow-based encoders
# ---------------------------------------------------------------------------

_CONTAINER_BITS = {DataType.UINT8: 8, DataType.UINT16: 16}


def to_full_range(pixels: np.ndarray, fmt: PixelFormat, bits_per_sample: int) -> np.ndarray:
    """Stretch integer samples stored with *bits_per_sample* to the container range.

    Samples decoded at their original bit depth (e.g. 10-bit values in a
    16-bit container) would otherwise look dark in formats without a
    significant-bits field.
    """
    container = _CONTAINER_BITS.get(fmt.data_type)
    if container is None or bits_per_sample >= container or bits_per_sample <= 0:
        return pixels
    scale = ((1 << container) - 1) / ((1 << bits_per_sample) - 1)
    return np.clip(np.rint(pixels.astype(np.float32) * scale), 0, (1 << container) - 1).astype(
        pixels.dtype
    )


def array_to_pil(pixels: np.ndarray, cmyk: bool = False) -> Image.Image:
    """Convert an ``H x W x C`` (or ``H x W``) integer array to a Pillow image."""
    if pixels.ndim == 3 and pixels.shape[-1] == 1:
        pixels = pixels[..., 0]
    size = (pixels.shape[1], pixels.shape[0])

    if pixels.ndim == 2:
        if pixels.dtype.itemsize == 2:
            # I;16 is little-endian regardless of the host
            return Image.frombytes("I;16", size, pixels.astype("<u2").tobytes())
        return Image.frombytes("L", size, pixels.astype(np.uint8).tobytes())

    channels = pixels.shape[-1]
    mode = {2: "LA", 3: "RGB", 4: "CMYK" if cmyk else "RGBA"}[channels]
    return Image.frombytes(mode, size, pixels.astype(np.uint8).tobytes())
