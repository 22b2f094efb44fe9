"""Decoder contract and the in-memory image it produces.

The codec itself (bit reading, entropy decoding, reconstruction) lives behind
:class:`Decoder`. Orchestration code only ever talks to this interface so that
backends can be swapped and faked in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from .pixel_format import PixelFormat

if TYPE_CHECKING:
    from .parallel import WorkerPool

# bits_per_sample policies
BIT_DEPTH_FROM_ENCODER = -1
BIT_DEPTH_FROM_CODESTREAM = 0


@dataclass
class ImageInfo:
    """Basic information about a decoded image."""

    xsize: int
    ysize: int
    bits_per_sample: int = 8
    float_samples: bool = False
    num_color_channels: int = 3
    has_alpha: bool = False
    is_cmyk: bool = False


@dataclass
class Frame:
    """One animation frame: ``H x W x C`` samples plus timing."""

    pixels: np.ndarray
    duration_ms: int = 0
    name: str = ""


@dataclass
class ExtraChannel:
    """A non-color channel (alpha, depth, spot color...) with one plane per frame."""

    name: str
    kind: str
    frames: list[np.ndarray] = field(default_factory=list)
    bits_per_sample: int = 8


@dataclass
class DecodedImage:
    """Pixel buffer of a decoded bitstream and everything that travels with it."""

    info: ImageInfo
    pixel_format: PixelFormat
    frames: list[Frame]
    extra_channels: list[ExtraChannel] = field(default_factory=list)
    icc: bytes = b""
    orig_icc: bytes = b""
    preview: np.ndarray | None = None
    metadata: dict[str, bytes] = field(default_factory=dict)
    color_space: str | None = None


@dataclass(frozen=True)
class DecodeParams:
    """Everything the decoder needs besides the compressed bytes."""

    accepted_formats: tuple[PixelFormat, ...] = ()
    cmyk_color_space: str | None = None
    bits_per_sample: int = BIT_DEPTH_FROM_ENCODER
    max_downsampling: int = 0
    display_nits: float = 0.0
    color_space: str | None = None
    render_spotcolors: bool = True
    coalescing: bool = True
    allow_partial_input: bool = False
    pool: WorkerPool | None = None


@dataclass
class PassthroughResult:
    """Losslessly reconstructed JPEG bytes."""

    jpeg_bytes: bytes
    info: ImageInfo


@dataclass
class PixelResult:
    """Fully reconstructed raster and the number of input bytes consumed."""

    image: DecodedImage
    decoded_bytes: int


class Decoder(ABC):
    """Codec decode library as seen by the orchestrator.

    Implementations must raise :class:`~decodelab.error_handling.DecodeFailure`
    when the bitstream is rejected; any other exception is treated as a bug.
    """

    #: Human-readable backend name
    NAME: str = "decoder"

    @abstractmethod
    def reconstruct_jpeg(self, data: bytes, params: DecodeParams) -> PassthroughResult:
        """Re-emit the JPEG embedded in *data* without decoding pixels."""

    @abstractmethod
    def decode_pixels(self, data: bytes, params: DecodeParams) -> PixelResult:
        """Decode *data* into one of ``params.accepted_formats``."""
