import io
import logging

import numpy as np
import pytest
from PIL import Image

from decodelab.codec import (
    DecodedImage,
    Decoder,
    ExtraChannel,
    Frame,
    ImageInfo,
    PassthroughResult,
    PixelResult,
)
from decodelab.error_handling import DecodeFailure
from decodelab.pixel_format import DataType, Endianness, PixelFormat


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handlers installed by setup_logging (the CLI calls it on every run)."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


# ---------------------------------------------------------------------------
# Pillow-generated bitstreams
# ---------------------------------------------------------------------------


def _gradient(width: int, height: int) -> np.ndarray:
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    red = np.tile(xs, (height, 1))
    green = np.tile(ys[:, np.newaxis], (1, width))
    blue = np.full((height, width), 128, dtype=np.float32)
    return np.stack([red, green, blue], axis=-1).astype(np.uint8)


def _encode(img: Image.Image, fmt: str, **params) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **params)
    return buffer.getvalue()


@pytest.fixture
def rgb_array() -> np.ndarray:
    """A 16x12 RGB gradient."""
    return _gradient(16, 12)


@pytest.fixture
def jpeg_bytes(rgb_array) -> bytes:
    """A small baseline JPEG."""
    return _encode(Image.fromarray(rgb_array), "JPEG", quality=90)


@pytest.fixture
def png_bytes(rgb_array) -> bytes:
    """A small opaque RGB PNG."""
    return _encode(Image.fromarray(rgb_array), "PNG")


@pytest.fixture
def rgba_png_bytes(rgb_array) -> bytes:
    """An RGBA PNG whose left half is fully transparent."""
    alpha = np.full(rgb_array.shape[:2] + (1,), 255, dtype=np.uint8)
    alpha[:, : rgb_array.shape[1] // 2] = 0
    rgba = np.concatenate([rgb_array, alpha], axis=-1)
    return _encode(Image.fromarray(rgba), "PNG")


@pytest.fixture
def gray16_png_bytes() -> bytes:
    """A 16-bit grayscale PNG."""
    ramp = np.tile(np.linspace(0, 65535, 8, dtype=np.uint16), (4, 1))
    img = Image.frombytes("I;16", (8, 4), ramp.astype("<u2").tobytes())
    return _encode(img, "PNG")


@pytest.fixture
def animated_gif_bytes() -> bytes:
    """A 3-frame 10x10 GIF with distinct solid colors."""
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255)]
    frames = [Image.new("RGB", (10, 10), color) for color in colors]
    return _encode(frames[0], "GIF", save_all=True, append_images=frames[1:], duration=100, loop=0)


@pytest.fixture
def write_file(tmp_path):
    """Write bytes to a file under tmp_path and return its path as a string."""

    def _write(name: str, data: bytes) -> str:
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _write


# ---------------------------------------------------------------------------
# In-memory images and fake decoders
# ---------------------------------------------------------------------------


@pytest.fixture
def make_image():
    """Factory for DecodedImage instances with solid uint8 frames."""

    def _make(
        num_frames: int = 1,
        num_channels: int = 3,
        num_extra: int = 0,
        width: int = 4,
        height: int = 3,
        has_alpha: bool | None = None,
    ) -> DecodedImage:
        fmt = PixelFormat(num_channels, DataType.UINT8, Endianness.BIG)
        frames = [
            Frame(np.full((height, width, num_channels), 10 * (i + 1), dtype=np.uint8), 100)
            for i in range(num_frames)
        ]
        extra = [
            ExtraChannel(
                name=f"ec{c}",
                kind="alpha" if c == 0 else "depth",
                frames=[np.full((height, width), 200, dtype=np.uint8) for _ in range(num_frames)],
            )
            for c in range(num_extra)
        ]
        info = ImageInfo(
            xsize=width,
            ysize=height,
            num_color_channels=3 if num_channels >= 3 else 1,
            has_alpha=fmt.has_alpha if has_alpha is None else has_alpha,
        )
        return DecodedImage(info=info, pixel_format=fmt, frames=frames, extra_channels=extra)

    return _make


class FakeDecoder(Decoder):
    """Scripted decoder: each call pops the next outcome.

    An outcome is either an exception instance (raised) or a value (returned).
    """

    NAME = "fake"

    def __init__(self, passthrough=(), pixels=()):
        self.passthrough_outcomes = list(passthrough)
        self.pixel_outcomes = list(pixels)
        self.passthrough_calls = 0
        self.pixel_calls = 0
        self.pixel_params = []

    @staticmethod
    def _next(outcomes):
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def reconstruct_jpeg(self, data, params):
        self.passthrough_calls += 1
        return self._next(self.passthrough_outcomes)

    def decode_pixels(self, data, params):
        self.pixel_calls += 1
        self.pixel_params.append(params)
        return self._next(self.pixel_outcomes)


@pytest.fixture
def fake_decoder_cls():
    return FakeDecoder


@pytest.fixture
def passthrough_ok():
    return PassthroughResult(jpeg_bytes=b"\xff\xd8jpeg\xff\xd9", info=ImageInfo(8, 6))


@pytest.fixture
def pixels_ok(make_image):
    return PixelResult(image=make_image(), decoded_bytes=123)


@pytest.fixture
def decode_failure():
    return DecodeFailure("bitstream rejected")
