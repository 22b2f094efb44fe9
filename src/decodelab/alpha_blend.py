"""Composite the alpha channel of a decoded image onto a solid background."""

from dataclasses import replace

import numpy as np

from .codec import DecodedImage, Frame
from .error_handling import AlphaBlendFailed
from .pixel_format import DataType

_SAMPLE_MAX = {
    DataType.UINT8: 255.0,
    DataType.UINT16: 65535.0,
    DataType.FLOAT16: 1.0,
    DataType.FLOAT: 1.0,
}


def _blend_array(pixels: np.ndarray, background: np.ndarray, sample_max: float) -> np.ndarray:
    color = pixels[..., :-1].astype(np.float32) / sample_max
    alpha = pixels[..., -1:].astype(np.float32) / sample_max
    blended = color * alpha + background * (1.0 - alpha)
    if sample_max != 1.0:
        blended = np.clip(np.rint(blended * sample_max), 0, sample_max)
    return blended.astype(pixels.dtype)


def alpha_blend(image: DecodedImage, background: tuple[float, float, float]) -> DecodedImage:
    """Return a copy of *image* with alpha composited onto *background*.

    An image without alpha is returned unchanged, and so is a CMYK image,
    whose fourth channel is black ink. The alpha channel is removed from
    the result, so the pixel format drops to 1 or 3 channels.

    Raises:
        AlphaBlendFailed: If the image declares alpha but the buffer has no
            alpha channel.
    """
    fmt = image.pixel_format
    if image.info.is_cmyk or not image.info.has_alpha:
        return image
    if not fmt.has_alpha:
        raise AlphaBlendFailed(
            "Image has alpha but the decoded buffer carries no alpha channel",
            context={"num_channels": fmt.num_channels},
        )

    sample_max = _SAMPLE_MAX[fmt.data_type]

    num_color = fmt.num_channels - 1
    bg = np.asarray(background[:num_color] if num_color == 3 else background[:1], dtype=np.float32)

    frames = [
        Frame(_blend_array(frame.pixels, bg, sample_max), frame.duration_ms, frame.name)
        for frame in image.frames
    ]
    preview = image.preview
    if preview is not None and preview.ndim == 3 and preview.shape[-1] == fmt.num_channels:
        preview = _blend_array(preview, bg, sample_max)

    return replace(
        image,
        frames=frames,
        preview=preview,
        pixel_format=replace(fmt, num_channels=num_color),
        info=replace(image.info, has_alpha=False),
    )
