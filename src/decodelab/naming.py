"""Deterministic names for multi-frame / multi-layer outputs."""

import math

STDOUT_SENTINEL = "-"


def _digits(n: int) -> int:
    return 1 + int(math.log10(n))


def output_filename(
    base: str,
    extension: str,
    layer_index: int,
    frame_index: int,
    num_layers: int,
    num_frames: int,
) -> str:
    """Return the on-disk name for one (layer, frame) output.

    Frame outputs get a ``-N`` suffix and extra-channel layers a ``-ecN``
    suffix, both zero-padded to the width of the respective count. The
    extension is only appended when a suffix was added, because a single
    primary output already carries it in *base*. Extra channels of a PPM
    target are grayscale and are written as ``.pgm``.
    """
    if base == STDOUT_SENTINEL:
        return STDOUT_SENTINEL

    out = base
    frame_suffixed = num_frames > 1
    layer_suffixed = num_layers > 1 and layer_index > 0

    if frame_suffixed:
        out += f"-{frame_index:0{_digits(num_frames)}d}"
    if layer_suffixed:
        out += f"-ec{layer_index:0{_digits(num_layers)}d}"

    if extension == ".ppm" and layer_index > 0:
        out += ".pgm"
    elif frame_suffixed or layer_suffixed:
        out += extension
    return out
