"""Encoder registry: maps output file extensions to encoder classes."""

from __future__ import annotations

from pathlib import Path

from ..error_handling import UnsupportedOutputFormat
from .base import Encoder
from .jpeg import JPEGEncoder
from .metadata import ExifEncoder, JUMBFEncoder, XMPEncoder
from .npy import NumPyEncoder
from .png import APNGEncoder, PNGEncoder
from .pnm import PNMEncoder

ENCODER_CLASSES: tuple[type[Encoder], ...] = (
    PNGEncoder,
    APNGEncoder,
    JPEGEncoder,
    PNMEncoder,
    NumPyEncoder,
    ExifEncoder,
    XMPEncoder,
    JUMBFEncoder,
)

_REGISTRY: dict[str, type[Encoder]] = {}

for cls in ENCODER_CLASSES:
    for ext in cls.EXTENSIONS:
        if ext in _REGISTRY:
            raise RuntimeError(f"Extension {ext} registered twice")
        _REGISTRY[ext] = cls

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def output_extension(path: str | None, output_format: str | None = None) -> str:
    """Return the lower-case extension selecting the encoder.

    An explicit *output_format* (``"png"``, ``"PPM"``...) overrides the
    extension of *path*.
    """
    if output_format:
        return "." + output_format.lower().lstrip(".")
    if not path:
        return ""
    return Path(path).suffix.lower()


def codec_for_extension(extension: str) -> str | None:
    """Return the codec family for *extension*, or ``None`` if unknown."""
    cls = _REGISTRY.get(extension.lower())
    return cls.CODEC if cls else None


def codec_from_path(path: str | None, output_format: str | None = None) -> str | None:
    """Return the codec family an output *path* (or override) selects."""
    return codec_for_extension(output_extension(path, output_format))


def encoder_from_extension(extension: str) -> Encoder:
    """Instantiate the encoder registered for *extension*.

    Raises:
        UnsupportedOutputFormat: If no encoder handles *extension*.
    """
    cls = _REGISTRY.get(extension.lower())
    if cls is None:
        if not extension:
            raise UnsupportedOutputFormat(
                "couldn't detect output format, consider using --output-format"
            )
        raise UnsupportedOutputFormat(
            f"can't decode to the file extension '{extension}'",
            context={"extension": extension},
        )
    return cls(extension.lower())


def registered_extensions() -> dict[str, type[Encoder]]:
    """Return a copy of the extension → encoder class mapping."""
    return dict(_REGISTRY)
