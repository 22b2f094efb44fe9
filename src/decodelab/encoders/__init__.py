from .base import EncodedArtifactSet, Encoder
from .jpeg import JPEGEncoder
from .metadata import ExifEncoder, JUMBFEncoder, XMPEncoder
from .npy import NumPyEncoder
from .png import APNGEncoder, PNGEncoder
from .pnm import PNMEncoder
from .registry import (
    codec_for_extension,
    codec_from_path,
    encoder_from_extension,
    output_extension,
    registered_extensions,
)

__all__ = [
    "EncodedArtifactSet",
    "Encoder",
    # Concrete encoders
    "PNGEncoder",
    "APNGEncoder",
    "JPEGEncoder",
    "PNMEncoder",
    "NumPyEncoder",
    "ExifEncoder",
    "XMPEncoder",
    "JUMBFEncoder",
    # Registry
    "codec_for_extension",
    "codec_from_path",
    "encoder_from_extension",
    "output_extension",
    "registered_extensions",
]
