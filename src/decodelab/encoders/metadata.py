"""Extract raw metadata boxes (EXIF, XMP, JUMBF) instead of pixels."""

from __future__ import annotations

from ..codec import DecodedImage
from ..error_handling import EncodeFailure
from ..pixel_format import DataType, Endianness, PixelFormat
from .base import EncodedArtifactSet, Encoder


class MetadataBoxEncoder(Encoder):
    """Writes one metadata box of the decoded image verbatim."""

    BOX: str = ""

    def accepted_formats(self) -> list[PixelFormat]:
        # pixels are discarded; any cheap layout will do
        return [
            PixelFormat(num_channels, DataType.UINT8, Endianness.BIG)
            for num_channels in (1, 2, 3, 4)
        ]

    def encode(self, image: DecodedImage) -> EncodedArtifactSet:
        data = image.metadata.get(self.BOX, b"")
        if not data:
            raise EncodeFailure(
                f"Image carries no {self.BOX.upper()} metadata",
                context={"box": self.BOX},
            )
        return EncodedArtifactSet(bitstreams=[data])


class ExifEncoder(MetadataBoxEncoder):
    CODEC = "exif"
    BOX = "exif"
    EXTENSIONS = (".exif",)
    DESCRIPTION = "Raw EXIF block"


class XMPEncoder(MetadataBoxEncoder):
    CODEC = "xmp"
    BOX = "xmp"
    EXTENSIONS = (".xmp", ".xml")
    DESCRIPTION = "Raw XMP packet"


class JUMBFEncoder(MetadataBoxEncoder):
    CODEC = "jumbf"
    BOX = "jumbf"
    EXTENSIONS = (".jumb", ".jumbf")
    DESCRIPTION = "Raw JUMBF box"
