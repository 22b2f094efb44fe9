"""Tests for decodelab.decoders.pillow module."""

import io
import logging

import numpy as np
import pytest
from PIL import Image

from decodelab.codec import DecodeParams
from decodelab.decoders import PillowDecoder
from decodelab.encoders import JPEGEncoder, PNGEncoder
from decodelab.error_handling import DecodeFailure
from decodelab.parallel import WorkerPool
from decodelab.pixel_format import DataType, discard_formats


def _params(formats=None, **kwargs) -> DecodeParams:
    accepted = tuple(formats if formats is not None else PNGEncoder().accepted_formats())
    return DecodeParams(accepted_formats=accepted, **kwargs)


@pytest.fixture
def decoder():
    return PillowDecoder()


class TestReconstructJpeg:
    """Tests for lossless JPEG passthrough."""

    def test_returns_jpeg_bytes_verbatim(self, decoder, jpeg_bytes):
        result = decoder.reconstruct_jpeg(jpeg_bytes, DecodeParams())

        assert result.jpeg_bytes == jpeg_bytes
        assert (result.info.xsize, result.info.ysize) == (16, 12)

    def test_non_jpeg_bitstream_fails(self, decoder, png_bytes):
        with pytest.raises(DecodeFailure, match="no JPEG reconstruction data"):
            decoder.reconstruct_jpeg(png_bytes, DecodeParams())

    def test_garbage_fails(self, decoder):
        with pytest.raises(DecodeFailure):
            decoder.reconstruct_jpeg(b"not an image at all", DecodeParams())

    def test_failed_attempt_not_logged_as_error(self, decoder, caplog):
        with caplog.at_level(logging.DEBUG):
            with pytest.raises(DecodeFailure):
                decoder.reconstruct_jpeg(b"not an image at all", DecodeParams())

        assert "Reconstruct JPEG failed" in caplog.text
        assert all(record.levelno < logging.WARNING for record in caplog.records)

    def test_truncated_jpeg_fails_unless_partial_allowed(self, decoder, jpeg_bytes):
        truncated = jpeg_bytes[:-2]

        with pytest.raises(DecodeFailure, match="truncated"):
            decoder.reconstruct_jpeg(truncated, DecodeParams())

        result = decoder.reconstruct_jpeg(truncated, DecodeParams(allow_partial_input=True))
        assert result.jpeg_bytes == truncated


class TestDecodePixels:
    """Tests for pixel decoding."""

    def test_rgb_png_is_lossless(self, decoder, png_bytes, rgb_array):
        result = decoder.decode_pixels(png_bytes, _params())

        image = result.image
        assert result.decoded_bytes == len(png_bytes)
        assert image.pixel_format.num_channels == 3
        assert image.pixel_format.data_type is DataType.UINT8
        np.testing.assert_array_equal(image.frames[0].pixels, rgb_array)
        assert image.extra_channels == []

    def test_alpha_kept_when_format_has_alpha(self, decoder, rgba_png_bytes):
        image = decoder.decode_pixels(rgba_png_bytes, _params()).image

        assert image.pixel_format.num_channels == 4
        assert image.info.has_alpha is True
        assert image.frames[0].pixels[0, 0, 3] == 0
        assert image.frames[0].pixels[0, -1, 3] == 255

    def test_alpha_moves_to_extra_channel(self, decoder, rgba_png_bytes):
        """Test alpha becomes an extra channel when the encoder takes no alpha."""
        image = decoder.decode_pixels(
            rgba_png_bytes, _params(JPEGEncoder().accepted_formats())
        ).image

        assert image.pixel_format.num_channels == 3
        assert image.info.has_alpha is True
        assert len(image.extra_channels) == 1
        alpha = image.extra_channels[0]
        assert alpha.kind == "alpha"
        assert alpha.frames[0].shape == (12, 16)
        assert alpha.frames[0][0, 0] == 0

    def test_sixteen_bit_gray_keeps_depth(self, decoder, gray16_png_bytes):
        image = decoder.decode_pixels(gray16_png_bytes, _params()).image

        assert image.pixel_format.data_type is DataType.UINT16
        assert image.info.bits_per_sample == 16
        assert int(image.frames[0].pixels[0, -1, 0]) == 65535
        assert int(image.frames[0].pixels[0, 0, 0]) == 0

    def test_sixteen_bit_gray_to_eight_bit_encoder(self, decoder, gray16_png_bytes):
        image = decoder.decode_pixels(
            gray16_png_bytes, _params(JPEGEncoder().accepted_formats())
        ).image

        assert image.pixel_format.data_type is DataType.UINT8
        assert int(image.frames[0].pixels[0, -1, 0]) == 255

    def test_animated_gif_frames(self, decoder, animated_gif_bytes):
        image = decoder.decode_pixels(animated_gif_bytes, _params()).image

        assert len(image.frames) == 3
        assert [f.duration_ms for f in image.frames] == [100, 100, 100]
        assert image.frames[0].pixels[0, 0, :3].tolist() == [255, 0, 0]
        assert image.frames[1].pixels[0, 0, :3].tolist() == [0, 255, 0]
        assert image.frames[2].pixels[0, 0, :3].tolist() == [0, 0, 255]

    def test_worker_pool_gives_same_frames(self, decoder, animated_gif_bytes):
        serial = decoder.decode_pixels(animated_gif_bytes, _params()).image
        with WorkerPool(2) as pool:
            parallel = decoder.decode_pixels(animated_gif_bytes, _params(pool=pool)).image

        for a, b in zip(serial.frames, parallel.frames):
            np.testing.assert_array_equal(a.pixels, b.pixels)

    def test_discard_formats_give_float_samples(self, decoder, png_bytes):
        image = decoder.decode_pixels(png_bytes, _params(discard_formats())).image

        pixels = image.frames[0].pixels
        assert pixels.dtype.kind == "f"
        assert float(pixels.min()) >= 0.0
        assert float(pixels.max()) <= 1.0

    def test_jpeg_downsampling(self, decoder, jpeg_bytes):
        image = decoder.decode_pixels(jpeg_bytes, _params(max_downsampling=2)).image

        assert (image.info.xsize, image.info.ysize) == (8, 6)

    def test_cmyk_kept_when_encoder_accepts_it(self, decoder):
        data = io.BytesIO()
        Image.new("CMYK", (4, 4), (0, 255, 0, 0)).save(data, format="JPEG")

        image = decoder.decode_pixels(
            data.getvalue(), _params(JPEGEncoder().accepted_formats())
        ).image

        assert image.info.is_cmyk is True
        assert image.pixel_format.num_channels == 4

    def test_cmyk_converted_when_fallback_color_space_set(self, decoder):
        data = io.BytesIO()
        Image.new("CMYK", (4, 4), (0, 255, 0, 0)).save(data, format="JPEG")

        image = decoder.decode_pixels(
            data.getvalue(), _params(cmyk_color_space="sRGB")
        ).image

        assert image.info.is_cmyk is False
        assert image.pixel_format.num_channels == 3

    def test_icc_and_exif_carried(self, decoder, rgb_array):
        exif = Image.Exif()
        exif[0x010F] = "decodelab"
        data = io.BytesIO()
        Image.fromarray(rgb_array).save(
            data, format="PNG", icc_profile=b"icc-bytes", exif=exif.tobytes()
        )

        image = decoder.decode_pixels(data.getvalue(), _params()).image

        assert image.icc == b"icc-bytes"
        assert image.orig_icc == b"icc-bytes"
        assert "exif" in image.metadata

    def test_color_space_passed_through(self, decoder, png_bytes):
        image = decoder.decode_pixels(png_bytes, _params(color_space="RGB_D65_SRG_Rel_SRG")).image

        assert image.color_space == "RGB_D65_SRG_Rel_SRG"

    def test_garbage_fails(self, decoder):
        with pytest.raises(DecodeFailure):
            decoder.decode_pixels(b"\x00" * 32, _params())
