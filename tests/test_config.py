"""Tests for decodelab.config module."""

import os
from unittest.mock import patch

import pytest

from decodelab.config import DEFAULT_DECODE_CONFIG, DecodeConfig


class TestDecodeConfig:
    """Tests for DecodeConfig class."""

    def test_default_initialization(self):
        """Test that default values are set correctly."""
        with patch.dict(os.environ, {}, clear=True):
            config = DecodeConfig()

        assert config.NUM_THREADS == -1
        assert config.JPEG_QUALITY == 95
        assert config.BACKGROUND == "white"
        assert config.CMYK_FALLBACK_COLOR_SPACE == "sRGB"
        assert config.LOG_LEVEL == "INFO"

    def test_custom_initialization(self):
        """Test initialization with custom values."""
        with patch.dict(os.environ, {}, clear=True):
            config = DecodeConfig(NUM_THREADS=4, JPEG_QUALITY=80, BACKGROUND="#000000")

        assert config.NUM_THREADS == 4
        assert config.JPEG_QUALITY == 80
        assert config.BACKGROUND == "#000000"

    def test_environment_overrides(self):
        """Test DECODELAB_* variables override defaults."""
        env = {
            "DECODELAB_NUM_THREADS": "3",
            "DECODELAB_JPEG_QUALITY": "70",
            "DECODELAB_BACKGROUND": "black",
            "DECODELAB_LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            config = DecodeConfig()

        assert config.NUM_THREADS == 3
        assert config.JPEG_QUALITY == 70
        assert config.BACKGROUND == "black"
        assert config.LOG_LEVEL == "debug"

    def test_empty_environment_value_is_ignored(self):
        with patch.dict(os.environ, {"DECODELAB_JPEG_QUALITY": ""}, clear=True):
            assert DecodeConfig().JPEG_QUALITY == 95

    def test_non_integer_environment_value(self):
        with patch.dict(os.environ, {"DECODELAB_NUM_THREADS": "many"}, clear=True):
            with pytest.raises(ValueError, match="DECODELAB_NUM_THREADS"):
                DecodeConfig()

    @pytest.mark.parametrize(
        "kwargs",
        [{"NUM_THREADS": -2}, {"JPEG_QUALITY": 150}, {"LOG_LEVEL": "LOUD"}],
    )
    def test_invalid_values(self, kwargs):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError):
                DecodeConfig(**kwargs)

    def test_default_instance(self):
        assert isinstance(DEFAULT_DECODE_CONFIG, DecodeConfig)
