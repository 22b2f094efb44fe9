"""Configuration settings for decodelab."""

import os
from dataclasses import dataclass


@dataclass
class DecodeConfig:
    """Defaults for a decode run with environment variable overrides."""

    # Worker threads for the decoder (-1 = machine default, 0 = serial).
    # Override with: DECODELAB_NUM_THREADS
    NUM_THREADS: int = -1

    # Quality passed to the JPEG encoder when re-encoding pixels.
    # Override with: DECODELAB_JPEG_QUALITY
    JPEG_QUALITY: int = 95

    # Background used by --alpha-blend.
    # Override with: DECODELAB_BACKGROUND
    BACKGROUND: str = "white"

    # Color space substituted for CMYK sources when the encoder cannot take CMYK
    CMYK_FALLBACK_COLOR_SPACE: str = "sRGB"

    # Console log level when neither --quiet nor --verbose is given.
    # Override with: DECODELAB_LOG_LEVEL
    LOG_LEVEL: str = "INFO"

    def __post_init__(self) -> None:
        """Apply environment variable overrides, then validate."""
        env_overrides = {
            "NUM_THREADS": ("DECODELAB_NUM_THREADS", int),
            "JPEG_QUALITY": ("DECODELAB_JPEG_QUALITY", int),
            "BACKGROUND": ("DECODELAB_BACKGROUND", str),
            "LOG_LEVEL": ("DECODELAB_LOG_LEVEL", str),
        }

        for attr_name, (env_var_name, cast) in env_overrides.items():
            env_value = os.getenv(env_var_name)
            if env_value:
                try:
                    setattr(self, attr_name, cast(env_value))
                except ValueError as e:
                    raise ValueError(
                        f"Invalid value for {env_var_name}: {env_value!r}"
                    ) from e

        if self.NUM_THREADS < -1:
            raise ValueError(
                f"NUM_THREADS must be -1, 0 or positive, got {self.NUM_THREADS}"
            )

        if not 0 <= self.JPEG_QUALITY <= 100:
            raise ValueError(
                f"JPEG_QUALITY must be between 0 and 100, got {self.JPEG_QUALITY}"
            )

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.LOG_LEVEL.upper() not in valid_levels:
            raise ValueError(f"Invalid LOG_LEVEL: {self.LOG_LEVEL}")


# Default configuration instance
DEFAULT_DECODE_CONFIG = DecodeConfig()
