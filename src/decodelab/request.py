"""User intent for one decode run."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import DEFAULT_DECODE_CONFIG
from .error_handling import ValidationError

VALID_DOWNSAMPLING = (0, 1, 2, 4, 8)


@dataclass(frozen=True)
class DecodeRequest:
    """Everything the user asked for. Built once per run, never mutated.

    ``output_path`` is ``None`` when nothing is to be written; ``"-"`` means
    standard output. ``bits_per_sample`` is ``-1`` for the encoder's choice,
    ``0`` for the codestream's own depth, or an explicit depth.
    """

    input_path: str
    output_path: str | None = None
    output_format: str | None = None
    num_threads: int = DEFAULT_DECODE_CONFIG.NUM_THREADS
    bits_per_sample: int = -1
    display_nits: float = 0.0
    color_space: str | None = None
    downsampling: int = 0
    allow_partial_files: bool = False
    pixels_to_jpeg: bool = False
    jpeg_quality: int = DEFAULT_DECODE_CONFIG.JPEG_QUALITY
    jpeg_quality_set: bool = False
    use_sjpeg: bool = False
    render_spotcolors: bool = True
    coalescing: bool = True
    output_extra_channels: bool = False
    output_frames: bool = False
    preview_out: str | None = None
    icc_out: str | None = None
    orig_icc_out: str | None = None
    metadata_out: str | None = None
    background: str = DEFAULT_DECODE_CONFIG.BACKGROUND
    alpha_blend: bool = False
    num_reps: int = 1
    disable_output: bool = False
    print_read_bytes: bool = False
    quiet: bool = False
    data: bytes | None = field(default=None, repr=False, compare=False)

    @property
    def writes_output(self) -> bool:
        """True when a primary output file will be written."""
        return bool(self.output_path) and not self.disable_output

    @property
    def pixels_requested(self) -> bool:
        """True when the user asked for a pixel-level JPEG re-encode."""
        return self.pixels_to_jpeg or self.jpeg_quality_set

    def validate(self) -> DecodeRequest:
        """Check flag combinations.

        Returns:
            The request itself, so calls can be chained

        Raises:
            ValidationError: On the first invalid combination found.
        """
        if not self.input_path:
            raise ValidationError("Missing INPUT filename.")
        if self.num_threads < -1:
            raise ValidationError(
                "Invalid flag value for --num-threads: must be -1, 0 or positive."
            )
        if self.num_reps < 1:
            raise ValidationError(f"--num-reps must be at least 1, got {self.num_reps}")
        if self.downsampling not in VALID_DOWNSAMPLING:
            raise ValidationError(
                f"--downsampling must be one of 1, 2, 4, 8, got {self.downsampling}"
            )
        if not 0 <= self.jpeg_quality <= 100:
            raise ValidationError(
                f"--jpeg-quality must be between 0 and 100, got {self.jpeg_quality}"
            )
        if self.bits_per_sample < -1 or self.bits_per_sample > 32:
            raise ValidationError(
                f"--bits-per-sample must be -1, 0 or 1-32, got {self.bits_per_sample}"
            )
        if not self.output_path and not self.disable_output:
            raise ValidationError(
                "No output file specified and --disable-output flag not passed."
            )
        return self
