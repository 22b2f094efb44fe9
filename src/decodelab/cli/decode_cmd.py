"""Decode a compressed bitstream to an image file or a reconstructed JPEG."""

from pathlib import Path

import click

from ..config import DEFAULT_DECODE_CONFIG
from ..request import DecodeRequest
from ..runner import DecodeRunner
from .utils import configure_logging, handle_generic_error, handle_keyboard_interrupt


@click.command()
@click.argument("input_path", metavar="INPUT")
@click.argument("output_path", metavar="OUTPUT", required=False)
@click.option(
    "--output-format",
    type=str,
    default=None,
    help="Output format to use instead of the OUTPUT extension (e.g. png, ppm, npy)",
)
@click.option(
    "--num-threads",
    type=int,
    default=DEFAULT_DECODE_CONFIG.NUM_THREADS,
    show_default=True,
    help="Number of worker threads (-1 = CPU count, 0 = no worker threads)",
)
@click.option(
    "--bits-per-sample",
    type=int,
    default=-1,
    show_default=True,
    help="Sets the output bit depth. -1 lets the encoder decide, 0 keeps the codestream depth",
)
@click.option(
    "--display-nits",
    type=float,
    default=0.0,
    help="Intensity target of the display, in nits",
)
@click.option(
    "--color-space",
    type=str,
    default=None,
    help="Color space of the decoded output, passed to the decoder unchanged",
)
@click.option(
    "--downsampling",
    "-s",
    type=int,
    default=0,
    help="Maximum permissible downsampling factor (1, 2, 4 or 8)",
)
@click.option(
    "--allow-partial-files",
    is_flag=True,
    help="Allow decoding of truncated files",
)
@click.option(
    "--pixels-to-jpeg",
    "-j",
    is_flag=True,
    help="Decode to pixels and re-encode to JPEG instead of reconstructing losslessly",
)
@click.option(
    "--jpeg-quality",
    "-q",
    type=int,
    default=None,
    help=f"JPEG quality for re-encoding pixels (default: {DEFAULT_DECODE_CONFIG.JPEG_QUALITY}); implies --pixels-to-jpeg",
)
@click.option(
    "--num-reps",
    type=int,
    default=1,
    show_default=True,
    help="Number of times to decompress the image, for benchmarking",
)
@click.option(
    "--disable-output",
    is_flag=True,
    help="Decode but do not write anything",
)
@click.option(
    "--output-extra-channels",
    is_flag=True,
    help="Write extra channels as separate -ecN files",
)
@click.option(
    "--output-frames",
    is_flag=True,
    help="Write every frame as a separate -N file",
)
@click.option(
    "--use-sjpeg",
    is_flag=True,
    help="Use the sjpeg backend when re-encoding to JPEG",
)
@click.option(
    "--norender-spotcolors",
    is_flag=True,
    help="Do not render spot colors into the color channels",
)
@click.option(
    "--no-coalescing",
    is_flag=True,
    help="Do not coalesce frames; implies --output-frames",
)
@click.option(
    "--preview-out",
    type=str,
    default=None,
    help="File to write the preview image to, if the image has one",
)
@click.option(
    "--icc-out",
    type=str,
    default=None,
    help="File to write the output ICC profile to",
)
@click.option(
    "--orig-icc-out",
    type=str,
    default=None,
    help="File to write the original ICC profile to",
)
@click.option(
    "--metadata-out",
    type=str,
    default=None,
    help="File to write the JSON metadata to, for encoders that produce it",
)
@click.option(
    "--background",
    type=str,
    default=DEFAULT_DECODE_CONFIG.BACKGROUND,
    show_default=True,
    help="Background color for --alpha-blend: black, white or #RRGGBB",
)
@click.option(
    "--alpha-blend",
    is_flag=True,
    help="Blend alpha onto the --background color",
)
@click.option(
    "--print-read-bytes",
    is_flag=True,
    help="Print the number of decoded input bytes",
)
@click.option(
    "--quiet",
    is_flag=True,
    help="Silence informational output",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Print debug information (repeatable)",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write log records to this file",
)
def decode(
    input_path: str,
    output_path: str | None,
    output_format: str | None,
    num_threads: int,
    bits_per_sample: int,
    display_nits: float,
    color_space: str | None,
    downsampling: int,
    allow_partial_files: bool,
    pixels_to_jpeg: bool,
    jpeg_quality: int | None,
    num_reps: int,
    disable_output: bool,
    output_extra_channels: bool,
    output_frames: bool,
    use_sjpeg: bool,
    norender_spotcolors: bool,
    no_coalescing: bool,
    preview_out: str | None,
    icc_out: str | None,
    orig_icc_out: str | None,
    metadata_out: str | None,
    background: str,
    alpha_blend: bool,
    print_read_bytes: bool,
    quiet: bool,
    verbose: int,
    log_file: Path | None,
) -> None:
    """Decode INPUT and write the result to OUTPUT.

    The output format is picked from the OUTPUT extension. Decoding to .jpg
    reconstructs the original JPEG losslessly when possible and falls back
    to re-encoding pixels otherwise.

    INPUT and OUTPUT may be "-" for standard input and standard output.
    """
    configure_logging(verbose, quiet, log_file)

    request = DecodeRequest(
        input_path=input_path,
        output_path=output_path,
        output_format=output_format,
        num_threads=num_threads,
        bits_per_sample=bits_per_sample,
        display_nits=display_nits,
        color_space=color_space,
        downsampling=downsampling,
        allow_partial_files=allow_partial_files,
        pixels_to_jpeg=pixels_to_jpeg,
        jpeg_quality=(
            jpeg_quality if jpeg_quality is not None else DEFAULT_DECODE_CONFIG.JPEG_QUALITY
        ),
        jpeg_quality_set=jpeg_quality is not None,
        use_sjpeg=use_sjpeg,
        render_spotcolors=not norender_spotcolors,
        coalescing=not no_coalescing,
        output_extra_channels=output_extra_channels,
        output_frames=output_frames,
        preview_out=preview_out,
        icc_out=icc_out,
        orig_icc_out=orig_icc_out,
        metadata_out=metadata_out,
        background=background,
        alpha_blend=alpha_blend,
        num_reps=num_reps,
        disable_output=disable_output,
        print_read_bytes=print_read_bytes,
        quiet=quiet,
    )

    try:
        result = DecodeRunner().run(request)
    except KeyboardInterrupt:
        handle_keyboard_interrupt("Decode")
    except Exception as e:
        handle_generic_error("Decode", e)
    else:
        if print_read_bytes and result.decoded_bytes:
            click.echo(f"Decoded bytes: {result.decoded_bytes}", err=True)
        if not quiet:
            report = result.stats.report(result.worker_threads)
            if report:
                click.echo(report, err=True)
