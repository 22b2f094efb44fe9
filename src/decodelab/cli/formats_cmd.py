"""List the output formats decodelab can write."""

import json

import click
from rich.console import Console
from rich.table import Table

from ..encoders import encoder_from_extension, registered_extensions
from ..pixel_format import PixelFormat


def _describe_format(fmt: PixelFormat) -> str:
    return f"{fmt.num_channels}ch {fmt.data_type.value} {fmt.endianness.value}"


@click.command("formats")
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show the pixel formats each encoder accepts",
)
@click.option(
    "--json", "output_json",
    is_flag=True,
    help="Output the format list in JSON format",
)
def formats(verbose: bool, output_json: bool) -> None:
    """List output extensions and the encoder handling each of them."""
    rows = []
    for ext, cls in sorted(registered_extensions().items()):
        encoder = encoder_from_extension(ext)
        rows.append(
            {
                "extension": ext,
                "codec": cls.CODEC,
                "encoder": cls.__name__,
                "description": cls.DESCRIPTION,
                "accepts_cmyk": encoder.accepts_cmyk(),
                "pixel_formats": [_describe_format(f) for f in encoder.accepted_formats()],
            }
        )

    if output_json:
        click.echo(json.dumps(rows, indent=2))
        return

    console = Console()
    table = Table(title="🖼️ Output formats", show_header=True, header_style="bold magenta")
    table.add_column("Extension", style="cyan", no_wrap=True)
    table.add_column("Codec")
    table.add_column("Encoder", style="dim")
    table.add_column("Description")
    if verbose:
        table.add_column("Pixel formats", style="dim")

    for row in rows:
        cells = [row["extension"], row["codec"], row["encoder"], row["description"]]
        if verbose:
            formats_text = ", ".join(row["pixel_formats"]) or "-"
            if row["accepts_cmyk"]:
                formats_text += ", CMYK"
            cells.append(formats_text)
        table.add_row(*cells)

    console.print(table)
