"""CLI module for decodelab commands."""

import click

from .. import __version__
from .decode_cmd import decode
from .formats_cmd import formats


@click.group()
@click.version_option(__version__, "-V", "--version", prog_name="decodelab")
def main() -> None:
    """🖼️ decodelab: decode compressed images into files you can use."""
    pass


main.add_command(decode)
main.add_command(formats)

__all__ = [
    "decode",
    "formats",
    "main",
]
