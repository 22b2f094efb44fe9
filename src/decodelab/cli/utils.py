"""Shared utilities for CLI commands."""

import sys
from pathlib import Path

import click

from ..config import DEFAULT_DECODE_CONFIG
from ..io import setup_logging


def handle_generic_error(command_name: str, error: Exception) -> None:
    """Handle command errors with consistent formatting."""
    click.echo(f"❌ {command_name} failed: {error}", err=True)
    sys.exit(1)


def handle_keyboard_interrupt(command_name: str) -> None:
    """Handle keyboard interrupt with consistent formatting."""
    click.echo(f"\n⏹️  {command_name} interrupted by user", err=True)
    sys.exit(1)


def log_level_for(verbose: int, quiet: bool) -> str:
    """Map ``--quiet`` / ``-v`` to a logging level name."""
    if quiet:
        return "ERROR"
    if verbose:
        return "DEBUG"
    return DEFAULT_DECODE_CONFIG.LOG_LEVEL


def configure_logging(verbose: int, quiet: bool, log_file: Path | None = None) -> None:
    setup_logging(log_level_for(verbose, quiet), log_file)
