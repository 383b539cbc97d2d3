"""CLI command reporting the installed imgprobe build."""

from __future__ import annotations

import platform

import click

from imgprobe import __version__


@click.command()
@click.option("--short", is_flag=True, help="Print only the version number")
def version(*, short: bool) -> None:
    """Print the imgprobe version and the interpreter it runs on."""
    if short:
        print(__version__)
        return
    print(f"imgprobe {__version__} (Python {platform.python_version()})")
