"""CLI exports.

This package exposes `cli` and `main` from `root.py` so that
`python -m imgprobe` and the console entry point continue to work.
"""

from .root import cli, main

__all__ = ["cli", "main"]
