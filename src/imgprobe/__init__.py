"""Package initialization for imgprobe."""

import contextlib
from importlib.metadata import PackageNotFoundError, version

from .constants import SupportedFormat
from .core import decode
from .outcome import DecodedImageInfo, Found, NeedMoreData, Outcome, Unsupported

__version__ = "0.0.0"
with contextlib.suppress(PackageNotFoundError):
    if __package__ is not None:
        __version__ = version(__package__)

__all__ = [
    "DecodedImageInfo",
    "Found",
    "NeedMoreData",
    "Outcome",
    "SupportedFormat",
    "Unsupported",
    "__version__",
    "decode",
]
