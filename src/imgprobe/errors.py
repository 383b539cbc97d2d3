"""Custom exception classes for probing, sources, and configuration."""

from __future__ import annotations


class ImageProbeError(Exception):
    """Base class for errors raised outside the pure decoder."""


class UnsupportedImageError(ImageProbeError):
    """Raised when a source's bytes are conclusively not a supported image."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: unsupported image ({reason})")
        self.source = source
        self.reason = reason


class InsufficientDataError(ImageProbeError):
    """Raised when a fetch gives up while the decoder still needs more bytes."""

    EXHAUSTED = "exhausted"
    LIMIT = "limit"

    def __init__(self, source: str, reason: str, bytes_fetched: int) -> None:
        if reason == self.EXHAUSTED:
            detail = f"source ended after {bytes_fetched} bytes before dimensions were found"
        else:
            detail = f"gave up after {bytes_fetched} bytes without finding dimensions"
        super().__init__(f"{source}: {detail}")
        self.source = source
        self.reason = reason
        self.bytes_fetched = bytes_fetched


class SourceReadError(ImageProbeError):
    """Raised when a byte source cannot be read."""


class ConfigLoadError(ImageProbeError):
    """Raised when a configuration file cannot be loaded."""


class TruncatedBufferError(Exception):
    """Signals that a read ran past the end of the buffer."""


class FormatMismatchError(Exception):
    """Signals that bytes already present violate the claimed format."""
