"""Project-wide constants, enums, and format lookup tables."""

from __future__ import annotations

from enum import StrEnum


class SupportedFormat(StrEnum):
    """Image container formats the decoder recognises."""

    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    BMP = "bmp"

    @property
    def minimum_sample(self) -> int | None:
        """Buffer length at or below which extraction is certain to be futile.

        ``None`` means the header is variable-length and the scanner decides.
        """
        return MINIMUM_SAMPLE[self]


class SummaryFormat(StrEnum):
    """Valid summary formats for probe results."""

    HUMAN = "human"
    JSON = "json"


class TableStyle(StrEnum):
    """Valid table styles for human summaries."""

    AUTO = "auto"
    FULL = "full"
    COMPACT = "compact"
    NONE = "none"


# First two bytes of the file, read big-endian.
SIGNATURE_MAGIC: dict[int, SupportedFormat] = {
    0xFFD8: SupportedFormat.JPEG,
    0x8950: SupportedFormat.PNG,
    0x4749: SupportedFormat.GIF,
    0x424D: SupportedFormat.BMP,
}
SIGNATURE_LENGTH = 2

MINIMUM_SAMPLE: dict[SupportedFormat, int | None] = {
    SupportedFormat.JPEG: None,
    SupportedFormat.PNG: 25,
    SupportedFormat.GIF: 11,
    SupportedFormat.BMP: 29,
}

# ---- Binary layout constants ----
PNG_WIDTH_OFFSET = 16
PNG_HEIGHT_OFFSET = 20

GIF_WIDTH_OFFSET = 6
GIF_HEIGHT_OFFSET = 8

BMP_DIB_SIZE_OFFSET = 14
BMP_CORE_HEADER_SIZE = 12
BMP_WIDTH_OFFSET = 18

JPEG_SOI_APP0 = b"\xff\xd8\xff\xe0"
JPEG_JFIF_TAG = b"JFIF\x00"
JPEG_JFIF_OFFSET = 6
JPEG_APP0_LENGTH_OFFSET = 4
JPEG_MARKER_PREFIX = 0xFF
JPEG_SOF_FIRST = 0xC0
JPEG_SOF_LAST = 0xC3
JPEG_SOF_HEIGHT_OFFSET = 5
JPEG_SOF_WIDTH_OFFSET = 7

# ---- Fetch policy defaults ----
DEFAULT_INITIAL_BYTES = 64
DEFAULT_GROWTH_FACTOR = 2
DEFAULT_MAX_BYTES = 1024 * 1024
DEFAULT_TIMEOUT = 10.0
DEFAULT_CACHE_SIZE = 256

CONFIG_INITIAL_BYTES = "initial_bytes"
CONFIG_GROWTH_FACTOR = "growth_factor"
CONFIG_MAX_BYTES = "max_bytes"
CONFIG_TIMEOUT = "timeout"
CONFIG_BMP_LEGACY_HEIGHT = "bmp_legacy_height"

# ---- Exit codes ----
EXIT_FAILURES = 1
EXIT_USAGE = 2
EXIT_CONFIG = 3
EXIT_INTERRUPT = 130
