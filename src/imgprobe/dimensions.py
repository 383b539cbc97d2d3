"""Dimension extraction for a buffer already classified by its signature.

Every multi-byte field is read through ``_read_uint`` with an explicit byte
order after a bounds check. A read past the end raises ``TruncatedBufferError``
and a mismatch in bytes already present raises ``FormatMismatchError``; both
are converted to outcomes in :func:`extract` and never escape it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from .constants import (
    BMP_CORE_HEADER_SIZE,
    BMP_DIB_SIZE_OFFSET,
    BMP_WIDTH_OFFSET,
    GIF_HEIGHT_OFFSET,
    GIF_WIDTH_OFFSET,
    JPEG_APP0_LENGTH_OFFSET,
    JPEG_JFIF_OFFSET,
    JPEG_JFIF_TAG,
    JPEG_MARKER_PREFIX,
    JPEG_SOF_FIRST,
    JPEG_SOF_HEIGHT_OFFSET,
    JPEG_SOF_LAST,
    JPEG_SOF_WIDTH_OFFSET,
    JPEG_SOI_APP0,
    PNG_HEIGHT_OFFSET,
    PNG_WIDTH_OFFSET,
    SupportedFormat,
)
from .errors import FormatMismatchError, TruncatedBufferError
from .outcome import DecodedImageInfo, Found, NeedMoreData, Outcome, Unsupported

if TYPE_CHECKING:
    from collections.abc import Callable

type Dimensions = tuple[int, int, int]  # width, height, bytes examined


def _read_uint(
    data: bytes,
    offset: int,
    size: int,
    byteorder: Literal["big", "little"],
    *,
    signed: bool = False,
) -> int:
    end = offset + size
    if end > len(data):
        msg = f"field at {offset}..{end} lies beyond {len(data)} buffered bytes"
        raise TruncatedBufferError(msg)
    return int.from_bytes(data[offset:end], byteorder, signed=signed)


def _expect(data: bytes, offset: int, expected: bytes, what: str) -> None:
    """Match ``expected`` at ``offset`` against whatever prefix of it is buffered."""
    present = data[offset : offset + len(expected)]
    if present != expected[: len(present)]:
        msg = f"invalid {what}"
        raise FormatMismatchError(msg)
    if len(present) < len(expected):
        msg = f"{what} is incomplete"
        raise TruncatedBufferError(msg)


def _png_dimensions(data: bytes) -> Dimensions:
    width = _read_uint(data, PNG_WIDTH_OFFSET, 4, "big")
    height = _read_uint(data, PNG_HEIGHT_OFFSET, 4, "big")
    return width, height, PNG_HEIGHT_OFFSET + 4


def _gif_dimensions(data: bytes) -> Dimensions:
    width = _read_uint(data, GIF_WIDTH_OFFSET, 2, "little")
    height = _read_uint(data, GIF_HEIGHT_OFFSET, 2, "little")
    return width, height, GIF_HEIGHT_OFFSET + 2


def _bmp_dimensions(data: bytes, *, legacy_height: bool = False) -> Dimensions:
    """Read BMP dimensions; field width depends on the DIB header variant.

    With ``legacy_height`` the height is read from the width field, which
    reproduces the historical behaviour of reporting width twice.
    """
    dib_size = _read_uint(data, BMP_DIB_SIZE_OFFSET, 4, "little")
    field = 2 if dib_size == BMP_CORE_HEADER_SIZE else 4
    width = _read_uint(data, BMP_WIDTH_OFFSET, field, "little")
    if legacy_height:
        return width, width, BMP_WIDTH_OFFSET + field
    height_offset = BMP_WIDTH_OFFSET + field
    # BITMAPINFOHEADER and later store a signed height; negative means top-down.
    height = _read_uint(data, height_offset, field, "little", signed=field == 4)
    return width, abs(height), height_offset + field


def _jpeg_dimensions(data: bytes) -> Dimensions:
    """Walk JFIF segments until a baseline/extended/progressive SOF marker."""
    _expect(data, 0, JPEG_SOI_APP0, "SOI/APP0 marker sequence")
    _expect(data, JPEG_JFIF_OFFSET, JPEG_JFIF_TAG, "JFIF identifier")

    cursor = JPEG_APP0_LENGTH_OFFSET
    length = _read_uint(data, cursor, 2, "big")
    while True:
        cursor += length
        if cursor >= len(data):
            msg = f"segment scan reached offset {cursor} past buffered data"
            raise TruncatedBufferError(msg)
        if data[cursor] != JPEG_MARKER_PREFIX:
            # a shifted or truncated buffer, not necessarily a corrupt file
            msg = f"no marker prefix at offset {cursor}"
            raise TruncatedBufferError(msg)
        marker = _read_uint(data, cursor + 1, 1, "big")
        if JPEG_SOF_FIRST <= marker <= JPEG_SOF_LAST:
            height = _read_uint(data, cursor + JPEG_SOF_HEIGHT_OFFSET, 2, "big")
            width = _read_uint(data, cursor + JPEG_SOF_WIDTH_OFFSET, 2, "big")
            return width, height, cursor + JPEG_SOF_WIDTH_OFFSET + 2
        cursor += 2
        length = _read_uint(data, cursor, 2, "big")


_EXTRACTORS: dict[SupportedFormat, Callable[[bytes], Dimensions]] = {
    SupportedFormat.JPEG: _jpeg_dimensions,
    SupportedFormat.PNG: _png_dimensions,
    SupportedFormat.GIF: _gif_dimensions,
    SupportedFormat.BMP: _bmp_dimensions,
}


def extract(
    fmt: SupportedFormat,
    buffer: bytes,
    *,
    source: str = "",
    bmp_legacy_height: bool = False,
) -> Outcome:
    """Attempt to read width and height for ``fmt`` from ``buffer``."""
    minimum = fmt.minimum_sample
    if minimum is not None and len(buffer) <= minimum:
        return NeedMoreData(fmt, f"{fmt.value} needs more than {minimum} bytes")

    try:
        if fmt is SupportedFormat.BMP:
            width, height, examined = _bmp_dimensions(buffer, legacy_height=bmp_legacy_height)
        else:
            width, height, examined = _EXTRACTORS[fmt](buffer)
    except TruncatedBufferError as err:
        return NeedMoreData(fmt, str(err))
    except FormatMismatchError as err:
        return Unsupported(fmt, str(err))

    info = DecodedImageInfo(
        format=fmt,
        width=width,
        height=height,
        source=source,
        bytes_examined=examined,
    )
    return Found(info)


__all__ = ["extract"]
