"""Byte builders for minimal image headers shared across tests."""

from __future__ import annotations

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def png_bytes(width: int, height: int) -> bytes:
    # signature + length(13) + "IHDR" + width + height + bit_depth + color_type + misc + crc
    ihdr_len = (13).to_bytes(4, "big")
    w = width.to_bytes(4, "big")
    h = height.to_bytes(4, "big")
    rest = b"\x08\x06\x00\x00\x00"  # RGBA, 8 bits, no interlace
    crc = b"\x00\x00\x00\x00"
    return PNG_SIGNATURE + ihdr_len + b"IHDR" + w + h + rest + crc


def gif_bytes(width: int, height: int, *, padding: int = 3) -> bytes:
    # Header (6) + Logical Screen Descriptor width/height (4) + flags/bg/aspect
    return b"GIF89a" + width.to_bytes(2, "little") + height.to_bytes(2, "little") + b"\x00" * padding


def bmp_bytes(width: int, height: int, *, core: bool = False, pixels: int = 16) -> bytes:
    """Build a BMP file header plus a core (12) or info (40) DIB header."""
    if core:
        dib = (
            (12).to_bytes(4, "little")
            + width.to_bytes(2, "little")
            + height.to_bytes(2, "little")
            + (1).to_bytes(2, "little")
            + (24).to_bytes(2, "little")
        )
    else:
        dib = (
            (40).to_bytes(4, "little")
            + width.to_bytes(4, "little", signed=True)
            + height.to_bytes(4, "little", signed=True)
            + (1).to_bytes(2, "little")
            + (24).to_bytes(2, "little")
            + b"\x00" * 24
        )
    body = b"\x00" * pixels
    offset = 14 + len(dib)
    total = offset + len(body)
    file_header = b"BM" + total.to_bytes(4, "little") + b"\x00\x00\x00\x00" + offset.to_bytes(4, "little")
    return file_header + dib + body


def jfif_app0() -> bytes:
    # SOI + APP0 with a 16-byte JFIF payload (length field included)
    return (
        b"\xff\xd8"
        b"\xff\xe0"
        b"\x00\x10"
        b"JFIF\x00"
        b"\x01\x01"  # version 1.1
        b"\x00"  # density units
        b"\x00\x01\x00\x01"  # x/y density
        b"\x00\x00"  # no thumbnail
    )


def segment(marker: int, payload: bytes) -> bytes:
    return bytes((0xFF, marker)) + (len(payload) + 2).to_bytes(2, "big") + payload


def sof_segment(width: int, height: int, *, marker: int = 0xC0) -> bytes:
    payload = (
        b"\x08"
        + height.to_bytes(2, "big")
        + width.to_bytes(2, "big")
        + b"\x03\x01\x22\x00\x02\x11\x01\x03\x11\x01"
    )
    return segment(marker, payload)


def jpeg_bytes(width: int, height: int, *, before_sof: tuple[bytes, ...] = (), marker: int = 0xC0) -> bytes:
    """Build SOI + APP0/JFIF, optional extra segments, SOF and a trailing EOI."""
    return jfif_app0() + b"".join(before_sof) + sof_segment(width, height, marker=marker) + b"\xff\xd9"


def dqt_segment() -> bytes:
    return segment(0xDB, b"\x00" + bytes(range(1, 65)))
