"""Signature detection from the first bytes of a buffer."""

from __future__ import annotations

from .constants import SIGNATURE_LENGTH, SIGNATURE_MAGIC, SupportedFormat
from .outcome import NeedMoreData, Unsupported


def classify(buffer: bytes) -> SupportedFormat | NeedMoreData | Unsupported:
    """Classify ``buffer`` by its leading big-endian 16-bit magic value."""
    if len(buffer) < SIGNATURE_LENGTH:
        return NeedMoreData(reason="signature needs 2 bytes")
    magic = int.from_bytes(buffer[:SIGNATURE_LENGTH], "big")
    fmt = SIGNATURE_MAGIC.get(magic)
    if fmt is None:
        return Unsupported(reason=f"unknown signature 0x{magic:04X}")
    return fmt
