"""Result types returned by the decoder.

A decode attempt resolves to exactly one of three states:

- ``Found``: the dimensions were read from in-bounds positions.
- ``NeedMoreData``: the buffer is provably too short; retry with more bytes.
- ``Unsupported``: the bytes already present rule out every supported format.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .constants import SupportedFormat


@dataclass(frozen=True, slots=True)
class DecodedImageInfo:
    """Format and pixel dimensions recovered from a buffer prefix."""

    format: SupportedFormat
    width: int
    height: int
    source: str
    bytes_examined: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "format": self.format.value,
            "width": self.width,
            "height": self.height,
            "bytes_examined": self.bytes_examined,
        }


@dataclass(frozen=True, slots=True)
class Found:
    info: DecodedImageInfo


@dataclass(frozen=True, slots=True)
class NeedMoreData:
    format: SupportedFormat | None = None
    reason: str = ""


@dataclass(frozen=True, slots=True)
class Unsupported:
    format: SupportedFormat | None = None
    reason: str = ""


type Outcome = Found | NeedMoreData | Unsupported

__all__ = ["DecodedImageInfo", "Found", "NeedMoreData", "Outcome", "Unsupported"]
