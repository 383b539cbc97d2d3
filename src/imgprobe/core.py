"""Decoder entry point: signature detection followed by dimension extraction."""

from __future__ import annotations

import logging

from .constants import SupportedFormat
from .dimensions import extract
from .logging_utils import StructuredLogEvent, get_logger, log_event
from .outcome import Found, Outcome
from .signature import classify

logger = get_logger(__name__)


def decode(source: str, buffer: bytes | bytearray | memoryview, *, bmp_legacy_height: bool = False) -> Outcome:
    """Decode the format and dimensions of an image from a prefix of its bytes.

    ``buffer`` must start at offset 0 of the underlying file. The call is pure:
    it returns ``Found``, ``NeedMoreData`` or ``Unsupported`` for any input and
    never raises on short or malformed data.
    """
    data = bytes(buffer)
    classified = classify(data)
    if isinstance(classified, SupportedFormat):
        outcome = extract(classified, data, source=source, bmp_legacy_height=bmp_legacy_height)
    else:
        outcome = classified

    context: dict[str, object] = {
        "source": source,
        "buffered": len(data),
        "outcome": type(outcome).__name__,
    }
    if isinstance(outcome, Found):
        context |= {"format": outcome.info.format, "width": outcome.info.width, "height": outcome.info.height}
    else:
        context |= {"format": outcome.format, "reason": outcome.reason}
    log_event(
        logger,
        StructuredLogEvent(name="decode.outcome", message="decode attempt", level=logging.DEBUG, context=context),
    )
    return outcome


__all__ = ["decode"]
