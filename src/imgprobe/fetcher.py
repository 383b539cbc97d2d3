"""Fetch orchestration: grow the requested prefix until the decoder answers."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .constants import (
    DEFAULT_CACHE_SIZE,
    DEFAULT_GROWTH_FACTOR,
    DEFAULT_INITIAL_BYTES,
    DEFAULT_MAX_BYTES,
    DEFAULT_TIMEOUT,
)
from .core import decode
from .errors import InsufficientDataError, UnsupportedImageError
from .logging_utils import StructuredLogEvent, get_logger, log_event
from .outcome import Found, Unsupported
from .sources import open_source

if TYPE_CHECKING:
    from pathlib import Path

    from .outcome import DecodedImageInfo
    from .sources import ByteSource

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FetchPolicy:
    """How many bytes to request per attempt and when to give up."""

    initial_bytes: int = DEFAULT_INITIAL_BYTES
    growth_factor: int = DEFAULT_GROWTH_FACTOR
    max_bytes: int = DEFAULT_MAX_BYTES
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.initial_bytes < 1:
            msg = f"initial_bytes must be positive, got {self.initial_bytes}"
            raise ValueError(msg)
        if self.growth_factor < 2:  # noqa: PLR2004
            msg = f"growth_factor must be at least 2, got {self.growth_factor}"
            raise ValueError(msg)
        if self.max_bytes < self.initial_bytes:
            msg = f"max_bytes ({self.max_bytes}) must not be smaller than initial_bytes ({self.initial_bytes})"
            raise ValueError(msg)
        if self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout}"
            raise ValueError(msg)

    def next_window(self, current: int) -> int:
        return min(current * self.growth_factor, self.max_bytes)


@dataclass(frozen=True, slots=True)
class FetchReport:
    info: DecodedImageInfo
    attempts: int
    bytes_fetched: int
    cached: bool = False

    def as_dict(self) -> dict[str, Any]:
        return self.info.as_dict() | {"attempts": self.attempts, "bytes_fetched": self.bytes_fetched}


@dataclass
class ImageSizeFetcher:
    """Resolve image dimensions while reading as few leading bytes as possible.

    Each attempt re-reads a prefix from offset 0, growing the window by
    ``policy.growth_factor`` on every ``NeedMoreData`` until ``policy.max_bytes``.
    Successful reports are cached per source identifier; once ``cache_size``
    entries are held the least recently used one is evicted.
    """

    policy: FetchPolicy = field(default_factory=FetchPolicy)
    bmp_legacy_height: bool = False
    cache: bool = True
    cache_size: int = DEFAULT_CACHE_SIZE
    _results: OrderedDict[str, FetchReport] = field(default_factory=OrderedDict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.cache_size < 1:
            msg = f"cache_size must be positive, got {self.cache_size}"
            raise ValueError(msg)

    def fetch(self, source: ByteSource) -> FetchReport:
        """Return the decoded dimensions for ``source`` or raise why it failed.

        Raises ``UnsupportedImageError`` when the bytes rule out every format and
        ``InsufficientDataError`` when the source ends or the byte ceiling is hit.
        ``SourceReadError`` from the source propagates unchanged.
        """
        ident = source.identifier
        if self.cache:
            with self._lock:
                hit = self._results.get(ident)
                if hit is not None:
                    self._results.move_to_end(ident)
            if hit is not None:
                self._log("fetch.cache_hit", "serving cached result", source=ident)
                return FetchReport(hit.info, hit.attempts, hit.bytes_fetched, cached=True)

        window = self.policy.initial_bytes
        attempts = 0
        while True:
            attempts += 1
            data = source.read_prefix(window)
            self._log(
                "fetch.attempt",
                "fetched prefix",
                level=logging.DEBUG,
                source=ident,
                attempt=attempts,
                requested=window,
                received=len(data),
            )
            outcome = decode(ident, data, bmp_legacy_height=self.bmp_legacy_height)

            if isinstance(outcome, Found):
                report = FetchReport(outcome.info, attempts, len(data))
                self._log(
                    "fetch.found",
                    "dimensions found",
                    source=ident,
                    format=outcome.info.format,
                    width=outcome.info.width,
                    height=outcome.info.height,
                    bytes_fetched=len(data),
                )
                if self.cache:
                    self._remember(ident, report)
                return report

            if isinstance(outcome, Unsupported):
                self._log(
                    "fetch.unsupported",
                    "unsupported image",
                    level=logging.WARNING,
                    source=ident,
                    reason=outcome.reason,
                )
                raise UnsupportedImageError(ident, outcome.reason)

            if len(data) < window:
                self._log("fetch.exhausted", "source exhausted", level=logging.WARNING, source=ident, fetched=len(data))
                raise InsufficientDataError(ident, InsufficientDataError.EXHAUSTED, len(data))
            if window >= self.policy.max_bytes:
                self._log("fetch.limit", "byte ceiling reached", level=logging.WARNING, source=ident, fetched=len(data))
                raise InsufficientDataError(ident, InsufficientDataError.LIMIT, len(data))
            window = self.policy.next_window(window)

    def probe(self, ref: str | Path) -> FetchReport:
        """Open ``ref`` (path or http(s) URL) and fetch its dimensions."""
        return self.fetch(open_source(ref, timeout=self.policy.timeout))

    def _remember(self, ident: str, report: FetchReport) -> None:
        with self._lock:
            self._results[ident] = report
            self._results.move_to_end(ident)
            while len(self._results) > self.cache_size:
                self._results.popitem(last=False)

    def clear_cache(self) -> None:
        with self._lock:
            self._results.clear()

    @staticmethod
    def _log(name: str, message: str, *, level: int = logging.INFO, **context: object) -> None:
        log_event(logger, StructuredLogEvent(name=name, message=message, level=level, context=context))


__all__ = ["FetchPolicy", "FetchReport", "ImageSizeFetcher"]
