"""Shared CLI helpers used by multiple subcommands."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from imgprobe.constants import EXIT_INTERRUPT
from imgprobe.errors import ImageProbeError, InsufficientDataError, SourceReadError, UnsupportedImageError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from imgprobe.fetcher import FetchReport, ImageSizeFetcher

logger = logging.getLogger(__name__)

ERROR_KINDS: dict[type[ImageProbeError], str] = {
    UnsupportedImageError: "unsupported",
    InsufficientDataError: "insufficient_data",
    SourceReadError: "read_error",
}


@dataclass(slots=True)
class ProbeRun:
    """Results collected while probing a batch of sources."""

    reports: list[FetchReport] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


def error_kind(err: ImageProbeError) -> str:
    for cls, kind in ERROR_KINDS.items():
        if isinstance(err, cls):
            return kind
    return "error"


def probe_sources(fetcher: ImageSizeFetcher, refs: Sequence[str]) -> ProbeRun:
    """Probe each reference in order, recording failures instead of stopping."""
    run = ProbeRun()
    for idx, ref in enumerate(refs):
        try:
            run.reports.append(fetcher.probe(ref))
        except ImageProbeError as err:
            print(err, file=sys.stderr)
            run.errors.append({"source": ref, "kind": error_kind(err), "message": str(err)})
        except KeyboardInterrupt:
            print(f"\nInterrupted after {idx} of {len(refs)} sources.", file=sys.stderr)
            raise SystemExit(EXIT_INTERRUPT) from None
    logger.debug("probed %d sources, %d failed", len(refs), len(run.errors))
    return run


def exit_on_broken_pipe() -> None:
    """Silence the downstream-closed pipe and exit cleanly."""
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    except (OSError, ValueError):
        # stdout may be a test double without a file descriptor
        pass
    raise SystemExit(0)
