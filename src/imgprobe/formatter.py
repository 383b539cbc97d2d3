"""Output formatting helpers for probe results."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any, TextIO

from rich.console import Console
from rich.table import Table

from .constants import TableStyle

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .fetcher import FetchReport


def resolve_table_style(requested: TableStyle, stream: TextIO | None = None) -> TableStyle:
    """Pick a concrete style for ``auto``: the rich table on a terminal, TSV otherwise.

    ``stream`` defaults to ``sys.stdout``; objects without ``isatty`` count as
    non-terminals.
    """
    if requested is not TableStyle.AUTO:
        return requested
    target = sys.stdout if stream is None else stream
    isatty = getattr(target, "isatty", None)
    return TableStyle.FULL if callable(isatty) and isatty() else TableStyle.COMPACT


def human_summary(reports: Sequence[FetchReport], *, table: TableStyle = TableStyle.FULL) -> str:
    """Build a human-readable summary of ``reports`` and return it as a string."""
    if table is TableStyle.NONE or not reports:
        return ""

    if table is TableStyle.COMPACT:
        lines = [f"{r.info.source}\t{r.info.format}\t{r.info.width}x{r.info.height}" for r in reports]
        return "\n".join(lines) + "\n"

    out = Table(title="Image Summary", show_edge=False, pad_edge=False, expand=False)
    out.add_column("Source", style="cyan", overflow="fold")
    out.add_column("Format")
    out.add_column("Width", justify="right")
    out.add_column("Height", justify="right")
    out.add_column("Bytes", justify="right")
    for r in reports:
        out.add_row(
            r.info.source,
            r.info.format.value,
            str(r.info.width),
            str(r.info.height),
            f"{r.info.bytes_examined}/{r.bytes_fetched}",
        )
    console = Console(width=120)
    with console.capture() as capture:
        console.print(out)
    return capture.get()


def json_summary(reports: Sequence[FetchReport], errors: Sequence[dict[str, str]]) -> dict[str, Any]:
    """Build a machine-readable summary of successes and failures."""
    return {
        "results": [r.as_dict() for r in reports],
        "errors": list(errors),
    }
