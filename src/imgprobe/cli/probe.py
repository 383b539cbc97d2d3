"""CLI command implementation for the ``imgprobe probe`` workflow."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from imgprobe.config import (
    apply_runtime_overrides,
    bmp_legacy_height_enabled,
    build_fetch_policy,
    read_config,
)
from imgprobe.constants import (
    CONFIG_BMP_LEGACY_HEIGHT,
    CONFIG_INITIAL_BYTES,
    CONFIG_MAX_BYTES,
    CONFIG_TIMEOUT,
    EXIT_CONFIG,
    EXIT_FAILURES,
    SummaryFormat,
    TableStyle,
)
from imgprobe.errors import ConfigLoadError
from imgprobe.fetcher import ImageSizeFetcher
from imgprobe.formatter import human_summary, json_summary, resolve_table_style

from .common import exit_on_broken_pipe, probe_sources


@click.command()
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Explicit config file path")
@click.option("--ignore-defaults", "-I", is_flag=True, help="Ignore the bundled default configuration")
@click.option("--initial-bytes", type=click.IntRange(min=1), help="Bytes requested on the first attempt")
@click.option("--max-bytes", type=click.IntRange(min=1), help="Give up after reading this many bytes")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Network timeout in seconds",
)
@click.option(
    "--bmp-legacy-height/--no-bmp-legacy-height",
    default=None,
    help="Report BMP height from the width field (legacy behaviour)",
)
@click.option(
    "--summary",
    type=click.Choice([s.value for s in SummaryFormat], case_sensitive=False),
    default=SummaryFormat.HUMAN.value,
    help="Summary format to display",
)
@click.option(
    "--summary-style",
    type=click.Choice([t.value for t in TableStyle], case_sensitive=False),
    default=TableStyle.AUTO.value,
    help="Summary table style (auto/full/compact/none)",
)
@click.argument("sources", nargs=-1, required=True)
def probe(
    *,
    config_path: Path | None,
    ignore_defaults: bool,
    initial_bytes: int | None,
    max_bytes: int | None,
    timeout: float | None,
    bmp_legacy_height: bool | None,
    summary: str,
    summary_style: str,
    sources: tuple[str, ...],
) -> None:
    """Report format and dimensions for image files or http(s) URLs."""
    try:
        cfg = read_config(base_path=Path(), ignore_default=ignore_defaults, explicit_config=config_path)
        cfg = apply_runtime_overrides(
            cfg,
            **{
                CONFIG_INITIAL_BYTES: initial_bytes,
                CONFIG_MAX_BYTES: max_bytes,
                CONFIG_TIMEOUT: timeout,
                CONFIG_BMP_LEGACY_HEIGHT: bmp_legacy_height,
            },
        )
        policy = build_fetch_policy(cfg)
        legacy = bmp_legacy_height_enabled(cfg)
    except ConfigLoadError as err:
        print(err, file=sys.stderr)
        raise SystemExit(EXIT_CONFIG) from err

    fetcher = ImageSizeFetcher(policy, bmp_legacy_height=legacy)
    run = probe_sources(fetcher, sources)

    try:
        if SummaryFormat(summary) is SummaryFormat.JSON:
            print(json.dumps(json_summary(run.reports, run.errors), sort_keys=True, indent=2))
        else:
            text = human_summary(run.reports, table=resolve_table_style(TableStyle(summary_style)))
            if text:
                print(text, end="")
    except BrokenPipeError:
        exit_on_broken_pipe()

    if run.failed:
        raise SystemExit(EXIT_FAILURES)
