"""Utilities for loading configuration files and building fetch policies."""

from __future__ import annotations

import importlib.resources
import os
import tomllib
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from imgprobe.constants import (
    CONFIG_BMP_LEGACY_HEIGHT,
    CONFIG_GROWTH_FACTOR,
    CONFIG_INITIAL_BYTES,
    CONFIG_MAX_BYTES,
    CONFIG_TIMEOUT,
)
from imgprobe.errors import ConfigLoadError
from imgprobe.fetcher import FetchPolicy

TOML_CONFIG = ".imgprobe.toml"
ENV_CONFIG_PATH = "IMGPROBE_CONFIG_PATH"

_INT_KEYS = (CONFIG_INITIAL_BYTES, CONFIG_GROWTH_FACTOR, CONFIG_MAX_BYTES)


def load_default_config_text() -> str:
    """Return the bundled default configuration text, comments included."""
    try:
        cfg_path = importlib.resources.files("imgprobe.resources").joinpath("default_config.toml")
        with cfg_path.open("r", encoding="utf-8") as f:  # type: ignore[attr-defined]
            return f.read()
    except OSError as err:  # pragma: no cover - packaging problem
        msg = f"Error loading default configuration: {err}"
        raise ConfigLoadError(msg) from err


def load_default_config() -> dict[str, Any]:
    """Return the bundled default configuration as a Python dict."""
    return tomllib.loads(load_default_config_text())


def write_default_config(target_dir: Path) -> Path:
    """Write the bundled default configuration into ``target_dir``."""
    toml_path = target_dir / TOML_CONFIG
    toml_path.write_text(load_default_config_text(), encoding="utf-8")
    return toml_path


def _parse_toml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Error reading {path}: {e}"
        raise ConfigLoadError(msg) from e
    try:
        return tomlkit.loads(raw).unwrap()
    except TOMLKitError as e:
        msg = f"Error parsing {path.name}: {e}"
        raise ConfigLoadError(msg) from e


def _load_with_extends(path: Path, *, _visited: set[Path] | None = None) -> dict[str, Any]:
    """Load a TOML file supporting an optional 'extends' key for inheritance.

    Relative paths in 'extends' are resolved against the parent of ``path``.
    """
    if _visited is None:
        _visited = set()
    real = path.resolve()
    if real in _visited:
        return {}
    _visited.add(real)

    data = _parse_toml(path)
    ext = data.get("extends")
    if isinstance(ext, str):
        ext_list = [ext]
    elif isinstance(ext, list):
        ext_list = [e for e in ext if isinstance(e, str)]
    else:
        ext_list = []

    base_cfg: dict[str, Any] = {}
    for entry in ext_list:
        ext_path = Path(entry)
        if not ext_path.is_absolute():
            ext_path = (path.parent / ext_path).resolve()
        if ext_path.exists():
            base_cfg |= _load_with_extends(ext_path, _visited=_visited)

    base_cfg |= {k: v for k, v in data.items() if k != "extends"}
    return base_cfg


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file (supports 'extends')."""
    return _load_with_extends(path)


def _xdg_config_path() -> Path:
    xdg_home = os.environ.get("XDG_CONFIG_HOME")
    xdg_dir = Path(xdg_home) if xdg_home else Path.home() / ".config"
    return xdg_dir / "imgprobe" / "config.toml"


def _merge_pyproject_cfg(pyproject_path: Path, cfg: dict[str, Any]) -> dict[str, Any]:
    if not pyproject_path.exists():
        return cfg
    data = _parse_toml(pyproject_path)
    tool = data.get("tool", {})
    if isinstance(tool, dict):
        section = tool.get("imgprobe")
        if isinstance(section, dict):
            cfg |= section
    return cfg


def read_config(
    *,
    base_path: Path,
    ignore_default: bool = False,
    explicit_config: Path | None = None,
) -> dict[str, Any]:
    """Read configuration merging multiple sources with clear precedence.

    Precedence (low → high):
      1. bundled defaults (unless ``ignore_default``)
      2. XDG config: $XDG_CONFIG_HOME/imgprobe/config.toml (or ~/.config/imgprobe/config.toml)
      3. .imgprobe.toml in ``base_path``
      4. [tool.imgprobe] table in pyproject.toml at ``base_path``
      5. $IMGPROBE_CONFIG_PATH (if set)
      6. ``explicit_config`` (from --config)
    """
    cfg: dict[str, Any] = {} if ignore_default else load_default_config()

    for p in (_xdg_config_path(), base_path / TOML_CONFIG):
        if p.exists():
            cfg |= load_toml_config(p)

    cfg = _merge_pyproject_cfg(base_path / "pyproject.toml", cfg)

    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        p = Path(env_path)
        if p.exists():
            cfg |= load_toml_config(p)

    if explicit_config:
        if not explicit_config.exists():
            msg = f"Explicit config file not found: {explicit_config}"
            raise ConfigLoadError(msg)
        cfg |= load_toml_config(explicit_config)

    return cfg


def apply_runtime_overrides(cfg: dict[str, Any], **overrides: object) -> dict[str, Any]:
    """Return ``cfg`` with CLI flags layered on top; ``None`` means not given."""
    cfg = dict(cfg)
    cfg |= {k: v for k, v in overrides.items() if v is not None}
    return cfg


def build_fetch_policy(cfg: dict[str, Any]) -> FetchPolicy:
    """Validate config values and turn them into a :class:`FetchPolicy`."""
    kwargs: dict[str, Any] = {}
    for key in _INT_KEYS:
        if key in cfg:
            value = cfg[key]
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"Config key '{key}' must be an integer, got {value!r}"
                raise ConfigLoadError(msg)
            kwargs[key] = value
    if CONFIG_TIMEOUT in cfg:
        value = cfg[CONFIG_TIMEOUT]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            msg = f"Config key '{CONFIG_TIMEOUT}' must be a number, got {value!r}"
            raise ConfigLoadError(msg)
        kwargs[CONFIG_TIMEOUT] = float(value)
    try:
        return FetchPolicy(**kwargs)
    except ValueError as err:
        msg = f"Invalid fetch settings: {err}"
        raise ConfigLoadError(msg) from err


def bmp_legacy_height_enabled(cfg: dict[str, Any]) -> bool:
    value = cfg.get(CONFIG_BMP_LEGACY_HEIGHT, False)
    if not isinstance(value, bool):
        msg = f"Config key '{CONFIG_BMP_LEGACY_HEIGHT}' must be true or false, got {value!r}"
        raise ConfigLoadError(msg)
    return value
