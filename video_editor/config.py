"""Runtime settings loading and path resolution.

Settings come from a YAML file::

    ffmpeg:
      binary: /usr/local/bin/ffmpeg
      timeout: 900        # seconds, optional
    fonts_dir: fonts      # relative to this file

Relative paths resolve against the directory holding the config file.
"""

from __future__ import annotations

from pathlib import Path

import yaml

_DEFAULT_CONFIG = "config.yaml"
DEFAULT_FFMPEG_BINARY = "ffmpeg"


def load_config(config_path: str | None = None) -> dict:
    """Load the settings file.

    The default ``config.yaml`` is optional and yields ``{}`` when absent; an
    explicitly given path must exist.
    """
    path = Path(config_path or _DEFAULT_CONFIG)
    if not path.exists():
        if config_path is None:
            return {}
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must be a mapping, got {type(data).__name__}")
    return data


def get_project_root(config_path: str | None = None) -> Path:
    path = Path(config_path or _DEFAULT_CONFIG)
    return path.resolve().parent


def resolve_path(config: dict, key_path: str, config_path: str | None = None) -> Path | None:
    """Resolve a dotted key (``"fonts_dir"``) to a path, ``None`` if unset."""
    val = config
    for key in key_path.split("."):
        if not isinstance(val, dict) or key not in val:
            return None
        val = val[key]
    if val is None:
        return None
    p = Path(val)
    if not p.is_absolute():
        p = get_project_root(config_path) / p
    return p


def _ffmpeg_section(config: dict) -> dict:
    section = config.get("ffmpeg") or {}
    if not isinstance(section, dict):
        raise ValueError("'ffmpeg' config section must be a mapping")
    return section


def get_ffmpeg_binary(config: dict) -> str:
    return str(_ffmpeg_section(config).get("binary") or DEFAULT_FFMPEG_BINARY)


def get_ffmpeg_timeout(config: dict) -> float | None:
    timeout = _ffmpeg_section(config).get("timeout")
    if timeout is None:
        return None
    try:
        value = float(timeout)
    except (TypeError, ValueError):
        raise ValueError(f"ffmpeg.timeout must be a number of seconds, got {timeout!r}") from None
    if value <= 0:
        raise ValueError("ffmpeg.timeout must be positive")
    return value


def get_fonts_dir(config: dict, config_path: str | None = None) -> Path | None:
    return resolve_path(config, "fonts_dir", config_path)
