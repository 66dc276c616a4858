"""
Runtime settings for chartcore.

Settings are resolved once, on first use, from (lowest to highest):

  1. the defaults on ``Settings``
  2. a JSON file: ``$CHARTCORE_CONFIG``, else ``<data dir>/config.json``
  3. ``configure(**overrides)`` calls from the host application

The data directory is ``$CHARTCORE_DIR`` (a project ``.env`` may set it),
else the file's ``data_dir`` key, else ``~/.chartcore``.

Example config.json:
    {"console_format": "full", "log_to_file": true,
     "plotly": {"max_display_points": 2000}}
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv

CONSOLE_FORMATS = ("simple", "full", "clean")


@dataclass(frozen=True)
class Settings:
    """Resolved chartcore settings.

    Attributes:
        data_dir:  Base directory for anything chartcore writes.
        console_format:  ``simple``, ``full`` or ``clean`` (see ``setup_logging``).
        log_to_file:  Write a per-session log under ``data_dir/logs``.
        warn_on_redefine:  Log a warning when a chart name is re-registered.
        max_display_points:  Plotly layers decimate series longer than this.
        gl_threshold:  Plotly layers switch to WebGL above this many points.
    """

    data_dir: Path
    console_format: str = "simple"
    log_to_file: bool = False
    warn_on_redefine: bool = True
    max_display_points: int = 5_000
    gl_threshold: int = 100_000

    def __post_init__(self):
        if self.console_format not in CONSOLE_FORMATS:
            raise ValueError(
                f"console_format must be one of {', '.join(CONSOLE_FORMATS)}, "
                f"got '{self.console_format}'"
            )
        for name in ("max_display_points", "gl_threshold"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")

    @property
    def log_dir(self) -> Path:
        return self.data_dir / "logs"

    @classmethod
    def from_mapping(cls, raw: dict[str, Any], data_dir: Path) -> Settings:
        """Build settings from a parsed config.json (nested ``plotly`` section)."""
        plotly = raw.get("plotly") or {}
        return cls(
            data_dir=data_dir,
            console_format=raw.get("console_format", "simple"),
            log_to_file=bool(raw.get("log_to_file", False)),
            warn_on_redefine=bool(raw.get("warn_on_redefine", True)),
            max_display_points=int(plotly.get("max_display_points", 5_000)),
            gl_threshold=int(plotly.get("gl_threshold", 100_000)),
        )


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid chartcore config file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"chartcore config file {path} must hold a JSON object")
    return raw


def load_settings() -> Settings:
    """Resolve settings from the environment and the config file (uncached)."""
    load_dotenv(find_dotenv(usecwd=True), override=False)

    env_dir = os.environ.get("CHARTCORE_DIR")
    data_dir = Path(env_dir).expanduser().resolve() if env_dir else Path.home() / ".chartcore"

    env_file = os.environ.get("CHARTCORE_CONFIG")
    raw = _read_config_file(Path(env_file).expanduser() if env_file else data_dir / "config.json")

    if not env_dir and raw.get("data_dir"):
        data_dir = Path(raw["data_dir"]).expanduser().resolve()
    return Settings.from_mapping(raw, data_dir)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def configure(**overrides: Any) -> Settings:
    """Override individual settings for this process.

    Example: ``configure(warn_on_redefine=False, gl_threshold=50_000)``

    Raises:
        TypeError: For an unknown setting name.
        ValueError: For an invalid value.
    """
    global _settings
    if "data_dir" in overrides:
        overrides["data_dir"] = Path(overrides["data_dir"]).expanduser().resolve()
    _settings = replace(get_settings(), **overrides)
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next access re-reads env and file."""
    global _settings
    _settings = None
