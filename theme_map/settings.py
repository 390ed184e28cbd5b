# theme_map/settings.py
from __future__ import annotations

"""
Run settings and the YAML loader.

Document shape:

  palette: ["#2e3440", "#3b4252", "#88c0d0", "#eceff4"]
  palette-affinity: 0.8
  cpus: 0            # 0 or absent: use every core

Loading is all-or-nothing: an unreadable file, a YAML syntax error, or a
value of the wrong type raises SettingsError; a palette entry that is
not a colour raises PaletteEntryError and an empty palette EmptyPaletteError.
All three are ConfigError and no partial settings are returned.
"""

import math
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Mapping, Optional, Union

import yaml

from .errors import SettingsError
from .palette import Palette
from .row_scheduler import resolve_workers
from .utils import warn

KNOWN_KEYS = ("palette", "palette-affinity", "cpus")


@dataclass(frozen=True)
class Settings:
    palette: Palette
    palette_affinity: float = 0.0
    cpus: int = 0

    def __post_init__(self) -> None:
        if self.cpus < 0:
            raise SettingsError(f"cpus must be >= 0, got {self.cpus}")

    def worker_count(self, override: Optional[int] = None) -> int:
        """Workers for a run: explicit override, else cpus, else every core."""
        return resolve_workers(override if override else self.cpus)


def _require_number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise SettingsError(f"{key} must be finite, got {value!r}")
    return float(value)


def _require_count(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SettingsError(f"{key} must be an integer, got {value!r}")
    if value < 0:
        raise SettingsError(f"{key} must be >= 0, got {value}")
    return value


def settings_from_mapping(raw: Any) -> Settings:
    """Validate a parsed settings document and build Settings from it."""
    if not isinstance(raw, Mapping):
        raise SettingsError(
            f"settings document must be a mapping, got {type(raw).__name__}"
        )

    for key in raw:
        if key not in KNOWN_KEYS:
            warn(f"ignoring unknown settings key {key!r}")

    entries = raw.get("palette") or []
    if not isinstance(entries, list):
        raise SettingsError("palette must be a list of hex colour strings")
    palette = Palette.from_hex(entries)

    if "palette-affinity" in raw:
        affinity = _require_number(raw["palette-affinity"], "palette-affinity")
    else:
        warn("palette-affinity not set; defaulting to 0.0 (image left unchanged)")
        affinity = 0.0

    cpus = _require_count(raw.get("cpus", 0) or 0, "cpus")
    return Settings(palette=palette, palette_affinity=affinity, cpus=cpus)


def load_settings_from_stream(stream: Union[str, IO[str]]) -> Settings:
    """Parse a YAML document (text or open text stream) into Settings."""
    try:
        raw = yaml.safe_load(stream)
    except yaml.YAMLError as exc:
        raise SettingsError(f"invalid settings YAML: {exc}") from exc
    return settings_from_mapping(raw)


def load_settings(path: Union[str, Path]) -> Settings:
    """Read and parse a YAML settings file."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return load_settings_from_stream(fh)
    except (OSError, UnicodeDecodeError) as exc:
        raise SettingsError(f"cannot read settings {path}: {exc}") from exc


__all__ = [
    "KNOWN_KEYS",
    "Settings",
    "settings_from_mapping",
    "load_settings_from_stream",
    "load_settings",
]
