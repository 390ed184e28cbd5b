# theme_map/errors.py
from __future__ import annotations

"""
Error taxonomy.

ConfigError covers anything wrong with the settings document or palette and
is always raised before a single pixel is mapped. ImageDecodeError is an
OSError so callers that already handle I/O failures catch it too.
"""


class ThemeMapError(Exception):
    """Base class for every error raised by theme_map."""


class ConfigError(ThemeMapError, ValueError):
    """Invalid run configuration."""


class SettingsError(ConfigError):
    """Settings document unreadable, malformed, or of the wrong shape."""


class PaletteEntryError(ConfigError):
    """A palette entry that does not parse as a colour."""

    def __init__(self, index: int, value: object, reason: str) -> None:
        super().__init__(f"palette[{index}] = {value!r}: {reason}")
        self.index = index
        self.value = value


class EmptyPaletteError(ConfigError):
    """Palette parsed fine but has no entries."""

    def __init__(self) -> None:
        super().__init__("palette must contain at least one colour")


class ImageDecodeError(ThemeMapError, OSError):
    """Input bytes are not a decodable image."""


__all__ = [
    "ThemeMapError",
    "ConfigError",
    "SettingsError",
    "PaletteEntryError",
    "EmptyPaletteError",
    "ImageDecodeError",
]
