"""
theme_map package.

Purpose:
  Recolour images toward a fixed palette: every pixel moves toward its
  nearest palette colour in CIE Lab by a configurable affinity. See cli.py
  for the command line.

Public API:
  Settings / load_settings : run configuration from YAML.
  Palette                  : ordered Lab palette built from hex strings.
  PixelMapper              : nearest-colour search and blend for one pixel.
  ColourCache              : thread-safe memo of source -> mapped colours.
  RowScheduler             : worker pool fed row indices through a queue.
  ImageMapper / map_image  : whole-image mapping.
  load_image / save_image  : Pillow decode/encode from paths or streams.

Quick start:
  from theme_map import load_settings, load_image, map_image, save_image
  settings = load_settings("settings.yaml")
  save_image(map_image(settings, load_image("in.jpg")), "out.jpg")
"""

__version__ = "1.0.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import errors
from . import utils

from .colour_cache import ColourCache
from .core_types import LabColour, PaletteItem
from .errors import (
    ConfigError,
    EmptyPaletteError,
    ImageDecodeError,
    PaletteEntryError,
    SettingsError,
    ThemeMapError,
)
from .image_io import load_image, save_image
from .image_mapper import ImageMapper, MappingStats, map_image
from .palette import Palette
from .pixel_mapper import PixelMapper
from .raster import Bounds, DestinationBuffer, SourceImage
from .row_scheduler import RowScheduler
from .settings import Settings, load_settings, load_settings_from_stream

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "errors",
    "utils",
    "ColourCache",
    "LabColour",
    "PaletteItem",
    "ConfigError",
    "EmptyPaletteError",
    "ImageDecodeError",
    "PaletteEntryError",
    "SettingsError",
    "ThemeMapError",
    "load_image",
    "save_image",
    "ImageMapper",
    "MappingStats",
    "map_image",
    "Palette",
    "PixelMapper",
    "Bounds",
    "DestinationBuffer",
    "SourceImage",
    "RowScheduler",
    "Settings",
    "load_settings",
    "load_settings_from_stream",
]
