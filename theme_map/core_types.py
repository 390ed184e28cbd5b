# theme_map/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
NativePixel = Tuple[int, ...]  # RGB or RGBA at the image's bit depth
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 3|4)
Lab = NDArray[np.float64]  # (..., 3) CIE Lab

# Value objects


class LabColour(NamedTuple):
    """A colour in CIE Lab (D65). Immutable."""

    L: float
    a: float
    b: float


@dataclass(frozen=True)
class PaletteItem:
    """Palette entry with its device colour and precomputed Lab coordinates."""

    rgb: RGBTuple
    hex: HexStr
    lab: LabColour


# Small helpers

_HEX_DIGITS = frozenset("0123456789abcdef")


def rgb_to_hex(rgb: Sequence[int]) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{int(rgb[0]):02x}{int(rgb[1]):02x}{int(rgb[2]):02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        raise ValueError("hex must start with '#'")
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    if any(c not in _HEX_DIGITS for c in s[1:]):
        raise ValueError("hex digits must be 0-9 or a-f")
    return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))


def channel_max(depth: int) -> int:
    """Largest channel value at a given bit depth (255 for 8, 65535 for 16)."""
    if depth not in (8, 16):
        raise ValueError(f"unsupported bit depth {depth}")
    return (1 << depth) - 1


__all__ = [
    # aliases / types
    "RGBTuple",
    "NativePixel",
    "HexStr",
    "U8Image",
    "Lab",
    # value objects
    "LabColour",
    "PaletteItem",
    # helpers
    "rgb_to_hex",
    "hex_to_rgb",
    "channel_max",
]
