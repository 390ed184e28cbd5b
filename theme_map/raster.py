# theme_map/raster.py
from __future__ import annotations

"""
Pixel grids addressed by absolute (x, y) within rectangular bounds.

SourceImage is read-only. DestinationBuffer is written row by row; each row
belongs to exactly one worker, so writes never overlap and need no lock.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from .core_types import NativePixel, U8Image


@dataclass(frozen=True)
class Bounds:
    """Half-open rectangle [min_x, max_x) x [min_y, max_y)."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    def rows(self) -> range:
        return range(self.min_y, self.max_y)

    def columns(self) -> range:
        return range(self.min_x, self.max_x)

    def contains(self, x: int, y: int) -> bool:
        return self.min_x <= x < self.max_x and self.min_y <= y < self.max_y


class SourceImage:
    """
    Read-only native pixels [H, W, C] (C = 3 or 4, uint8 or uint16).
    The last channel is alpha when C == 4.
    """

    def __init__(
        self, pixels: np.ndarray, *, origin: tuple[int, int] = (0, 0), depth: int = 8
    ) -> None:
        if pixels.ndim != 3 or pixels.shape[-1] not in (3, 4):
            raise TypeError(f"expected (H, W, 3|4) pixels, got shape {pixels.shape}")
        pixels = np.array(pixels, copy=True)
        pixels.setflags(write=False)
        self.pixels = pixels
        self.depth = depth
        height, width = pixels.shape[:2]
        self.bounds = Bounds(origin[0], origin[1], origin[0] + width, origin[1] + height)

    @classmethod
    def from_pil(cls, image: Image.Image, origin: tuple[int, int] = (0, 0)) -> "SourceImage":
        """Wrap a decoded Pillow image (RGB/RGBA 8-bit, or 16-bit greyscale)."""
        if image.mode.startswith("I;16"):
            grey = np.array(image, dtype=np.uint16)
            return cls(np.stack([grey] * 3, axis=-1), origin=origin, depth=16)
        if image.mode not in ("RGB", "RGBA"):
            keep_alpha = "A" in image.getbands() or "transparency" in image.info
            image = image.convert("RGBA" if keep_alpha else "RGB")
        return cls(np.array(image, dtype=np.uint8), origin=origin, depth=8)

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[-1])

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    def row(self, y: int) -> np.ndarray:
        return self.pixels[y - self.bounds.min_y]

    def at(self, x: int, y: int) -> NativePixel:
        if not self.bounds.contains(x, y):
            raise IndexError(f"({x}, {y}) outside {self.bounds}")
        return tuple(self.pixels[y - self.bounds.min_y, x - self.bounds.min_x].tolist())


class DestinationBuffer:
    """Mapped 8-bit pixels with the same bounds as the source."""

    def __init__(self, bounds: Bounds, channels: int) -> None:
        self.bounds = bounds
        self.pixels: U8Image = np.zeros((bounds.height, bounds.width, channels), dtype=np.uint8)

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[-1])

    def write_row(self, y: int, values: NDArray[np.uint8]) -> None:
        self.pixels[y - self.bounds.min_y] = values

    def at(self, x: int, y: int) -> NativePixel:
        if not self.bounds.contains(x, y):
            raise IndexError(f"({x}, {y}) outside {self.bounds}")
        return tuple(self.pixels[y - self.bounds.min_y, x - self.bounds.min_x].tolist())

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels)


__all__ = ["Bounds", "SourceImage", "DestinationBuffer"]
