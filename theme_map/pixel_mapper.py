# theme_map/pixel_mapper.py
from __future__ import annotations

"""
Pixel mapper: nearest palette colour in Lab, then blend toward it.

For a source colour with Lab coordinates t and nearest palette colour n:

  result = t + (n - t) * affinity

per channel. affinity 0 leaves the pixel alone, 1 replaces it with n, and
values outside [0, 1] extrapolate. Ties on distance go to the earlier
palette entry.
"""

import math
from typing import Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .colour_convert import lab_distance, lab_distances, lab_to_rgb, rgb_to_lab
from .core_types import Lab, LabColour, NativePixel, channel_max
from .palette import Palette


class PixelMapper:
    def __init__(self, palette: Palette, affinity: float) -> None:
        self.palette = palette
        self.affinity = float(affinity)
        self._pal_lab = palette.lab_array()

    # Nearest

    def nearest(self, target: LabColour) -> Tuple[int, LabColour]:
        """Linear scan; the first entry at the minimum distance wins."""
        best_index = -1
        best_distance = math.inf
        for index, candidate in enumerate(self.palette.colours()):
            distance = lab_distance(target, candidate)
            if distance < best_distance:
                best_distance = distance
                best_index = index
        return best_index, self.palette[best_index].lab

    def nearest_indices(self, lab: Lab) -> NDArray[np.intp]:
        """Vectorised nearest(): argmin keeps the first minimum, same tie-break."""
        return np.argmin(lab_distances(np.atleast_2d(lab), self._pal_lab), axis=1)

    # Blend

    def blend(self, target: Lab, nearest: Lab) -> Lab:
        target = np.asarray(target, dtype=np.float64)
        return target + (np.asarray(nearest, dtype=np.float64) - target) * self.affinity

    def map_lab(self, lab: Lab) -> Lab:
        """Lab rows [N,3] to blended Lab rows [N,3]."""
        lab = np.atleast_2d(np.asarray(lab, dtype=np.float64))
        return self.blend(lab, self._pal_lab[self.nearest_indices(lab)])

    # Native pixels

    def map_pixels(self, pixels: np.ndarray, depth: int = 8) -> NDArray[np.uint8]:
        """
        Map native pixels [N,3|4] at `depth` bits to 8-bit pixels of the same
        channel count. Alpha is carried through, rescaled to 8 bits.
        """
        pixels = np.atleast_2d(np.asarray(pixels))
        channels = pixels.shape[-1]
        out = np.empty((pixels.shape[0], channels), dtype=np.uint8)
        out[:, :3] = lab_to_rgb(self.map_lab(rgb_to_lab(pixels[:, :3], depth)))
        if channels == 4:
            alpha = pixels[:, 3].astype(np.float64)
            out[:, 3] = np.rint(alpha * 255.0 / channel_max(depth)).astype(np.uint8)
        return out

    def map(self, native: Sequence[int], depth: int = 8) -> NativePixel:
        """Map one native pixel (RGB or RGBA) to an 8-bit pixel."""
        return tuple(self.map_pixels(np.asarray([native]), depth)[0].tolist())


__all__ = ["PixelMapper"]
