# theme_map/image_mapper.py
from __future__ import annotations

"""
Image mapper: runs the pixel mapper over a whole image.

Owns the source image, a fresh destination buffer and a fresh colour cache
per run. Rows are handed to the row scheduler; each worker maps its row
through the cache (one batched nearest/blend call for the colours the cache
has not seen yet) and writes the row into the destination.

Quick start:
  from theme_map import load_settings, load_image, map_image
  out = map_image(load_settings("settings.yaml"), load_image("in.jpg"))
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

from .colour_cache import ColourCache
from .core_types import NativePixel, U8Image, rgb_to_hex
from .pixel_mapper import PixelMapper
from .raster import DestinationBuffer, SourceImage
from .row_scheduler import ProgressCallback, RowScheduler
from .settings import Settings


@dataclass(frozen=True)
class MappingStats:
    rows: int
    pixels: int
    unique_colours: int
    cache_hits: int
    cache_misses: int
    workers: int
    rows_per_worker: Tuple[int, ...]
    seconds: float

    @property
    def hit_ratio(self) -> float:
        lookups = self.cache_hits + self.cache_misses
        return self.cache_hits / lookups if lookups else 0.0

    @property
    def mpx_per_second(self) -> float:
        return (self.pixels / self.seconds) / 1e6 if self.seconds > 0 else 0.0


class ImageMapper:
    def __init__(
        self, settings: Settings, source: SourceImage, workers: Optional[int] = None
    ) -> None:
        self.settings = settings
        self.source = source
        self.pixel_mapper = PixelMapper(settings.palette, settings.palette_affinity)
        self.cache = ColourCache()
        self.destination = DestinationBuffer(source.bounds, source.channels)
        self.scheduler = RowScheduler(settings.worker_count(workers))
        self._stats: Optional[MappingStats] = None
        self._started = False

    def _compute(self, keys: List[NativePixel]) -> List[NativePixel]:
        mapped = self.pixel_mapper.map_pixels(np.asarray(keys), self.source.depth)
        return [tuple(p) for p in mapped.tolist()]

    def map_row(self, y: int) -> None:
        """Map every column of row y and write the row into the destination."""
        keys = [tuple(p) for p in self.source.row(y).tolist()]
        values = self.cache.get_or_compute_many(keys, self._compute)
        self.destination.write_row(
            y, np.asarray(values, dtype=np.uint8).reshape(-1, self.destination.channels)
        )

    def run(self, progress: Optional[ProgressCallback] = None) -> DestinationBuffer:
        """Map the whole image. Blocks until every row is written."""
        if self._started:
            raise RuntimeError("ImageMapper.run() already called; create a new mapper")
        self._started = True

        t_start = time.perf_counter()
        per_worker = self.scheduler.run(self.source.bounds.rows(), self.map_row, progress)
        elapsed = time.perf_counter() - t_start

        bounds = self.source.bounds
        self._stats = MappingStats(
            rows=bounds.height,
            pixels=bounds.width * bounds.height,
            unique_colours=len(self.cache),
            cache_hits=self.cache.hits,
            cache_misses=self.cache.misses,
            workers=self.scheduler.workers,
            rows_per_worker=tuple(per_worker),
            seconds=elapsed,
        )
        return self.destination

    def stats(self) -> MappingStats:
        if self._stats is None:
            raise RuntimeError("no stats before run()")
        return self._stats


def map_image(
    settings: Settings,
    image: Image.Image,
    workers: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> Image.Image:
    """Map a decoded Pillow image and return the mapped image."""
    return ImageMapper(settings, SourceImage.from_pil(image), workers).run(progress).to_pil()


def colour_usage_report(pixels: U8Image, top: Optional[int] = None) -> List[Tuple[str, int]]:
    """(hex, count) for each distinct output colour, most used first."""
    flat = pixels[..., :3].reshape(-1, 3)
    if flat.shape[0] == 0:
        return []
    uniques, counts = np.unique(flat, axis=0, return_counts=True)
    order = np.argsort(-counts, kind="stable")
    if top is not None:
        order = order[:top]
    return [(rgb_to_hex(uniques[i]), int(counts[i])) for i in order]


__all__ = ["MappingStats", "ImageMapper", "map_image", "colour_usage_report"]
