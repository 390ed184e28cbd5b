#!/usr/bin/env python3
"""
theme-map
Recolour an image toward a fixed palette (e.g. a desktop colour scheme).

Usage:
  theme-map --settings settings.yaml --input in.jpg --output out.jpg [--cpus N] [--progress] [--debug]
  theme-map --settings settings.yaml < in.png > out.jpg

Each pixel moves toward its nearest palette colour in CIE Lab by the
settings' palette-affinity (0 = unchanged, 1 = palette colour).

Input:
  Any Pillow-readable image, from --input or stdin.

Output:
  Format from the output suffix; JPEG when writing to stdout. When image
  bytes go to stdout, log lines go to stderr.

Exit status:
  0 on success, 1 on a settings or image error, 2 if --input does not exist.
"""

from __future__ import annotations

import argparse
import io
import os
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional

from .errors import ThemeMapError
from .image_io import load_image, save_image
from .image_mapper import ImageMapper, colour_usage_report
from .raster import SourceImage
from .row_scheduler import ProgressCallback
from .settings import load_settings
from .utils import (
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_eta,
    format_seconds_compact,
    key_value_pairs_to_string,
    log,
    print_config_line,
    print_progress_line,
    set_log_stream,
)


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        settings: Path to the YAML settings file
        input: optional Path (None reads stdin)
        output: optional Path (None writes stdout)
        cpus: optional worker override (0 or omitted defers to settings)
        progress: bool for a live row counter
        debug: bool for mapping statistics
    """
    parser = argparse.ArgumentParser(
        prog="theme-map",
        description="Map colours in an image to a specified palette.",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=Path("settings.yaml"),
        help="Settings YAML file path",
    )
    parser.add_argument(
        "--input", type=Path, default=None, help="Input image file path (default: stdin)"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output image file path (default: JPEG to stdout)",
    )
    parser.add_argument(
        "--cpus", type=int, default=None, help="Worker threads (overrides settings)"
    )
    parser.add_argument("--progress", action="store_true", help="Show row progress")
    parser.add_argument("--debug", action="store_true", help="Verbose mapping details")
    return parser.parse_args(argv)


def _progress_printer() -> ProgressCallback:
    """Row counter with ETA, redrawn about every 1% of rows."""
    t_start = time.perf_counter()
    lock = threading.Lock()

    def report(done: int, total: int) -> None:
        step = max(1, total // 100)
        if done != total and done % step:
            return
        elapsed = time.perf_counter() - t_start
        eta = elapsed / done * (total - done) if done else None
        with lock:
            print_progress_line(
                f"rows {done:,}/{total:,} ({done / total:.0%})  ETA {format_eta(eta)}",
                final=done == total,
            )

    return report


def _debug_report(mapper: ImageMapper) -> None:
    stats = mapper.stats()
    debug_log(
        key_value_pairs_to_string(
            [
                ("Size", f"{mapper.source.bounds.width}x{mapper.source.bounds.height}"),
                ("Depth", mapper.source.depth),
                ("Alpha", mapper.source.has_alpha),
                ("Unique colours", stats.unique_colours),
                ("Cache hits", stats.cache_hits),
                ("Hit ratio", f"{stats.hit_ratio:.1%}"),
            ]
        )
    )
    debug_log(f"rows per worker: {list(stats.rows_per_worker)}")
    debug_log(
        f"throughput {stats.mpx_per_second:.2f} MPx/s  "
        f"({stats.pixels / 1e6:.2f} MPx in {format_seconds_compact(stats.seconds)})"
    )
    debug_log("colours used (top 10):")
    for hex_code, count in colour_usage_report(mapper.destination.pixels, top=10):
        debug_log(f"  {hex_code}: {count:,}")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = parse_cli_args(argv)

    if args.output is None:
        set_log_stream(sys.stderr)
    else:
        enable_line_buffered_stdout()

    try:
        if args.input is not None and not args.input.exists():
            error(f"not found: {args.input}")
            return 2

        t_start = time.perf_counter()
        settings = load_settings(args.settings)
        workers = settings.worker_count(args.cpus)
        print_config_line(
            "run",
            [
                ("CPU cores", os.cpu_count() or 1),
                ("Workers", workers),
                ("Affinity", settings.palette_affinity),
                ("Palette", len(settings.palette)),
            ],
            debug=False,
        )

        image_src = args.input if args.input is not None else io.BytesIO(sys.stdin.buffer.read())
        source = SourceImage.from_pil(load_image(image_src))

        mapper = ImageMapper(settings, source, workers)
        destination = mapper.run(_progress_printer() if args.progress else None)

        dest = args.output if args.output is not None else sys.stdout.buffer
        written = save_image(destination.to_pil(), dest)

        if args.debug:
            _debug_report(mapper)
        log(f"Image mapped and saved at: {written if written is not None else '<stdout>'}")
        log(f"Total time {format_seconds_compact(time.perf_counter() - t_start)}")
        return 0
    except (ThemeMapError, OSError) as exc:
        error(str(exc))
        return 1
    finally:
        set_log_stream(None)


if __name__ == "__main__":
    sys.exit(main())
