# theme_map/utils.py
from __future__ import annotations

"""
Shared utilities for theme_map.

Time formatting, one-line progress output, and tidy print-based logging.
Plain log lines go to the current log stream (stdout unless the CLI is
writing image bytes there); warnings and errors always go to stderr.
"""

import sys
from typing import Any, Iterable, List, Optional, TextIO, Tuple

_log_stream: Optional[TextIO] = None


def set_log_stream(stream: Optional[TextIO]) -> None:
    """Route log/debug/progress output. None restores stdout."""
    global _log_stream
    _log_stream = stream


def _out() -> TextIO:
    return _log_stream if _log_stream is not None else sys.stdout


#  Time formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


def format_eta(seconds: float | None) -> str:
    """Format an ETA in seconds as 'Hh Mm', 'Mm Ss', 'Ss', or '--:--' for unknown."""
    if seconds is None or seconds != seconds or seconds < 0:
        return "--:--"
    total = int(round(seconds))
    if total >= 3600:
        hours = total // 3600
        minutes = (total % 3600) // 60
        return f"{hours}h {minutes}m"
    if total >= 60:
        minutes = total // 60
        rem = total % 60
        return f"{minutes}m {rem}s"
    return f"{total}s"


# Pretty formatting


def format_bool_on_off(value: Any) -> str:
    """Pretty boolean: 'on'/'off' for bools; str(value) otherwise."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Pretty number: 1,234 style for ints; compact for floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        text = f"{value:.3f}".rstrip("0").rstrip(".")
        return text
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """
    Format (name, value) pairs as 'Name: value' blocks separated by sep.
    Uses format_bool_on_off / format_number_compact for readability.
    """
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


#  Progress


def print_progress_line(message: str, final: bool = False) -> None:
    """Print a single-line progress message that overwrites previous output."""
    stream = _out()
    stream.write("\r\033[K" + message)
    if final:
        stream.write("\n")
    stream.flush()


def enable_line_buffered_stdout() -> None:
    """
    Enable line-buffered stdout when supported.
    Helps live progress printing in terminals that expose .reconfigure().
    """
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        try:
            reconfig(line_buffering=True, write_through=True)
        except (OSError, ValueError):
            pass


# Logging


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [run] CPU cores: 8  Workers: 8  Affinity: 0.8  Palette: 16
    Routes to debug_log() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def log(message: str) -> None:
    """Plain log line."""
    print(message, file=_out(), flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", file=_out(), flush=True)


def warn(message: str) -> None:
    """Warning log line to stderr."""
    print(f"[warn] {message}", file=sys.stderr, flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    "set_log_stream",
    "format_seconds_compact",
    "format_eta",
    "format_bool_on_off",
    "format_number_compact",
    "key_value_pairs_to_string",
    "print_progress_line",
    "enable_line_buffered_stdout",
    "print_config_line",
    "log",
    "debug_log",
    "warn",
    "error",
]
