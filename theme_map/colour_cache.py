# theme_map/colour_cache.py
from __future__ import annotations

"""
Thread-safe memo table: source native pixel -> mapped pixel.

Keys are compared by exact tuple equality on the device representation, so
(16, 16, 16) and (16, 16, 16, 255) are different entries. Lookups are plain
dict reads; stores and counters take the lock. Two workers racing on the
same missing key may both compute it; the mapping is pure, so whichever
store lands last holds an equal value.
"""

import threading
from typing import Callable, Dict, Hashable, List, Optional, Sequence, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class ColourCache:
    def __init__(self) -> None:
        self._entries: Dict[Hashable, object] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable, default: Optional[object] = None) -> Optional[object]:
        """Stored value for key, or `default` on a miss. Does not touch the counters."""
        return self._entries.get(key, default)

    def put(self, key: Hashable, value: object) -> None:
        with self._lock:
            self._entries[key] = value

    def get_or_compute(self, key: K, compute: Callable[[K], V]) -> V:
        value = self._entries.get(key, _MISSING)
        if value is not _MISSING:
            with self._lock:
                self.hits += 1
            return value  # type: ignore[return-value]

        value = compute(key)
        with self._lock:
            self.misses += 1
            self._entries[key] = value
        return value

    def get_or_compute_many(
        self, keys: Sequence[K], compute_many: Callable[[List[K]], Sequence[V]]
    ) -> List[V]:
        """
        Batch form of get_or_compute. Distinct missing keys are computed in a
        single compute_many call (in first-seen order); results come back in
        the order of `keys`.
        """
        entries = self._entries
        missing = list(dict.fromkeys(k for k in keys if k not in entries))
        if missing:
            computed = compute_many(missing)
            if len(computed) != len(missing):
                raise ValueError(
                    f"compute_many returned {len(computed)} values for {len(missing)} keys"
                )
            fresh = dict(zip(missing, computed))
        else:
            fresh = {}

        with self._lock:
            self._entries.update(fresh)
            self.misses += len(fresh)
            self.hits += len(keys) - len(fresh)

        return [fresh[k] if k in fresh else entries[k] for k in keys]  # type: ignore[misc]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ColourCache"]
