# theme_map/palette.py
from __future__ import annotations

"""
Palette definition and builders.

A Palette is an ordered, non-empty, read-only sequence of PaletteItem. Order
matters: the pixel mapper breaks distance ties in favour of the earlier entry.

Exports:
  Palette.from_hex(["#rrggbb", ...])
  Palette.from_lab([LabColour, ...])
"""

from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from .colour_convert import lab_to_rgb, rgb_to_lab
from .core_types import HexStr, Lab, LabColour, PaletteItem, hex_to_rgb, rgb_to_hex
from .errors import EmptyPaletteError, PaletteEntryError


class Palette:
    def __init__(self, items: Iterable[PaletteItem]) -> None:
        self._items: Tuple[PaletteItem, ...] = tuple(items)
        if not self._items:
            raise EmptyPaletteError()
        lab = np.array([item.lab for item in self._items], dtype=np.float64)
        lab.setflags(write=False)
        self._lab = lab

    @classmethod
    def from_hex(cls, entries: Sequence[object]) -> "Palette":
        """
        Build a palette from hex strings. Every entry must parse; the first bad
        one raises PaletteEntryError with its index.
        """
        rgbs: List[Tuple[int, int, int]] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, str):
                raise PaletteEntryError(index, entry, "expected a hex string")
            try:
                rgbs.append(hex_to_rgb(entry))
            except ValueError as exc:
                raise PaletteEntryError(index, entry, str(exc)) from None

        if not rgbs:
            raise EmptyPaletteError()

        labs = rgb_to_lab(np.array(rgbs, dtype=np.uint8)).reshape(-1, 3)
        return cls(
            PaletteItem(rgb=rgb, hex=rgb_to_hex(rgb), lab=LabColour(*labs[i].tolist()))
            for i, rgb in enumerate(rgbs)
        )

    @classmethod
    def from_lab(cls, colours: Sequence[Sequence[float]]) -> "Palette":
        """Build a palette straight from Lab coordinates (device rgb is derived)."""
        items = []
        for lab in colours:
            colour = LabColour(*(float(c) for c in lab))
            rgb_arr = lab_to_rgb(np.asarray(colour, dtype=np.float64))
            rgb = (int(rgb_arr[0]), int(rgb_arr[1]), int(rgb_arr[2]))
            items.append(PaletteItem(rgb=rgb, hex=rgb_to_hex(rgb), lab=colour))
        return cls(items)

    def colours(self) -> Tuple[LabColour, ...]:
        """Lab colours in configured order."""
        return tuple(item.lab for item in self._items)

    def hex_codes(self) -> Tuple[HexStr, ...]:
        return tuple(item.hex for item in self._items)

    def lab_array(self) -> Lab:
        """Read-only (P, 3) float64 view of the Lab colours."""
        return self._lab

    @property
    def items(self) -> Tuple[PaletteItem, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[PaletteItem]:
        return iter(self._items)

    def __getitem__(self, index: int) -> PaletteItem:
        return self._items[index]

    def __repr__(self) -> str:
        return f"Palette({list(self.hex_codes())!r})"


__all__ = ["Palette"]
