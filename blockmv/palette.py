"""Palettes of values referenced by paletted storages."""

from __future__ import annotations

from collections.abc import Callable

SIZES = (0, 1, 2, 3, 4, 5, 6, 8, 16)
_BLOCKS_PER_STORAGE = 4096


def padded(size: int) -> bool:
    """Return True if a storage of this palette size carries padding (3, 5 or 6 bits)."""
    return size in (3, 5, 6)


def palette_size_for(n: int) -> int:
    """Return the smallest palette size able to index ``n`` values (0 if none fits)."""
    for size in SIZES:
        if n <= 1 << size:
            return size
    return 0


def uint32_count(size: int) -> int:
    """Return the number of uint32 words a storage with this palette size needs."""
    count = 0
    if size:
        count = _BLOCKS_PER_STORAGE // (32 // size)
    if padded(size):
        count += 1
    return count


class Palette:
    """A list of unique values that storage indices point into."""

    def __init__(self, size: int, values: list[int]) -> None:
        self.size = size
        self.values = values
        self._last: int | None = None
        self._last_index = 0

    def __len__(self) -> int:
        return len(self.values)

    def add(self, value: int) -> tuple[int, bool]:
        """Append ``value`` without checking for duplicates.

        Returns the new index and whether the palette grew to a larger size.
        """
        index = len(self.values)
        self.values.append(value)
        if self.needs_resize():
            self.increase_size()
            return index, True
        return index, False

    def replace(self, func: Callable[[int], int]) -> None:
        """Replace every value with ``func(value)``."""
        self._last = None
        self.values[:] = [func(v) for v in self.values]

    def index(self, value: int) -> int:
        """Return the index of ``value``, or -1 if it is not present."""
        if value == self._last:
            return self._last_index
        try:
            found = self.values.index(value)
        except ValueError:
            return -1
        self._last = value
        self._last_index = found
        return found

    def value(self, i: int) -> int:
        """Return the value at index ``i``."""
        if i < 0:
            raise IndexError(f"palette index {i} is negative")
        return self.values[i]

    def needs_resize(self) -> bool:
        """Return True if the values no longer fit in the current size."""
        return len(self.values) > 1 << self.size

    def increase_size(self) -> None:
        """Grow the palette to the next supported size."""
        position = SIZES.index(self.size)
        if position + 1 >= len(SIZES):
            raise ValueError(f"palette size {self.size} cannot grow further")
        self.size = SIZES[position + 1]