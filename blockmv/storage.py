"""Paletted storage of 4096 values packed into 32-bit words."""

from __future__ import annotations

from itertools import product

from .palette import Palette, palette_size_for, uint32_count

_WORD_BITS = 32
_WORD_MASK = 0xFFFFFFFF
_WORDS_PER_BIT = _WORD_BITS * 4


def _positions():
    return product(range(16), repeat=3)


class PalettedStorage:
    """A 16x16x16 cube of values stored as indices into a palette.

    Indices are packed into 32-bit words with 0, 1, 2, 3, 4, 5, 6, 8 or 16 bits
    per index. Sizes 3, 5 and 6 leave padding in each word and carry one extra
    word at the end.
    """

    def __init__(self, indices: list[int], palette: Palette) -> None:
        self._adopt(indices, palette)

    def _adopt(self, indices: list[int], palette: Palette) -> None:
        bits = len(indices) // _WORDS_PER_BIT
        self.bits_per_index = bits
        self.filled_bits_per_index = (_WORD_BITS // bits) * bits if bits else 0
        self.index_mask = (1 << bits) - 1
        self.indices = indices
        self.palette = palette

    def at(self, x: int, y: int, z: int) -> int:
        """Return the value at the given position."""
        return self.palette.value(self.palette_index(x & 15, y & 15, z & 15))

    def set(self, x: int, y: int, z: int, value: int) -> None:
        """Set the value at the given position, growing the storage if needed."""
        index = self.palette.index(value)
        if index == -1:
            index = self._add_new(value)
        self.set_palette_index(x & 15, y & 15, z & 15, index)

    def _add_new(self, value: int) -> int:
        index, resized = self.palette.add(value)
        if resized:
            self.resize(self.palette.size)
        return index

    def _locate(self, x: int, y: int, z: int) -> tuple[int, int]:
        offset = ((x << 8) | (z << 4) | y) * self.bits_per_index
        return divmod(offset, self.filled_bits_per_index)

    def palette_index(self, x: int, y: int, z: int) -> int:
        """Return the palette index stored at the given position."""
        if self.bits_per_index == 0:
            return 0
        word, bit = self._locate(x, y, z)
        return (self.indices[word] >> bit) & self.index_mask

    def set_palette_index(self, x: int, y: int, z: int, index: int) -> None:
        """Store a palette index at the given position."""
        if self.bits_per_index == 0:
            return
        word, bit = self._locate(x, y, z)
        current = self.indices[word]
        cleared = current & ~(self.index_mask << bit)
        self.indices[word] = (cleared | (index << bit)) & _WORD_MASK

    def resize(self, size: int) -> None:
        """Repack all indices with ``size`` bits per index."""
        if size == self.bits_per_index:
            return
        new = PalettedStorage([0] * uint32_count(size), self.palette)
        for x, y, z in _positions():
            new.set_palette_index(x, y, z, self.palette_index(x, y, z))
        self._adopt(new.indices, new.palette)

    def compact(self) -> None:
        """Drop unused palette values and shrink to the smallest fitting size."""
        used = [False] * len(self.palette)
        for x, y, z in _positions():
            used[self.palette_index(x, y, z)] = True

        new_values: list[int] = []
        conversion = [0] * len(used)
        for index, is_used in enumerate(used):
            if is_used:
                conversion[index] = len(new_values)
                new_values.append(self.palette.values[index])

        size = palette_size_for(len(new_values))
        new = PalettedStorage([0] * uint32_count(size), Palette(size, new_values))
        for x, y, z in _positions():
            new.set_palette_index(x, y, z, conversion[self.palette_index(x, y, z)])
        self._adopt(new.indices, new.palette)


def empty_storage(value: int) -> PalettedStorage:
    """Return a storage filled entirely with ``value``."""
    return PalettedStorage([], Palette(0, [value]))