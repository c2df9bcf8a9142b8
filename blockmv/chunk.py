"""Chunks: vertical stacks of sub chunks with per-sub-chunk biome storages."""

from __future__ import annotations

from dataclasses import dataclass

from .storage import PalettedStorage, empty_storage
from .sub_chunk import SubChunk


@dataclass(frozen=True)
class Range:
    """An inclusive vertical range of block Y coordinates."""

    min: int
    max: int

    def height(self) -> int:
        """Return the difference between the maximum and minimum Y."""
        return self.max - self.min


class Chunk:
    """A 16-wide column of sub chunks covering a vertical range.

    Not safe for concurrent use.
    """

    def __init__(self, air: int, range_: Range) -> None:
        count = (range_.height() >> 4) + 1
        self.air = air
        self.range = range_
        self.sub: list[SubChunk] = [SubChunk(air) for _ in range(count)]
        self.biomes: list[PalettedStorage] = [empty_storage(0) for _ in range(count)]

    def _checked_index(self, y: int) -> int:
        index = self.sub_index(y)
        if not 0 <= index < len(self.sub):
            raise IndexError(f"y {y} is outside the chunk range {self.range.min}..{self.range.max}")
        return index

    def block(self, x: int, y: int, z: int, layer: int) -> int:
        """Return the runtime ID at the position on ``layer``; air if absent."""
        sub = self.sub[self._checked_index(y)]
        if sub.empty() or len(sub.storages) <= layer:
            return self.air
        return sub.storages[layer].at(x, y, z)

    def set_block(self, x: int, y: int, z: int, layer: int, block: int) -> None:
        """Set the runtime ID at the position on ``layer``."""
        sub = self.sub[self._checked_index(y)]
        if len(sub.storages) <= layer and block == self.air:
            return
        sub.layer(layer).set(x, y, z, block)

    def biome(self, x: int, y: int, z: int) -> int:
        """Return the biome ID at the position."""
        return self.biomes[self._checked_index(y)].at(x, y, z)

    def set_biome(self, x: int, y: int, z: int, biome: int) -> None:
        """Set the biome ID at the position."""
        self.biomes[self._checked_index(y)].set(x, y, z, biome)

    def highest_block(self, x: int, z: int) -> int:
        """Return the Y of the highest non-air block in the column, or the range minimum."""
        for index in reversed(range(len(self.sub))):
            sub = self.sub[index]
            if sub.empty():
                continue
            for y in range(15, -1, -1):
                if sub.storages[0].at(x, y, z) != self.air:
                    return y | self.sub_y(index)
        return self.range.min

    def compact(self) -> None:
        """Compact every sub chunk."""
        for sub in self.sub:
            sub.compact()

    def sub_index(self, y: int) -> int:
        """Return the sub chunk index holding ``y``."""
        return (y - self.range.min) >> 4

    def sub_y(self, index: int) -> int:
        """Return the lowest Y of the sub chunk at ``index``."""
        return (index << 4) + self.range.min