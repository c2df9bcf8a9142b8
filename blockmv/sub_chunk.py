"""Sub chunks: 16x16x16 cubes made of one or more block layers."""

from __future__ import annotations

from .storage import PalettedStorage, empty_storage


class SubChunk:
    """A cube of blocks forming part of a chunk's vertical stack."""

    def __init__(self, air: int) -> None:
        self.air = air
        self.storages: list[PalettedStorage] = []

    def empty(self) -> bool:
        """Return True if there are no layers or a single layer holding only air."""
        if not self.storages:
            return True
        if len(self.storages) == 1:
            return self.storages[0].palette.values == [self.air]
        return False

    def layer(self, layer: int) -> PalettedStorage:
        """Return the storage at ``layer``, creating it and any layers below it."""
        while len(self.storages) <= layer:
            self.storages.append(empty_storage(self.air))
        return self.storages[layer]

    def layers(self) -> list[PalettedStorage]:
        """Return all layers, possibly none."""
        return self.storages

    def block(self, x: int, y: int, z: int, layer: int) -> int:
        """Return the runtime ID at the position, or air if the layer is absent."""
        if len(self.storages) <= layer:
            return self.air
        return self.storages[layer].at(x, y, z)

    def set_block(self, x: int, y: int, z: int, layer: int, block: int) -> None:
        """Set the runtime ID at the position on ``layer``."""
        self.layer(layer).set(x, y, z, block)

    def compact(self) -> None:
        """Compact every layer and drop the layers that hold only air."""
        kept = []
        for storage in self.storages:
            storage.compact()
            if storage.palette.values == [self.air]:
                continue
            kept.append(storage)
        self.storages = kept