"""Block and item mappings for a single protocol version."""

from __future__ import annotations

from collections.abc import Iterable, Mapping as MappingABC
from dataclasses import dataclass, field
from typing import Any

from .registry import _decode_item_ids, _iter_states
from .state import State, StateHash, hash_state

_AIR = "minecraft:air"
_INFO_UPDATE = "minecraft:info_update"
_NAME_TAG = "minecraft:name_tag"


def _int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


@dataclass
class BlockEntry:
    """A block name and its state properties as listed to clients."""

    name: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class ItemEntry:
    """An item name with its (16-bit) runtime ID."""

    name: str
    runtime_id: int
    component_based: bool = False


class BlockMapping:
    """Block states of one version, indexed by runtime ID."""

    def __init__(self, states: Iterable[State], old_format: bool = False) -> None:
        self.old_format = old_format
        self._states: list[State] = list(states)
        self.blocks: list[BlockEntry] = [BlockEntry(s.name, s.properties) for s in self._states]
        self._ids: dict[StateHash, int] = {
            hash_state(s.name, s.properties): rid for rid, s in enumerate(self._states)
        }
        self.legacy_air_rid = self.state_to_runtime_id(_AIR, None)

    @classmethod
    def from_nbt(cls, data: bytes, old_format: bool = False) -> BlockMapping:
        """Build a mapping from concatenated network NBT block state compounds."""
        return cls(_iter_states(data), old_format)

    def state_to_runtime_id(self, name: str, properties: MappingABC[str, Any] | None = None) -> int:
        """Return the runtime ID of the state.

        Unknown states map to the info_update block, or 0 if that is absent too.
        """
        rid = self._ids.get(hash_state(name, properties))
        if rid is None:
            rid = self._ids.get(hash_state(_INFO_UPDATE, None), 0)
        return rid

    def runtime_id_to_state(self, runtime_id: int) -> State:
        """Return the state of ``runtime_id``; an unnamed empty state if unknown."""
        if 0 <= runtime_id < len(self._states):
            return self._states[runtime_id]
        return State("")


class ItemMapping:
    """Item names and runtime IDs of one version."""

    def __init__(self, names: MappingABC[str, int]) -> None:
        self.items: list[ItemEntry] = []
        self.recipes: list[Any] = []
        self._names: dict[int, str] = {}
        self._ids: dict[str, int] = {}
        for name, rid in names.items():
            self.items.append(ItemEntry(name, _int16(rid)))
            self._ids[name] = rid
            self._names[rid] = name

    @classmethod
    def from_nbt(cls, data: bytes) -> ItemMapping:
        """Build a mapping from a network NBT compound of name to runtime ID."""
        return cls(_decode_item_ids(data))

    def item_name_by_id(self, runtime_id: int) -> str | None:
        """Return the item name for ``runtime_id``, or None if unknown."""
        return self._names.get(runtime_id)

    def item_id_by_name(self, name: str) -> tuple[int, bool]:
        """Return the runtime ID for ``name`` and whether it was found.

        When not found, the ID of the name tag item (or 0) is returned instead.
        """
        rid = self._ids.get(name)
        if rid is None:
            return self._ids.get(_NAME_TAG, 0), False
        return rid, True


@dataclass
class Mapping:
    """The block and item mappings of one version."""

    block: BlockMapping
    item: ItemMapping


def load_mapping(block_state_data: bytes, item_runtime_id_data: bytes, old_format: bool = False) -> Mapping:
    """Build a Mapping from block state NBT and item runtime ID NBT."""
    return Mapping(
        BlockMapping.from_nbt(block_state_data, old_format),
        ItemMapping.from_nbt(item_runtime_id_data),
    )