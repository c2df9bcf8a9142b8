"""Registries mapping block states and item names to runtime IDs."""

from __future__ import annotations

import io
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from .nbt import NBTError, iter_load, loads
from .state import State, StateHash, hash_state

_INT32_MIN, _INT32_MAX = -(1 << 31), (1 << 31) - 1


def _decode_state(value: Any) -> State:
    """Build a State from a decoded NBT compound with name, states and version."""
    if not isinstance(value, Mapping):
        raise NBTError(f"block state must be a compound, got {type(value).__name__}")
    name = value.get("name", "")
    properties = value.get("states", {})
    version = value.get("version", 0)
    if not isinstance(name, str):
        raise NBTError("block state name must be a string")
    if not isinstance(properties, Mapping):
        raise NBTError("block state properties must be a compound")
    if isinstance(version, bool) or not isinstance(version, int):
        raise NBTError("block state version must be an integer")
    return State(name, dict(properties), int(version))


def _iter_states(data: bytes) -> Iterator[State]:
    """Yield block states from concatenated network NBT, stopping at the first bad entry."""
    decoded = iter_load(io.BytesIO(data), network=True)
    while True:
        try:
            value = next(decoded)
        except (StopIteration, NBTError):
            return
        try:
            state = _decode_state(value)
        except NBTError:
            return
        yield state


def _decode_item_ids(data: bytes) -> dict[str, int]:
    """Decode a network NBT compound mapping item names to 32-bit runtime IDs."""
    value = loads(data, network=True)
    if not isinstance(value, Mapping):
        raise NBTError(f"item runtime IDs must be a compound, got {type(value).__name__}")
    result: dict[str, int] = {}
    for name, rid in value.items():
        if isinstance(rid, bool) or not isinstance(rid, int):
            raise NBTError(f"runtime ID of item {name} must be an integer")
        if not _INT32_MIN <= rid <= _INT32_MAX:
            raise NBTError(f"runtime ID of item {name} does not fit in 32 bits")
        result[name] = int(rid)
    return result


class BlockRegistry:
    """Block states indexed by runtime ID, in the order they were given."""

    def __init__(self, states: Iterable[State]) -> None:
        self._states: list[State] = list(states)
        self._ids: dict[StateHash, int] = {
            hash_state(state.name, state.properties): rid
            for rid, state in enumerate(self._states)
        }

    @classmethod
    def from_nbt(cls, data: bytes) -> BlockRegistry:
        """Build a registry from concatenated network NBT block state compounds."""
        return cls(_iter_states(data))

    def __len__(self) -> int:
        return len(self._states)

    def state_to_runtime_id(self, name: str, properties: Mapping[str, Any] | None = None) -> int | None:
        """Return the runtime ID of the state, or None if it is not registered."""
        return self._ids.get(hash_state(name, properties))

    def runtime_id_to_state(self, runtime_id: int) -> State:
        """Return the state of ``runtime_id``; an unnamed empty state if unknown."""
        if 0 <= runtime_id < len(self._states):
            return self._states[runtime_id]
        return State("")


class ItemRegistry:
    """A two-way mapping between item names and item runtime IDs."""

    def __init__(self, names: Mapping[str, int]) -> None:
        self._ids: dict[str, int] = {}
        self._names: dict[int, str] = {}
        for name, rid in names.items():
            self._ids[name] = rid
            self._names[rid] = name

    @classmethod
    def from_nbt(cls, data: bytes) -> ItemRegistry:
        """Build a registry from a network NBT compound of name to runtime ID."""
        return cls(_decode_item_ids(data))

    def item_runtime_id_to_name(self, runtime_id: int) -> str | None:
        """Return the item name for ``runtime_id``, or None if unknown."""
        return self._names.get(runtime_id)

    def item_name_to_runtime_id(self, name: str) -> int | None:
        """Return the runtime ID for the item ``name``, or None if unknown."""
        return self._ids.get(name)