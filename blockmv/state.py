"""Block states and the hashable key used to look them up."""

from __future__ import annotations

import struct
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .nbt import Byte, Int


@dataclass
class State:
    """A block name and its properties, together with a block version."""

    name: str
    properties: dict[str, Any] = field(default_factory=dict)
    version: int = 0


@dataclass(frozen=True)
class StateHash:
    """A hashable key for a block state: its name and encoded properties."""

    name: str
    properties: bytes = b""


def _encode_property(key: str, value: Any) -> bytes:
    if isinstance(value, bool):
        return b"\x01" if value else b"\x00"
    if isinstance(value, Byte):
        return bytes([value])
    if isinstance(value, Int) or type(value) is int:
        return struct.pack("<i", value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"invalid block property type {type(value).__name__} for property {key}")


def hash_state(name: str, properties: Mapping[str, Any] | None) -> StateHash:
    """Return the StateHash for a block name and its properties.

    Properties are encoded in sorted key order. Booleans and bytes take one byte,
    ints take four little-endian bytes and strings their UTF-8 bytes; any other
    property type raises TypeError.
    """
    if properties is None:
        return StateHash(name)
    encoded = b"".join(
        _encode_property(key, properties[key]) for key in sorted(properties)
    )
    return StateHash(name, encoded)