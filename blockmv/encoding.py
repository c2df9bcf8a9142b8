"""Palette encodings used to serialise paletted storages for disk and network."""

from __future__ import annotations

import struct
from typing import Any, BinaryIO

from . import nbt
from .nbt import Int, NBTError
from .palette import Palette
from .registry import BlockRegistry, _decode_state

SUB_CHUNK_VERSION = 9
CURRENT_BLOCK_VERSION = 17825806
_PREFIX = "minecraft:"


def _int32(value: int) -> int:
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def write_varint32(buf: BinaryIO, value: int) -> None:
    """Write ``value``, taken as a signed 32-bit int, as a zig-zag varint."""
    value = _int32(value)
    ux = ((value << 1) ^ (value >> 31)) & 0xFFFFFFFF
    out = bytearray()
    while ux >= 0x80:
        out.append((ux & 0x7F) | 0x80)
        ux >>= 7
    out.append(ux)
    buf.write(bytes(out))


def read_varint32(buf: BinaryIO) -> int:
    """Read a zig-zag varint holding a signed 32-bit int."""
    ux = 0
    for shift in range(0, 35, 7):
        chunk = buf.read(1)
        if not chunk:
            raise EOFError("unexpected end of data reading varint")
        b = chunk[0]
        ux = (ux | ((b & 0x7F) << shift)) & 0xFFFFFFFF
        if not b & 0x80:
            x = ux >> 1
            return ~x if ux & 1 else x
    raise ValueError("varint overflows a 32-bit integer")


def _read_count(buf: BinaryIO, size: int) -> int:
    if size == 0:
        return 1
    try:
        count = read_varint32(buf)
    except (EOFError, ValueError) as exc:
        raise ValueError(f"error reading palette entry count: {exc}") from exc
    if count <= 0:
        raise ValueError(f"invalid palette entry count {count}")
    return count


def _state_compound(name: str, properties: Any) -> dict[str, Any]:
    return {"name": name, "states": dict(properties or {}), "version": Int(CURRENT_BLOCK_VERSION)}


class BiomePaletteEncoding:
    """Encodes biome palette values as little-endian uint32s."""

    def encode(self, buf: BinaryIO, value: int) -> None:
        buf.write(struct.pack("<I", value & 0xFFFFFFFF))

    def decode(self, buf: BinaryIO) -> int:
        data = buf.read(4)
        if len(data) != 4:
            raise EOFError("unexpected end of data reading biome")
        return struct.unpack("<I", data)[0]


class BlockPaletteEncoding:
    """Encodes block palette values as little-endian NBT block states."""

    def __init__(self, registry: BlockRegistry) -> None:
        self.registry = registry

    def encode(self, buf: BinaryIO, value: int) -> None:
        state = self.registry.runtime_id_to_state(value)
        nbt.dump(_state_compound(state.name, state.properties), buf, network=False)

    def decode(self, buf: BinaryIO) -> int:
        try:
            state = _decode_state(nbt.load(buf, network=False))
        except NBTError as exc:
            raise ValueError(f"error decoding block palette entry: {exc}") from exc
        rid = self.registry.state_to_runtime_id(state.name, state.properties)
        if rid is None:
            raise ValueError(f"cannot get runtime ID of block state {state.name}{state.properties}")
        return rid


class NetworkEncoding:
    """Network chunk encoding: palettes are written as varints without NBT."""

    network = 1

    def __init__(self, registry: BlockRegistry | None = None) -> None:
        self.registry = registry

    def encode_palette(self, buf: BinaryIO, palette: Palette, palette_encoding: Any = None) -> None:
        if palette.size != 0:
            write_varint32(buf, len(palette))
        for value in palette.values:
            write_varint32(buf, value)

    def decode_palette(self, buf: BinaryIO, size: int, palette_encoding: Any = None) -> Palette:
        count = _read_count(buf, size)
        values = []
        for _ in range(count):
            try:
                values.append(read_varint32(buf) & 0xFFFFFFFF)
            except (EOFError, ValueError) as exc:
                raise ValueError(f"error decoding palette entry: {exc}") from exc
        return Palette(size, values)


class NetworkPersistentEncoding:
    """Network chunk encoding whose palettes hold network NBT block states."""

    network = 1

    def __init__(self, registry: BlockRegistry) -> None:
        self.registry = registry

    def encode_palette(self, buf: BinaryIO, palette: Palette, palette_encoding: Any = None) -> None:
        if palette.size != 0:
            write_varint32(buf, len(palette))
        for value in palette.values:
            state = self.registry.runtime_id_to_state(value)
            name = state.name[len(_PREFIX):] if state.name.startswith(_PREFIX) else state.name
            nbt.dump(_state_compound(name, state.properties), buf, network=True)

    def decode_palette(self, buf: BinaryIO, size: int, palette_encoding: Any = None) -> Palette:
        count = _read_count(buf, size)
        states = []
        for _ in range(count):
            try:
                states.append(_decode_state(nbt.load(buf, network=True)))
            except NBTError as exc:
                raise ValueError(f"error decoding block state: {exc}") from exc
        values = []
        for state in states:
            rid = self.registry.state_to_runtime_id(_PREFIX + state.name, state.properties)
            if rid is None:
                raise ValueError(f"cannot get runtime ID of block state {state.name}{state.properties}")
            values.append(rid)
        return Palette(size, values)