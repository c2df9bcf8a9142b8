"""Network serialisation of chunks, sub chunks and their biome storages."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from .chunk import Chunk, Range
from .encoding import (
    SUB_CHUNK_VERSION,
    BiomePaletteEncoding,
    BlockPaletteEncoding,
    NetworkEncoding,
    NetworkPersistentEncoding,
)
from .palette import uint32_count
from .storage import PalettedStorage
from .sub_chunk import SubChunk

_BIOMES = BiomePaletteEncoding()
_POINTS_TO_PREVIOUS = 0x7F
_MAX_BLOCK_SIZE = 32
_OLD_FORMAT_OFFSET = 4
_OLD_BIOME_BYTES = 256


class ChunkDecodeError(ValueError):
    """Raised when serialised chunk data cannot be decoded."""


@dataclass
class SerialisedData:
    """The serialised sub chunks, biomes and block entity NBT of a chunk."""

    sub_chunks: list[bytes] = field(default_factory=list)
    biomes: bytes = b""
    block_nbt: bytes = b""


def _int8(value: int) -> int:
    return ((value & 0xFF) ^ 0x80) - 0x80


def _read_byte(buf: BinaryIO, what: str) -> int:
    data = buf.read(1)
    if not data:
        raise ChunkDecodeError(f"error reading {what}: unexpected end of data")
    return data[0]


def _block_encoding(encoding: Any) -> BlockPaletteEncoding:
    return BlockPaletteEncoding(getattr(encoding, "registry", None))


def _decode_paletted_storage(
    buf: BinaryIO, encoding: Any, palette_encoding: Any
) -> PalettedStorage | None:
    """Decode one storage; None means it refers to the previously decoded one."""
    header = _read_byte(buf, "block size")
    if isinstance(encoding, NetworkEncoding) and not header & 1:
        if encoding.registry is None:
            raise ChunkDecodeError("persistent palette requires a block registry")
        encoding = NetworkPersistentEncoding(encoding.registry)

    size = header >> 1
    if size == _POINTS_TO_PREVIOUS:
        return None
    if size > _MAX_BLOCK_SIZE:
        raise ChunkDecodeError(f"invalid paletted storage block size {size}")

    count = uint32_count(size)
    byte_count = count * 4
    data = buf.read(byte_count)
    if len(data) != byte_count:
        raise ChunkDecodeError(
            f"cannot read paletted storage (size={size}) {type(palette_encoding).__name__}: "
            f"not enough block data present: expected {byte_count} bytes, got {len(data)}"
        )
    words = list(struct.unpack(f"<{count}I", data))
    try:
        palette = encoding.decode_palette(buf, size, palette_encoding)
    except (ValueError, EOFError) as exc:
        raise ChunkDecodeError(str(exc)) from exc
    return PalettedStorage(words, palette)


def decode_sub_chunk(
    air: int, range_: Range, buf: BinaryIO, index: int, encoding: Any = None
) -> tuple[SubChunk, int]:
    """Decode a sub chunk from ``buf``.

    Returns the sub chunk and its index within the chunk. Version 9 sub chunks
    carry their own Y, which replaces the ``index`` passed in.
    """
    if encoding is None:
        encoding = NetworkEncoding()
    version = _read_byte(buf, "version")
    sub = SubChunk(air)
    block_encoding = _block_encoding(encoding)

    if version == 1:
        storage = _decode_paletted_storage(buf, encoding, block_encoding)
        if storage is None:
            raise ChunkDecodeError("block storage pointed to previous one")
        sub.storages.append(storage)
    elif version in (8, 9):
        count = _read_byte(buf, "storage count")
        if version == 9:
            raw = _read_byte(buf, "subchunk index")
            index = (_int8(raw) - _int8(range_.min >> 4)) & 0xFF
        storages = []
        for _ in range(count):
            storage = _decode_paletted_storage(buf, encoding, block_encoding)
            if storage is None:
                raise ChunkDecodeError("block storage pointed to previous one")
            storages.append(storage)
        sub.storages = storages
    else:
        raise ChunkDecodeError(f"unknown sub chunk version {version}: can't decode")
    return sub, index


def network_decode(
    air: int,
    data: Any,
    count: int,
    old_format: bool,
    range_: Range,
    encoding: Any = None,
) -> Chunk:
    """Decode network chunk data holding ``count`` sub chunks followed by biomes.

    ``data`` may be bytes or a binary stream. In the old format sub chunks start
    at index 4 and biomes are a 256-byte column map.
    """
    if encoding is None:
        encoding = NetworkEncoding()
    buf = io.BytesIO(bytes(data)) if isinstance(data, (bytes, bytearray, memoryview)) else data
    chunk = Chunk(air, range_)

    for i in range(count):
        index = (i + _OLD_FORMAT_OFFSET if old_format else i) & 0xFF
        sub, index = decode_sub_chunk(air, range_, buf, index, encoding)
        if index >= len(chunk.sub):
            raise ChunkDecodeError(f"sub chunk index {index} outside chunk of {len(chunk.sub)} sub chunks")
        chunk.sub[index] = sub

    if old_format:
        raw = buf.read(_OLD_BIOME_BYTES)
        if not raw:
            raise ChunkDecodeError("error reading biomes: unexpected end of data")
        biomes = raw.ljust(_OLD_BIOME_BYTES, b"\x00")
        for x in range(16):
            for z in range(16):
                biome = biomes[x | z << 4]
                for y in range(range_.min, range_.max + 1):
                    chunk.set_biome(x, y, z, biome)
    else:
        last: PalettedStorage | None = None
        for i in range(len(chunk.sub)):
            storage = _decode_paletted_storage(buf, encoding, _BIOMES)
            if storage is None:
                if last is None:
                    raise ChunkDecodeError("first biome storage pointed to previous one")
                storage = last
            else:
                last = storage
            chunk.biomes[i] = storage
    return chunk


def _encode_paletted_storage(
    buf: BinaryIO, storage: PalettedStorage, encoding: Any, palette_encoding: Any
) -> None:
    buf.write(bytes([((storage.bits_per_index << 1) | encoding.network) & 0xFF]))
    buf.write(struct.pack(f"<{len(storage.indices)}I", *storage.indices))
    encoding.encode_palette(buf, storage.palette, palette_encoding)


def encode_sub_chunk(sub: SubChunk, encoding: Any, range_: Range, index: int) -> bytes:
    """Serialise a sub chunk at ``index`` in a chunk covering ``range_``."""
    buf = io.BytesIO()
    buf.write(
        bytes([SUB_CHUNK_VERSION, len(sub.storages) & 0xFF, (index + (range_.min >> 4)) & 0xFF])
    )
    block_encoding = _block_encoding(encoding)
    for storage in sub.storages:
        _encode_paletted_storage(buf, storage, encoding, block_encoding)
    return buf.getvalue()


def encode_biomes(chunk: Chunk, encoding: Any) -> bytes:
    """Serialise the biome storages of every sub chunk of ``chunk``."""
    buf = io.BytesIO()
    for storage in chunk.biomes:
        _encode_paletted_storage(buf, storage, encoding, _BIOMES)
    return buf.getvalue()


def encode(chunk: Chunk, encoding: Any, range_: Range) -> SerialisedData:
    """Serialise all sub chunks and biomes of ``chunk``."""
    return SerialisedData(
        sub_chunks=[
            encode_sub_chunk(sub, encoding, range_, i) for i, sub in enumerate(chunk.sub)
        ],
        biomes=encode_biomes(chunk, encoding),
    )