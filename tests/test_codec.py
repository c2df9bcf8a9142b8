import io

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from blockmv import nbt
from blockmv.chunk import Chunk, Range
from blockmv.codec import (
    ChunkDecodeError,
    SerialisedData,
    decode_sub_chunk,
    encode,
    encode_biomes,
    encode_sub_chunk,
    network_decode,
)
from blockmv.encoding import CURRENT_BLOCK_VERSION, NetworkEncoding
from blockmv.nbt import Int
from blockmv.registry import BlockRegistry
from blockmv.state import State
from blockmv.sub_chunk import SubChunk


def _wire(data: SerialisedData) -> bytes:
    return b"".join(data.sub_chunks) + data.biomes


def _storage_bytes(x, y, z, rid):
    sub = SubChunk(0)
    sub.set_block(x, y, z, 0, rid)
    return encode_sub_chunk(sub, NetworkEncoding(), Range(0, 15), 0)[3:]


def test_empty_sub_chunk_wire_bytes():
    assert encode_sub_chunk(SubChunk(0), NetworkEncoding(), Range(0, 255), 0) == b"\x09\x00\x00"


def test_empty_biomes_wire_bytes():
    assert encode_biomes(Chunk(0, Range(0, 15)), NetworkEncoding()) == b"\x01\x00"


def test_encode_has_one_entry_per_sub_chunk():
    chunk = Chunk(0, Range(-64, 63))
    data = encode(chunk, NetworkEncoding(), chunk.range)
    assert len(data.sub_chunks) == len(chunk.sub)
    assert data.block_nbt == b""


def test_sub_chunk_index_round_trips_with_negative_minimum():
    r = Range(-64, 319)
    encoded = encode_sub_chunk(SubChunk(0), NetworkEncoding(), r, 3)
    sub, index = decode_sub_chunk(0, r, io.BytesIO(encoded), 99, NetworkEncoding())
    assert index == 3
    assert sub.empty()


def test_chunk_round_trip():
    r = Range(-64, 63)
    chunk = Chunk(0, r)
    chunk.set_block(1, -60, 2, 0, 7)
    chunk.set_block(15, 40, 15, 1, 9)
    chunk.set_biome(4, 10, 4, 3)
    data = encode(chunk, NetworkEncoding(), r)
    decoded = network_decode(0, _wire(data), len(data.sub_chunks), False, r)
    assert decoded.block(1, -60, 2, 0) == 7
    assert decoded.block(15, 40, 15, 1) == 9
    assert decoded.block(15, 40, 15, 0) == 0
    assert decoded.block(0, 0, 0, 0) == 0
    assert decoded.biome(4, 10, 4) == 3
    assert decoded.biome(5, 10, 4) == 0


@settings(max_examples=25, deadline=None)
@given(
    st.lists(
        st.tuples(
            st.integers(0, 15), st.integers(0, 31), st.integers(0, 15), st.integers(0, 50)
        ),
        max_size=20,
    )
)
def test_round_trip_random_blocks(placements):
    r = Range(0, 31)
    chunk = Chunk(0, r)
    expected = {}
    for x, y, z, rid in placements:
        chunk.set_block(x, y, z, 0, rid)
        expected[(x, y, z)] = rid
    data = encode(chunk, NetworkEncoding(), r)
    decoded = network_decode(0, _wire(data), len(data.sub_chunks), False, r)
    for (x, y, z), rid in expected.items():
        assert decoded.block(x, y, z, 0) == rid


def test_version_eight_keeps_passed_index():
    encoded = encode_sub_chunk(SubChunk(0), NetworkEncoding(), Range(0, 15), 0)
    sub = SubChunk(0)
    sub.set_block(2, 3, 4, 0, 11)
    full = encode_sub_chunk(sub, NetworkEncoding(), Range(0, 15), 0)
    data = b"\x08" + full[1:2] + full[3:]
    decoded, index = decode_sub_chunk(0, Range(0, 15), io.BytesIO(data), 5, NetworkEncoding())
    assert index == 5
    assert decoded.block(2, 3, 4, 0) == 11
    assert encoded[1] == 0


def test_version_one_single_layer():
    data = b"\x01" + _storage_bytes(6, 7, 8, 21)
    sub, index = decode_sub_chunk(0, Range(0, 15), io.BytesIO(data), 2, NetworkEncoding())
    assert index == 2
    assert len(sub.layers()) == 1
    assert sub.block(6, 7, 8, 0) == 21


def test_unknown_version_raises():
    with pytest.raises(ChunkDecodeError, match="unknown sub chunk version"):
        decode_sub_chunk(0, Range(0, 15), io.BytesIO(b"\x05"), 0, NetworkEncoding())


def test_empty_data_raises():
    with pytest.raises(ChunkDecodeError):
        decode_sub_chunk(0, Range(0, 15), io.BytesIO(b""), 0, NetworkEncoding())


def test_truncated_storage_raises():
    with pytest.raises(ChunkDecodeError, match="not enough block data"):
        decode_sub_chunk(0, Range(0, 15), io.BytesIO(b"\x01\x03\x00\x00"), 0, NetworkEncoding())


def test_sub_chunk_index_outside_chunk_raises():
    data = b"\x09\x00" + bytes([200])
    with pytest.raises(ChunkDecodeError):
        network_decode(0, data, 1, False, Range(0, 15))


def test_first_biome_pointing_back_raises():
    with pytest.raises(ChunkDecodeError, match="first biome storage"):
        network_decode(0, b"\xff", 0, False, Range(0, 15))


def test_biome_pointing_back_inherits_previous():
    source = Chunk(0, Range(0, 15))
    source.set_biome(1, 1, 1, 4)
    first = encode_biomes(source, NetworkEncoding())
    chunk = network_decode(0, first + b"\xff", 0, False, Range(0, 31))
    assert chunk.biomes[1] is chunk.biomes[0]
    assert chunk.biome(1, 17, 1) == 4


def test_old_format_sub_chunks_and_biomes():
    r = Range(0, 127)
    sub_bytes = b"\x08\x01" + _storage_bytes(3, 2, 5, 13)
    biomes = bytes(range(256))
    chunk = network_decode(0, sub_bytes + biomes, 1, True, r)
    assert chunk.block(3, 66, 5, 0) == 13
    assert chunk.block(3, 2, 5, 0) == 0
    assert chunk.biome(3, 70, 5) == biomes[3 | 5 << 4]
    assert chunk.biome(15, 0, 15) == biomes[15 | 15 << 4]


def test_old_format_missing_biomes_raises():
    with pytest.raises(ChunkDecodeError, match="biomes"):
        network_decode(0, b"\x08\x00", 1, True, Range(0, 127))


def _persistent_data():
    entry = nbt.dumps(
        {"name": "stone", "states": {}, "version": Int(CURRENT_BLOCK_VERSION)}, network=True
    )
    return b"\x01\x00" + entry


def test_persistent_palette_fallback_uses_registry():
    registry = BlockRegistry([State("minecraft:air"), State("minecraft:stone")])
    sub, _ = decode_sub_chunk(
        0, Range(0, 15), io.BytesIO(_persistent_data()), 0, NetworkEncoding(registry)
    )
    assert sub.block(0, 0, 0, 0) == 1
    assert sub.block(9, 9, 9, 0) == 1


def test_persistent_palette_without_registry_raises():
    with pytest.raises(ChunkDecodeError):
        decode_sub_chunk(0, Range(0, 15), io.BytesIO(_persistent_data()), 0, NetworkEncoding())