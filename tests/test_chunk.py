import pytest

from blockmv.chunk import Chunk, Range

AIR = 3
RANGE = Range(-64, 319)


def test_range_height():
    assert RANGE.height() == 383


def test_sub_chunk_count():
    chunk = Chunk(AIR, RANGE)
    assert len(chunk.sub) == 24
    assert len(chunk.biomes) == len(chunk.sub)
    assert all(sub.empty() for sub in chunk.sub)


def test_default_block_is_air():
    chunk = Chunk(AIR, RANGE)
    assert chunk.block(0, -64, 0, 0) == AIR
    assert chunk.block(15, 319, 15, 1) == AIR


def test_set_and_get_block_negative_y():
    chunk = Chunk(AIR, RANGE)
    chunk.set_block(2, -30, 4, 0, 50)
    assert chunk.block(2, -30, 4, 0) == 50
    assert chunk.block(2, -29, 4, 0) == AIR
    assert chunk.block(2, -30, 4, 1) == AIR


def test_setting_air_on_missing_layer_creates_nothing():
    chunk = Chunk(AIR, RANGE)
    chunk.set_block(0, 0, 0, 1, AIR)
    assert chunk.sub[chunk.sub_index(0)].layers() == []


def test_highest_block():
    chunk = Chunk(AIR, RANGE)
    chunk.set_block(1, 10, 2, 0, 5)
    chunk.set_block(1, 100, 2, 0, 5)
    assert chunk.highest_block(1, 2) == 100
    assert chunk.highest_block(0, 0) == RANGE.min


def test_highest_block_negative():
    chunk = Chunk(AIR, RANGE)
    chunk.set_block(7, -50, 8, 0, 6)
    assert chunk.highest_block(7, 8) == -50


def test_biomes():
    chunk = Chunk(AIR, RANGE)
    assert chunk.biome(0, 0, 0) == 0
    chunk.set_biome(3, 70, 4, 12)
    assert chunk.biome(3, 70, 4) == 12
    assert chunk.biome(3, 71, 5) == 0


@pytest.mark.parametrize("y", [-64, -1, 0, 15, 16, 319])
def test_sub_index_and_sub_y(y):
    chunk = Chunk(AIR, RANGE)
    index = chunk.sub_index(y)
    assert chunk.sub_y(index) <= y < chunk.sub_y(index) + 16
    assert 0 <= index < len(chunk.sub)


@pytest.mark.parametrize("y", [-65, 400])
def test_out_of_range_y_raises(y):
    chunk = Chunk(AIR, RANGE)
    with pytest.raises(IndexError):
        chunk.block(0, y, 0, 0)
    with pytest.raises(IndexError):
        chunk.set_biome(0, y, 0, 1)


def test_compact_removes_air_only_storages():
    chunk = Chunk(AIR, RANGE)
    chunk.set_block(0, 0, 0, 0, 9)
    chunk.set_block(0, 20, 0, 0, 9)
    chunk.set_block(0, 0, 0, 0, AIR)
    chunk.compact()
    assert chunk.sub[chunk.sub_index(0)].layers() == []
    assert chunk.block(0, 20, 0, 0) == 9