from blockmv.sub_chunk import SubChunk

AIR = 11


def test_new_sub_chunk_is_empty():
    sub = SubChunk(AIR)
    assert sub.empty()
    assert sub.layers() == []
    assert sub.block(0, 0, 0, 0) == AIR


def test_layer_creates_intermediate_layers():
    sub = SubChunk(AIR)
    storage = sub.layer(2)
    assert len(sub.layers()) == 3
    assert storage is sub.layers()[2]
    assert storage.at(0, 0, 0) == AIR


def test_single_air_layer_is_empty():
    sub = SubChunk(AIR)
    sub.layer(0)
    assert sub.empty()


def test_two_air_layers_are_not_empty():
    sub = SubChunk(AIR)
    sub.layer(1)
    assert not sub.empty()


def test_set_and_get_block():
    sub = SubChunk(AIR)
    sub.set_block(1, 2, 3, 0, 42)
    assert sub.block(1, 2, 3, 0) == 42
    assert sub.block(1, 2, 4, 0) == AIR
    assert sub.block(1, 2, 3, 1) == AIR
    assert not sub.empty()


def test_set_block_on_higher_layer():
    sub = SubChunk(AIR)
    sub.set_block(5, 5, 5, 1, 9)
    assert len(sub.layers()) == 2
    assert sub.block(5, 5, 5, 1) == 9
    assert sub.block(5, 5, 5, 0) == AIR


def test_compact_drops_air_layers():
    sub = SubChunk(AIR)
    sub.set_block(0, 0, 0, 0, 42)
    sub.set_block(0, 0, 0, 1, 43)
    sub.set_block(0, 0, 0, 0, AIR)
    sub.compact()
    assert len(sub.layers()) == 1
    assert sub.layers()[0].at(0, 0, 0) == 43


def test_compact_of_air_only_becomes_empty():
    sub = SubChunk(AIR)
    sub.set_block(0, 0, 0, 0, 42)
    sub.set_block(0, 0, 0, 0, AIR)
    sub.compact()
    assert sub.layers() == []
    assert sub.empty()