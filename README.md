# blockmv

`blockmv` is a library for block-game worlds. It stores chunks and serialises them for the network. It also reads and writes NBT, maps block states and item names to runtime IDs, and encodes two protocol packets. It has no third-party dependencies.

## Modules

- **`blockmv.nbt`** reads and writes NBT in its little-endian and network (varint) variants.
  - Functions: `dump`, `dumps`, `load`, `loads`, and `iter_load`. `iter_load` yields successive root tags from a stream.
  - Sized wrappers: `Byte`, `Short`, `Int`, `Long`, and `Float`. Decoded values come back as these wrappers, so a value re-encodes to the same bytes.
  - Errors: malformed or unencodable data raises `NBTError`, which is a subclass of `ValueError`.
- **`blockmv.state`** defines `State` (name, properties, version) and `StateHash`. `hash_state(name, properties)` builds a hashable key from the properties in sorted key order. It accepts only bool, byte, int and string property values; any other type raises `TypeError`.
- **`blockmv.palette`** defines `Palette`, plus `padded`, `palette_size_for` and `uint32_count`. Palette sizes are 0, 1, 2, 3, 4, 5, 6, 8 and 16 bits.
- **`blockmv.storage`** defines `PalettedStorage`, a 16×16×16 cube of palette indices packed into 32-bit words.
  - It grows automatically on `set`.
  - `compact` drops unused palette values and shrinks the storage.
  - `empty_storage(value)` returns a storage filled with a single value.
- **`blockmv.sub_chunk`** defines `SubChunk`, a cube made of one or more block layers.
- **`blockmv.chunk`** defines `Range`, an inclusive vertical range, and `Chunk`.
  - A `Chunk` is a stack of sub chunks, each with its own biome storage.
  - Methods: `block`, `set_block`, `biome`, `set_biome`, `highest_block`, and `compact`.
  - A Y value outside the range raises `IndexError`.
- **`blockmv.registry`** defines `BlockRegistry` and `ItemRegistry`, which are lookup tables built from NBT data. Unknown lookups return `None`.
- **`blockmv.mappings`** holds the block and item tables of one version.
  - `BlockMapping` maps unknown states to `minecraft:info_update`, or to 0 if that block is missing too. Its `legacy_air_rid` attribute holds the runtime ID of air.
  - `ItemMapping.item_id_by_name` returns `(id, found)`. When the name is not found, the ID is that of `minecraft:name_tag`, or 0.
  - `Mapping` groups the two tables, and `load_mapping` builds one from NBT data.
- **`blockmv.encoding`** provides the palette encodings `NetworkEncoding`, `NetworkPersistentEncoding`, `BiomePaletteEncoding` and `BlockPaletteEncoding`. It also has the zig-zag varint helpers `write_varint32` and `read_varint32`.
- **`blockmv.codec`** converts chunks to and from network bytes.
  - Functions: `encode`, `encode_sub_chunk`, `encode_biomes`, `decode_sub_chunk`, and `network_decode`.
  - `encode` returns a `SerialisedData`.
  - Bad input raises `ChunkDecodeError`.
  - Reading persistent (NBT) palettes needs a `NetworkEncoding` built with a `BlockRegistry`.
- **`blockmv.recipe`** defines `Shape`, `Recipe`, `Shapeless` and `Shaped`. `register` adds a recipe to a module-level list, and `recipes` returns a copy of that list.
- **`blockmv.packets`** encodes and decodes the `Disconnect` and `ShowStoreOffer` packet payloads, using `PacketReader` and `PacketWriter`.

## Examples

```python
from blockmv.chunk import Chunk, Range

air = 0
chunk = Chunk(air, Range(-64, 319))
chunk.set_block(1, 10, 2, 0, 5)
assert chunk.block(1, 10, 2, 0) == 5
assert chunk.highest_block(1, 2) == 10
chunk.compact()
```

This round trip goes through the network encoding:

```python
from blockmv import codec
from blockmv.encoding import NetworkEncoding

encoding = NetworkEncoding()
data = codec.encode(chunk, encoding, chunk.range)
raw = b"".join(data.sub_chunks) + data.biomes
decoded = codec.network_decode(air, raw, len(data.sub_chunks), False, chunk.range, encoding)
assert decoded.block(1, 10, 2, 0) == 5
```

Packets encode and decode their payloads:

```python
from blockmv.packets import Disconnect

raw = Disconnect(hide_disconnection_screen=False, message="bye").encode()
assert Disconnect.decode(raw).message == "bye"
```

## What it does not do

- It is a library only. It has no command, no server or listener, and no network connection handling.
- It does not convert packets between protocol versions.
- It ships no block state, item or recipe data. You pass the NBT data to `BlockRegistry.from_nbt`, `ItemRegistry.from_nbt`, `load_mapping` and the other builders yourself.
- The recipe registry starts empty.

## Running the tests

```
pip install -e ".[test]"
pytest
```