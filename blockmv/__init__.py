"""Chunk storage and serialisation, NBT, block and item mappings, recipes and packet codecs for block-game worlds."""

__version__ = "0.1.0"

__all__ = [
    "chunk",
    "codec",
    "encoding",
    "mappings",
    "nbt",
    "packets",
    "palette",
    "recipe",
    "registry",
    "state",
    "storage",
    "sub_chunk",
]