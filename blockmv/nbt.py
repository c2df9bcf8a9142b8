"""Named binary tag (NBT) encoding in its little-endian and network variants.

Python values map onto tags as follows:

* ``Byte``/``bool`` -> byte, ``Short`` -> short, ``Int`` -> int, ``Long`` -> long,
  ``Float`` -> float (32-bit), ``float`` -> double
* plain ``int`` -> int when it fits in 32 bits, otherwise long
* ``bytes``/``bytearray`` -> byte array, ``str`` -> string
* ``list``/``tuple`` -> list (all elements must share one tag)
* mappings with ``str`` keys -> compound
* ``array.array`` of 4-byte or 8-byte signed integers -> int array / long array

Decoding produces the sized wrapper types, so a decoded value encodes back to the
same bytes.
"""

from __future__ import annotations

import array
import enum
import io
import struct
from collections.abc import Iterator, Mapping
from typing import Any, BinaryIO

MAX_DEPTH = 512
_MAX_DISK_STRING = 0x7FFF
_INT32_MIN, _INT32_MAX = -(1 << 31), (1 << 31) - 1
_INT64_MIN, _INT64_MAX = -(1 << 63), (1 << 63) - 1


class NBTError(ValueError):
    """Raised when NBT data cannot be encoded or decoded."""


class _Sized(int):
    _min = 0
    _max = 0

    def __new__(cls, value: Any = 0):
        number = int.__new__(cls, value)
        if not cls._min <= number <= cls._max:
            raise ValueError(
                f"{cls.__name__} value {int(number)} out of range [{cls._min}, {cls._max}]"
            )
        return number

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class Byte(_Sized):
    """An unsigned 8-bit byte tag."""

    _min, _max = 0, 0xFF


class Short(_Sized):
    """A signed 16-bit short tag."""

    _min, _max = -(1 << 15), (1 << 15) - 1


class Int(_Sized):
    """A signed 32-bit int tag."""

    _min, _max = _INT32_MIN, _INT32_MAX


class Long(_Sized):
    """A signed 64-bit long tag."""

    _min, _max = _INT64_MIN, _INT64_MAX


class Float(float):
    """A 32-bit float tag; the value is rounded to single precision."""

    def __new__(cls, value: Any = 0.0):
        try:
            rounded = struct.unpack("<f", struct.pack("<f", float(value)))[0]
        except (OverflowError, struct.error) as exc:
            raise ValueError(f"{value!r} does not fit in a 32-bit float") from exc
        return float.__new__(cls, rounded)

    def __repr__(self) -> str:
        return f"Float({float(self)!r})"


class _Tag(enum.IntEnum):
    END = 0
    BYTE = 1
    SHORT = 2
    INT = 3
    LONG = 4
    FLOAT = 5
    DOUBLE = 6
    BYTE_ARRAY = 7
    STRING = 8
    LIST = 9
    COMPOUND = 10
    INT_ARRAY = 11
    LONG_ARRAY = 12


def _tag_of(value: Any) -> _Tag:
    if isinstance(value, (bool, Byte)):
        return _Tag.BYTE
    if isinstance(value, Short):
        return _Tag.SHORT
    if isinstance(value, Int):
        return _Tag.INT
    if isinstance(value, Long):
        return _Tag.LONG
    if isinstance(value, int):
        if _INT32_MIN <= value <= _INT32_MAX:
            return _Tag.INT
        if _INT64_MIN <= value <= _INT64_MAX:
            return _Tag.LONG
        raise NBTError(f"integer {value} does not fit in 64 bits")
    if isinstance(value, Float):
        return _Tag.FLOAT
    if isinstance(value, float):
        return _Tag.DOUBLE
    if isinstance(value, (bytes, bytearray)):
        return _Tag.BYTE_ARRAY
    if isinstance(value, str):
        return _Tag.STRING
    if isinstance(value, array.array) and value.typecode in ("i", "l", "q"):
        if value.itemsize == 4:
            return _Tag.INT_ARRAY
        if value.itemsize == 8:
            return _Tag.LONG_ARRAY
    if isinstance(value, (list, tuple)):
        return _Tag.LIST
    if isinstance(value, Mapping):
        return _Tag.COMPOUND
    raise NBTError(f"cannot encode value of type {type(value).__name__} as NBT")


def _zigzag(value: int, bits: int) -> int:
    return ((value << 1) ^ (value >> (bits - 1))) & ((1 << bits) - 1)


def _unzigzag(value: int) -> int:
    return (value >> 1) ^ -(value & 1)


class _Writer:
    def __init__(self, stream: BinaryIO, network: bool) -> None:
        self._out = stream
        self._network = network

    def _varuint(self, value: int) -> None:
        out = bytearray()
        while True:
            part = value & 0x7F
            value >>= 7
            if value:
                out.append(part | 0x80)
            else:
                out.append(part)
                break
        self._out.write(bytes(out))

    def _int32(self, value: int) -> None:
        if self._network:
            self._varuint(_zigzag(value, 32))
        else:
            self._out.write(struct.pack("<i", value))

    def _int64(self, value: int) -> None:
        if self._network:
            self._varuint(_zigzag(value, 64))
        else:
            self._out.write(struct.pack("<q", value))

    def _length(self, n: int) -> None:
        if n > _INT32_MAX:
            raise NBTError(f"length {n} too large")
        self._int32(n)

    def _string(self, text: str) -> None:
        try:
            data = text.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise NBTError(f"string is not valid UTF-8: {exc}") from exc
        if self._network:
            self._varuint(len(data))
        else:
            if len(data) > _MAX_DISK_STRING:
                raise NBTError(f"string of {len(data)} bytes exceeds {_MAX_DISK_STRING} bytes")
            self._out.write(struct.pack("<H", len(data)))
        self._out.write(data)

    def root(self, value: Any) -> None:
        tag = _tag_of(value)
        self._out.write(bytes([tag]))
        self._string("")
        self._payload(tag, value, 0)

    def _payload(self, tag: _Tag, value: Any, depth: int) -> None:
        if tag is _Tag.BYTE:
            self._out.write(struct.pack("<B", int(value)))
        elif tag is _Tag.SHORT:
            self._out.write(struct.pack("<h", int(value)))
        elif tag is _Tag.INT:
            self._int32(int(value))
        elif tag is _Tag.LONG:
            self._int64(int(value))
        elif tag is _Tag.FLOAT:
            self._out.write(struct.pack("<f", float(value)))
        elif tag is _Tag.DOUBLE:
            self._out.write(struct.pack("<d", float(value)))
        elif tag is _Tag.BYTE_ARRAY:
            self._length(len(value))
            self._out.write(bytes(value))
        elif tag is _Tag.STRING:
            self._string(value)
        elif tag is _Tag.INT_ARRAY:
            self._length(len(value))
            for item in value:
                self._int32(item)
        elif tag is _Tag.LONG_ARRAY:
            self._length(len(value))
            for item in value:
                self._int64(item)
        elif tag is _Tag.LIST:
            self._list(value, depth + 1)
        elif tag is _Tag.COMPOUND:
            self._compound(value, depth + 1)

    def _list(self, items: Any, depth: int) -> None:
        if depth > MAX_DEPTH:
            raise NBTError(f"nesting deeper than {MAX_DEPTH}")
        tags = [_tag_of(item) for item in items]
        elem = tags[0] if tags else _Tag.END
        if any(t is not elem for t in tags):
            raise NBTError("list elements must all have the same tag type")
        self._out.write(bytes([elem]))
        self._length(len(tags))
        for item in items:
            self._payload(elem, item, depth)

    def _compound(self, mapping: Mapping, depth: int) -> None:
        if depth > MAX_DEPTH:
            raise NBTError(f"nesting deeper than {MAX_DEPTH}")
        for key, item in mapping.items():
            if not isinstance(key, str):
                raise NBTError(f"compound key {key!r} is not a string")
            tag = _tag_of(item)
            self._out.write(bytes([tag]))
            self._string(key)
            self._payload(tag, item, depth)
        self._out.write(bytes([_Tag.END]))


class _Reader:
    def __init__(self, stream: BinaryIO, network: bool) -> None:
        self._in = stream
        self._network = network

    def _read(self, n: int) -> bytes:
        data = self._in.read(n)
        if len(data) != n:
            raise NBTError("unexpected end of NBT data")
        return data

    def _byte(self) -> int:
        return self._read(1)[0]

    def _varuint(self, bits: int) -> int:
        result = 0
        shift = 0
        while shift < bits:
            part = self._byte()
            result |= (part & 0x7F) << shift
            if not part & 0x80:
                if result >> bits:
                    raise NBTError(f"varint exceeds {bits} bits")
                return result
            shift += 7
        raise NBTError(f"varint exceeds {bits} bits")

    def _int32(self) -> int:
        if self._network:
            return _unzigzag(self._varuint(32))
        return struct.unpack("<i", self._read(4))[0]

    def _int64(self) -> int:
        if self._network:
            return _unzigzag(self._varuint(64))
        return struct.unpack("<q", self._read(8))[0]

    def _length(self) -> int:
        n = self._int32()
        if n < 0:
            raise NBTError(f"negative length {n}")
        return n

    def _string(self) -> str:
        if self._network:
            n = self._varuint(32)
        else:
            n = struct.unpack("<H", self._read(2))[0]
        try:
            return self._read(n).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NBTError(f"string is not valid UTF-8: {exc}") from exc

    def _tag(self, tag_id: int) -> _Tag:
        try:
            return _Tag(tag_id)
        except ValueError:
            raise NBTError(f"unknown tag type {tag_id}") from None

    def root(self, tag_id: int) -> Any:
        tag = self._tag(tag_id)
        if tag is _Tag.END:
            raise NBTError("unexpected end tag at root")
        self._string()
        return self._payload(tag, 0)

    def _payload(self, tag: _Tag, depth: int) -> Any:
        if tag is _Tag.BYTE:
            return Byte(self._byte())
        if tag is _Tag.SHORT:
            return Short(struct.unpack("<h", self._read(2))[0])
        if tag is _Tag.INT:
            return Int(self._int32())
        if tag is _Tag.LONG:
            return Long(self._int64())
        if tag is _Tag.FLOAT:
            return Float(struct.unpack("<f", self._read(4))[0])
        if tag is _Tag.DOUBLE:
            return struct.unpack("<d", self._read(8))[0]
        if tag is _Tag.BYTE_ARRAY:
            return self._read(self._length())
        if tag is _Tag.STRING:
            return self._string()
        if tag is _Tag.INT_ARRAY:
            return array.array("i", (self._int32() for _ in range(self._length())))
        if tag is _Tag.LONG_ARRAY:
            return array.array("q", (self._int64() for _ in range(self._length())))
        if tag is _Tag.LIST:
            return self._list(depth + 1)
        if tag is _Tag.COMPOUND:
            return self._compound(depth + 1)
        raise NBTError("unexpected end tag")

    def _list(self, depth: int) -> list:
        if depth > MAX_DEPTH:
            raise NBTError(f"nesting deeper than {MAX_DEPTH}")
        elem = self._tag(self._byte())
        n = self._length()
        if elem is _Tag.END and n:
            raise NBTError("list of end tags must be empty")
        return [self._payload(elem, depth) for _ in range(n)]

    def _compound(self, depth: int) -> dict:
        if depth > MAX_DEPTH:
            raise NBTError(f"nesting deeper than {MAX_DEPTH}")
        result: dict[str, Any] = {}
        while True:
            tag = self._tag(self._byte())
            if tag is _Tag.END:
                return result
            name = self._string()
            result[name] = self._payload(tag, depth)


def dump(value: Any, stream: BinaryIO, network: bool = False) -> None:
    """Write ``value`` as a root tag with an empty name to ``stream``."""
    _Writer(stream, network).root(value)


def dumps(value: Any, network: bool = False) -> bytes:
    """Return ``value`` encoded as a root tag with an empty name."""
    buf = io.BytesIO()
    dump(value, buf, network)
    return buf.getvalue()


def load(stream: BinaryIO, network: bool = False) -> Any:
    """Read one root tag from ``stream`` and return its value."""
    reader = _Reader(stream, network)
    first = stream.read(1)
    if not first:
        raise NBTError("unexpected end of NBT data")
    return reader.root(first[0])


def loads(data: bytes, network: bool = False) -> Any:
    """Decode the first root tag in ``data``."""
    return load(io.BytesIO(data), network)


def iter_load(stream: BinaryIO, network: bool = False) -> Iterator[Any]:
    """Yield successive root tags from ``stream`` until it is exhausted."""
    reader = _Reader(stream, network)
    while True:
        first = stream.read(1)
        if not first:
            return
        yield reader.root(first[0])