"""Wire encoding of the version-specific Disconnect and ShowStoreOffer packets."""

from __future__ import annotations

import io
from dataclasses import dataclass

ID_DISCONNECT = 5
ID_SHOW_STORE_OFFER = 91

_UINT32_MASK = 0xFFFFFFFF


class PacketReader:
    """Reads packet fields from a byte string."""

    def __init__(self, data: bytes) -> None:
        self._buf = io.BytesIO(bytes(data))

    def _read(self, n: int) -> bytes:
        data = self._buf.read(n)
        if len(data) != n:
            raise EOFError(f"unexpected end of packet data: wanted {n} bytes, got {len(data)}")
        return data

    def _varuint32(self) -> int:
        value = 0
        for shift in range(0, 35, 7):
            b = self._read(1)[0]
            value |= (b & 0x7F) << shift
            if not b & 0x80:
                if value > _UINT32_MASK:
                    raise ValueError("varuint32 overflows 32 bits")
                return value
        raise ValueError("varuint32 overflows 32 bits")

    def bool(self) -> bool:
        """Read a single byte as a boolean."""
        return self._read(1)[0] != 0

    def string(self) -> str:
        """Read a varuint32 length-prefixed UTF-8 string."""
        length = self._varuint32()
        try:
            return self._read(length).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError(f"string is not valid UTF-8: {exc}") from exc

    @property
    def remaining(self) -> int:
        """The number of bytes not yet read."""
        return len(self._buf.getbuffer()) - self._buf.tell()


class PacketWriter:
    """Accumulates packet fields into a byte string."""

    def __init__(self) -> None:
        self._buf = io.BytesIO()

    def _varuint32(self, value: int) -> None:
        if not 0 <= value <= _UINT32_MASK:
            raise ValueError(f"value {value} does not fit in a varuint32")
        out = bytearray()
        while value >= 0x80:
            out.append((value & 0x7F) | 0x80)
            value >>= 7
        out.append(value)
        self._buf.write(bytes(out))

    def bool(self, value: bool) -> None:
        """Write a boolean as a single byte."""
        self._buf.write(b"\x01" if value else b"\x00")

    def string(self, value: str) -> None:
        """Write a varuint32 length-prefixed UTF-8 string."""
        data = value.encode("utf-8")
        self._varuint32(len(data))
        self._buf.write(data)

    def getvalue(self) -> bytes:
        """Return everything written so far."""
        return self._buf.getvalue()


@dataclass
class Disconnect:
    """Sent by the server to disconnect the client, optionally with a message.

    The message is only written when the disconnection screen is not hidden.
    """

    hide_disconnection_screen: bool = False
    message: str = ""

    packet_id = ID_DISCONNECT

    def encode(self) -> bytes:
        """Return the packet payload."""
        writer = PacketWriter()
        writer.bool(self.hide_disconnection_screen)
        if not self.hide_disconnection_screen:
            writer.string(self.message)
        return writer.getvalue()

    @classmethod
    def decode(cls, data: bytes) -> Disconnect:
        """Parse a packet payload."""
        reader = PacketReader(data)
        hide = reader.bool()
        message = "" if hide else reader.string()
        return cls(hide, message)


@dataclass
class ShowStoreOffer:
    """Sent by the server to open the store window on a given offer."""

    offer_id: str = ""
    show_all: bool = False

    packet_id = ID_SHOW_STORE_OFFER

    def encode(self) -> bytes:
        """Return the packet payload."""
        writer = PacketWriter()
        writer.string(self.offer_id)
        writer.bool(self.show_all)
        return writer.getvalue()

    @classmethod
    def decode(cls, data: bytes) -> ShowStoreOffer:
        """Parse a packet payload."""
        reader = PacketReader(data)
        offer_id = reader.string()
        show_all = reader.bool()
        return cls(offer_id, show_all)