"""Wire field types of the Minecraft network protocol.

Every field holds a value and knows how to write itself to a binary
stream (anything with ``write``) and how to read itself back from a
binary stream (anything with ``read``).  Both operations return the
number of bytes transferred.
"""

from __future__ import annotations

import abc
import math
import struct
import uuid
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, Optional

MAX_VARINT_LEN = 5
MAX_VARLONG_LEN = 10


def _read_exact(r: BinaryIO, n: int) -> bytes:
    """Read exactly ``n`` bytes or raise EOFError."""
    buf = bytearray()
    while len(buf) < n:
        chunk = r.read(n - len(buf))
        if not chunk:
            raise EOFError(f"unexpected end of stream: wanted {n} bytes, got {len(buf)}")
        buf += chunk
    return bytes(buf)


def _write(w: BinaryIO, data: bytes) -> int:
    w.write(data)
    return len(data)


def _to_signed(num: int, bits: int) -> int:
    num &= (1 << bits) - 1
    if num >> (bits - 1):
        return num - (1 << bits)
    return num


def _check_range(value: int, bits: int, name: str) -> None:
    if not -(1 << (bits - 1)) <= value < (1 << (bits - 1)):
        raise ValueError(f"{value} is out of range for {name}")


def _encode_varnum(num: int, length: int) -> bytes:
    out = bytearray()
    for _ in range(length - 1):
        out.append((num & 0x7F) | 0x80)
        num >>= 7
    out.append(num & 0xFF)
    return bytes(out)


def _read_varnum(r: BinaryIO, limit: int, bits: int, name: str) -> tuple[int, int]:
    result = 0
    count = 0
    while True:
        if count > limit:
            raise ValueError(f"{name} is too big")
        byte = _read_exact(r, 1)[0]
        result |= (byte & 0x7F) << (7 * count)
        count += 1
        if not byte & 0x80:
            break
    return _to_signed(result, bits), count


class Field(abc.ABC):
    """A value that can be encoded to and decoded from the protocol wire format."""

    @abc.abstractmethod
    def write_to(self, w: BinaryIO) -> int:
        """Encode this field into ``w`` and return the number of bytes written."""

    @abc.abstractmethod
    def read_from(self, r: BinaryIO) -> int:
        """Decode this field from ``r`` in place and return the number of bytes read."""


@dataclass
class _StructField(Field):
    value: int = 0
    _format: ClassVar[struct.Struct]

    def write_to(self, w: BinaryIO) -> int:
        try:
            data = self._format.pack(self.value)
        except struct.error as exc:
            raise ValueError(f"{self.value!r} cannot be encoded as {type(self).__name__}") from exc
        return _write(w, data)

    def read_from(self, r: BinaryIO) -> int:
        (self.value,) = self._format.unpack(_read_exact(r, self._format.size))
        return self._format.size


@dataclass
class Boolean(Field):
    """Encoded as 0x01 for true and 0x00 for false."""

    value: bool = False

    def write_to(self, w: BinaryIO) -> int:
        return _write(w, b"\x01" if self.value else b"\x00")

    def read_from(self, r: BinaryIO) -> int:
        self.value = _read_exact(r, 1)[0] != 0
        return 1


class Byte(_StructField):
    """Signed 8-bit integer."""

    _format = struct.Struct(">b")


class UnsignedByte(_StructField):
    """Unsigned 8-bit integer."""

    _format = struct.Struct(">B")


class Short(_StructField):
    """Signed big-endian 16-bit integer."""

    _format = struct.Struct(">h")


class UnsignedShort(_StructField):
    """Unsigned big-endian 16-bit integer."""

    _format = struct.Struct(">H")


class Int(_StructField):
    """Signed big-endian 32-bit integer."""

    _format = struct.Struct(">i")


class Long(_StructField):
    """Signed big-endian 64-bit integer."""

    _format = struct.Struct(">q")


@dataclass
class Float(_StructField):
    """Single-precision IEEE 754 number."""

    value: float = 0.0
    _format = struct.Struct(">f")


@dataclass
class Double(_StructField):
    """Double-precision IEEE 754 number."""

    value: float = 0.0
    _format = struct.Struct(">d")


@dataclass
class String(Field):
    """UTF-8 text prefixed with its byte length as a VarInt."""

    value: str = ""

    def write_to(self, w: BinaryIO) -> int:
        data = self.value.encode("utf-8", "surrogateescape")
        n = VarInt(len(data)).write_to(w)
        return n + _write(w, data)

    def read_from(self, r: BinaryIO) -> int:
        length = VarInt()
        n = length.read_from(r)
        if length.value < 0:
            raise ValueError(f"negative string length {length.value}")
        data = _read_exact(r, length.value)
        self.value = data.decode("utf-8", "surrogateescape")
        return n + length.value


@dataclass
class VarInt(Field):
    """Variable-length encoding of a signed 32-bit integer."""

    value: int = 0

    def encoded_len(self) -> int:
        """Number of bytes needed to encode the value."""
        v = self.value
        if v < 0:
            return MAX_VARINT_LEN
        for n in range(1, 5):
            if v < 1 << (7 * n):
                return n
        return 5

    def write_to(self, w: BinaryIO) -> int:
        _check_range(self.value, 32, "VarInt")
        return _write(w, _encode_varnum(self.value & 0xFFFFFFFF, self.encoded_len()))

    def read_from(self, r: BinaryIO) -> int:
        self.value, n = _read_varnum(r, MAX_VARINT_LEN, 32, "VarInt")
        return n


@dataclass
class VarLong(Field):
    """Variable-length encoding of a signed 64-bit integer."""

    value: int = 0

    def encoded_len(self) -> int:
        """Number of bytes needed to encode the value."""
        v = self.value
        if v < 0:
            return MAX_VARLONG_LEN
        for n in range(1, 9):
            if v < 1 << (7 * n):
                return n
        return 9

    def write_to(self, w: BinaryIO) -> int:
        _check_range(self.value, 64, "VarLong")
        return _write(w, _encode_varnum(self.value & 0xFFFFFFFFFFFFFFFF, self.encoded_len()))

    def read_from(self, r: BinaryIO) -> int:
        self.value, n = _read_varnum(r, MAX_VARLONG_LEN - 1, 64, "VarLong")
        return n


@dataclass
class Position(Field):
    """Block position packed as 26-bit x, 26-bit z and 12-bit y in one long."""

    x: int = 0
    y: int = 0
    z: int = 0

    def write_to(self, w: BinaryIO) -> int:
        packed = ((self.x & 0x3FFFFFF) << 38) | ((self.z & 0x3FFFFFF) << 12) | (self.y & 0xFFF)
        return _write(w, packed.to_bytes(8, "big"))

    def read_from(self, r: BinaryIO) -> int:
        v = int.from_bytes(_read_exact(r, 8), "big", signed=True)
        self.x = v >> 38
        self.y = _to_signed(v, 12)
        self.z = _to_signed(v >> 12, 26)
        return 8


class Angle(Byte):
    """Rotation angle in steps of 1/256 of a full turn."""

    def to_deg(self) -> float:
        """The angle in degrees."""
        return 360 * self.value / 256

    def to_rad(self) -> float:
        """The angle in radians."""
        return 2 * math.pi * self.value / 256


@dataclass
class UUID(Field):
    """A UUID encoded as 16 raw bytes."""

    value: uuid.UUID = field(default_factory=lambda: uuid.UUID(int=0))

    def write_to(self, w: BinaryIO) -> int:
        return _write(w, self.value.bytes)

    def read_from(self, r: BinaryIO) -> int:
        self.value = uuid.UUID(bytes=_read_exact(r, 16))
        return 16


@dataclass
class ByteArray(Field):
    """Raw bytes prefixed with their length as a VarInt."""

    value: bytes = b""

    def write_to(self, w: BinaryIO) -> int:
        n = VarInt(len(self.value)).write_to(w)
        return n + _write(w, bytes(self.value))

    def read_from(self, r: BinaryIO) -> int:
        length = VarInt()
        n = length.read_from(r)
        if length.value < 0:
            raise ValueError(f"negative byte array length {length.value}")
        self.value = _read_exact(r, length.value)
        return n + length.value


@dataclass
class PluginMessageData(Field):
    """Raw bytes that extend to the end of the stream."""

    value: bytes = b""

    def write_to(self, w: BinaryIO) -> int:
        return _write(w, bytes(self.value))

    def read_from(self, r: BinaryIO) -> int:
        self.value = r.read() or b""
        return len(self.value)


def _check_index(index: int) -> None:
    if index < 0:
        raise IndexError(f"bit index {index} is negative")


@dataclass
class BitSet(Field):
    """A list of bits stored in signed 64-bit words, prefixed with the word count."""

    value: list[int] = field(default_factory=list)

    def get(self, index: int) -> bool:
        """Whether bit ``index`` is set."""
        _check_index(index)
        return bool(self.value[index // 64] & (1 << (index % 64)))

    def set(self, index: int, value: bool) -> None:
        """Set or clear bit ``index``."""
        _check_index(index)
        word = self.value[index // 64] & 0xFFFFFFFFFFFFFFFF
        mask = 1 << (index % 64)
        word = word | mask if value else word & ~mask
        self.value[index // 64] = _to_signed(word, 64)

    def __len__(self) -> int:
        return len(self.value) * 64

    def write_to(self, w: BinaryIO) -> int:
        n = VarInt(len(self.value)).write_to(w)
        for word in self.value:
            n += Long(word).write_to(w)
        return n

    def read_from(self, r: BinaryIO) -> int:
        length = VarInt()
        n = length.read_from(r)
        if length.value < 0:
            raise ValueError(f"negative bit set length {length.value}")
        words = []
        for _ in range(length.value):
            word = Long()
            n += word.read_from(r)
            words.append(word.value)
        self.value = words
        return n


@dataclass
class FixedBitSet(Field):
    """A bit set of fixed size with no length prefix on the wire."""

    value: bytearray = field(default_factory=bytearray)

    def get(self, index: int) -> bool:
        """Whether bit ``index`` is set."""
        _check_index(index)
        return bool(self.value[index // 8] & (1 << (index % 8)))

    def set(self, index: int, value: bool) -> None:
        """Set or clear bit ``index``."""
        _check_index(index)
        mask = 1 << (index % 8)
        if value:
            self.value[index // 8] |= mask
        else:
            self.value[index // 8] &= ~mask & 0xFF

    def __len__(self) -> int:
        return len(self.value) * 8

    def write_to(self, w: BinaryIO) -> int:
        return _write(w, bytes(self.value))

    def read_from(self, r: BinaryIO) -> int:
        data = r.read(len(self.value)) or b""
        self.value[: len(data)] = data
        return len(data)


def new_fixed_bitset(n: int) -> Optional[FixedBitSet]:
    """A FixedBitSet able to hold at least ``n`` bits, or None if ``n`` is negative."""
    if n < 0:
        return None
    return FixedBitSet(bytearray((n + 7) // 8))