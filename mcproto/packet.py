"""Packets of the Minecraft protocol and their framing on the wire."""

from __future__ import annotations

import io
import zlib
from dataclasses import dataclass
from typing import BinaryIO

from .fields import Field, VarInt

MAX_DATA_LENGTH = 0x200000


def _read_exact(r: BinaryIO, n: int) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        chunk = r.read(n - len(buf))
        if not chunk:
            raise EOFError(f"unexpected end of stream: wanted {n} bytes, got {len(buf)}")
        buf += chunk
    return bytes(buf)


def _varint_bytes(value: int) -> bytes:
    buf = io.BytesIO()
    VarInt(value).write_to(buf)
    return buf.getvalue()


@dataclass
class Packet:
    """A packet: its numeric id and its encoded payload."""

    id: int
    data: bytes = b""

    def scan(self, *fields: Field) -> None:
        """Decode the payload into ``fields`` in order."""
        reader = io.BytesIO(self.data)
        for item in fields:
            item.read_from(reader)

    def pack(self, w: BinaryIO, threshold: int) -> None:
        """Frame the packet into ``w``; a negative threshold disables compression."""
        if threshold >= 0:
            frame = self._framed_compressed(threshold)
        else:
            frame = self._framed_plain()
        w.write(frame)

    def _framed_plain(self) -> bytes:
        packet_id = _varint_bytes(self.id)
        body = packet_id + bytes(self.data)
        return _varint_bytes(len(body)) + body

    def _framed_compressed(self, threshold: int) -> bytes:
        packet_id = _varint_bytes(self.id)
        payload = packet_id + bytes(self.data)
        if len(self.data) < threshold:
            body = _varint_bytes(0) + payload
        else:
            body = _varint_bytes(len(payload)) + zlib.compress(payload)
        return _varint_bytes(len(body)) + body

    @classmethod
    def unpack(cls, r: BinaryIO, threshold: int) -> "Packet":
        """Read one framed packet from ``r``; a negative threshold means no compression."""
        if threshold >= 0:
            return cls._unpack_compressed(r, threshold)
        return cls._unpack_plain(r)

    @classmethod
    def _unpack_plain(cls, r: BinaryIO) -> "Packet":
        length = VarInt()
        length.read_from(r)
        packet_id = VarInt()
        n = packet_id.read_from(r)
        data_length = length.value - n
        if data_length < 0 or data_length > MAX_DATA_LENGTH:
            raise ValueError(f"uncompressed packet error: length is {data_length}")
        return cls(packet_id.value, _read_exact(r, data_length))

    @classmethod
    def _unpack_compressed(cls, r: BinaryIO, threshold: int) -> "Packet":
        packet_length = VarInt()
        packet_length.read_from(r)
        if packet_length.value < 0:
            raise ValueError(f"compressed packet error: negative length {packet_length.value}")
        body = io.BytesIO(_read_exact(r, packet_length.value))

        data_length = VarInt()
        n2 = data_length.read_from(body)
        packet_id = VarInt()
        if data_length.value != 0:
            if data_length.value < threshold:
                raise ValueError(
                    f"compressed packet error: size of {data_length.value} "
                    f"is below threshold of {threshold}"
                )
            if data_length.value > MAX_DATA_LENGTH:
                raise ValueError(
                    f"compressed packet error: size of {data_length.value} "
                    f"is larger than protocol maximum of {MAX_DATA_LENGTH}"
                )
            raw = zlib.decompressobj().decompress(body.read(), data_length.value)
            stream = io.BytesIO(raw)
            n3 = packet_id.read_from(stream)
            remaining = data_length.value - n3
            if remaining < 0:
                raise ValueError(f"compressed packet error: data length {data_length.value} too short")
            data = _read_exact(stream, remaining)
        else:
            n3 = packet_id.read_from(body)
            remaining = packet_length.value - n2 - n3
            if remaining < 0:
                raise ValueError(f"compressed packet error: length is {remaining}")
            data = _read_exact(body, remaining)
        return cls(packet_id.value, data)


class Builder:
    """Accumulates encoded fields into a packet payload."""

    def __init__(self) -> None:
        self._buf = io.BytesIO()

    def write_field(self, *fields: Field) -> None:
        """Encode ``fields`` onto the end of the payload."""
        for item in fields:
            item.write_to(self._buf)

    def packet(self, packet_id: int) -> Packet:
        """A packet with the given id and the payload built so far."""
        return Packet(int(packet_id), self._buf.getvalue())


def marshal(packet_id: int, *fields: Field) -> Packet:
    """Build a packet with ``packet_id`` whose payload is ``fields`` encoded in order."""
    builder = Builder()
    builder.write_field(*fields)
    return builder.packet(packet_id)