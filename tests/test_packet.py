import io

import pytest

from mcproto.fields import Boolean, Int, String, VarInt
from mcproto.packet import MAX_DATA_LENGTH, Builder, Packet, marshal


def _varints(*values):
    buf = io.BytesIO()
    for v in values:
        VarInt(v).write_to(buf)
    return buf.getvalue()


def _pack(packet, threshold):
    buf = io.BytesIO()
    packet.pack(buf, threshold)
    return buf.getvalue()


def test_pack_without_compression_bytes():
    assert _pack(Packet(0x00, b"\x01\x02"), -1) == b"\x03\x00\x01\x02"


def test_pack_below_threshold_marks_uncompressed():
    assert _pack(Packet(0x05, b"ab"), 256) == b"\x04\x00\x05ab"


@pytest.mark.parametrize("threshold", [-1, 0, 16, 256])
@pytest.mark.parametrize("data", [b"", b"hello", bytes(range(256)) * 4])
def test_pack_unpack_round_trip(threshold, data):
    original = Packet(0x2C, data)
    framed = _pack(original, threshold)
    stream = io.BytesIO(framed)
    decoded = Packet.unpack(stream, threshold)
    assert decoded == original
    assert stream.read() == b""


def test_compressed_frame_structure():
    data = b"x" * 1000
    framed = _pack(Packet(0x01, data), 64)
    stream = io.BytesIO(framed)
    length = VarInt()
    length.read_from(stream)
    rest = stream.read()
    assert length.value == len(rest)
    data_length = VarInt()
    data_length.read_from(io.BytesIO(rest))
    assert data_length.value == 1 + len(data)
    assert len(framed) < len(data)


def test_consecutive_packets_on_one_stream():
    packets = [Packet(1, b"a"), Packet(2, b"b" * 300), Packet(3, b"")]
    buf = io.BytesIO()
    for p in packets:
        p.pack(buf, 128)
    buf.seek(0)
    assert [Packet.unpack(buf, 128) for _ in packets] == packets


def test_unpack_plain_too_long_rejected():
    with pytest.raises(ValueError):
        Packet.unpack(io.BytesIO(_varints(MAX_DATA_LENGTH + 10, 0)), -1)


def test_unpack_plain_negative_length_rejected():
    with pytest.raises(ValueError):
        Packet.unpack(io.BytesIO(_varints(0, 0)), -1)


def test_unpack_plain_truncated():
    with pytest.raises(EOFError):
        Packet.unpack(io.BytesIO(_varints(10, 0) + b"ab"), -1)


def test_unpack_compressed_below_threshold_rejected():
    body = _varints(5) + b"\x00"
    frame = _varints(len(body)) + body
    with pytest.raises(ValueError):
        Packet.unpack(io.BytesIO(frame), 256)


def test_unpack_compressed_above_maximum_rejected():
    body = _varints(MAX_DATA_LENGTH + 1) + b"\x00"
    frame = _varints(len(body)) + body
    with pytest.raises(ValueError):
        Packet.unpack(io.BytesIO(frame), 0)


def test_unpack_compressed_truncated_frame():
    with pytest.raises(EOFError):
        Packet.unpack(io.BytesIO(_varints(20) + b"\x00\x01"), 0)


def test_marshal_and_scan_round_trip():
    packet = marshal(0x10, String("Tnze"), Int(-5), Boolean(True))
    assert packet.id == 0x10
    name, number, flag = String(), Int(), Boolean()
    packet.scan(name, number, flag)
    assert (name.value, number.value, flag.value) == ("Tnze", -5, True)


def test_scan_past_end_raises():
    packet = marshal(0x00, Boolean(True))
    with pytest.raises(EOFError):
        packet.scan(Boolean(), Int())


def test_builder_accumulates_fields():
    builder = Builder()
    builder.write_field(String("a"))
    builder.write_field(Int(3), Boolean(False))
    packet = builder.packet(7)
    assert packet == marshal(7, String("a"), Int(3), Boolean(False))
    assert packet.id == 7


def test_pack_rejects_out_of_range_id():
    with pytest.raises(ValueError):
        _pack(Packet(1 << 40, b""), -1)