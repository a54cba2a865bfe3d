import socket
import threading
from dataclasses import dataclass

import dns.exception
import pytest

from mcproto.cfb8 import new_cfb8_decrypt, new_cfb8_encrypt
from mcproto.conn import (
    Conn,
    Dialer,
    dial_mc,
    listen_mc,
    partial_deadline,
    wrap_conn,
)
from mcproto.packet import Packet

KEY = bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c")
IV = bytes.fromhex("000102030405060708090a0b0c0d0e0f")


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    left, right = wrap_conn(a), wrap_conn(b)
    yield left, right
    left.close()
    right.close()


def _closed_port():
    s = socket.socket()
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


def test_plain_wire_bytes(pair):
    left, right = pair
    left.write_packet(Packet(0x00, b"\x01\x02"))
    assert right.sock.recv(16) == b"\x03\x00\x01\x02"


def test_plain_round_trip(pair):
    left, right = pair
    left.write_packet(Packet(0x2B, b"hello"))
    got = right.read_packet()
    assert got == Packet(0x2B, b"hello")


def test_compressed_round_trip(pair):
    left, right = pair
    left.set_threshold(16)
    right.set_threshold(16)
    big = Packet(0x07, b"abc" * 200)
    small = Packet(0x01, b"xy")
    left.write_packet(big)
    left.write_packet(small)
    assert right.read_packet() == big
    assert right.read_packet() == small


def test_encrypted_round_trip(pair):
    left, right = pair
    left.set_cipher(new_cfb8_encrypt(KEY, IV), new_cfb8_decrypt(KEY, IV))
    right.set_cipher(new_cfb8_encrypt(KEY, IV), new_cfb8_decrypt(KEY, IV))
    left.write_packet(Packet(0x05, b"secret payload"))
    right.write_packet(Packet(0x06, b"reply"))
    assert right.read_packet() == Packet(0x05, b"secret payload")
    assert left.read_packet() == Packet(0x06, b"reply")


def test_encrypted_wire_is_cipher_of_frame(pair):
    left, right = pair
    left.set_cipher(new_cfb8_encrypt(KEY, IV), new_cfb8_decrypt(KEY, IV))
    left.write_packet(Packet(0x00, b"\x01\x02"))
    wire = right.sock.recv(16)
    assert wire == new_cfb8_encrypt(KEY, IV).xor_key_stream(b"\x03\x00\x01\x02")
    assert wire != b"\x03\x00\x01\x02"


def test_read_after_peer_close_raises(pair):
    left, right = pair
    left.close()
    with pytest.raises(EOFError):
        right.read_packet()


def test_partial_deadline_none():
    assert partial_deadline(100.0, None, 3) is None


def test_partial_deadline_expired():
    with pytest.raises(TimeoutError):
        partial_deadline(10.0, 10.0, 1)


def test_partial_deadline_splits_time():
    assert partial_deadline(0.0, 10.0, 2) == pytest.approx(5.0)


def test_partial_deadline_sane_minimum():
    assert partial_deadline(0.0, 5.0, 5) == pytest.approx(2.0)
    assert partial_deadline(0.0, 1.5, 3) == pytest.approx(1.5)


def _serve_once(listener, results):
    with listener.accept() as conn:
        results.append(conn.read_packet())
        conn.write_packet(Packet(0x02, b"ok"))


def test_listen_and_dial():
    with listen_mc("127.0.0.1:0") as listener:
        host, port = listener.address
        results = []
        worker = threading.Thread(target=_serve_once, args=(listener, results))
        worker.start()
        with dial_mc(f"{host}:{port}", timeout=5) as conn:
            conn.write_packet(Packet(0x00, b"hi"))
            reply = conn.read_packet()
        worker.join(5)
    assert results == [Packet(0x00, b"hi")]
    assert reply == Packet(0x02, b"ok")


def test_dial_refused():
    port = _closed_port()
    with pytest.raises(OSError):
        dial_mc(f"127.0.0.1:{port}", timeout=5)


def test_dial_bad_address():
    with pytest.raises(ValueError):
        dial_mc("a:b:c")


def test_listen_requires_port():
    with pytest.raises(ValueError):
        listen_mc("127.0.0.1")


@dataclass
class _SRV:
    priority: int
    weight: int
    port: int
    target: str


class _FakeResolver:
    def __init__(self, records=None, fail=False):
        self.records = records or []
        self.fail = fail
        self.queries = []

    def resolve(self, qname, rdtype, **kwargs):
        self.queries.append((qname, rdtype))
        if self.fail:
            raise dns.exception.DNSException("no records")
        return self.records


def test_dial_uses_srv_records_without_port():
    with listen_mc("127.0.0.1:0") as listener:
        _, port = listener.address
        resolver = _FakeResolver(
            [
                _SRV(20, 0, _closed_port(), "127.0.0.1."),
                _SRV(10, 0, port, "127.0.0.1."),
            ]
        )
        results = []
        worker = threading.Thread(target=_serve_once, args=(listener, results))
        worker.start()
        conn = Dialer(resolver=resolver).dial_mc("mc.example.com", timeout=5)
        with conn:
            conn.write_packet(Packet(0x00, b"srv"))
            reply = conn.read_packet()
        worker.join(5)
    assert resolver.queries == [("_minecraft._tcp.mc.example.com", "SRV")]
    assert results == [Packet(0x00, b"srv")]
    assert reply == Packet(0x02, b"ok")


def test_dial_with_port_skips_srv():
    resolver = _FakeResolver(fail=True)
    port = _closed_port()
    with pytest.raises(OSError):
        Dialer(resolver=resolver).dial_mc(f"127.0.0.1:{port}", timeout=5)
    assert resolver.queries == []


def test_new_conn_has_compression_off(pair):
    left, _ = pair
    assert isinstance(left, Conn)
    assert left.threshold == -1
    left.set_threshold(256)
    assert left.threshold == 256