"""Connections that carry framed protocol packets over TCP."""

from __future__ import annotations

import socket
import time
from dataclasses import dataclass
from typing import Any, BinaryIO, Optional

import dns.exception
import dns.resolver

from .packet import Packet

DEFAULT_PORT = 25565

_SANE_MINIMUM = 2.0


class _SocketReader:
    """Reads raw bytes from a socket, decrypting them if a stream is given."""

    def __init__(self, sock: socket.socket, stream: Any = None) -> None:
        self._sock = sock
        self._stream = stream

    def read(self, n: Optional[int] = -1) -> bytes:
        if n is None or n < 0:
            chunks = []
            while True:
                chunk = self._recv(65536)
                if not chunk:
                    return b"".join(chunks)
                chunks.append(chunk)
        if n == 0:
            return b""
        return self._recv(n)

    def _recv(self, n: int) -> bytes:
        data = self._sock.recv(n)
        if data and self._stream is not None:
            data = self._stream.xor_key_stream(data)
        return data


class _SocketWriter:
    """Writes raw bytes to a socket, encrypting them if a stream is given."""

    def __init__(self, sock: socket.socket, stream: Any = None) -> None:
        self._sock = sock
        self._stream = stream

    def write(self, data: bytes) -> int:
        data = bytes(data)
        if self._stream is not None:
            data = self._stream.xor_key_stream(data)
        self._sock.sendall(data)
        return len(data)


class Conn:
    """A game connection: reads and writes whole packets over a socket.

    Compression is off until :meth:`set_threshold` is given a non-negative
    value; encryption is off until :meth:`set_cipher` is called.
    """

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock
        self.reader: BinaryIO = _SocketReader(sock)  # type: ignore[assignment]
        self.writer: BinaryIO = _SocketWriter(sock)  # type: ignore[assignment]
        self.threshold = -1

    def __enter__(self) -> "Conn":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def read_packet(self) -> Packet:
        """Read one packet from the connection."""
        return Packet.unpack(self.reader, self.threshold)

    def write_packet(self, packet: Packet) -> None:
        """Write one packet to the connection."""
        packet.pack(self.writer, self.threshold)

    def set_cipher(self, encrypt_stream: Any, decrypt_stream: Any) -> None:
        """Encrypt everything written and decrypt everything read from now on.

        The streams are objects with an ``xor_key_stream(data)`` method
        returning the transformed bytes, such as :class:`mcproto.cfb8.CFB8`.
        """
        self.reader = _SocketReader(self.sock, decrypt_stream)  # type: ignore[assignment]
        self.writer = _SocketWriter(self.sock, encrypt_stream)  # type: ignore[assignment]

    def set_threshold(self, threshold: int) -> None:
        """Set the compression threshold; packets at least this long are compressed."""
        self.threshold = threshold

    def close(self) -> None:
        """Close the connection."""
        self.sock.close()


def wrap_conn(sock: socket.socket) -> Conn:
    """Wrap a connected socket as a game connection."""
    return Conn(sock)


def _split_host_port(addr: str) -> tuple[str, Optional[str]]:
    """Split ``host:port``; the port is None when the address has none."""
    if addr.startswith("["):
        end = addr.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address {addr!r}")
        host, rest = addr[1:end], addr[end + 1 :]
        if not rest:
            return host, None
        if not rest.startswith(":"):
            raise ValueError(f"unexpected text after ']' in address {addr!r}")
        return host, rest[1:]
    colons = addr.count(":")
    if colons == 0:
        return addr, None
    if colons > 1:
        raise ValueError(f"too many colons in address {addr!r}")
    host, _, port = addr.partition(":")
    return host, port


def _parse_port(port: str, addr: str) -> int:
    try:
        number = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {addr!r}") from None
    if not 0 <= number <= 0xFFFF:
        raise ValueError(f"invalid port in address {addr!r}")
    return number


class Listener:
    """A listening socket that accepts game connections."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock
        self.address = sock.getsockname()[:2]

    def __enter__(self) -> "Listener":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def accept(self) -> Conn:
        """Wait for a client and return its connection."""
        sock, _ = self.sock.accept()
        return wrap_conn(sock)

    def close(self) -> None:
        """Stop listening."""
        self.sock.close()


def listen_mc(addr: str) -> Listener:
    """Listen for game connections on ``host:port``."""
    host, port = _split_host_port(addr)
    if port is None:
        raise ValueError(f"missing port in address {addr!r}")
    return Listener(socket.create_server((host, _parse_port(port, addr))))


def partial_deadline(now: float, deadline: Optional[float], addrs_remaining: int) -> Optional[float]:
    """The deadline for one of ``addrs_remaining`` pending addresses.

    Times are in seconds.  A deadline of None means none is set and is
    returned unchanged; a deadline already passed raises TimeoutError.
    """
    if deadline is None:
        return None
    time_remaining = deadline - now
    if time_remaining <= 0:
        raise TimeoutError("deadline exceeded")
    timeout = time_remaining / addrs_remaining
    if timeout < _SANE_MINIMUM:
        timeout = time_remaining if time_remaining < _SANE_MINIMUM else _SANE_MINIMUM
    return now + timeout


@dataclass
class Dialer:
    """Dials game servers, looking up SRV records when no port is given.

    ``timeout`` bounds each single connection attempt; ``resolver`` is an
    object with a dnspython-style ``resolve`` method, the default resolver
    when None.
    """

    timeout: Optional[float] = None
    resolver: Any = None

    def _lookup_srv(self, host: str, deadline: Optional[float]) -> list[tuple[str, int]]:
        resolver = self.resolver if self.resolver is not None else dns.resolver.get_default_resolver()
        kwargs = {}
        if deadline is not None:
            kwargs["lifetime"] = max(deadline - time.monotonic(), 0.0)
        try:
            answer = resolver.resolve(f"_minecraft._tcp.{host}", "SRV", **kwargs)
        except dns.exception.DNSException:
            return []
        records = sorted(answer, key=lambda rec: (rec.priority, -rec.weight))
        return [(str(rec.target).rstrip("."), int(rec.port)) for rec in records]

    def dial_mc(self, addr: str, timeout: Optional[float] = None) -> Conn:
        """Connect to a game server at ``addr`` within ``timeout`` seconds.

        Without a port, SRV records are tried first and the default port last.
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        host, port = _split_host_port(addr)
        if port is None:
            addresses = self._lookup_srv(host, deadline)
            addresses.append((host, DEFAULT_PORT))
        else:
            addresses = [(host, _parse_port(port, addr))]

        first_error: Optional[BaseException] = None
        for i, target in enumerate(addresses):
            now = time.monotonic()
            if deadline is not None and now >= deadline:
                raise TimeoutError("dial canceled")
            attempt_timeout = self.timeout
            if deadline is not None:
                try:
                    partial = partial_deadline(now, deadline, len(addresses) - i)
                except TimeoutError as exc:
                    if first_error is None:
                        first_error = exc
                    break
                remaining = partial - now
                attempt_timeout = remaining if attempt_timeout is None else min(attempt_timeout, remaining)
            try:
                sock = socket.create_connection(target, timeout=attempt_timeout)
            except OSError as exc:
                if first_error is None:
                    first_error = exc
                continue
            sock.settimeout(None)
            return wrap_conn(sock)
        assert first_error is not None
        raise first_error


DEFAULT_DIALER = Dialer()


def dial_mc(addr: str, timeout: Optional[float] = None) -> Conn:
    """Connect to a game server with the default dialer."""
    return DEFAULT_DIALER.dial_mc(addr, timeout)