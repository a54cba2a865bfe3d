"""Remote console (RCON) client and server connections."""

from __future__ import annotations

import random
import socket
import struct

MAX_RCON_PACKAGE_SIZE = 4096

TYPE_RESPONSE = 0
TYPE_COMMAND = 2
TYPE_LOGIN = 3

_MIN_LENGTH = 4 + 4 + 0 + 2
_HEADER = struct.Struct("<iii")


class RCONError(Exception):
    """A failure in the RCON protocol or its connection."""


def _split_addr(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    return host.strip("[]"), int(port)


class RCONConn:
    """One RCON connection, usable from either the client or the server side."""

    def __init__(self, sock: socket.socket, req_id: int = 0) -> None:
        self.sock = sock
        self.req_id = req_id

    def __enter__(self) -> "RCONConn":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _recv_exact(self, n: int) -> bytes:
        buf = bytearray()
        while len(buf) < n:
            chunk = self.sock.recv(n - len(buf))
            if not chunk:
                raise EOFError("connection closed")
            buf += chunk
        return bytes(buf)

    def read_packet(self) -> tuple[int, int, str]:
        """Read one packet and return its request id, type and payload."""
        try:
            header = self._recv_exact(4)
        except (OSError, EOFError) as exc:
            raise RCONError(f"read packet length fail: {exc}") from exc
        (length,) = struct.unpack("<i", header)
        if length < _MIN_LENGTH:
            raise RCONError("packet too short")
        if length > MAX_RCON_PACKAGE_SIZE:
            raise RCONError("packet too large")
        try:
            body = self._recv_exact(length)
        except (OSError, EOFError) as exc:
            raise RCONError(f"read packet body fail: {exc}") from exc
        request_id, packet_type = struct.unpack_from("<ii", body)
        payload = body[8 : length - 2].decode("utf-8", "surrogateescape")
        return request_id, packet_type, payload

    def write_packet(self, request_id: int, packet_type: int, payload: str) -> None:
        """Send one packet."""
        data = payload.encode("utf-8", "surrogateescape")
        frame = _HEADER.pack(4 + 4 + len(data) + 2, request_id, packet_type) + data + b"\x00\x00"
        self.sock.sendall(frame)

    def cmd(self, command: str) -> None:
        """Send a command to the server."""
        self.write_packet(self.req_id, TYPE_COMMAND, command)

    def resp(self) -> str:
        """Read one response packet from the server."""
        request_id, packet_type, payload = self.read_packet()
        if request_id != self.req_id:
            raise RCONError("req ID not match")
        if packet_type != TYPE_RESPONSE:
            raise RCONError(f"packet type wrong: {packet_type}")
        return payload

    def accept_login(self, password: str) -> None:
        """Read a login packet and answer it, raising if the password is wrong."""
        request_id, packet_type, payload = self.read_packet()
        self.req_id = request_id
        if packet_type != TYPE_LOGIN:
            raise RCONError(f"not a login packet: {packet_type}")
        if payload != password:
            self.write_packet(-1, TYPE_COMMAND, "")
            raise RCONError("password wrong")
        self.write_packet(request_id, TYPE_COMMAND, "")

    def accept_cmd(self) -> str:
        """Read a command packet and return the command."""
        request_id, packet_type, payload = self.read_packet()
        self.req_id = request_id
        if packet_type != TYPE_COMMAND:
            raise RCONError(f"not a command packet: {packet_type}")
        return payload

    def resp_cmd(self, response: str) -> None:
        """Send a response to the last command; may be called several times."""
        self.write_packet(self.req_id, TYPE_RESPONSE, response)

    def close(self) -> None:
        """Close the connection."""
        self.sock.close()


def dial_rcon(addr: str, password: str) -> RCONConn:
    """Connect to an RCON server at ``host:port`` and log in."""
    host, port = _split_addr(addr)
    try:
        sock = socket.create_connection((host, port))
    except OSError as exc:
        raise RCONError(f"connect fail: {exc}") from exc
    conn = RCONConn(sock, random.randint(0, 2**31 - 1))
    try:
        try:
            conn.write_packet(conn.req_id, TYPE_LOGIN, password)
        except OSError as exc:
            raise RCONError(f"login fail: {exc}") from exc
        try:
            request_id, _, _ = conn.read_packet()
        except RCONError as exc:
            raise RCONError(f"read login resp fail: {exc}") from exc
        if request_id == -1:
            raise RCONError("login fail")
        if request_id != conn.req_id:
            raise RCONError("req id not match")
    except BaseException:
        conn.close()
        raise
    return conn


class RCONListener:
    """A listening socket that accepts RCON clients."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock
        self.address = sock.getsockname()[:2]

    def __enter__(self) -> "RCONListener":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def accept(self) -> RCONConn:
        """Wait for a client and return its connection."""
        conn, _ = self.sock.accept()
        return RCONConn(conn)

    def close(self) -> None:
        """Stop listening."""
        self.sock.close()


def listen_rcon(addr: str) -> RCONListener:
    """Listen for RCON clients on ``host:port``."""
    host, port = _split_addr(addr)
    return RCONListener(socket.create_server((host, port)))