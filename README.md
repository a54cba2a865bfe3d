# mcproto

Building blocks for talking the Minecraft Java Edition network protocol.

- **Field codecs** (`mcproto.fields`): `Boolean`, `Byte`, `UnsignedByte`,
  `Short`, `UnsignedShort`, `Int`, `Long`, `Float`, `Double`, `String`,
  `VarInt`, `VarLong`, `Position`, `Angle`, `UUID`, `ByteArray`,
  `PluginMessageData`, `BitSet` and `FixedBitSet` (made with
  `new_fixed_bitset(n)`). Every field holds its value and can `write_to` a
  binary stream and `read_from` one, returning the number of bytes moved.
- **Composite fields** (`mcproto.compose`): `Ary` (and the `array` helper)
  for count-prefixed arrays, `Opt` for fields whose presence is decided by
  a flag or callable elsewhere, `Option` for a boolean-prefixed optional
  value, and `Tuple` for a fixed sequence of fields.
- **Packets** (`mcproto.packet`): `Packet` (an `id` and its `data`) with
  `pack` / `Packet.unpack` for the uncompressed and zlib-compressed framing,
  `scan` to decode fields out of a packet body, plus `marshal` and `Builder`
  to assemble one.
- **Encryption** (`mcproto.cfb8`): the AES/CFB8 stream cipher used after
  login, via `new_cfb8_encrypt(key, iv)` and `new_cfb8_decrypt(key, iv)`;
  `xor_key_stream(data)` returns the transformed bytes and may be fed data
  in pieces.
- **Connections** (`mcproto.conn`): `dial_mc`, `listen_mc`, `Dialer` (with
  SRV lookup when no port is given, the default port 25565 tried last), and
  `Conn` for reading and writing packets, with compression set by
  `set_threshold` and encryption by `set_cipher`.
- **RCON** (`mcproto.rcon`): client and server sides of the remote console
  protocol, via `dial_rcon` and `listen_rcon`.
- **Queues** (`mcproto.queues`): `LinkedQueue` (unbounded, blocking pull)
  and `ChannelQueue` (fixed capacity, non-blocking push). Both can be
  iterated until closed and drained.
- **Versions** (`mcproto.versions`): `State`, and packet id tables per
  protocol version, looked up with `resolve("1.21.11")`, `resolve("774")` or
  `resolve(774)`; `supported_versions()` lists the known game versions.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Examples

Build and frame a packet, then read it back:

```python
import io

from mcproto.fields import String, VarInt
from mcproto.packet import Packet, marshal

packet = marshal(0x00, VarInt(774), String("localhost"))

stream = io.BytesIO()
packet.pack(stream, -1)          # -1: compression disabled
stream.seek(0)

received = Packet.unpack(stream, -1)
assert received.id == packet.id

version, host = VarInt(), String()
received.scan(version, host)
print(version.value, host.value)
```

Look up packet ids for a game version:

```python
from mcproto.versions import resolve

info = resolve("1.21.11")
print(info.protocol_number, info.ids.sb_keep_alive)
```

Send a command over RCON:

```python
from mcproto.rcon import dial_rcon

password = "password"
with dial_rcon("localhost:25575", password) as conn:
    conn.cmd("list")
    print(conn.resp())
```

## Errors

Errors are reported as exceptions: malformed packets and out-of-range
values raise `ValueError`, truncated input raises `EOFError`, RCON failures
raise `RCONError`, and pulling from a closed, drained queue raises
`QueueClosed`. Unsupported versions passed to `resolve` raise `ValueError`.

## What it does not do

This package provides the wire-level pieces only. It does not carry out the
handshake, login, configuration or play sequences of a game client, has no
NBT encoder or decoder, and has no command-line program.