"""AES in CFB8 mode, the stream cipher used by encrypted game connections."""

from __future__ import annotations

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

BLOCK_SIZE = 16


class CFB8:
    """A CFB8 stream over AES.

    Each call to :meth:`xor_key_stream` continues the stream where the
    previous call stopped, so data may be fed in pieces of any size.
    """

    def __init__(self, key: bytes, iv: bytes, decrypt: bool) -> None:
        if len(iv) != BLOCK_SIZE:
            raise ValueError(f"iv must be {BLOCK_SIZE} bytes long, got {len(iv)}")
        self._encrypt_block = Cipher(algorithms.AES(bytes(key)), modes.ECB()).encryptor().update
        self._register = bytearray(iv)
        self._decrypt = decrypt

    def xor_key_stream(self, data: bytes) -> bytes:
        """Encrypt or decrypt ``data`` and return the result."""
        out = bytearray(len(data))
        register = self._register
        for i, byte in enumerate(bytes(data)):
            key_byte = self._encrypt_block(bytes(register))[0]
            result = byte ^ key_byte
            out[i] = result
            del register[0]
            register.append(byte if self._decrypt else result)
        return bytes(out)


def new_cfb8_encrypt(key: bytes, iv: bytes) -> CFB8:
    """A CFB8 stream that encrypts."""
    return CFB8(key, iv, decrypt=False)


def new_cfb8_decrypt(key: bytes, iv: bytes) -> CFB8:
    """A CFB8 stream that decrypts."""
    return CFB8(key, iv, decrypt=True)