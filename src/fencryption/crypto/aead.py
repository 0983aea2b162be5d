"""AES-256-GCM encryption of small buffers and of streams.

Single-shot blob:  nonce (12) || ciphertext (n) || tag (16)

Stream: a plain concatenation of single-shot blobs, one per ENC_CHUNK_LEN
bytes of plaintext, each with its own random nonce. The last chunk is
shorter than ENC_CHUNK_LEN (possibly empty), which is how the decryptor
finds the end of the stream. Chunks carry no index, so decryption is
strictly sequential.
"""
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from typing import BinaryIO

from fencryption.crypto.hash import derive_key, derive_key_argon2id
from fencryption.utils.dataModels import (
    BLOB_OVERHEAD,
    DEC_CHUNK_LEN,
    ENC_CHUNK_LEN,
    IV_LEN,
    KDF_ARGON2ID,
    KDF_SHA256,
    KEY_LEN,
)


class CryptoError(Exception):
    pass


class AuthenticationFailure(CryptoError):
    """Tag mismatch: wrong key, or the ciphertext was altered or cut."""


class MalformedInput(CryptoError):
    pass


class IoFailure(CryptoError):
    pass


def read_full(source: BinaryIO, size: int) -> bytes:
    """Read up to size bytes, stopping early only at end of stream."""
    buf = bytearray()
    while len(buf) < size:
        try:
            part = source.read(size - len(buf))
        except OSError as e:
            raise IoFailure(f"Failed to read source: {e}") from e
        if not part:
            break
        buf += part
    return bytes(buf)


def _write(sink: BinaryIO, data: bytes) -> None:
    try:
        sink.write(data)
    except OSError as e:
        raise IoFailure(f"Failed to write destination: {e}") from e


class Crypto:
    """A cipher bound to one derived key.

    Holds no mutable state, so one instance can be shared by any number of
    worker threads.
    """

    __slots__ = ("_cipher",)

    def __init__(self, key: bytes):
        if len(key) != KEY_LEN:
            raise ValueError(f"key must be {KEY_LEN} bytes")
        self._cipher = AESGCM(bytes(key))

    @classmethod
    def from_passphrase(cls, passphrase: bytes | str, kdf: str = KDF_SHA256) -> "Crypto":
        if kdf == KDF_SHA256:
            return cls(derive_key(passphrase))
        if kdf == KDF_ARGON2ID:
            return cls(derive_key_argon2id(passphrase))
        raise ValueError(f"Unsupported kdf: {kdf}")

    def encrypt(self, plaintext: bytes) -> bytes:
        nonce = os.urandom(IV_LEN)
        return nonce + self._cipher.encrypt(nonce, bytes(plaintext), None)

    def decrypt(self, blob: bytes) -> bytes:
        if len(blob) < BLOB_OVERHEAD:
            raise MalformedInput(f"Encrypted data too short ({len(blob)} bytes, need at least {BLOB_OVERHEAD})")
        nonce, ct = blob[:IV_LEN], blob[IV_LEN:]
        try:
            return self._cipher.decrypt(bytes(nonce), bytes(ct), None)
        except InvalidTag as e:
            raise AuthenticationFailure("Authentication failed (wrong key or corrupted data)") from e

    def encrypt_stream(self, source: BinaryIO, sink: BinaryIO) -> None:
        while True:
            chunk = read_full(source, ENC_CHUNK_LEN)
            # an empty source still produces one (empty) chunk
            _write(sink, self.encrypt(chunk))
            if len(chunk) != ENC_CHUNK_LEN:
                break

    def decrypt_stream(self, source: BinaryIO, sink: BinaryIO) -> None:
        """Decrypt chunk by chunk.

        A failing chunk aborts with the earlier chunks already written to
        sink; nothing of the failing chunk is written.
        """
        while True:
            chunk = read_full(source, DEC_CHUNK_LEN)
            if not chunk:
                break
            _write(sink, self.decrypt(chunk))
            if len(chunk) != DEC_CHUNK_LEN:
                break
