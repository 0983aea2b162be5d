import io
import os

import pytest

from fencryption.crypto.aead import AuthenticationFailure, Crypto, IoFailure, MalformedInput
from fencryption.utils.dataModels import DEC_CHUNK_LEN, ENC_CHUNK_LEN

N = ENC_CHUNK_LEN


def encrypt_bytes(crypto, data):
    out = io.BytesIO()
    crypto.encrypt_stream(io.BytesIO(data), out)
    return out.getvalue()


def decrypt_bytes(crypto, data):
    out = io.BytesIO()
    crypto.decrypt_stream(io.BytesIO(data), out)
    return out.getvalue()


class TrickleReader:
    """A source that never returns more than 1000 bytes per read."""

    def __init__(self, data):
        self._buf = io.BytesIO(data)

    def read(self, n=-1):
        return self._buf.read(min(n, 1000) if n >= 0 else 1000)


class BrokenReader:
    def read(self, n=-1):
        raise OSError("disk on fire")


def test_small_text_scenario():
    crypto = Crypto.from_passphrase("my_super_key")
    enc = crypto.encrypt(b"hello :)")
    assert len(enc) == 8 + 28
    assert enc[12:20] != b"hello :)"
    assert Crypto.from_passphrase("my_super_key").decrypt(enc) == b"hello :)"


def test_empty_plaintext_round_trip(crypto):
    enc = crypto.encrypt(b"")
    assert len(enc) == 28
    assert crypto.decrypt(enc) == b""


def test_same_plaintext_encrypts_differently(crypto):
    a = crypto.encrypt(b"same")
    b = crypto.encrypt(b"same")
    assert a != b
    assert a[:12] != b[:12]
    assert crypto.decrypt(a) == crypto.decrypt(b) == b"same"


def test_wrong_key_is_rejected(crypto):
    enc = crypto.encrypt(b"secret")
    with pytest.raises(AuthenticationFailure):
        Crypto.from_passphrase("not my key").decrypt(enc)


def test_tampered_blob_is_rejected(crypto):
    enc = bytearray(crypto.encrypt(b"secret message"))
    enc[15] ^= 0x01
    with pytest.raises(AuthenticationFailure):
        crypto.decrypt(bytes(enc))


@pytest.mark.parametrize("size", [0, 1, 12, 27])
def test_too_short_blob_is_malformed(crypto, size):
    with pytest.raises(MalformedInput):
        crypto.decrypt(b"\x00" * size)


def test_key_length_is_checked():
    with pytest.raises(ValueError):
        Crypto(b"too short")


def test_unknown_kdf():
    with pytest.raises(ValueError):
        Crypto.from_passphrase("key", kdf="md5")


@pytest.mark.parametrize("size", [0, 1, N - 1, N, N + 1, 3 * N])
def test_stream_round_trip(crypto, size):
    data = os.urandom(size)
    enc = encrypt_bytes(crypto, data)
    # every full chunk is followed by one more, shorter (maybe empty) chunk
    chunks = size // N + 1
    assert len(enc) == size + 28 * chunks
    assert decrypt_bytes(crypto, enc) == data


def test_stream_of_empty_source_is_one_empty_chunk(crypto):
    enc = encrypt_bytes(crypto, b"")
    assert len(enc) == 28
    assert crypto.decrypt(enc) == b""


def test_stream_chunks_are_single_shot_blobs(crypto):
    data = os.urandom(N + 10)
    enc = encrypt_bytes(crypto, data)
    assert crypto.decrypt(enc[:DEC_CHUNK_LEN]) == data[:N]
    assert crypto.decrypt(enc[DEC_CHUNK_LEN:]) == data[N:]


def test_decrypting_empty_source_writes_nothing(crypto):
    assert decrypt_bytes(crypto, b"") == b""


def test_stream_handles_short_reads(crypto):
    data = os.urandom(2 * N + 7)
    enc = io.BytesIO()
    crypto.encrypt_stream(TrickleReader(data), enc)
    out = io.BytesIO()
    crypto.decrypt_stream(TrickleReader(enc.getvalue()), out)
    assert out.getvalue() == data


def test_stream_wrong_key_writes_nothing(crypto):
    enc = encrypt_bytes(crypto, b"x" * 5000)
    out = io.BytesIO()
    with pytest.raises(AuthenticationFailure):
        Crypto.from_passphrase("wrong").decrypt_stream(io.BytesIO(enc), out)
    assert out.getvalue() == b""


def test_stream_failure_keeps_earlier_chunks(crypto):
    data = os.urandom(2 * N + 5)
    enc = bytearray(encrypt_bytes(crypto, data))
    enc[DEC_CHUNK_LEN + 100] ^= 0xFF
    out = io.BytesIO()
    with pytest.raises(AuthenticationFailure):
        crypto.decrypt_stream(io.BytesIO(bytes(enc)), out)
    assert out.getvalue() == data[:N]


def test_truncated_stream_is_rejected(crypto):
    enc = encrypt_bytes(crypto, b"y" * 100)
    with pytest.raises(AuthenticationFailure):
        decrypt_bytes(crypto, enc[:-5])


def test_stream_tail_shorter_than_overhead_is_malformed(crypto):
    enc = encrypt_bytes(crypto, os.urandom(N))
    # keep the full first chunk and only 10 bytes of the final one
    with pytest.raises(MalformedInput):
        decrypt_bytes(crypto, enc[: DEC_CHUNK_LEN + 10])


def test_read_errors_surface_as_io_failure(crypto):
    with pytest.raises(IoFailure) as excinfo:
        crypto.encrypt_stream(BrokenReader(), io.BytesIO())
    assert isinstance(excinfo.value.__cause__, OSError)
