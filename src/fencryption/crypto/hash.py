from argon2.low_level import hash_secret_raw, Type as Argon2Type
from cryptography.hazmat.primitives import hashes

from fencryption.utils.dataModels import (
    ARGON2_SALT,
    DEFAULT_M_COST_KiB,
    DEFAULT_PARALLELISM,
    DEFAULT_T_COST,
    KEY_LEN,
)


def _as_bytes(passphrase: bytes | str) -> bytes:
    if isinstance(passphrase, str):
        return passphrase.encode("utf-8")
    return bytes(passphrase)


def sha256_bytes(data: bytes) -> bytes:
    digest = hashes.Hash(hashes.SHA256())
    digest.update(data)
    return digest.finalize()


def sha3_512_bytes(data: bytes) -> bytes:
    digest = hashes.Hash(hashes.SHA3_512())
    digest.update(data)
    return digest.finalize()


def derive_key(passphrase: bytes | str) -> bytes:
    """Key = SHA-256(passphrase) -> 32 bytes.

    No salt and no work factor: a fast hash, kept for compatibility with
    existing encrypted files. See derive_key_argon2id for the slow variant.
    """
    return sha256_bytes(_as_bytes(passphrase))


def derive_key_argon2id(
    passphrase: bytes | str,
    t_cost: int | None = None,
    m_cost_kib: int | None = None,
    parallelism: int | None = None,
) -> bytes:
    """Key = Argon2id(SHA3-512(passphrase)) with the fixed application salt -> 32 bytes"""
    t_cost = DEFAULT_T_COST if t_cost is None else t_cost
    m_cost_kib = DEFAULT_M_COST_KiB if m_cost_kib is None else m_cost_kib
    parallelism = DEFAULT_PARALLELISM if parallelism is None else parallelism
    prehash = sha3_512_bytes(_as_bytes(passphrase))
    return hash_secret_raw(
        secret=prehash,
        salt=ARGON2_SALT,
        time_cost=t_cost,
        memory_cost=m_cost_kib,
        parallelism=parallelism,
        hash_len=KEY_LEN,
        type=Argon2Type.ID,
    )
