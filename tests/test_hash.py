import hashlib

from fencryption.crypto.hash import derive_key, derive_key_argon2id


def test_derive_key_is_sha256_of_passphrase():
    assert derive_key(b"my_super_key") == hashlib.sha256(b"my_super_key").digest()


def test_derive_key_accepts_text_and_bytes():
    assert derive_key("pässword") == derive_key("pässword".encode("utf-8"))


def test_derive_key_is_deterministic_and_32_bytes():
    assert derive_key("a") == derive_key("a")
    assert len(derive_key("a")) == 32
    assert len(derive_key(b"")) == 32


def test_different_passphrases_give_different_keys():
    assert derive_key("key one") != derive_key("key two")


def test_argon2id_key():
    # tiny cost parameters keep the test fast
    k1 = derive_key_argon2id("my_super_key", t_cost=1, m_cost_kib=64, parallelism=1)
    k2 = derive_key_argon2id("my_super_key", t_cost=1, m_cost_kib=64, parallelism=1)
    assert k1 == k2
    assert len(k1) == 32
    assert k1 != derive_key("my_super_key")
    assert k1 != derive_key_argon2id("other key", t_cost=1, m_cost_kib=64, parallelism=1)
