import os

import pytest

from fencryption.crypto.aead import Crypto

TREE = {
    "1/1.1": b"first file\n",
    "1/1.3": os.urandom(300_000),
    "1/1.2/1.2.1": b"",
    "1/1.2/1.2.2": b"nested " * 1000,
    "2": b"sibling file",
}


@pytest.fixture
def crypto():
    return Crypto.from_passphrase("my_super_key")


@pytest.fixture
def tree(tmp_path):
    """1/{1.1, 1.3, 1.2/{1.2.1, 1.2.2}} and a sibling file 2."""
    for rel, content in TREE.items():
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return tmp_path


def read_tree(root):
    """{posix relative path: bytes} for every regular file under root."""
    files = {}
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            full = os.path.join(dirpath, name)
            rel = os.path.relpath(full, root).replace(os.sep, "/")
            with open(full, "rb") as f:
                files[rel] = f.read()
    return files


def can_symlink(tmp_path) -> bool:
    try:
        os.symlink(tmp_path / "missing-target", tmp_path / ".symlink-check")
    except (OSError, NotImplementedError):
        return False
    os.unlink(tmp_path / ".symlink-check")
    return True
