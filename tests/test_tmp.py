import pytest

from fencryption.storage.tmp import TmpDir


def test_tmp_dir_lifecycle():
    with TmpDir() as tmp_dir:
        path = tmp_dir.path
        assert path.is_dir()
        inner = tmp_dir.unique_path()
        assert inner.parent == path
        assert not inner.exists()
        inner.write_bytes(b"data")
        (path / "sub").mkdir()
        (path / "sub" / "file").write_bytes(b"x")
    assert not path.exists()


def test_unique_paths_differ():
    with TmpDir() as tmp_dir:
        assert tmp_dir.unique_path() != tmp_dir.unique_path()


def test_tmp_dir_removed_on_error():
    with pytest.raises(RuntimeError):
        with TmpDir() as tmp_dir:
            path = tmp_dir.path
            tmp_dir.unique_path().write_bytes(b"data")
            raise RuntimeError("boom")
    assert not path.exists()
