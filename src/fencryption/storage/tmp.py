import shutil
import tempfile
import uuid

from pathlib import Path


class TmpDir:
    """A directory under the system temp dir, removed with its contents on exit."""

    def __init__(self):
        self.path = Path(tempfile.gettempdir()) / str(uuid.uuid4())
        self.path.mkdir()

    def unique_path(self) -> Path:
        return self.path / str(uuid.uuid4())

    def cleanup(self) -> None:
        shutil.rmtree(self.path, ignore_errors=True)

    def __enter__(self) -> "TmpDir":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()
