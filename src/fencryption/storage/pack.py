"""Pack container: a whole directory tree in one file.

A pack is a flat sequence of records, one per regular file:

    header_len : u16 (big-endian)
    header     : header_len bytes, compact JSON {"path": <posix relative path>, "len": <body length>}
    body       : exactly `len` raw bytes of the file

Nothing else delimits records, so a wrong body length desynchronizes every
record after it. Directories produce no record; empty directories are not
preserved. The end of the pack is the end of the stream.
"""
import struct

from pathlib import Path, PurePosixPath
from typing import BinaryIO, List

from fencryption.storage.walk import entry_kind, walk_dir
from fencryption.utils.dataModels import (
    COPY_BUF_LEN,
    PACK_HEADER_MAX,
    PACK_LEN_FMT,
    PACK_LEN_SIZE,
    PackEntryMetadata,
)


class PackError(Exception):
    pass


class TruncatedContainer(PackError):
    pass


class MalformedHeader(PackError):
    pass


def _read_exact(source: BinaryIO, size: int, what: str) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        part = source.read(size - len(buf))
        if not part:
            raise TruncatedContainer(f"Pack ended inside {what} ({len(buf)} of {size} bytes)")
        buf += part
    return bytes(buf)


def _copy_exact(source: BinaryIO, dest: BinaryIO, size: int, what: str) -> None:
    remaining = size
    while remaining:
        buf = source.read(min(COPY_BUF_LEN, remaining))
        if not buf:
            raise TruncatedContainer(f"{what}: {size - remaining} of {size} bytes available")
        dest.write(buf)
        remaining -= len(buf)


def _safe_relpath(path: PurePosixPath) -> PurePosixPath:
    if path.is_absolute() or not path.parts or any(p in ("", ".", "..") for p in path.parts):
        raise MalformedHeader(f"Unsafe path in pack: {str(path)!r}")
    return path


def write_header(sink: BinaryIO, meta: PackEntryMetadata) -> None:
    header = meta.to_bytes()
    if len(header) > PACK_HEADER_MAX:
        raise MalformedHeader(f"Header too large for {meta.path} ({len(header)} bytes)")
    sink.write(struct.pack(PACK_LEN_FMT, len(header)))
    sink.write(header)


def read_header(source: BinaryIO) -> PackEntryMetadata | None:
    """Return the next header, or None at the end of pack.

    A short or empty read of the length prefix ends the pack.
    """
    lb = source.read(PACK_LEN_SIZE)
    if len(lb) != PACK_LEN_SIZE:
        return None
    (hlen,) = struct.unpack(PACK_LEN_FMT, lb)
    hbytes = _read_exact(source, hlen, "header")
    try:
        meta = PackEntryMetadata.from_bytes(hbytes)
    except (ValueError, KeyError, TypeError, RecursionError) as e:
        raise MalformedHeader(f"Invalid pack header: {e}") from e
    _safe_relpath(meta.path)
    return meta


def create(root: Path | str, sink: BinaryIO) -> int:
    """Write a record for every regular file under root. Returns the record count."""
    root = Path(root)
    count = 0
    for entry in walk_dir(root):
        if entry_kind(entry) != "file":
            continue
        rel = PurePosixPath(Path(entry.path).relative_to(root).as_posix())
        # length comes from the metadata read here, the body copy trusts it
        meta = PackEntryMetadata(path=rel, file_len=entry.stat(follow_symlinks=False).st_size)
        with open(entry.path, "rb") as source:
            write_header(sink, meta)
            try:
                _copy_exact(source, sink, meta.file_len, str(rel))
            except TruncatedContainer as e:
                raise PackError(f"File shrank while packing: {e}") from e
        count += 1
    return count


def unpack(source: BinaryIO, root: Path | str) -> List[Path]:
    """Recreate every file of the pack under root. Returns the written paths."""
    root = Path(root)
    written = []
    while True:
        meta = read_header(source)
        if meta is None:
            break
        out = root.joinpath(*meta.path.parts)
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("wb") as dest:
            _copy_exact(source, dest, meta.file_len, f"Body of {meta.path}")
        written.append(out)
    return written


class Pack:
    """A pack file on disk."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def create(self, dir_path: Path | str) -> int:
        with self.path.open("wb") as sink:
            return create(dir_path, sink)

    def unpack(self, dir_path: Path | str) -> List[Path]:
        Path(dir_path).mkdir(parents=True, exist_ok=True)
        with self.path.open("rb") as source:
            return unpack(source, dir_path)
