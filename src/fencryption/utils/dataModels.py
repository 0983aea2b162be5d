import json
import struct

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Tuple

# AES-256-GCM
KEY_LEN = 32
IV_LEN = 12
TAG_LEN = 16
BLOB_OVERHEAD = IV_LEN + TAG_LEN

# Streaming: a read shorter than the chunk length marks the last chunk
ENC_CHUNK_LEN = 128000
DEC_CHUNK_LEN = IV_LEN + ENC_CHUNK_LEN + TAG_LEN

COPY_BUF_LEN = 64 * 1024

PACK_LEN_FMT = ">H"  # big-endian u16 header length
PACK_LEN_SIZE = struct.calcsize(PACK_LEN_FMT)
PACK_HEADER_MAX = 0xFFFF

DEFAULT_WORKERS = 8

# Optional argon2id key derivation
DEFAULT_T_COST = 4
DEFAULT_M_COST_KiB = 262144  # 256 MiB (tune per device)
DEFAULT_PARALLELISM = 2
ARGON2_SALT = b"fencryption.kdf1"

KDF_SHA256 = "sha256"
KDF_ARGON2ID = "argon2id"
KDF_CHOICES = (KDF_SHA256, KDF_ARGON2ID)


@dataclass(frozen=True)
class PackEntryMetadata:
    path: PurePosixPath
    file_len: int

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path.as_posix(), "len": self.file_len}

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    @staticmethod
    def from_bytes(b: bytes) -> "PackEntryMetadata":
        obj = json.loads(b.decode("utf-8"))
        path, file_len = obj["path"], obj["len"]
        if not isinstance(path, str) or not isinstance(file_len, int) or isinstance(file_len, bool):
            raise ValueError("header fields have the wrong type")
        if file_len < 0:
            raise ValueError("negative body length")
        return PackEntryMetadata(path=PurePosixPath(path), file_len=file_len)


@dataclass
class BatchReport:
    success: int = 0
    failures: List[Tuple[Path, BaseException]] = field(default_factory=list)
    skips: List[Tuple[Path, str]] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failures
