from pathlib import Path
from typing import Callable

ENC_SUFFIX = ".enc"
DEC_SUFFIX = ".dec"
PACK_SUFFIX = ".pack"
UNPACKED_SUFFIX = ".unpacked"


def change_file_name(path: Path, callback: Callable[[str], str]) -> Path:
    return path.with_name(callback(path.name))


def encrypted_name(name: str) -> str:
    return name + ENC_SUFFIX


def decrypted_name(name: str) -> str:
    if name.endswith(ENC_SUFFIX) and len(name) > len(ENC_SUFFIX):
        return name[: -len(ENC_SUFFIX)] + DEC_SUFFIX
    return name + DEC_SUFFIX


def pack_name(name: str) -> str:
    return name + PACK_SUFFIX


def unpacked_name(name: str) -> str:
    if name.endswith(PACK_SUFFIX) and len(name) > len(PACK_SUFFIX):
        return name[: -len(PACK_SUFFIX)]
    return name + UNPACKED_SUFFIX


def human_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    minutes, secs = divmod(seconds, 60)
    if minutes < 1:
        return f"{secs:.2f}s"
    hours, minutes = divmod(int(minutes), 60)
    if hours:
        return f"{hours}h {minutes}m {secs:.0f}s"
    return f"{minutes}m {secs:.0f}s"
