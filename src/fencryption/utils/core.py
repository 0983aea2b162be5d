import base64
import binascii
import queue
import shutil
import time

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Sequence

from fencryption.crypto.aead import Crypto, CryptoError
from fencryption.storage.pack import Pack, PackError
from fencryption.storage.tmp import TmpDir
from fencryption.storage.walk import entry_kind, walk_dir
from fencryption.utils.dataModels import DEFAULT_WORKERS, BatchReport
from fencryption.utils.errors import CommandError, wrap
from fencryption.utils.helper import (
    change_file_name,
    decrypted_name,
    encrypted_name,
    pack_name,
    unpacked_name,
)

OUTPUT_NAMERS = {
    "encrypt": encrypted_name,
    "decrypt": decrypted_name,
    "pack": pack_name,
    "unpack": unpacked_name,
}

Transform = Callable[[Crypto, Path, Path], None]


def checks(paths: Sequence[Path], output_path: Path | None) -> None:
    if not paths:
        raise CommandError("Please provide at least one path")
    missing = [str(p) for p in paths if not p.exists() and not p.is_symlink()]
    if missing:
        raise CommandError(f"I can't work with files that don't exist: {', '.join(missing)}")
    if output_path is not None and len(paths) != 1:
        raise CommandError("Only one input path can be provided when setting an output path")


def get_output_paths(paths: Sequence[Path], output_path: Path | None, command: str) -> List[Path]:
    if output_path is not None:
        return [Path(output_path) for _ in paths]
    namer = OUTPUT_NAMERS[command]
    return [change_file_name(p, namer) for p in paths]


def check_outputs(paths: Sequence[Path], output_paths: Sequence[Path]) -> None:
    """Refuse output paths that collide with each other or with any input.

    An output is removed by --overwrite before work starts, so it may never
    be an input or contain one.
    """
    sources = [p.resolve() for p in paths]
    resolved = [p.resolve() for p in output_paths]
    if len(set(resolved)) != len(resolved):
        raise CommandError("Several inputs would be written to the same output path")
    for dst in resolved:
        for src in sources:
            if dst == src:
                raise CommandError(f"Output path is an input path: {src}")
            if src.is_relative_to(dst):
                raise CommandError(f"Output path {dst} contains the input {src}")
    for src, dst in zip(sources, resolved):
        if src.is_dir() and dst.is_relative_to(src):
            raise CommandError(f"Output path {dst} is inside the input directory")


def delete_entry(path: Path) -> None:
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
    except OSError as e:
        raise CommandError(f"Failed to remove {path}, please do it yourself", e) from e


def overwrite(paths: Sequence[Path], overwrite: bool) -> None:
    existing = [p for p in paths if p.exists() or p.is_symlink()]
    if not existing:
        return
    if not overwrite:
        raise CommandError(
            f"The output file/directory already exists: {existing[0]} (use \"--overwrite\"/\"-O\" to force overwrite)"
        )
    for path in existing:
        delete_entry(path)


def delete_original(path: Path, enabled: bool) -> None:
    if enabled and (path.exists() or path.is_symlink()):
        delete_entry(path)


def encrypt_file(crypto: Crypto, input_path: Path, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with input_path.open("rb") as source, output_path.open("wb") as dest:
        crypto.encrypt_stream(source, dest)


def decrypt_file(crypto: Crypto, input_path: Path, output_path: Path) -> None:
    """Decrypt input_path to output_path.

    On failure output_path keeps whatever chunks were authenticated before
    the failing one.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with input_path.open("rb") as source, output_path.open("wb") as dest:
        crypto.decrypt_stream(source, dest)


def _transform_tree(
    transform: Transform,
    crypto: Crypto,
    dir_path: Path,
    output_dir: Path,
    report: BatchReport,
    workers: int,
) -> None:
    """Mirror dir_path into output_dir, one pool job per file."""
    output_dir.mkdir(parents=True)
    results: queue.Queue = queue.Queue()

    def job(src: Path, dst: Path) -> None:
        try:
            transform(crypto, src, dst)
        except Exception as e:  # reported with the batch
            results.put((src, e))
        else:
            results.put((src, None))

    def on_error(e: OSError) -> None:
        report.failures.append((Path(e.filename) if e.filename else dir_path, e))

    with ThreadPoolExecutor(max_workers=workers) as pool:
        for entry in walk_dir(dir_path, on_error=on_error):
            src = Path(entry.path)
            dst = output_dir / src.relative_to(dir_path)
            kind = entry_kind(entry)
            if kind == "dir":
                try:
                    dst.mkdir(exist_ok=True)
                except OSError as e:
                    report.failures.append((src, e))
            elif kind == "file":
                pool.submit(job, src, dst)
            else:
                report.skips.append((src, "Unknown entry type"))

    while not results.empty():
        src, error = results.get_nowait()
        if error is None:
            report.success += 1
        else:
            report.failures.append((src, error))


def transform_paths(
    transform: Transform,
    command: str,
    crypto: Crypto,
    paths: Sequence[Path],
    output_path: Path | None = None,
    overwrite_output: bool = False,
    delete_originals: bool = False,
    workers: int = DEFAULT_WORKERS,
) -> BatchReport:
    """Run transform over files and directory trees.

    Setup problems raise CommandError before anything is written; per-file
    problems are collected in the returned report.
    """
    start = time.perf_counter()
    paths = [Path(p) for p in paths]
    output_path = Path(output_path) if output_path is not None else None

    checks(paths, output_path)
    output_paths = get_output_paths(paths, output_path, command)
    check_outputs(paths, output_paths)
    overwrite(output_paths, overwrite_output)

    report = BatchReport()
    for src, dst in zip(paths, output_paths):
        failed_before = len(report.failures)
        if src.is_dir() and not src.is_symlink():
            try:
                _transform_tree(transform, crypto, src, dst, report, workers)
            except OSError as e:
                report.failures.append((src, e))
        elif src.is_file() and not src.is_symlink():
            try:
                transform(crypto, src, dst)
            except (CryptoError, OSError) as e:
                report.failures.append((src, e))
            else:
                report.success += 1
        else:
            report.skips.append((src, "Unknown entry type"))
            continue

        if delete_originals and len(report.failures) == failed_before:
            try:
                delete_original(src, True)
            except CommandError as e:
                report.failures.append((src, e))

    report.failures.sort(key=lambda f: str(f[0]))
    report.skips.sort(key=lambda s: str(s[0]))
    report.elapsed = time.perf_counter() - start
    return report


def encrypt_paths(crypto: Crypto, paths: Sequence[Path], **kwargs) -> BatchReport:
    return transform_paths(encrypt_file, "encrypt", crypto, paths, **kwargs)


def decrypt_paths(crypto: Crypto, paths: Sequence[Path], **kwargs) -> BatchReport:
    return transform_paths(decrypt_file, "decrypt", crypto, paths, **kwargs)


def pack_directory(
    crypto: Crypto,
    dir_path: Path,
    output_path: Path | None = None,
    overwrite_output: bool = False,
    delete_originals: bool = False,
) -> float:
    """Pack dir_path into one encrypted file. Returns the elapsed seconds."""
    start = time.perf_counter()
    dir_path = Path(dir_path)
    output_path = Path(output_path) if output_path is not None else None

    checks([dir_path], output_path)
    if not dir_path.is_dir():
        raise CommandError(f"Only directories can be packed: {dir_path}")
    (pack_path,) = get_output_paths([dir_path], output_path, "pack")
    check_outputs([dir_path], [pack_path])
    overwrite([pack_path], overwrite_output)

    with TmpDir() as tmp_dir:
        tmp_pack_path = tmp_dir.unique_path()
        try:
            Pack(tmp_pack_path).create(dir_path)
        except (PackError, OSError, UnicodeError) as e:
            raise wrap("Failed to create pack", e) from e
        try:
            encrypt_file(crypto, tmp_pack_path, pack_path)
        except (CryptoError, OSError) as e:
            pack_path.unlink(missing_ok=True)
            raise wrap("Failed to encrypt pack", e) from e

    delete_original(dir_path, delete_originals)
    return time.perf_counter() - start


def unpack_pack(
    crypto: Crypto,
    pack_path: Path,
    output_path: Path | None = None,
    overwrite_output: bool = False,
    delete_originals: bool = False,
) -> float:
    """Decrypt and unpack a pack. Returns the elapsed seconds.

    Everything is staged in a temporary directory and moved into place only
    once the whole pack decrypted and unpacked.
    """
    start = time.perf_counter()
    pack_path = Path(pack_path)
    output_path = Path(output_path) if output_path is not None else None

    checks([pack_path], output_path)
    if not pack_path.is_file():
        raise CommandError(f"Not a pack file: {pack_path}")
    (output_dir,) = get_output_paths([pack_path], output_path, "unpack")
    check_outputs([pack_path], [output_dir])
    overwrite([output_dir], overwrite_output)

    with TmpDir() as tmp_dir:
        tmp_pack_path = tmp_dir.unique_path()
        staging = tmp_dir.unique_path()
        try:
            decrypt_file(crypto, pack_path, tmp_pack_path)
        except (CryptoError, OSError) as e:
            raise wrap("Failed to decrypt pack", e) from e
        try:
            Pack(tmp_pack_path).unpack(staging)
        except (PackError, OSError) as e:
            raise wrap("Failed to unpack pack", e) from e
        try:
            output_dir.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(staging), str(output_dir))
        except OSError as e:
            raise CommandError(f"Failed to move unpacked files to {output_dir}", e) from e

    delete_original(pack_path, delete_originals)
    return time.perf_counter() - start


def encrypt_text(crypto: Crypto, text: str) -> str:
    return base64.b64encode(crypto.encrypt(text.encode("utf-8"))).decode("ascii")


def decrypt_text(crypto: Crypto, encrypted: str) -> str:
    try:
        blob = base64.b64decode(encrypted.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise CommandError("Failed to decode base64", e) from e
    try:
        plain = crypto.decrypt(blob)
    except CryptoError as e:
        raise wrap("Failed to decrypt text", e) from e
    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CommandError("Decrypted bytes are not valid UTF-8 text", e) from e
