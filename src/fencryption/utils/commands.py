import argparse

from pathlib import Path

from fencryption.crypto.aead import Crypto
from fencryption.ui import log
from fencryption.utils.core import (
    decrypt_paths,
    decrypt_text,
    encrypt_paths,
    encrypt_text,
    pack_directory,
    unpack_pack,
)
from fencryption.utils.dataModels import BatchReport
from fencryption.utils.errors import CommandError, describe_failure
from fencryption.utils.helper import human_duration


def get_crypto(args: argparse.Namespace, confirm: bool) -> Crypto:
    key = args.key if args.key is not None else log.prompt_key(confirm=confirm)
    if not key:
        raise CommandError("The key cannot be less than 1 character long")
    return Crypto.from_passphrase(key, kdf=args.kdf)


def _output_path(args: argparse.Namespace) -> Path | None:
    return Path(args.output_path) if args.output_path else None


def report_batch(report: BatchReport, verb: str) -> int:
    if report.success:
        log.success(f"{report.success} {'file' if report.success == 1 else 'files'} {verb} successfully")
    if report.failures:
        lines = [f"{len(report.failures)} {'file' if len(report.failures) == 1 else 'files'} failed:"]
        for path, exc in report.failures:
            lines.append(f"- {path}: {describe_failure(exc)}")
            if log.debug_enabled():
                lines.append(f"    {exc!r}")
        log.error("\n".join(lines))
    if report.skips:
        lines = [f"{len(report.skips)} {'entry' if len(report.skips) == 1 else 'entries'} skipped:"]
        lines += [f"- {path}: {reason}" for path, reason in report.skips]
        log.warning("\n".join(lines))
    log.info(f"{human_duration(report.elapsed)} elapsed")
    return 0 if report.ok else 1


def cmd_encrypt(args: argparse.Namespace) -> int:
    crypto = get_crypto(args, confirm=True)
    log.info("Encrypting...")
    report = encrypt_paths(
        crypto,
        [Path(p) for p in args.paths],
        output_path=_output_path(args),
        overwrite_output=args.overwrite,
        delete_originals=args.delete_original,
    )
    return report_batch(report, "encrypted")


def cmd_decrypt(args: argparse.Namespace) -> int:
    crypto = get_crypto(args, confirm=False)
    log.info("Decrypting...")
    report = decrypt_paths(
        crypto,
        [Path(p) for p in args.paths],
        output_path=_output_path(args),
        overwrite_output=args.overwrite,
        delete_originals=args.delete_original,
    )
    return report_batch(report, "decrypted")


def cmd_pack(args: argparse.Namespace) -> int:
    crypto = get_crypto(args, confirm=True)
    log.info("Packing...")
    elapsed = pack_directory(
        crypto,
        Path(args.path),
        output_path=_output_path(args),
        overwrite_output=args.overwrite,
        delete_originals=args.delete_original,
    )
    log.success(f"Packed {args.path} ({human_duration(elapsed)} elapsed)")
    return 0


def cmd_unpack(args: argparse.Namespace) -> int:
    crypto = get_crypto(args, confirm=False)
    log.info("Unpacking...")
    elapsed = unpack_pack(
        crypto,
        Path(args.path),
        output_path=_output_path(args),
        overwrite_output=args.overwrite,
        delete_originals=args.delete_original,
    )
    log.success(f"Unpacked {args.path} ({human_duration(elapsed)} elapsed)")
    return 0


def cmd_encrypt_text(args: argparse.Namespace) -> int:
    crypto = get_crypto(args, confirm=True)
    log.output(encrypt_text(crypto, args.text))
    return 0


def cmd_decrypt_text(args: argparse.Namespace) -> int:
    crypto = get_crypto(args, confirm=False)
    log.output(decrypt_text(crypto, args.text))
    return 0
