import argparse

from fencryption.utils.commands import (
    cmd_decrypt,
    cmd_decrypt_text,
    cmd_encrypt,
    cmd_encrypt_text,
    cmd_pack,
    cmd_unpack,
)
from fencryption.utils.dataModels import KDF_CHOICES, KDF_SHA256


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("-k", "--key", help="Key (prompted for when omitted)")
    p.add_argument("--kdf", choices=KDF_CHOICES, default=KDF_SHA256,
                   help="Key derivation: fast sha256 (default) or slow argon2id; decrypt with the same one")
    p.add_argument("-D", "--debug", action="store_true", help="Show the underlying cause of failures")


def _add_output_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("-o", "--output-path", help="Custom output path (only with a single input path)")
    p.add_argument("-O", "--overwrite", action="store_true", help="Overwrite the output if it already exists")
    p.add_argument("-d", "--delete-original", action="store_true",
                   help="Delete the original after it was processed successfully")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fencryption", description="Encrypt and decrypt files and directories")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_enc = sub.add_parser("encrypt", help="Encrypt files and directories")
    p_enc.add_argument("paths", nargs="+", help="Files/directories to encrypt")
    _add_output_flags(p_enc)
    _add_common(p_enc)
    p_enc.set_defaults(func=cmd_encrypt)

    p_dec = sub.add_parser("decrypt", help="Decrypt files and directories")
    p_dec.add_argument("paths", nargs="+", help="Files/directories to decrypt")
    _add_output_flags(p_dec)
    _add_common(p_dec)
    p_dec.set_defaults(func=cmd_decrypt)

    p_pack = sub.add_parser("pack", help="Pack a directory into one encrypted file")
    p_pack.add_argument("path", help="Directory to pack")
    _add_output_flags(p_pack)
    _add_common(p_pack)
    p_pack.set_defaults(func=cmd_pack)

    p_unpack = sub.add_parser("unpack", help="Decrypt a pack back into a directory")
    p_unpack.add_argument("path", help="Pack file")
    _add_output_flags(p_unpack)
    _add_common(p_unpack)
    p_unpack.set_defaults(func=cmd_unpack)

    p_etext = sub.add_parser("encrypt-text", help="Encrypt text (prints base64)")
    p_etext.add_argument("text", help="Text to encrypt")
    _add_common(p_etext)
    p_etext.set_defaults(func=cmd_encrypt_text)

    p_dtext = sub.add_parser("decrypt-text", help="Decrypt base64 text from encrypt-text")
    p_dtext.add_argument("text", help="Base64 encrypted text")
    _add_common(p_dtext)
    p_dtext.set_defaults(func=cmd_decrypt_text)

    return p
