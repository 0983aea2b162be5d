#!/usr/bin/env python3
"""
fencryption: encrypt/decrypt files and directory trees with a passphrase.

Commands:
  encrypt <paths...>      Encrypt files; directories are mirrored file by file (<path>.enc)
  decrypt <paths...>      Reverse of encrypt (<name>.enc -> <name>.dec)
  pack <dir>              Pack a directory into one encrypted file (<dir>.pack)
  unpack <pack>           Decrypt and unpack a pack (<name>.pack -> <name>)
  encrypt-text <text>     Encrypt text, print base64
  decrypt-text <b64>      Decrypt text from encrypt-text

Encrypted file format:
  A sequence of chunks, each: nonce (12 bytes) || AES-256-GCM ciphertext || tag (16 bytes).
  Every chunk holds 128000 plaintext bytes except the last, which is shorter (possibly empty).

Key:
  SHA-256(passphrase) by default; argon2id with --kdf argon2id.
  Files must be decrypted with the KDF they were encrypted with.
"""
from __future__ import annotations

import sys

from fencryption.ui import log
from fencryption.ui.cli import build_parser
from fencryption.utils.errors import CommandError


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    log.setup(debug=args.debug)
    try:
        return args.func(args)
    except CommandError as e:
        log.error(e.format(debug=args.debug))
        return 1
    except KeyboardInterrupt:
        log.error("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
