from fencryption.crypto.aead import AuthenticationFailure, IoFailure, MalformedInput
from fencryption.storage.pack import MalformedHeader, PackError, TruncatedContainer


class CommandError(Exception):
    """A failure reported to the user: a message plus the optional underlying cause."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def format(self, debug: bool = False) -> str:
        if debug and self.cause is not None:
            return f"{self.message}\n{self.cause!r}"
        return self.message


def describe_failure(exc: BaseException) -> str:
    """User-facing message for an error raised while processing one file."""
    if isinstance(exc, CommandError):
        return exc.message
    if isinstance(exc, AuthenticationFailure):
        return "Failed to decrypt (key must be wrong)"
    if isinstance(exc, MalformedInput):
        return "Failed to decrypt (not an encrypted file or truncated)"
    if isinstance(exc, TruncatedContainer):
        return "The pack is truncated"
    if isinstance(exc, MalformedHeader):
        return "The pack is corrupt"
    if isinstance(exc, PackError):
        return "Failed to process pack"
    if isinstance(exc, (IoFailure, OSError)):
        return "Failed to read or write file"
    return "Unexpected error"


def wrap(message: str, exc: BaseException) -> CommandError:
    return CommandError(f"{message}: {describe_failure(exc)}", exc)
