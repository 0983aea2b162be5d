"""Terminal output. The only place that prints."""
import getpass
import sys

import colorama
from colorama import Style

from fencryption.ui.constants import MESSAGE_COLORS, MESSAGE_PREFIXES
from fencryption.utils.errors import CommandError

_state = {"debug": False, "color": False}


def setup(debug: bool = False) -> None:
    colorama.just_fix_windows_console()
    _state["debug"] = debug
    _state["color"] = sys.stdout.isatty()


def debug_enabled() -> bool:
    return _state["debug"]


def with_start_line(text: str, line_start: str) -> str:
    """Prefix every line of text with line_start."""
    return "\n".join(f"{line_start} {line}" for line in text.split("\n"))


def format_message(message: str, kind: str) -> str:
    prefix = MESSAGE_PREFIXES[kind]
    if _state["color"]:
        prefix = f"{MESSAGE_COLORS[kind]}{prefix}{Style.RESET_ALL}"
    return with_start_line(message, prefix)


def output(text: str) -> None:
    """Raw command output, without prefix or color."""
    print(text)


def info(message: str) -> None:
    print(format_message(message, "info"))


def success(message: str) -> None:
    print(format_message(message, "success"))


def warning(message: str) -> None:
    print(format_message(message, "warning"))


def error(message: str) -> None:
    print(format_message(message, "error"), file=sys.stderr)


def prompt_key(confirm: bool = False) -> str:
    key = getpass.getpass(format_message("Enter key: ", "info"))
    if confirm:
        confirm_key = getpass.getpass(format_message("Confirm key: ", "info"))
        if key != confirm_key:
            raise CommandError("The two keys don't match")
    if not key:
        raise CommandError("The key cannot be less than 1 character long")
    return key
