"""Shared terminal styling constants."""
from colorama import Fore

# Status message styling constants
MESSAGE_COLORS = {
    "info": Fore.CYAN,
    "warning": Fore.YELLOW,
    "error": Fore.RED,
    "success": Fore.GREEN,
}

MESSAGE_PREFIXES = {
    "info": "[*]",
    "warning": "[~]",
    "error": "[!]",
    "success": "[+]",
}
