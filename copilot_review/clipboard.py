"""Copy text to the system clipboard through the platform's clipboard tool."""

import shutil
import subprocess
import sys


class ClipboardError(Exception):
    """Raised when no clipboard tool is available or it fails."""


# Tried in order; the first one found on PATH wins
_CANDIDATES = {
    "darwin": [["pbcopy"]],
    "win32": [["clip"]],
    "linux": [
        ["wl-copy"],
        ["xclip", "-selection", "clipboard"],
        ["xsel", "--clipboard", "--input"],
    ],
}


def detect_command(platform: str | None = None) -> list[str] | None:
    """Return the clipboard command for *platform*, or None if none is installed."""
    platform = platform or sys.platform
    key = "linux" if platform.startswith("linux") else platform
    for command in _CANDIDATES.get(key, []):
        if shutil.which(command[0]) is not None:
            return command
    return None


def copy_to_clipboard(text: str, command: list[str] | None = None) -> list[str]:
    """Put *text* on the clipboard and return the command that was used.

    Raises:
        ClipboardError: no clipboard tool found, or the tool failed.
    """
    command = command or detect_command()
    if not command:
        raise ClipboardError(
            "No clipboard tool found (install pbcopy, wl-copy, xclip or xsel, "
            "or set 'clipboard.command' in the config file)"
        )
    try:
        subprocess.run(command, input=text, encoding="utf-8", errors="replace",
                       check=True, capture_output=True)
    except FileNotFoundError as exc:
        raise ClipboardError(f"Clipboard command not found: {command[0]}") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
        raise ClipboardError(f"Failed to copy to clipboard with {command[0]}: {detail}") from exc
    return command
