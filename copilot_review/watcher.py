"""Wait for the response file and clean up temp files.

The chat assistant writes its review to ``code-review-temp-<millis>.json``
in the repository root. ``wait_for_file`` polls for it, reads it once it has
content, and deletes it. The file is also removed on timeout, and
``cleanup_temp_files`` sweeps up leftovers after a failure.
"""

import time
from pathlib import Path
from typing import Callable

import click

TEMP_PREFIX = "code-review-temp-"
TEMP_SUFFIX = ".json"


class ResponseTimeoutError(Exception):
    """Raised when the response file does not show up in time."""


def temp_response_path(root: Path) -> Path:
    millis = int(time.time() * 1000)
    return root / f"{TEMP_PREFIX}{millis}{TEMP_SUFFIX}"


def _remove(path: Path, echo: Callable[..., None]) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        echo(f"Warning: Could not clean up temp file: {exc}", err=True)


def _format_seconds(seconds: float) -> str:
    return f"{seconds:g}"


def wait_for_file(
    path: Path,
    interval: float = 1,
    timeout: float = 300,
    progress_every: float = 10,
    echo: Callable[..., None] = click.echo,
    sleep: Callable[[float], None] | None = None,
) -> str:
    """Block until *path* holds non-blank content, then return it stripped.

    The file is checked immediately and then every *interval* seconds; elapsed
    time is counted in intervals. The file is deleted after a successful read
    and on timeout.

    Raises:
        ResponseTimeoutError: *timeout* seconds elapsed without content.
    """
    sleep = sleep or time.sleep
    echo(f"\nWaiting for file to be created: {path}")
    elapsed = 0.0
    next_progress = progress_every

    while True:
        if path.exists():
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                echo("Warning: File exists but couldn't read it yet, retrying...")
            else:
                if content.strip():
                    echo("File detected and content found!")
                    _remove(path, echo)
                    return content.strip()

        elapsed += interval
        if elapsed >= timeout:
            _remove(path, echo)
            raise ResponseTimeoutError(
                f"Timeout: File was not created within {_format_seconds(timeout)} seconds"
            )

        if elapsed >= next_progress:
            echo(f"Still waiting... ({_format_seconds(elapsed)}s elapsed)")
            next_progress += progress_every

        sleep(interval)


def cleanup_temp_files(root: Path, echo: Callable[..., None] = click.echo) -> list[str]:
    """Remove stray response files in *root* and return the removed names."""
    removed: list[str] = []
    try:
        candidates = sorted(root.glob(f"{TEMP_PREFIX}*{TEMP_SUFFIX}"))
    except OSError:
        echo("Warning: Could not clean up temp files automatically", err=True)
        return removed

    for path in candidates:
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            echo(f"Warning: Could not remove {path.name}: {exc}", err=True)
            continue
        echo(f"Cleaned up temp file: {path.name}", err=True)
        removed.append(path.name)
    return removed
