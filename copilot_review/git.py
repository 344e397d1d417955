"""Thin wrapper around the ``git`` command line.

Usage:
    root  = repo_root()                                  # raises NotARepositoryError
    validate_branches("origin/main", "HEAD")             # raises BranchNotFoundError
    files = changed_files("origin/main", "HEAD")
    diff  = filtered_diff("origin/main", "HEAD", max_changes=1000)

Every command runs with an argv list (no shell), so branch names and paths
are passed to git untouched.
"""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from copilot_review.config import LOCK_FILES


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class GitError(Exception):
    """Base exception for failing git invocations."""


class NotARepositoryError(GitError):
    """Raised when the working directory is not inside a git repository."""


class BranchNotFoundError(GitError):
    """Raised when a branch or ref cannot be resolved."""


# ---------------------------------------------------------------------------
# Low-level runner
# ---------------------------------------------------------------------------

def _git(*args: str, cwd: Path | None = None) -> str:
    """Run ``git <args>`` and return stdout.

    Output is decoded as UTF-8; undecodable bytes (for example a Latin-1
    source file in a diff) become U+FFFD instead of failing.

    Raises:
        GitError: git is not installed or exited with a non-zero status.
    """
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True, encoding="utf-8", errors="replace", cwd=cwd,
        )
    except FileNotFoundError as exc:
        raise GitError("git executable not found on PATH") from exc

    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        raise GitError(f"git {' '.join(args)} failed: {detail}")
    return result.stdout


def _lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

def repo_root(cwd: Path | None = None) -> Path:
    """Return the top-level directory of the enclosing repository."""
    try:
        return Path(_git("rev-parse", "--show-toplevel", cwd=cwd).strip())
    except GitError as exc:
        raise NotARepositoryError(
            "This command must be run from within a git repository."
        ) from exc


def remote_url(name: str = "origin", cwd: Path | None = None) -> str:
    return _git("remote", "get-url", name, cwd=cwd).strip()


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------

@dataclass
class Branches:
    local: list[str] = field(default_factory=list)
    remote: list[str] = field(default_factory=list)

    @property
    def all(self) -> list[str]:
        """Local and remote branches merged, de-duplicated and sorted."""
        return sorted(set(self.local) | set(self.remote))


def list_branches(cwd: Path | None = None) -> Branches:
    try:
        local = _lines(_git("branch", "--format=%(refname:short)", cwd=cwd))
        remote = _lines(_git("branch", "-r", "--format=%(refname:short)", cwd=cwd))
    except GitError as exc:
        raise GitError(f"Failed to get available branches: {exc}") from exc
    # origin/HEAD is an alias, not a branch
    remote = [b for b in remote if "HEAD" not in b]
    return Branches(local=local, remote=remote)


def ref_exists(ref: str, cwd: Path | None = None) -> bool:
    try:
        _git("rev-parse", "--verify", "--quiet", ref, cwd=cwd)
    except GitError:
        return False
    return True


def validate_branches(base: str, target: str, cwd: Path | None = None) -> None:
    """Raise BranchNotFoundError unless both refs resolve."""
    if not ref_exists(base, cwd=cwd):
        raise BranchNotFoundError(
            f"Base branch '{base}' does not exist or is not accessible."
        )
    if not ref_exists(target, cwd=cwd):
        raise BranchNotFoundError(
            f"Target branch '{target}' does not exist or is not accessible."
        )


# ---------------------------------------------------------------------------
# Diffs
# ---------------------------------------------------------------------------

def changed_files(base: str, target: str, cwd: Path | None = None) -> list[str]:
    """Files changed on *target* since it diverged from *base*."""
    try:
        output = _git("diff", "-M", "--name-only", "-z", f"{base}...{target}", cwd=cwd)
    except GitError as exc:
        raise GitError(
            f"Failed to get changed files between {base} and {target}: {exc}"
        ) from exc
    return [path for path in output.split("\0") if path]


def _count(value: str) -> int:
    # Binary files report "-" for both columns
    try:
        return int(value)
    except ValueError:
        return 0


def _numstat_records(base: str, target: str, cwd: Path | None = None):
    """Yield ``(added, deleted, path, old_path)`` from ``git diff --numstat -z``.

    Paths come back unquoted. A rename is reported as an empty path field
    followed by the old and the new name; *old_path* equals *path* otherwise.
    """
    output = _git("diff", "-M", "--numstat", "-z", f"{base}...{target}", cwd=cwd)
    tokens = iter(output.split("\0"))
    for record in tokens:
        parts = record.split("\t", 2)
        if len(parts) != 3:
            continue
        added, deleted, path = parts
        old_path = path
        if not path:
            old_path, path = next(tokens, ""), next(tokens, "")
        yield _count(added), _count(deleted), path, old_path


def numstat(base: str, target: str, cwd: Path | None = None) -> list[tuple[int, int, str]]:
    """Return ``(added, deleted, path)`` for every changed file.

    Renamed files are listed under their new path.
    """
    return [
        (added, deleted, path)
        for added, deleted, path, _ in _numstat_records(base, target, cwd=cwd)
    ]


def is_excluded(path: str, exclude=LOCK_FILES) -> bool:
    """True when the file name matches an excluded name (case-insensitive)."""
    name = path.rsplit("/", 1)[-1].lower()
    return name in {e.lower() for e in exclude}


def select_files(
    stats: list[tuple[int, int, str]],
    max_changes: int = 1000,
    exclude=LOCK_FILES,
) -> list[str]:
    """Keep files that are not excluded and have at most *max_changes* lines changed."""
    return [
        path for added, deleted, path in stats
        if not is_excluded(path, exclude) and added + deleted <= max_changes
    ]


def filtered_diff(
    base: str,
    target: str,
    max_changes: int = 1000,
    exclude=LOCK_FILES,
    cwd: Path | None = None,
) -> str:
    """Diff between *base* and *target*, restricted to reviewable files.

    Lock files and files with more than *max_changes* added+deleted lines are
    left out. Returns an empty string when no file qualifies. A renamed file
    is diffed together with its old path so git still pairs the two.
    """
    try:
        records = list(_numstat_records(base, target, cwd=cwd))
        files = set(select_files(
            [(added, deleted, path) for added, deleted, path, _ in records],
            max_changes, exclude,
        ))
        if not files:
            return ""
        pathspecs: list[str] = []
        for _, _, path, old_path in records:
            if path in files:
                pathspecs.extend(dict.fromkeys((old_path, path)))
        return _git(
            "--literal-pathspecs", "diff", "-M", f"{base}...{target}", "--", *pathspecs,
            cwd=cwd,
        )
    except GitError as exc:
        raise GitError(f"Failed to get diff between {base} and {target}: {exc}") from exc
