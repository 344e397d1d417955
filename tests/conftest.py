"""Shared fixtures: a throwaway git repository with a feature branch."""

import subprocess
from pathlib import Path

import pytest


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c", "user.name=Test",
            "-c", "user.email=test@example.com",
            "-c", "commit.gpgsign=false",
            *args,
        ],
        cwd=repo, capture_output=True, text=True, check=True,
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path, monkeypatch) -> Path:
    """Repository with ``main`` and a ``feature`` branch that changes three files.

    ``feature`` modifies ``app.py``, adds ``notes.md`` and adds a
    ``package-lock.json`` lock file.
    """
    repo = tmp_path / "repo"
    repo.mkdir()
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))

    _git(repo, "init", "-q")
    _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    (repo / "app.py").write_text("def main():\n    return 1\n", encoding="utf-8")
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "initial")

    _git(repo, "checkout", "-q", "-b", "feature")
    (repo / "app.py").write_text("def main():\n    return 2\n", encoding="utf-8")
    (repo / "notes.md").write_text("# Notes\n", encoding="utf-8")
    (repo / "package-lock.json").write_text("{}\n", encoding="utf-8")
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "feature work")

    monkeypatch.chdir(repo)
    return repo


@pytest.fixture
def git(git_repo):
    """Run git inside ``git_repo``: ``git("checkout", "-b", "topic")``."""
    return lambda *args: _git(git_repo, *args)
