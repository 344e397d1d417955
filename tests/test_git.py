"""Tests for copilot_review/git.py"""

import shutil

import pytest

from copilot_review.git import (
    BranchNotFoundError,
    GitError,
    NotARepositoryError,
    changed_files,
    filtered_diff,
    is_excluded,
    list_branches,
    numstat,
    repo_root,
    select_files,
    validate_branches,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


# ---------------------------------------------------------------------------
# select_files / is_excluded: pure filtering
# ---------------------------------------------------------------------------

def test_select_files_drops_lock_files():
    stats = [(3, 1, "src/app.py"), (10, 0, "yarn.lock"), (2, 2, "web/package-lock.json")]
    assert select_files(stats) == ["src/app.py"]


def test_select_files_drops_large_files():
    stats = [(600, 400, "ok.py"), (600, 401, "too_big.py")]
    assert select_files(stats, max_changes=1000) == ["ok.py"]


def test_select_files_custom_exclude():
    stats = [(1, 0, "poetry.lock"), (1, 0, "yarn.lock")]
    assert select_files(stats, exclude=["poetry.lock"]) == ["yarn.lock"]


def test_is_excluded_is_case_insensitive():
    assert is_excluded("frontend/Yarn.lock")
    assert not is_excluded("yarn.lock.py")


# ---------------------------------------------------------------------------
# Against a real repository
# ---------------------------------------------------------------------------

@requires_git
def test_repo_root(git_repo):
    assert repo_root().resolve() == git_repo.resolve()


@requires_git
def test_repo_root_outside_repository(tmp_path, monkeypatch):
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    outside = tmp_path / "plain"
    outside.mkdir()
    with pytest.raises(NotARepositoryError, match="git repository"):
        repo_root(cwd=outside)


@requires_git
def test_list_branches(git_repo):
    branches = list_branches()
    assert branches.local == ["feature", "main"]
    assert branches.remote == []
    assert branches.all == ["feature", "main"]


@requires_git
def test_validate_branches_ok(git_repo):
    validate_branches("main", "feature")


@requires_git
def test_validate_branches_unknown_base(git_repo):
    with pytest.raises(BranchNotFoundError, match="Base branch 'nope' does not exist"):
        validate_branches("nope", "HEAD")


@requires_git
def test_validate_branches_unknown_target(git_repo):
    with pytest.raises(BranchNotFoundError, match="Target branch 'nope' does not exist"):
        validate_branches("main", "nope")


@requires_git
def test_changed_files(git_repo):
    assert sorted(changed_files("main", "feature")) == ["app.py", "notes.md", "package-lock.json"]


@requires_git
def test_changed_files_no_changes(git_repo):
    assert changed_files("feature", "feature") == []


@requires_git
def test_changed_files_bad_ref_raises(git_repo):
    with pytest.raises(GitError, match="Failed to get changed files"):
        changed_files("nope", "feature")


@requires_git
def test_numstat(git_repo):
    stats = {path: (added, deleted) for added, deleted, path in numstat("main", "feature")}
    assert stats["app.py"] == (1, 1)
    assert stats["notes.md"] == (1, 0)


@requires_git
def test_filtered_diff_skips_lock_files(git_repo):
    diff = filtered_diff("main", "feature")
    assert "diff --git a/app.py b/app.py" in diff
    assert "+    return 2" in diff
    assert "notes.md" in diff
    assert "package-lock.json" not in diff


@requires_git
def test_filtered_diff_empty_when_everything_filtered(git_repo):
    assert filtered_diff("main", "feature", max_changes=0) == ""


# ---------------------------------------------------------------------------
# Encodings, renames and unusual file names
# ---------------------------------------------------------------------------

@requires_git
def test_filtered_diff_tolerates_non_utf8_content(git_repo, git):
    git("checkout", "-q", "-b", "latin", "main")
    (git_repo / "legacy.txt").write_bytes(b"caf\xe9 cr\xe8me\n")
    git("add", "legacy.txt")
    git("commit", "-q", "-m", "latin-1 file")

    diff = filtered_diff("main", "latin")

    assert "diff --git a/legacy.txt b/legacy.txt" in diff
    assert "+caf\ufffd cr\ufffdme" in diff


@requires_git
def test_renamed_file_is_diffed_under_new_name(git_repo, git):
    git("checkout", "-q", "-b", "rename", "main")
    git("mv", "app.py", "main_app.py")
    (git_repo / "main_app.py").write_text(
        "def main():\n    return 1\nVERSION = 3\n", encoding="utf-8",
    )
    git("add", "-A")
    git("commit", "-q", "-m", "rename")

    assert changed_files("main", "rename") == ["main_app.py"]
    assert numstat("main", "rename") == [(1, 0, "main_app.py")]
    diff = filtered_diff("main", "rename")
    assert "rename to main_app.py" in diff
    assert "+VERSION = 3" in diff


@requires_git
def test_non_ascii_file_name(git_repo, git):
    git("checkout", "-q", "-b", "accents", "main")
    (git_repo / "café.py").write_text("x = 1\n", encoding="utf-8")
    git("add", "café.py")
    git("commit", "-q", "-m", "accents")

    assert changed_files("main", "accents") == ["café.py"]
    assert numstat("main", "accents") == [(1, 0, "café.py")]
    assert "+x = 1" in filtered_diff("main", "accents")
