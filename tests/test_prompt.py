"""Tests for copilot_review/prompt.py"""

from pathlib import Path

from copilot_review.prompt import (
    DEFAULT_GUIDELINES,
    EXAMPLE_GUIDELINES_PATH,
    build_prompt,
    load_guidelines,
)


# ---------------------------------------------------------------------------
# load_guidelines()
# ---------------------------------------------------------------------------

def test_project_guidelines_win(tmp_path):
    (tmp_path / "co-pilot-coding-review-guidelines.md").write_text("# Ours\n", encoding="utf-8")
    assert load_guidelines(tmp_path) == "# Ours\n"


def test_configured_guidelines_path(tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "review.md").write_text("# Docs\n", encoding="utf-8")
    assert load_guidelines(tmp_path, "docs/review.md") == "# Docs\n"


def test_falls_back_to_bundled_example(tmp_path, capsys):
    text = load_guidelines(tmp_path)
    assert text == EXAMPLE_GUIDELINES_PATH.read_text(encoding="utf-8")
    assert "Custom guidelines file not found" in capsys.readouterr().err


def test_bundled_example_is_shipped():
    assert EXAMPLE_GUIDELINES_PATH.is_file()


def test_falls_back_to_builtin_default(tmp_path):
    missing = tmp_path / "no-example.md.example"
    assert load_guidelines(tmp_path, example_path=missing) == DEFAULT_GUIDELINES


# ---------------------------------------------------------------------------
# build_prompt()
# ---------------------------------------------------------------------------

def test_build_prompt_embeds_everything():
    temp = Path("/repo/code-review-temp-123.json")
    prompt = build_prompt(
        guidelines="# Rules\n- be nice",
        diff="diff --git a/app.py b/app.py\n+x = 1",
        changed_files=["app.py", "notes.md"],
        temp_path=temp,
        base="origin/main",
        target="feature",
    )
    assert "Create a JSON file at the path: /repo/code-review-temp-123.json" in prompt
    assert "- **Base Branch**: origin/main" in prompt
    assert "- **Target Branch**: feature" in prompt
    assert "## Guidelines to Follow:\n# Rules\n- be nice" in prompt
    assert "## Changed Files:\n- app.py\n- notes.md" in prompt
    assert "```diff\ndiff --git a/app.py b/app.py\n+x = 1\n```" in prompt
    assert '"positivePoints"' in prompt
    assert '"suggestedFix"' in prompt
    assert prompt.endswith("I will automatically detect it and process the review.")
