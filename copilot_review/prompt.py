"""Guidelines lookup and prompt assembly.

Functions:
    load_guidelines(root, path)                                  -> str
    build_prompt(guidelines, diff, changed_files, temp_path,
                 base, target)                                   -> str
"""

from pathlib import Path

import click

from copilot_review.config import DEFAULT_GUIDELINES_PATH

EXAMPLE_GUIDELINES_PATH = (
    Path(__file__).resolve().parent / "data" / "custom-coding-review-guidelines.md.example"
)

DEFAULT_GUIDELINES = """\
# Basic Code Review Guidelines

## General Principles
- Write clean, readable, and maintainable code
- Follow consistent naming conventions
- Use meaningful variable and function names
- Keep functions small and focused

## Error Handling
- Always handle errors appropriately
- Use try-catch blocks for async operations
- Provide meaningful error messages

## Security
- Validate all user inputs
- Avoid hardcoded secrets
- Use secure coding practices

## Documentation
- Add comments for complex logic
- Document function parameters and return values
- Keep documentation up to date with code changes"""

RESPONSE_SCHEMA = """\
{
  "summary": "Brief overview of changes",
  "positivePoints": [
    "What's done well",
    "Another positive point"
  ],
  "issues": [
    {
      "file": "filename",
      "line": "line number or range",
      "description": "Issue description",
      "suggestedFix": "Code example or fix description"
    }
  ],
  "additionalNotes": [
    "Any other observations",
    "Recommendations"
  ]
}"""


# ---------------------------------------------------------------------------
# Guidelines
# ---------------------------------------------------------------------------

def load_guidelines(
    root: Path,
    path: str = DEFAULT_GUIDELINES_PATH,
    example_path: Path = EXAMPLE_GUIDELINES_PATH,
) -> str:
    """Return the project's review guidelines.

    Looks for *path* under *root* first. When it is missing a warning is
    printed and the bundled example is used instead; if that is missing too,
    ``DEFAULT_GUIDELINES`` is returned.
    """
    guidelines_path = (root / path).resolve()
    if guidelines_path.is_file():
        return guidelines_path.read_text(encoding="utf-8", errors="replace")

    click.echo("Warning: Custom guidelines file not found!", err=True)
    click.echo(f"   Expected: {guidelines_path}", err=True)
    click.echo("   Using example guidelines instead...", err=True)
    click.echo("   Create your own guidelines file for customized reviews.\n", err=True)

    if example_path.is_file():
        return example_path.read_text(encoding="utf-8")
    return DEFAULT_GUIDELINES


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------

def build_prompt(
    guidelines: str,
    diff: str,
    changed_files: list[str],
    temp_path: Path,
    base: str,
    target: str,
) -> str:
    """Assemble the message the user pastes into the chat interface."""
    file_list = "\n".join(f"- {f}" for f in changed_files)
    return f"""Review the following code changes based on the provided guidelines.

IMPORTANT: Create a JSON file at the path: {temp_path}

The JSON file should contain your review in the exact format below. Do not include any markdown, explanations, or text outside the JSON structure in the file.IF YOU DO NOT FOLLOW THIS INSTRUCTION, I WILL NOT BE ABLE TO PROCESS YOUR REVIEW AND IT WILL BE FAILED.


## Branch Comparison:
- **Base Branch**: {base}
- **Target Branch**: {target}

## Guidelines to Follow:
{guidelines}

## Changed Files:
{file_list}

## Git Diff:
```diff
{diff}
```

Please create the file with ONLY this JSON structure:
{RESPONSE_SCHEMA}

Once you've created the file, I will automatically detect it and process the review."""
