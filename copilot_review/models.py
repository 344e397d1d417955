"""Data models for the review document written by the chat assistant.

Contains dataclasses used to parse and validate the JSON response:
    - ReviewIssue
    - Review
"""

import json
from dataclasses import dataclass, field
from typing import Any


class ReviewFormatError(Exception):
    """Raised when the response is not valid JSON of the expected shape."""


def _text(value: Any, name: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    raise ReviewFormatError(f"'{name}' must be a string, got {type(value).__name__}")


def _text_list(value: Any, name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ReviewFormatError(f"'{name}' must be a list, got {type(value).__name__}")
    return [_text(item, f"{name}[{i}]") for i, item in enumerate(value)]


@dataclass
class ReviewIssue:
    file: str
    description: str
    line: str = ""
    suggested_fix: str = ""

    @classmethod
    def from_dict(cls, raw: Any, index: int = 0) -> "ReviewIssue":
        name = f"issues[{index}]"
        if not isinstance(raw, dict):
            raise ReviewFormatError(f"'{name}' must be an object")
        return cls(
            file=_text(raw.get("file"), f"{name}.file"),
            description=_text(raw.get("description"), f"{name}.description"),
            line=_text(raw.get("line"), f"{name}.line"),
            suggested_fix=_text(raw.get("suggestedFix"), f"{name}.suggestedFix"),
        )


@dataclass
class Review:
    summary: str
    positive_points: list[str] = field(default_factory=list)
    issues: list[ReviewIssue] = field(default_factory=list)
    additional_notes: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "Review":
        if not isinstance(raw, dict):
            raise ReviewFormatError("The review must be a JSON object")
        issues = raw.get("issues")
        if issues is None:
            issues = []
        if not isinstance(issues, list):
            raise ReviewFormatError(f"'issues' must be a list, got {type(issues).__name__}")
        return cls(
            summary=_text(raw.get("summary"), "summary"),
            positive_points=_text_list(raw.get("positivePoints"), "positivePoints"),
            issues=[ReviewIssue.from_dict(item, i) for i, item in enumerate(issues)],
            additional_notes=_text_list(raw.get("additionalNotes"), "additionalNotes"),
        )


def parse_review(text: str) -> Review:
    """Parse the assistant's JSON response into a Review.

    Raises:
        ReviewFormatError: invalid JSON or unexpected shape. The message
                           includes the raw response.
    """
    try:
        return Review.from_dict(json.loads(text))
    except (json.JSONDecodeError, ReviewFormatError) as exc:
        raise ReviewFormatError(
            f"Failed to parse JSON response: {exc}\nResponse: {text}"
        ) from exc
