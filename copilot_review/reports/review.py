"""Markdown rendering of a parsed review.

Functions:
    format_review(review)                          -> str
    build_pr_comment(formatted, base, target)      -> str

Output only depends on the input, so the same review always renders to the
same comment.
"""

from copilot_review.models import Review

FOOTER = (
    "*This review was generated using AI assistance based on the project's "
    "custom coding guidelines.*"
)


def _bullets(items: list[str]) -> list[str]:
    return [f"- {item}" for item in items]


def format_review(review: Review) -> str:
    """Render *review* as the markdown body of the PR comment."""
    lines: list[str] = ["## 📋 Code Review Summary", f"- {review.summary}", ""]

    if review.positive_points:
        lines.append("## ✅ Positive Points")
        lines.extend(_bullets(review.positive_points))
        lines.append("")

    if review.issues:
        lines.append("## ⚠️ Issues & Suggestions")
        for issue in review.issues:
            lines.append(f"### File: {issue.file}")
            if issue.line:
                lines.append(f"**Line:** {issue.line}")
            lines.append(f"- {issue.description}")
            if issue.suggested_fix:
                lines.append(f"- **Suggested fix:** {issue.suggested_fix}")
            lines.append("")

    if review.additional_notes:
        lines.append("## 📝 Additional Notes")
        lines.extend(_bullets(review.additional_notes))
        lines.append("")

    return "\n".join(lines)


def build_pr_comment(formatted: str, base: str, target: str) -> str:
    """Wrap a formatted review with the comment header and footer."""
    return (
        "### 🤖 AI Code Review\n\n"
        f"**Branch Comparison:** `{target}` vs `{base}`\n\n"
        f"{formatted}\n\n"
        "---\n"
        f"{FOOTER}"
    )
