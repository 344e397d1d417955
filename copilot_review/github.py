"""Posting the review back to the pull request.

Two ways to post:

* ``post_pr_comment`` shells out to the GitHub CLI (``gh pr comment``),
  which uses whatever authentication ``gh`` already has.
* ``GitHubClient`` talks to the REST API directly with a token, for
  machines without ``gh``.

Usage:
    url = post_pr_comment(body)                         # PR of the current branch
    client = GitHubClient("https://api.github.com", token="ghp_xxx")
    url = client.post_issue_comment("owner/repo", 42, body)
"""

import re
import subprocess
from typing import Any

import requests


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class PostCommentError(Exception):
    """Base exception for failures while posting the review."""


class GitHubClientError(PostCommentError):
    """Base exception for REST API errors."""


class AuthenticationError(GitHubClientError):
    """Raised on HTTP 401: invalid or expired token."""


class NotFoundError(GitHubClientError):
    """Raised on HTTP 404: repository or pull request not found."""


class NetworkError(GitHubClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# GitHub CLI
# ---------------------------------------------------------------------------

def post_pr_comment(body: str, pr: str | None = None) -> str:
    """Post *body* as a comment with ``gh pr comment`` and return gh's output.

    Without *pr*, gh picks the pull request of the current branch.

    Raises:
        PostCommentError: gh is missing or exited with a non-zero status.
    """
    command = ["gh", "pr", "comment"]
    if pr:
        command.append(str(pr))
    command += ["--body-file", "-"]

    try:
        result = subprocess.run(command, input=body, capture_output=True,
                                encoding="utf-8", errors="replace")
    except FileNotFoundError as exc:
        raise PostCommentError(
            "Failed to post PR comment: GitHub CLI (gh) not found on PATH"
        ) from exc

    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        raise PostCommentError(f"Failed to post PR comment: {detail}")
    return result.stdout.strip()


def current_pr_number() -> str:
    """Number of the pull request for the current branch, via ``gh pr view``."""
    try:
        result = subprocess.run(
            ["gh", "pr", "view", "--json", "number", "--jq", ".number"],
            capture_output=True, encoding="utf-8", errors="replace",
        )
    except FileNotFoundError as exc:
        raise PostCommentError(
            "Cannot determine the pull request without gh; pass --pr"
        ) from exc
    number = result.stdout.strip()
    if result.returncode != 0 or not number:
        detail = result.stderr.strip() or "no pull request for the current branch"
        raise PostCommentError(f"Cannot determine the pull request: {detail}")
    return number


# ---------------------------------------------------------------------------
# Remote URL parsing
# ---------------------------------------------------------------------------

_REMOTE_RE = re.compile(
    r"^(?:https?://(?:[^@/]+@)?[^/]+/|ssh://git@[^/]+/|git@[^:]+:)"
    r"(?P<repo>[^/]+/[^/]+?)(?:\.git)?/?$"
)


def parse_repository(remote: str) -> str:
    """Return ``owner/name`` from an https or ssh remote URL.

    Raises:
        ValueError: the URL does not look like a hosted repository.
    """
    match = _REMOTE_RE.match(remote.strip())
    if not match:
        raise ValueError(f"Cannot infer repository from remote URL '{remote}'")
    return match.group("repo")


# ---------------------------------------------------------------------------
# REST client
# ---------------------------------------------------------------------------

class GitHubClient:
    """Thin wrapper around the GitHub REST API."""

    def __init__(self, api_url: str, token: str, timeout: int = 30) -> None:
        self.base_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def post_issue_comment(self, repository: str, number: int | str, body: str) -> str:
        """Create a comment on pull request *number* and return its URL.

        Pull request conversation comments live under the issues endpoint.

        Raises:
            AuthenticationError: HTTP 401
            NotFoundError:       HTTP 404
            GitHubClientError:   Any other non-2xx response
            NetworkError:        Timeout or connection failure
        """
        data = self._request(
            "POST", f"/repos/{repository}/issues/{number}/comments", {"body": body},
        )
        return data.get("html_url", "")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(self, method: str, endpoint: str, payload: dict[str, Any]) -> dict:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.request(method, url, json=payload, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach GitHub at '{self.base_url}'"
            ) from exc

        if response.status_code == 401:
            raise AuthenticationError(
                "Authentication failed; check that your token is valid and not expired."
            )
        if response.status_code == 404:
            raise NotFoundError(
                f"Resource not found: {url}"
            )
        if not response.ok:
            raise GitHubClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        return response.json()
