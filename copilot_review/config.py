"""Configuration loading and validation.

Usage:
    config = load()                              # defaults when .cp-review.yaml is absent
    config = load("ci/review.yaml")              # raises ConfigError if missing or invalid
    generate_template(".cp-review.yaml")         # writes example file to disk
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = ".cp-review.yaml"
DEFAULT_GUIDELINES_PATH = "co-pilot-coding-review-guidelines.md"

LOCK_FILES = (
    "yarn.lock",
    "package-lock.json",
    "pnpm-lock.yaml",
    "npm-shrinkwrap.json",
)

POSTERS = ("gh", "api")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    base_branch: str = "origin/main"
    target_branch: str = "HEAD"
    guidelines_path: str = DEFAULT_GUIDELINES_PATH
    max_file_changes: int = 1000
    exclude: list[str] = field(default_factory=lambda: list(LOCK_FILES))
    poll_interval: float = 1
    timeout: float = 300
    progress_every: float = 10
    clipboard_command: list[str] | None = None
    poster: str = "gh"
    api_url: str = "https://api.github.com"
    repository: str | None = None
    token: str | None = None
    source: Path | None = None


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str | None = None, base_dir: Path | None = None) -> Config:
    """Load and validate configuration from a YAML file.

    With no *config_path*, ``.cp-review.yaml`` in *base_dir* is read when it
    exists and built-in defaults are used otherwise. An explicit path must
    exist.

    Environment variables GITHUB_TOKEN and GH_TOKEN (in that order) override
    ``github.token``.

    Raises:
        ConfigError: if the file is missing (when named explicitly),
                     malformed, or contains invalid values.
    """
    base_dir = base_dir or Path.cwd()
    explicit = config_path is not None
    path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not path.is_absolute():
        path = base_dir / path

    raw: dict = {}
    if path.exists():
        try:
            with path.open(encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse '{path}': {exc}") from exc
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"'{path}' must be a YAML mapping at the top level.")
    elif explicit:
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `cp-review init` to generate a template."
        )

    config = _from_mapping(raw)
    config.source = path if path.exists() else None

    token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
    if token:
        config.token = token.strip()

    _validate(config)
    return config


def _section(raw: dict, name: str) -> dict:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping.")
    return value


def _get(section: dict, key: str, default):
    """Like dict.get, but an empty YAML value also falls back to *default*."""
    value = section.get(key)
    return default if value is None else value


def _from_mapping(raw: dict) -> Config:
    defaults = Config()
    branches = _section(raw, "branches")
    guidelines = _section(raw, "guidelines")
    diff = _section(raw, "diff")
    response = _section(raw, "response")
    clipboard = _section(raw, "clipboard")
    github = _section(raw, "github")

    command = clipboard.get("command")
    if isinstance(command, str):
        command = command.split()

    return Config(
        base_branch=str(branches.get("base") or defaults.base_branch),
        target_branch=str(branches.get("target") or defaults.target_branch),
        guidelines_path=str(guidelines.get("path") or defaults.guidelines_path),
        max_file_changes=_get(diff, "max_file_changes", defaults.max_file_changes),
        exclude=_get(diff, "exclude", defaults.exclude),
        poll_interval=_get(response, "poll_interval", defaults.poll_interval),
        timeout=_get(response, "timeout", defaults.timeout),
        progress_every=_get(response, "progress_every", defaults.progress_every),
        clipboard_command=command or None,
        poster=str(github.get("poster") or defaults.poster),
        api_url=str(github.get("api_url") or defaults.api_url).rstrip("/"),
        repository=github.get("repository") or None,
        token=github.get("token") or None,
    )


def _is_positive_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _validate(config: Config) -> None:
    """Raise ConfigError if any value is out of range."""
    errors: list[str] = []

    if not isinstance(config.max_file_changes, int) or config.max_file_changes < 0:
        errors.append("  - 'diff.max_file_changes' must be a non-negative integer")
    if not isinstance(config.exclude, list) or not all(isinstance(e, str) for e in config.exclude):
        errors.append("  - 'diff.exclude' must be a list of file names")
    for key in ("poll_interval", "timeout", "progress_every"):
        if not _is_positive_number(getattr(config, key)):
            errors.append(f"  - 'response.{key}' must be a positive number")
    if config.poster not in POSTERS:
        errors.append(
            f"  - 'github.poster' must be one of: {', '.join(POSTERS)} (got '{config.poster}')"
        )
    if config.repository is not None and "/" not in str(config.repository):
        errors.append("  - 'github.repository' must look like 'owner/name'")

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
branches:
  base: origin/main
  target: HEAD

guidelines:
  # Markdown file with your review standards, relative to the repository root
  path: co-pilot-coding-review-guidelines.md

diff:
  # Files with more added+deleted lines than this are left out of the prompt
  max_file_changes: 1000
  exclude:
    - yarn.lock
    - package-lock.json
    - pnpm-lock.yaml
    - npm-shrinkwrap.json

response:
  poll_interval: 1     # seconds between checks for the response file
  timeout: 300         # seconds before giving up
  progress_every: 10   # seconds between "still waiting" messages

clipboard:
  # Leave empty to auto-detect pbcopy / clip / wl-copy / xclip / xsel
  command:

github:
  poster: gh           # gh (GitHub CLI) or api (REST API with a token)
  api_url: https://api.github.com
  repository:          # owner/name, inferred from the origin remote when empty
  token:               # or set GITHUB_TOKEN / GH_TOKEN
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template .cp-review.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
