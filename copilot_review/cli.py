"""CLI entry point: command definitions using Click.

Commands:
    (default)     Run a review: diff -> prompt on clipboard -> wait -> post
    init          Generate a template config file
"""

import functools
import os
import sys
from pathlib import Path

import click

from copilot_review import __version__

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

EXAMPLES = """\b
Examples:
  cp-review                           # Compare HEAD with origin/main
  cp-review -b main -t feature-branch # Compare feature-branch with main
  cp-review --base origin/develop     # Compare HEAD with origin/develop
  cp-review -i                        # Interactive branch selection
  cp-review init                      # Write a template .cp-review.yaml
"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _verbose(ctx: click.Context, message: str) -> None:
    if ctx.obj["verbose"]:
        click.echo(f"[verbose] {message}", err=True)


def _cleanup(ctx: click.Context) -> None:
    """Best-effort removal of response files left in the repository root."""
    from copilot_review.watcher import cleanup_temp_files

    root = ctx.obj.get("root")
    if root is not None:
        cleanup_temp_files(root)


def _handle_review_errors(func):
    """Decorator that catches review errors, cleans up and exits non-zero."""

    @functools.wraps(func)
    def wrapper(ctx: click.Context, *args, **kwargs):
        from copilot_review.clipboard import ClipboardError
        from copilot_review.config import ConfigError
        from copilot_review.git import GitError
        from copilot_review.github import PostCommentError
        from copilot_review.models import ReviewFormatError
        from copilot_review.watcher import ResponseTimeoutError

        try:
            return func(ctx, *args, **kwargs)
        except KeyboardInterrupt:
            click.echo("\nAborted.", err=True)
            _cleanup(ctx)
            sys.exit(130)
        except (
            ConfigError,
            GitError,
            ClipboardError,
            ResponseTimeoutError,
            ReviewFormatError,
            PostCommentError,
        ) as exc:
            _cleanup(ctx)
            click.echo(f"Error during code review: {exc}", err=True)
            sys.exit(1)
        except (click.ClickException, click.exceptions.Abort):
            _cleanup(ctx)
            raise
        except Exception as exc:
            _cleanup(ctx)
            click.echo(f"Error during code review: {exc}", err=True)
            _verbose(ctx, f"{type(exc).__name__} while running the review")
            sys.exit(1)

    return wrapper


def _enter_repository(ctx: click.Context) -> Path:
    """Change into the repository root. Exits when not in a repository."""
    from copilot_review.git import NotARepositoryError, repo_root

    try:
        root = repo_root()
    except NotARepositoryError:
        click.echo("Error: This command must be run from within a git repository.", err=True)
        click.echo("Make sure you are in a git repository and try again.", err=True)
        sys.exit(1)

    os.chdir(root)
    ctx.obj["root"] = root
    _verbose(ctx, f"Repository root: {root}")
    return root


def _pick_branch(label: str, default: str, branches: list[str]) -> str:
    answer = click.prompt(label, default=default).strip()
    if answer.isdigit() and 1 <= int(answer) <= len(branches):
        return branches[int(answer) - 1]
    return answer


def _select_branches(base: str, target: str) -> tuple[str, str]:
    """List branches and ask for base and target (by number or name)."""
    from copilot_review.git import list_branches

    branches = list_branches().all

    click.echo("\nAvailable branches:")
    for index, branch in enumerate(branches, start=1):
        click.echo(f"  {index}. {branch}")

    click.echo("\nYou can also use:")
    click.echo("  - HEAD (current branch)")
    click.echo("  - origin/main, origin/develop, etc.")
    click.echo("  - Any valid git reference\n")

    base = _pick_branch("Base branch", base, branches)
    target = _pick_branch("Target branch", target, branches)
    return base, target


def _post(ctx: click.Context, config, body: str) -> str:
    """Post *body* with the configured poster and return the comment URL."""
    from copilot_review.config import ConfigError
    from copilot_review.git import remote_url
    from copilot_review.github import (
        GitHubClient,
        current_pr_number,
        parse_repository,
        post_pr_comment,
    )

    pr = ctx.obj["pr"]
    if config.poster == "gh":
        _verbose(ctx, f"Posting with gh to PR {pr or '(current branch)'}")
        return post_pr_comment(body, pr)

    if not config.token:
        raise ConfigError(
            "The 'api' poster needs a token: set 'github.token' or GITHUB_TOKEN"
        )
    repository = config.repository
    if not repository:
        try:
            repository = parse_repository(remote_url())
        except ValueError as exc:
            raise ConfigError(f"{exc}; set 'github.repository'") from exc
    number = pr or current_pr_number()
    _verbose(ctx, f"Posting with the REST API to {repository}#{number}")
    client = GitHubClient(config.api_url, config.token)
    return client.post_issue_comment(repository, number, body)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group(
    name="cp-review",
    invoke_without_command=True,
    context_settings=CONTEXT_SETTINGS,
    epilog=EXAMPLES,
)
@click.option("-b", "--base", default=None,
              help="Base branch to compare against (default: origin/main).")
@click.option("-t", "--target", default=None,
              help="Target branch to compare (default: HEAD).")
@click.option("-i", "--interactive", is_flag=True, default=False,
              help="Interactive mode to select branches.")
@click.option("-p", "--pr", default=None,
              help="Pull request number to comment on (default: PR of the current branch).")
@click.option("--config", "config_path", default=None,
              help="Path to the configuration file (default: .cp-review.yaml in the repo root).")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Seconds to wait for the response file (default: 300).")
@click.option("--dry-run", is_flag=True, default=False,
              help="Print the PR comment instead of posting it.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="cp-review")
@click.pass_context
def cli(ctx: click.Context, base: str | None, target: str | None, interactive: bool,
        pr: str | None, config_path: str | None, timeout: float | None,
        dry_run: bool, verbose: bool) -> None:
    """co-pilot-review - AI-assisted code review tool

    Collects the diff between two branches, copies a review prompt to the
    clipboard for your AI chat, waits for the JSON review it writes, and posts
    it as a comment on the pull request.
    """
    ctx.ensure_object(dict)
    ctx.obj["base"] = base
    ctx.obj["target"] = target
    ctx.obj["interactive"] = interactive
    ctx.obj["pr"] = pr
    ctx.obj["config_path"] = config_path
    ctx.obj["timeout"] = timeout
    ctx.obj["dry_run"] = dry_run
    ctx.obj["verbose"] = verbose

    if ctx.invoked_subcommand is None:
        root = _enter_repository(ctx)
        run_review(ctx, root)


# ---------------------------------------------------------------------------
# review (default)
# ---------------------------------------------------------------------------

@_handle_review_errors
def run_review(ctx: click.Context, root: Path) -> None:
    """Run the whole review pipeline from inside *root*."""
    from copilot_review import config as config_module
    from copilot_review import git
    from copilot_review.clipboard import copy_to_clipboard
    from copilot_review.models import parse_review
    from copilot_review.prompt import build_prompt, load_guidelines
    from copilot_review.reports.review import build_pr_comment, format_review
    from copilot_review.watcher import temp_response_path, wait_for_file

    obj = ctx.obj
    config = config_module.load(obj["config_path"], base_dir=root)
    if config.source is not None:
        _verbose(ctx, f"Loaded config from {config.source}")

    base = obj["base"] or config.base_branch
    target = obj["target"] or config.target_branch
    if obj["interactive"]:
        base, target = _select_branches(base, target)

    click.echo("Starting AI-assisted code review...\n")
    click.echo(f"Comparing: {target} with {base}\n")

    click.echo("Validating branches...")
    git.validate_branches(base, target)

    files = git.changed_files(base, target)
    if not files:
        click.echo("No changed files detected between the specified branches. Exiting.")
        return

    click.echo("Changed files:")
    for f in files:
        click.echo(f"   - {f}")

    diff = git.filtered_diff(
        base, target, max_changes=config.max_file_changes, exclude=config.exclude,
    )
    _verbose(ctx, f"Diff size: {len(diff)} characters")
    guidelines = load_guidelines(root, config.guidelines_path)

    temp_path = temp_response_path(root)
    message = build_prompt(guidelines, diff, files, temp_path, base, target)
    used = copy_to_clipboard(message, config.clipboard_command)
    _verbose(ctx, f"Clipboard command: {' '.join(used)}")

    click.echo("\nMessage copied to clipboard!")
    click.secho(
        "Please paste it into Copilot Chat (AGENT, EDIT MODE) and hit Enter.",
        fg="yellow", bold=True,
    )

    response = wait_for_file(
        temp_path,
        interval=config.poll_interval,
        timeout=obj["timeout"] or config.timeout,
        progress_every=config.progress_every,
    )
    if not response.strip():
        click.echo("No response received. Exiting.")
        return

    click.echo("\nParsing JSON response...")
    formatted = format_review(parse_review(response))
    body = build_pr_comment(formatted, base, target)

    if obj["dry_run"]:
        click.echo("\n[dry run] Review comment:\n")
        click.echo(body)
        return

    click.echo("\nPosting review to pull request...")
    result = _post(ctx, config, body)
    click.echo("Successfully posted review to pull request!")
    if result:
        click.echo(result)


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default=".cp-review.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template .cp-review.yaml file."""
    from copilot_review.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it to change default branches, guidelines path and posting method.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
