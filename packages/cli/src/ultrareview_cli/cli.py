"""CLI entry point for ultrareview.

Reviews the changes on the current branch against a target branch with
Claude, prints the review, and saves it to REQUESTED_CHANGES.md (previous
reviews are kept as REQUESTED_CHANGES.md.~1~, .~2~, ...).
"""

from __future__ import annotations

import importlib.metadata

import click
from rich.console import Console

from ultrareview_core.providers.base import ReviewError
from ultrareview_core.reviewer import ReviewSummary, print_review, run_review
from ultrareview_core.vcs.git import CollectionError
from ultrareview_store.base import OutputError
from ultrareview_store.file import FileStore
from ultrareview_store.models import ReviewRecord

console = Console()

# Anthropic API limits for extended thinking.
_MIN_THINKING_BUDGET = 1024


def _summary_to_record(summary: ReviewSummary) -> ReviewRecord:
    """Map a ReviewSummary returned by run_review() to a ReviewRecord for the store.

    The CLI layer owns this mapping — ultrareview_core has no store knowledge and
    ultrareview_store has no core knowledge. The CLI bridges the two.
    """
    return ReviewRecord(
        content=summary.review,
        reviewer_model=summary.model,
        base_ref=summary.base_ref,
        head_ref=summary.head_ref,
        branch=summary.branch,
        reviewed_at=summary.reviewed_at,
        input_tokens=summary.usage.input_tokens,
        output_tokens=summary.usage.output_tokens,
    )


def _validate(config: dict) -> None:
    if not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config["max_tokens"] <= 0:
        raise click.UsageError("--max-tokens must be a positive integer.")
    if config["ultrathink"]:
        budget = config["thinking_budget"]
        if budget < _MIN_THINKING_BUDGET:
            raise click.UsageError(f"--thinking-budget must be at least {_MIN_THINKING_BUDGET} tokens.")
        if budget >= config["max_tokens"]:
            raise click.UsageError(
                f"--thinking-budget ({budget}) must be lower than --max-tokens ({config['max_tokens']})."
            )


@click.command()
@click.version_option(
    version=importlib.metadata.version("ultrareview"),
    prog_name="ultrareview",
)
@click.option(
    "--branch",
    "-b",
    default=None,
    help="Target branch to compare against. [default: origin's HEAD, else main, else master]",
)
@click.option("--base", default=None, help="Base branch or commit to compare from. [default: the target branch]")
@click.option("--model", default=None, help="Claude model to use. [default: claude-sonnet-4-5-20250929]")
@click.option("--no-ultrathink", "no_ultrathink", is_flag=True, help="Disable extended thinking mode.")
@click.option(
    "--thinking-budget",
    type=int,
    default=None,
    help="Extended thinking token budget. [default: 10000]",
)
@click.option("--max-tokens", type=int, default=None, help="Maximum output tokens. [default: 16000]")
@click.option(
    "--context",
    "context_files",
    default=None,
    help="Comma-separated list of additional context files to include.",
)
@click.option(
    "--output",
    "-o",
    default=None,
    help="File to write the review to; an existing file is backed up first. [default: REQUESTED_CHANGES.md]",
)
@click.option(
    "--config",
    "config_path",
    default=".ultrareview.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="ULTRAREVIEW_CONFIG",
)
def main(
    branch: str | None,
    base: str | None,
    model: str | None,
    no_ultrathink: bool,
    thinking_budget: int | None,
    max_tokens: int | None,
    context_files: str | None,
    output: str | None,
    config_path: str,
):
    """AI-powered code review of your branch's changes.

    Diffs HEAD against the target branch, sends the diff with the changed
    files, recent commit messages and any --context files to Claude, and
    writes the review to the output file.

    \b
    Required environment variables:
      ANTHROPIC_API_KEY    Anthropic API key
    """
    from ultrareview_core.config import load_config

    config = load_config(
        config_path,
        cli_overrides={
            "branch": branch,
            "base": base,
            "model": model,
            "ultrathink": False if no_ultrathink else None,
            "thinking_budget": thinking_budget,
            "max_tokens": max_tokens,
            "context": context_files,
            "output": output,
        },
    )
    _validate(config)

    try:
        summary = run_review(config)
    except CollectionError as e:
        raise click.ClickException(f"Could not get diff: {e}")
    except ReviewError as e:
        raise click.ClickException(f"Claude API request failed: {e}")

    # Empty diff: nothing to review, nothing to save.
    if summary is None:
        return

    print_review(summary)

    store = FileStore(config["output"])
    try:
        store.save(_summary_to_record(summary))
    except OutputError as e:
        raise click.ClickException(str(e))
    console.print(f"\n[green]Review saved to {store.describe()}[/green]")
