"""Core review orchestration: collect → build prompt → call the model."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from rich.console import Console

from ultrareview_core.prompt import build_review_prompt
from ultrareview_core.providers.anthropic import AnthropicReviewer
from ultrareview_core.providers.base import BaseReviewer, Usage
from ultrareview_core.utils.context import load_context_files
from ultrareview_core.vcs.git import ChangeSource, GitChangeSource, collect_changes

console = Console()
logger = logging.getLogger(__name__)

HEAD_REF = "HEAD"
_RULE = "=" * 79


@dataclass
class ReviewSummary:
    """Result returned by run_review — carries enough data for the CLI to persist the review.

    Decoupled from ultrareview_store so ultrareview_core has no dependency on the store layer.
    The CLI converts this to a ReviewRecord before persisting.
    """

    review: str
    model: str
    base_ref: str
    head_ref: str
    branch: str
    usage: Usage = field(default_factory=Usage)
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def _get_reviewer(config: dict) -> BaseReviewer:
    return AnthropicReviewer(
        api_key=config["anthropic_api_key"],
        model=config["model"],
        max_tokens=config["max_tokens"],
        ultrathink=config["ultrathink"],
        thinking_budget=config["thinking_budget"],
        timeout=config.get("timeout"),
    )


def resolve_refs(config: dict, source: ChangeSource) -> tuple[str, str]:
    """Return ``(target_branch, base_ref)`` for this run.

    An explicit base wins over the target branch; the target branch falls
    back to the repository's default branch.
    """
    target = config.get("branch") or source.default_branch()
    base = config.get("base") or target
    return target, base


def print_review(summary: ReviewSummary) -> None:
    """Print the review text and token accounting to the terminal."""
    console.print(_RULE, highlight=False)
    console.print("[bold]CODE REVIEW[/bold]")
    console.print(_RULE, highlight=False)
    console.print()
    # Written straight to the stream: rich would expand tabs and rewrap lines.
    console.file.write(f"{summary.review}\n")
    console.print()
    console.print(_RULE, highlight=False)
    usage = summary.usage
    console.print(
        f"Token Usage: Input: {usage.input_tokens} | Output: {usage.output_tokens} | Total: {usage.total_tokens}",
        highlight=False,
    )
    console.print(_RULE, highlight=False)


def run_review(
    config: dict,
    source: ChangeSource | None = None,
    reviewer: BaseReviewer | None = None,
) -> ReviewSummary | None:
    """Run the full review pipeline and return a ReviewSummary.

    Returns None when there is nothing to review (empty diff).
    Raises CollectionError when the diff cannot be retrieved and ReviewError
    when the model call fails.
    """
    source = source if source is not None else GitChangeSource()

    target, base = resolve_refs(config, source)
    branch = source.current_branch()
    console.print(f"Reviewing changes on [bold]{branch}[/bold] against [bold]{base}[/bold]\n")
    if base != target:
        logger.debug("Explicit base %s overrides target branch %s", base, target)

    changes = collect_changes(source, base, HEAD_REF)
    if changes.is_empty:
        console.print("[yellow]No changes found.[/yellow]")
        return None

    additional_context = load_context_files(config.get("context") or [])
    prompt = build_review_prompt(
        changes.diff,
        changes.changed_files,
        changes.commit_messages,
        additional_context,
    )
    logger.debug("Built review prompt (%d chars)", len(prompt))

    reviewer = reviewer if reviewer is not None else _get_reviewer(config)
    mode = "enabled" if config.get("ultrathink") else "disabled"
    console.print(f"[cyan]Analyzing changes with {config['model']} (ultrathink mode: {mode})...[/cyan]")
    console.print("[dim]This may take a moment for deep analysis...[/dim]\n")

    result = reviewer.review(prompt)

    return ReviewSummary(
        review=result.text,
        model=config["model"],
        base_ref=base,
        head_ref=HEAD_REF,
        branch=branch,
        usage=result.usage,
    )
