"""Review data models.

Decoupled from ultrareview_core so the store layer can be used independently
and ultrareview_core has no knowledge of persistence concerns.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ReviewRecord:
    """A completed review persisted to the store.

    Created by the CLI layer after run_review() returns a ReviewSummary.
    The CLI maps ReviewSummary → ReviewRecord before calling store.save().
    """

    content: str
    reviewer_model: str
    base_ref: str
    head_ref: str
    branch: str
    reviewed_at: str  # ISO-8601 UTC timestamp
    input_tokens: int = 0
    output_tokens: int = 0
