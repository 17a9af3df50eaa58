"""Base reviewer implementing the Template Method pattern.

    review() → _call_api()   ← only this differs per provider
             → ReviewResult

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return a ReviewResult

No retries: a failed attempt raises ReviewError carrying whatever
diagnostic detail the provider returned.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

_MAX_TOKENS = 16000
_TIMEOUT_SECONDS = 300.0


class ReviewError(RuntimeError):
    """The review request could not be completed."""


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class ReviewResult:
    """Text of the review plus the provider's accounting for the call."""

    text: str
    response_id: str = ""
    usage: Usage = field(default_factory=Usage)


class BaseReviewer(ABC):
    MAX_TOKENS: int = _MAX_TOKENS
    TIMEOUT: float = _TIMEOUT_SECONDS

    def review(self, prompt: str) -> ReviewResult:
        """Send ``prompt`` as a single request and return the review.

        Raises ReviewError on any failure; nothing is retried.
        """
        started = time.monotonic()
        result = self._call_api(prompt)
        logger.debug(
            "%s returned %s in %.1fs (%d input / %d output tokens)",
            self.__class__.__name__,
            result.response_id or "a response",
            time.monotonic() - started,
            result.usage.input_tokens,
            result.usage.output_tokens,
        )
        return result

    @abstractmethod
    def _call_api(self, prompt: str) -> ReviewResult:
        """Make a single API call and return the parsed result.

        This is the only method subclasses must implement. It should raise
        ReviewError on failure.
        """
