from __future__ import annotations

import anthropic
from anthropic import Anthropic

from ultrareview_core.providers.base import BaseReviewer, ReviewError, ReviewResult, Usage


class AnthropicReviewer(BaseReviewer):
    MODEL = "claude-sonnet-4-5-20250929"
    # Extended thinking requires temperature=1; the same value is used with
    # thinking disabled.
    TEMPERATURE = 1.0
    THINKING_BUDGET = 10000

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        max_tokens: int | None = None,
        ultrathink: bool = True,
        thinking_budget: int | None = None,
        timeout: float | None = None,
    ):
        self.model = model or self.MODEL
        self.max_tokens = max_tokens or self.MAX_TOKENS
        self.ultrathink = ultrathink
        self.thinking_budget = thinking_budget or self.THINKING_BUDGET
        self.timeout = float(timeout or self.TIMEOUT)
        # max_retries=0: the SDK retries 5xx and timeouts by default.
        self.client = Anthropic(api_key=api_key, timeout=self.timeout, max_retries=0)

    def build_request(self, prompt: str) -> dict:
        """Return the keyword arguments for ``messages.create``.

        Temperature goes through ``extra_body``: recent SDK releases dropped it
        from the ``create()`` signature, while the API still accepts it.
        """
        request = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "extra_body": {"temperature": self.TEMPERATURE},
        }
        if self.ultrathink:
            request["thinking"] = {"type": "enabled", "budget_tokens": self.thinking_budget}
        return request

    def _call_api(self, prompt: str) -> ReviewResult:
        try:
            response = self.client.messages.create(**self.build_request(prompt), timeout=self.timeout)
        except anthropic.APITimeoutError as e:
            raise ReviewError(f"Request timed out after {self.timeout:.0f}s") from e
        except anthropic.APIStatusError as e:
            raise ReviewError(f"API error (status {e.status_code}): {e.response.text}") from e
        except anthropic.APIConnectionError as e:
            raise ReviewError(f"Error making request: {e}") from e
        except (anthropic.APIError, ValueError) as e:
            raise ReviewError(f"Malformed API response: {e}") from e
        except TypeError as e:
            raise ReviewError(f"Request rejected by the installed anthropic SDK: {e}") from e

        try:
            # Thinking blocks carry the reasoning trace; only text is the review.
            text = "".join(block.text for block in response.content if block.type == "text")
            usage = Usage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            )
        except (AttributeError, TypeError) as e:
            raise ReviewError(f"Malformed API response: {e}") from e

        return ReviewResult(text=text, response_id=response.id or "", usage=usage)
