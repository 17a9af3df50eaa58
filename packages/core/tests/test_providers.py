"""Tests for AI provider implementations.

Shared behaviour (review()) lives in BaseReviewer and is tested once via a
lightweight stub. Provider-specific tests cover the request shape and the
mapping of SDK responses and errors, with the SDK client replaced by a mock.
"""

import json
from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from ultrareview_core.providers.anthropic import AnthropicReviewer
from ultrareview_core.providers.base import BaseReviewer, ReviewError, ReviewResult, Usage

_API_URL = "https://api.anthropic.com/v1/messages"


class _StubReviewer(BaseReviewer):
    def __init__(self):
        self.prompts = []

    def _call_api(self, prompt: str) -> ReviewResult:
        self.prompts.append(prompt)
        return ReviewResult(text="Looks good.", response_id="msg_1", usage=Usage(10, 5))


def _block(type_, **attrs):
    block = MagicMock()
    block.type = type_
    for key, value in attrs.items():
        setattr(block, key, value)
    return block


def _response(blocks, input_tokens=100, output_tokens=50, response_id="msg_123"):
    response = MagicMock()
    response.id = response_id
    response.content = blocks
    response.usage.input_tokens = input_tokens
    response.usage.output_tokens = output_tokens
    return response


def _reviewer(**kwargs) -> AnthropicReviewer:
    reviewer = AnthropicReviewer(api_key="test-key", **kwargs)
    reviewer.client = MagicMock()
    return reviewer


def _status_error(cls, status: int, body: str):
    response = httpx.Response(status, text=body, request=httpx.Request("POST", _API_URL))
    return cls(body, response=response, body=None)


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------


class TestBaseReviewer:
    def test_review_delegates_to_call_api_once(self):
        reviewer = _StubReviewer()
        result = reviewer.review("the prompt")
        assert reviewer.prompts == ["the prompt"]
        assert result.text == "Looks good."

    def test_usage_total(self):
        assert Usage(input_tokens=120, output_tokens=30).total_tokens == 150

    def test_no_retry_on_failure(self):
        calls = 0

        class _AlwaysFail(BaseReviewer):
            def _call_api(self, prompt: str) -> ReviewResult:
                nonlocal calls
                calls += 1
                raise ReviewError("network error")

        with pytest.raises(ReviewError):
            _AlwaysFail().review("prompt")
        assert calls == 1


# ---------------------------------------------------------------------------
# AnthropicReviewer — request shape
# ---------------------------------------------------------------------------


class TestAnthropicRequest:
    def test_defaults(self):
        reviewer = AnthropicReviewer(api_key="key")
        assert "claude" in reviewer.model
        assert reviewer.max_tokens == 16000
        assert reviewer.thinking_budget == 10000
        assert reviewer.ultrathink is True

    def test_client_has_no_retries_and_timeout(self):
        reviewer = AnthropicReviewer(api_key="key", timeout=120)
        assert reviewer.client.max_retries == 0
        assert reviewer.timeout == 120.0

    def test_single_user_message(self):
        request = AnthropicReviewer(api_key="key").build_request("review this")
        assert request["messages"] == [{"role": "user", "content": "review this"}]

    def test_fixed_temperature(self):
        request = AnthropicReviewer(api_key="key").build_request("p")
        assert request["extra_body"]["temperature"] == AnthropicReviewer.TEMPERATURE == 1.0
        assert "temperature" not in request

    def test_thinking_directive_when_enabled(self):
        request = AnthropicReviewer(api_key="key", thinking_budget=8000).build_request("p")
        assert request["thinking"] == {"type": "enabled", "budget_tokens": 8000}

    def test_no_thinking_directive_when_disabled(self):
        request = AnthropicReviewer(api_key="key", ultrathink=False).build_request("p")
        assert "thinking" not in request

    def test_model_and_max_tokens_overrides(self):
        request = AnthropicReviewer(api_key="key", model="claude-opus-4-1", max_tokens=32000).build_request("p")
        assert request["model"] == "claude-opus-4-1"
        assert request["max_tokens"] == 32000

    def test_call_passes_request_and_timeout(self):
        reviewer = _reviewer(timeout=60)
        reviewer.client.messages.create.return_value = _response([_block("text", text="ok")])

        reviewer.review("prompt text")

        kwargs = reviewer.client.messages.create.call_args.kwargs
        assert kwargs["messages"][0]["content"] == "prompt text"
        assert kwargs["timeout"] == 60.0
        reviewer.client.messages.create.assert_called_once()


# ---------------------------------------------------------------------------
# AnthropicReviewer — response handling
# ---------------------------------------------------------------------------


class TestAnthropicResponse:
    def test_concatenates_text_blocks_and_ignores_thinking(self):
        reviewer = _reviewer()
        reviewer.client.messages.create.return_value = _response(
            [
                _block("thinking", thinking="Let me reason about this...", text=None),
                _block("text", text="## Summary\n"),
                _block("text", text="All good."),
            ]
        )

        result = reviewer.review("prompt")

        assert result.text == "## Summary\nAll good."
        assert "reason" not in result.text

    def test_usage_and_id(self):
        reviewer = _reviewer()
        reviewer.client.messages.create.return_value = _response(
            [_block("text", text="x")], input_tokens=1234, output_tokens=567, response_id="msg_abc"
        )

        result = reviewer.review("prompt")

        assert result.usage == Usage(input_tokens=1234, output_tokens=567)
        assert result.usage.total_tokens == 1801
        assert result.response_id == "msg_abc"

    def test_no_text_blocks_gives_empty_review(self):
        reviewer = _reviewer()
        reviewer.client.messages.create.return_value = _response([_block("thinking", thinking="...")])
        assert reviewer.review("prompt").text == ""

    def test_malformed_response_raises(self):
        reviewer = _reviewer()
        response = MagicMock()
        response.content = None
        reviewer.client.messages.create.return_value = response
        with pytest.raises(ReviewError, match="Malformed"):
            reviewer.review("prompt")


# ---------------------------------------------------------------------------
# AnthropicReviewer — error mapping
# ---------------------------------------------------------------------------


class TestAnthropicErrors:
    def test_server_error_includes_status_and_body(self):
        reviewer = _reviewer()
        reviewer.client.messages.create.side_effect = _status_error(anthropic.InternalServerError, 500, "server error")

        with pytest.raises(ReviewError) as exc_info:
            reviewer.review("prompt")

        assert "500" in str(exc_info.value)
        assert "server error" in str(exc_info.value)

    def test_client_error_includes_body(self):
        body = '{"type":"error","error":{"type":"invalid_request_error","message":"max_tokens too large"}}'
        reviewer = _reviewer()
        reviewer.client.messages.create.side_effect = _status_error(anthropic.BadRequestError, 400, body)

        with pytest.raises(ReviewError, match="status 400") as exc_info:
            reviewer.review("prompt")
        assert "max_tokens too large" in str(exc_info.value)

    def test_timeout(self):
        reviewer = _reviewer(timeout=300)
        reviewer.client.messages.create.side_effect = anthropic.APITimeoutError(
            request=httpx.Request("POST", _API_URL)
        )

        with pytest.raises(ReviewError, match="timed out after 300s"):
            reviewer.review("prompt")

    def test_connection_error(self):
        reviewer = _reviewer()
        reviewer.client.messages.create.side_effect = anthropic.APIConnectionError(
            message="Connection refused", request=httpx.Request("POST", _API_URL)
        )

        with pytest.raises(ReviewError, match="Error making request"):
            reviewer.review("prompt")

    def test_undecodable_body(self):
        reviewer = _reviewer()
        reviewer.client.messages.create.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")

        with pytest.raises(ReviewError, match="Malformed API response"):
            reviewer.review("prompt")


# ---------------------------------------------------------------------------
# AnthropicReviewer — real SDK client over a mocked HTTP transport
# ---------------------------------------------------------------------------


_MESSAGE_BODY = {
    "id": "msg_transport",
    "type": "message",
    "role": "assistant",
    "model": "claude-sonnet-4-5-20250929",
    "content": [
        {"type": "thinking", "thinking": "Checking the diff...", "signature": "sig"},
        {"type": "text", "text": "## Review\n"},
        {"type": "text", "text": "Ship it."},
    ],
    "stop_reason": "end_turn",
    "stop_sequence": None,
    "usage": {"input_tokens": 321, "output_tokens": 54},
}


def _transport_reviewer(handler, **kwargs) -> AnthropicReviewer:
    """AnthropicReviewer whose real SDK client talks to ``handler`` instead of the network."""
    reviewer = AnthropicReviewer(api_key="test-key", **kwargs)
    reviewer.client = anthropic.Anthropic(
        api_key="test-key",
        max_retries=0,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    return reviewer


class TestAnthropicTransport:
    def test_request_accepted_by_sdk_and_sent_as_json(self):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, json=_MESSAGE_BODY)

        result = _transport_reviewer(handler, thinking_budget=4000, max_tokens=8000).review("review this diff")

        assert result.text == "## Review\nShip it."
        assert result.usage == Usage(input_tokens=321, output_tokens=54)
        assert result.response_id == "msg_transport"

        (request,) = sent
        assert request.method == "POST"
        assert request.url.path == "/v1/messages"
        assert request.headers["x-api-key"] == "test-key"
        assert "anthropic-version" in request.headers
        body = json.loads(request.content)
        assert body["messages"] == [{"role": "user", "content": "review this diff"}]
        assert body["temperature"] == 1.0
        assert body["max_tokens"] == 8000
        assert body["thinking"] == {"type": "enabled", "budget_tokens": 4000}

    def test_request_without_thinking(self):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(json.loads(request.content))
            return httpx.Response(200, json=_MESSAGE_BODY)

        _transport_reviewer(handler, ultrathink=False).review("p")

        assert "thinking" not in sent[0]
        assert sent[0]["temperature"] == 1.0

    def test_server_error_over_transport(self):
        reviewer = _transport_reviewer(lambda request: httpx.Response(500, text="server error"))

        with pytest.raises(ReviewError) as exc_info:
            reviewer.review("p")

        assert "status 500" in str(exc_info.value)
        assert "server error" in str(exc_info.value)

    def test_non_json_body_over_transport(self):
        reviewer = _transport_reviewer(
            lambda request: httpx.Response(200, text="<html>gateway</html>", headers={"content-type": "text/html"})
        )

        with pytest.raises(ReviewError):
            reviewer.review("p")

    def test_sdk_signature_mismatch_is_a_review_error(self):
        reviewer = _reviewer()
        reviewer.client.messages.create.side_effect = TypeError(
            "Messages.create() got an unexpected keyword argument 'temperature'"
        )

        with pytest.raises(ReviewError, match="unexpected keyword argument"):
            reviewer.review("p")
