"""Tests for AnthropicAdapter -- uses mocked SDK, no live API calls."""

from unittest.mock import MagicMock, patch

import anthropic
import pytest

from tictacpro.core.adapter import AdapterError, AdapterResponse
from tictacpro.core.anthropic_adapter import AnthropicAdapter

MESSAGES = [{"role": "user", "content": "Your turn"}]


def _block(kind, text=""):
    block = MagicMock()
    block.type = kind
    block.text = text
    return block


def _mock_message(
    texts=("",),
    model="claude-3-5-haiku-20241022",
    input_tokens=10,
    output_tokens=5,
    extra_blocks=(),
):
    """Build a mock Anthropic Message response."""
    usage = MagicMock()
    usage.input_tokens = input_tokens
    usage.output_tokens = output_tokens

    msg = MagicMock()
    msg.content = list(extra_blocks) + [_block("text", t) for t in texts]
    msg.model = model
    msg.usage = usage
    return msg


class TestAnthropicAdapterSuccess:
    @patch("tictacpro.core.anthropic_adapter.Anthropic")
    def test_basic_query(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.return_value = _mock_message(
            texts=('{"index": 4, "commentary": "Center."}',),
            input_tokens=50,
            output_tokens=8,
        )

        adapter = AnthropicAdapter(model_id="claude-3-5-haiku-latest", api_key="test-key")
        resp = adapter.query(messages=MESSAGES, max_tokens=256, timeout_s=30.0)

        assert isinstance(resp, AdapterResponse)
        assert resp.raw_text == '{"index": 4, "commentary": "Center."}'
        assert resp.model_id == "claude-3-5-haiku-latest"
        assert resp.model_version == "claude-3-5-haiku-20241022"
        assert resp.input_tokens == 50
        assert resp.output_tokens == 8

    @patch("tictacpro.core.anthropic_adapter.Anthropic")
    def test_request_shape(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.return_value = _mock_message(texts=("{}",))

        adapter = AnthropicAdapter(
            model_id="claude-3-5-haiku-latest", api_key="test-key", temperature=0.7,
        )
        adapter.query(messages=MESSAGES, max_tokens=200, timeout_s=9.0)

        assert MockAnthropic.call_args[1] == {"api_key": "test-key"}
        create_kwargs = client.messages.create.call_args[1]
        assert create_kwargs["model"] == "claude-3-5-haiku-latest"
        assert create_kwargs["messages"] == MESSAGES
        assert create_kwargs["max_tokens"] == 200
        assert create_kwargs["temperature"] == 0.7
        assert create_kwargs["timeout"] == 9.0

    @patch("tictacpro.core.anthropic_adapter.Anthropic")
    def test_text_blocks_joined(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.return_value = _mock_message(
            texts=('{"index": 2, ', '"commentary": "Split."}'),
            extra_blocks=(_block("thinking"),),
        )

        adapter = AnthropicAdapter(model_id="claude-3-5-haiku-latest", api_key="k")
        resp = adapter.query(messages=MESSAGES, max_tokens=256, timeout_s=30.0)
        assert resp.raw_text == '{"index": 2, "commentary": "Split."}'


class TestAnthropicAdapterErrors:
    @patch("tictacpro.core.anthropic_adapter.Anthropic")
    def test_empty_text_raises(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.return_value = _mock_message(texts=("  ",))

        adapter = AnthropicAdapter(model_id="claude-3-5-haiku-latest", api_key="k")
        with pytest.raises(AdapterError) as exc_info:
            adapter.query(messages=MESSAGES, max_tokens=256, timeout_s=30.0)
        assert exc_info.value.error_type == "empty_response"

    @patch("tictacpro.core.anthropic_adapter.Anthropic")
    def test_timeout_raises_adapter_error(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.side_effect = anthropic.APITimeoutError(
            request=MagicMock()
        )

        adapter = AnthropicAdapter(model_id="claude-3-5-haiku-latest", api_key="k")
        with pytest.raises(AdapterError) as exc_info:
            adapter.query(messages=MESSAGES, max_tokens=256, timeout_s=5.0)
        assert exc_info.value.error_type == "timeout"

    @patch("tictacpro.core.anthropic_adapter.time.sleep")
    @patch("tictacpro.core.anthropic_adapter.Anthropic")
    def test_rate_limit_retries_then_raises(self, MockAnthropic, mock_sleep):
        client = MockAnthropic.return_value

        resp_mock = MagicMock()
        resp_mock.status_code = 429
        resp_mock.headers = {}
        client.messages.create.side_effect = anthropic.RateLimitError(
            message="rate limited",
            response=resp_mock,
            body=None,
        )

        adapter = AnthropicAdapter(model_id="claude-3-5-haiku-latest", api_key="k")
        with pytest.raises(AdapterError) as exc_info:
            adapter.query(messages=MESSAGES, max_tokens=256, timeout_s=30.0)
        assert exc_info.value.error_type == "rate_limit"
        assert client.messages.create.call_count == 2

    @patch("tictacpro.core.anthropic_adapter.Anthropic")
    def test_generic_api_error_raises_adapter_error(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.side_effect = anthropic.APIError(
            message="server error",
            request=MagicMock(),
            body=None,
        )

        adapter = AnthropicAdapter(model_id="claude-3-5-haiku-latest", api_key="k")
        with pytest.raises(AdapterError) as exc_info:
            adapter.query(messages=MESSAGES, max_tokens=256, timeout_s=30.0)
        assert exc_info.value.error_type == "api_error"

    @patch("tictacpro.core.anthropic_adapter.Anthropic")
    def test_no_raw_sdk_exception_propagates(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.side_effect = ConnectionError("network down")

        adapter = AnthropicAdapter(model_id="claude-3-5-haiku-latest", api_key="k")
        with pytest.raises(AdapterError) as exc_info:
            adapter.query(messages=MESSAGES, max_tokens=256, timeout_s=30.0)
        assert exc_info.value.error_type == "api_error"
