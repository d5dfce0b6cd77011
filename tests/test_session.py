"""Tests for adapter factory and orchestrator wiring."""

import os
from unittest.mock import MagicMock, patch

import pytest

from tictacpro.config import AIConfig, AppConfig, GameConfig
from tictacpro.core.adapter import MockAdapter
from tictacpro.game.collaborator import LLMCollaborator
from tictacpro.game.orchestrator import TurnOrchestrator
from tictacpro.game.state import Mode
from tictacpro.session import build_adapter, build_orchestrator


class TestAdapterFactory:
    def test_mock_provider(self):
        adapter = build_adapter(AIConfig(provider="mock", strategy="first_empty"))
        assert isinstance(adapter, MockAdapter)

    def test_unknown_mock_strategy(self):
        with pytest.raises(ValueError, match="Unknown mock strategy"):
            build_adapter(AIConfig(provider="mock", strategy="psychic"))

    def test_unsupported_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            build_adapter(AIConfig(provider="carrier-pigeon"))

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_key(self):
        with pytest.raises(ValueError, match="OPENROUTER_API_KEY not set"):
            build_adapter(AIConfig(provider="openrouter"))

    @patch.dict(os.environ, {"TEST_OPENAI_KEY": "sk-test-123"})
    @patch("tictacpro.core.openai_adapter.OpenAI")
    def test_openai_provider(self, MockOpenAI):
        from tictacpro.core.openai_adapter import OpenAIAdapter

        adapter = build_adapter(AIConfig(
            provider="openai",
            api_key_env="TEST_OPENAI_KEY",
            base_url="http://localhost:8000/v1",
        ))
        assert isinstance(adapter, OpenAIAdapter)
        call_kwargs = MockOpenAI.call_args[1]
        assert call_kwargs["api_key"] == "sk-test-123"
        assert call_kwargs["base_url"] == "http://localhost:8000/v1"

    @patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-ant-test"})
    @patch("tictacpro.core.anthropic_adapter.Anthropic")
    def test_anthropic_provider_default_env(self, MockAnthropic):
        from tictacpro.core.anthropic_adapter import AnthropicAdapter

        adapter = build_adapter(AIConfig(provider="anthropic"))
        assert isinstance(adapter, AnthropicAdapter)
        assert MockAnthropic.call_args[1] == {"api_key": "sk-ant-test"}

    @patch.dict(os.environ, {"OPENROUTER_API_KEY": "sk-or-test"})
    @patch("tictacpro.core.openai_adapter.OpenAI")
    def test_openrouter_provider(self, MockOpenAI):
        from tictacpro.core.openai_adapter import OpenAIAdapter

        adapter = build_adapter(AIConfig(
            provider="openrouter",
            site_url="https://example.com",
            app_name="tictacpro",
        ))
        assert isinstance(adapter, OpenAIAdapter)
        call_kwargs = MockOpenAI.call_args[1]
        assert call_kwargs["api_key"] == "sk-or-test"
        assert call_kwargs["base_url"] == "https://openrouter.ai/api/v1"
        assert call_kwargs["default_headers"] == {
            "HTTP-Referer": "https://example.com",
            "X-Title": "tictacpro",
        }

    @patch.dict(os.environ, {"OPENROUTER_API_KEY": "sk-or-test"})
    @patch("tictacpro.core.openai_adapter.OpenAI")
    def test_openrouter_without_attribution(self, MockOpenAI):
        build_adapter(AIConfig(provider="openrouter"))
        assert "default_headers" not in MockOpenAI.call_args[1]

    @patch.dict(os.environ, {"OPENROUTER_API_KEY": "sk-or-test"})
    @patch("tictacpro.core.openai_adapter.OpenAI")
    def test_openrouter_query_skips_json_mode(self, MockOpenAI):
        client = MockOpenAI.return_value
        choice = MagicMock()
        choice.message.content = '{"index": 4, "commentary": "Center."}'
        completion = MagicMock()
        completion.choices = [choice]
        completion.model = "google/gemini-2.5-flash"
        client.chat.completions.create.return_value = completion

        adapter = build_adapter(AIConfig(provider="openrouter"))
        resp = adapter.query(
            messages=[{"role": "user", "content": "go"}],
            max_tokens=256,
            timeout_s=30.0,
        )

        assert resp.model_id == "google/gemini-2.5-flash"
        # Routed models may not support response_format
        create_kwargs = client.chat.completions.create.call_args[1]
        assert "response_format" not in create_kwargs


class TestBuildOrchestrator:
    def test_wires_mode_and_collaborator(self):
        config = AppConfig(game=GameConfig(mode=Mode.VS_AI, bot_delay_s=0.0, seed=3))
        with build_orchestrator(config) as orch:
            assert isinstance(orch, TurnOrchestrator)
            assert orch.state.mode is Mode.VS_AI
            assert isinstance(orch._collaborator, LLMCollaborator)
            assert orch._bot.delay_s == 0.0
            assert orch._ai_timeout_s == config.ai.timeout_s + 5.0

    def test_mock_ai_plays_a_turn(self):
        config = AppConfig(game=GameConfig(mode=Mode.VS_AI, bot_delay_s=0.0))
        with build_orchestrator(config) as orch:
            assert orch.select_cell(0) is True
            assert orch.wait_for_automated_turn(5.0) is True
            # grandmaster answers a corner opening with the center
            assert orch.state.board[4] is not None
            assert orch.state.automated_turn_in_flight is False

    def test_bad_provider_surfaces_value_error(self):
        config = AppConfig(ai=AIConfig(provider="nope"))
        with pytest.raises(ValueError):
            build_orchestrator(config)
