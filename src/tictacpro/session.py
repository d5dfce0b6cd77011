"""Session wiring — turns an AppConfig into a ready TurnOrchestrator.

Builds the model adapter for the configured provider, wraps it in an
LLMCollaborator, and hands that, a seeded BasicBot and a fresh
ScoreTracker to the orchestrator.
"""

from __future__ import annotations

import os
import random

from tictacpro.config import AIConfig, AppConfig
from tictacpro.core.adapter import MockAdapter, ModelAdapter
from tictacpro.game.bot import BasicBot
from tictacpro.game.collaborator import LLMCollaborator
from tictacpro.game.orchestrator import TurnOrchestrator
from tictacpro.game.state import ScoreTracker
from tictacpro.game.strategies import STRATEGY_REGISTRY

_DEFAULT_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

_DEFAULT_MODEL_ID = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-latest",
    "openrouter": "google/gemini-2.5-flash",
}

_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# Margin over the adapter's own timeout before the orchestrator gives up
_TIMEOUT_GRACE_S = 5.0


def build_adapter(cfg: AIConfig) -> ModelAdapter:
    """Build a ModelAdapter from an AIConfig."""
    if cfg.provider == "mock":
        strategy_fn = STRATEGY_REGISTRY.get(cfg.strategy or "")
        if strategy_fn is None:
            raise ValueError(
                f"Unknown mock strategy: {cfg.strategy!r}. "
                f"Available: {list(STRATEGY_REGISTRY)}"
            )
        return MockAdapter(model_id=f"mock-{cfg.strategy}", strategy=strategy_fn)

    if cfg.provider not in _DEFAULT_KEY_ENV:
        raise ValueError(f"Unsupported provider: {cfg.provider!r}")

    key_env = cfg.api_key_env or _DEFAULT_KEY_ENV[cfg.provider]
    api_key = os.environ.get(key_env)
    if not api_key:
        raise ValueError(f"Environment variable {key_env} not set")
    model_id = cfg.model_id or _DEFAULT_MODEL_ID[cfg.provider]

    if cfg.provider == "anthropic":
        from tictacpro.core.anthropic_adapter import AnthropicAdapter

        return AnthropicAdapter(
            model_id=model_id, api_key=api_key, temperature=cfg.temperature,
        )

    from tictacpro.core.openai_adapter import OpenAIAdapter

    if cfg.provider == "openai":
        return OpenAIAdapter(
            model_id=model_id,
            api_key=api_key,
            base_url=cfg.base_url,
            temperature=cfg.temperature,
        )

    # OpenRouter speaks the OpenAI protocol. Not every routed model honours
    # response_format, so JSON mode stays off and the parser digs the move
    # out of any surrounding prose.
    headers = {}
    if cfg.site_url:
        headers["HTTP-Referer"] = cfg.site_url
    if cfg.app_name:
        headers["X-Title"] = cfg.app_name
    return OpenAIAdapter(
        model_id=model_id,
        api_key=api_key,
        base_url=cfg.base_url or _OPENROUTER_BASE_URL,
        temperature=cfg.temperature,
        extra_headers=headers or None,
        json_mode=False,
    )


def build_orchestrator(config: AppConfig) -> TurnOrchestrator:
    """Wire adapter, collaborator, bot and scores into an orchestrator."""
    collaborator = LLMCollaborator(
        build_adapter(config.ai),
        max_tokens=config.ai.max_output_tokens,
        timeout_s=config.ai.timeout_s,
    )
    bot = BasicBot(
        rng=random.Random(config.game.seed),
        delay_s=config.game.bot_delay_s,
    )
    return TurnOrchestrator(
        ScoreTracker(),
        mode=config.game.mode,
        bot=bot,
        collaborator=collaborator,
        ai_timeout_s=config.ai.timeout_s + _TIMEOUT_GRACE_S,
    )
