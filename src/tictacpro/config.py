"""Game configuration loader."""

import yaml
from dataclasses import dataclass, field
from pathlib import Path

from tictacpro.game.state import Mode


@dataclass
class GameConfig:
    mode: Mode = Mode.LOCAL_PVP
    bot_delay_s: float = 0.6
    seed: int | None = None  # bot RNG seed; None for system randomness


@dataclass
class AIConfig:
    provider: str = "mock"  # "mock", "openai", "anthropic", "openrouter"
    model_id: str | None = None
    strategy: str | None = "grandmaster"  # for mock provider
    api_key_env: str | None = None      # env var name for API key
    base_url: str | None = None         # custom API base URL
    site_url: str | None = None         # OpenRouter attribution
    app_name: str | None = None         # OpenRouter attribution
    temperature: float = 0.7
    max_output_tokens: int = 256
    timeout_s: float = 15.0


@dataclass
class AppConfig:
    game: GameConfig = field(default_factory=GameConfig)
    ai: AIConfig = field(default_factory=AIConfig)


def parse_mode(value: str) -> Mode:
    """Accept a mode by value ("pvp") or by name ("LOCAL_PVP")."""
    try:
        return Mode(value.lower())
    except ValueError:
        pass
    try:
        return Mode[value.upper()]
    except KeyError:
        choices = ", ".join(m.value for m in Mode)
        raise ValueError(f"Unknown mode: {value!r}. Use one of: {choices}") from None


def load_config(path: Path) -> AppConfig:
    """Load game config from a YAML file. Every key is optional."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    g = raw.get("game") or {}
    a = raw.get("ai") or {}
    defaults = AIConfig()

    game = GameConfig(
        mode=parse_mode(g["mode"]) if "mode" in g else Mode.LOCAL_PVP,
        bot_delay_s=float(g.get("bot_delay_s", 0.6)),
        seed=g.get("seed"),
    )

    ai = AIConfig(
        provider=a.get("provider", defaults.provider),
        model_id=a.get("model_id"),
        strategy=a.get("strategy", defaults.strategy),
        api_key_env=a.get("api_key_env"),
        base_url=a.get("base_url"),
        site_url=a.get("site_url"),
        app_name=a.get("app_name"),
        temperature=a.get("temperature", defaults.temperature),
        max_output_tokens=a.get("max_output_tokens", defaults.max_output_tokens),
        timeout_s=a.get("timeout_s", defaults.timeout_s),
    )

    return AppConfig(game=game, ai=ai)
