"""ModelAdapter — one call shape for every language-model provider.

The AI opponent only ever talks to a ModelAdapter:
- MockAdapter: deterministic and offline, driven by a strategy callable
- OpenAIAdapter / AnthropicAdapter: live SDK clients (OpenRouter goes
  through OpenAIAdapter)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable
import time


class AdapterError(Exception):
    """Raised by adapters on API failures. Raw SDK exceptions never escape."""

    def __init__(
        self,
        error_type: str,
        model_id: str,
        details: str = "",
    ):
        self.error_type = error_type  # "timeout", "rate_limit", "api_error", "empty_response"
        self.model_id = model_id
        self.details = details
        super().__init__(f"{error_type} from {model_id}: {details}")


@dataclass(frozen=True)
class AdapterResponse:
    """Immutable response from a model query."""

    raw_text: str
    input_tokens: int
    output_tokens: int
    latency_ms: float
    model_id: str
    model_version: str


class ModelAdapter(ABC):
    """Abstract base for all model adapters."""

    @abstractmethod
    def query(
        self,
        messages: list[dict[str, str]],
        max_tokens: int,
        timeout_s: float,
        context: dict[str, Any] | None = None,
    ) -> AdapterResponse:
        """Send messages to the model and return its reply."""


# Rough chars-per-token used to cap mock output
_CHARS_PER_TOKEN = 4

MockStrategy = Callable[[list[dict[str, str]], dict[str, Any]], str]


class MockAdapter(ModelAdapter):
    """Offline adapter for tests and demo play.

    The strategy receives (messages, context) and returns the raw reply
    text. The AI opponent puts the board and marks in ``context`` so
    strategies need not parse the prompt.
    """

    def __init__(self, model_id: str, strategy: MockStrategy):
        self._model_id = model_id
        self._strategy = strategy

    def query(
        self,
        messages: list[dict[str, str]],
        max_tokens: int,
        timeout_s: float,
        context: dict[str, Any] | None = None,
    ) -> AdapterResponse:
        start = time.monotonic()
        raw = self._strategy(messages, context or {})

        max_chars = max_tokens * _CHARS_PER_TOKEN
        if len(raw) > max_chars:
            raw = raw[:max_chars]

        elapsed_ms = (time.monotonic() - start) * 1000

        return AdapterResponse(
            raw_text=raw,
            input_tokens=sum(len(m["content"]) for m in messages) // _CHARS_PER_TOKEN,
            output_tokens=max(1, len(raw) // _CHARS_PER_TOKEN),
            latency_ms=elapsed_ms,
            model_id=self._model_id,
            model_version=self._model_id,
        )
