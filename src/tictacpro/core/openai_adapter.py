"""OpenAI-compatible adapter.

Talks to the OpenAI API or any endpoint speaking the same protocol
(OpenRouter, local servers) via a base_url override. Asks for a JSON
object reply where the model family supports it.
"""

import time
from typing import Any

import openai
from openai import OpenAI

from tictacpro.core.adapter import AdapterError, AdapterResponse, ModelAdapter

_RATE_LIMIT_BACKOFF_S = 5.0

# Reasoning families take max_completion_tokens and a fixed temperature
_REASONING_PREFIXES = ("gpt-5", "o1", "o3", "o4")


class OpenAIAdapter(ModelAdapter):
    """Adapter for OpenAI-compatible chat completions."""

    def __init__(
        self,
        model_id: str,
        api_key: str,
        base_url: str | None = None,
        temperature: float = 0.0,
        extra_headers: dict[str, str] | None = None,
        json_mode: bool = True,
    ):
        self._model_id = model_id
        self._temperature = temperature
        self._json_mode = json_mode

        client_kwargs: dict[str, Any] = {"api_key": api_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        if extra_headers:
            client_kwargs["default_headers"] = extra_headers
        self._client = OpenAI(**client_kwargs)

    def query(
        self,
        messages: list[dict[str, str]],
        max_tokens: int,
        timeout_s: float,
        context: dict[str, Any] | None = None,
    ) -> AdapterResponse:
        start = time.monotonic()
        completion = self._call_api(messages, max_tokens, timeout_s)
        elapsed_ms = (time.monotonic() - start) * 1000

        if not completion.choices:
            raise AdapterError(
                "empty_response", self._model_id,
                "API returned no choices",
            )

        raw_text = completion.choices[0].message.content or ""
        if not raw_text.strip():
            raise AdapterError(
                "empty_response", self._model_id,
                "API returned an empty message",
            )

        usage = completion.usage
        return AdapterResponse(
            raw_text=raw_text,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            latency_ms=elapsed_ms,
            model_id=self._model_id,
            model_version=completion.model or self._model_id,
        )

    def _request_kwargs(self, messages, max_tokens, timeout_s) -> dict[str, Any]:
        reasoning_model = any(p in self._model_id for p in _REASONING_PREFIXES)
        token_param = "max_completion_tokens" if reasoning_model else "max_tokens"
        kwargs: dict[str, Any] = {
            "model": self._model_id,
            "messages": messages,
            token_param: max_tokens,
            "timeout": timeout_s,
        }
        if not reasoning_model:
            kwargs["temperature"] = self._temperature
        if self._json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        return kwargs

    def _call_api(self, messages, max_tokens, timeout_s):
        """Call the API with one rate-limit retry."""
        kwargs = self._request_kwargs(messages, max_tokens, timeout_s)
        for attempt in range(2):
            try:
                return self._client.chat.completions.create(**kwargs)
            except openai.APITimeoutError as e:
                raise AdapterError("timeout", self._model_id, str(e)) from e
            except openai.RateLimitError as e:
                if attempt == 0:
                    time.sleep(_RATE_LIMIT_BACKOFF_S)
                    continue
                raise AdapterError("rate_limit", self._model_id, str(e)) from e
            except openai.APIError as e:
                raise AdapterError("api_error", self._model_id, str(e)) from e
            except Exception as e:
                raise AdapterError("api_error", self._model_id, str(e)) from e
        raise AdapterError("api_error", self._model_id, "max retries exceeded")
