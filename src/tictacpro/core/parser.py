"""ReplyParser — pull a JSON move out of raw model output.

Finds JSON objects anywhere in the text (bare, in prose, or inside a
markdown fence), validates each against a JSON Schema and keeps the last
valid one. Models that change their mind mid-reply get their final answer
used, not the first draft.
"""

import json
import re
from dataclasses import dataclass

import jsonschema

from tictacpro.core.sanitizer import detect_injection

# Outermost { ... } with at most one level of nesting
_JSON_OBJECT_RE = re.compile(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}")


def _loads_lenient(candidate: str):
    """json.loads, retried with raw newlines collapsed.

    Models often break long commentary across lines inside the string
    value, which strict JSON rejects.
    """
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        return json.loads(re.sub(r"\s*\n\s*", " ", candidate))


@dataclass(frozen=True)
class ParseResult:
    """Result of parsing a model's raw output."""

    success: bool
    payload: dict | None
    raw_json: str | None
    error: str | None
    injection_detected: bool


class ReplyParser:
    """Extract the last schema-valid JSON object from model output."""

    def parse(self, raw_text: str, schema: dict) -> ParseResult:
        injection = detect_injection(raw_text)
        candidates = _JSON_OBJECT_RE.findall(raw_text)

        if not candidates:
            return ParseResult(
                success=False,
                payload=None,
                raw_json=None,
                error="No JSON object found in output",
                injection_detected=injection,
            )

        last_error = None
        best = None

        for candidate in candidates:
            try:
                parsed = _loads_lenient(candidate)
            except json.JSONDecodeError as e:
                last_error = f"JSON parse error: {e}"
                continue

            try:
                jsonschema.validate(parsed, schema)
            except jsonschema.ValidationError as e:
                last_error = f"Schema validation: {e.message}"
                continue

            best = (parsed, candidate)

        if best is None:
            return ParseResult(
                success=False,
                payload=None,
                raw_json=candidates[-1],
                error=last_error,
                injection_detected=injection,
            )

        return ParseResult(
            success=True,
            payload=best[0],
            raw_json=best[1],
            error=None,
            injection_detected=injection,
        )
