"""Text sanitization and prompt injection detection.

Model replies pass through sanitize_text before parsing, and commentary is
clipped before it reaches the screen. Injection detection only flags; the
reply is still used if it is otherwise valid.
"""

import re

# Control chars to strip (keep \t=0x09, \n=0x0a, \r=0x0d)
_CONTROL_RE = re.compile(
    r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]"
)

# Zero-width and BOM characters
_ZERO_WIDTH_RE = re.compile(
    r"[\u200b\u200c\u200d\u2060\ufeff\u00ad]"
)

_WHITESPACE_RUN_RE = re.compile(r"\s+")

# Injection patterns, case-insensitive
_INJECTION_PATTERNS = [
    re.compile(r"ignore\s+previous\s+instructions", re.IGNORECASE),
    re.compile(r"<\s*system\s*>", re.IGNORECASE),
    re.compile(r"\[\s*INST\s*\]", re.IGNORECASE),
    re.compile(r'"role"\s*:\s*"system"', re.IGNORECASE),
    re.compile(r"you\s+are\s+now\s+(a|an|the|free|unbound)", re.IGNORECASE),
    re.compile(r"new\s+instructions?\s*:", re.IGNORECASE),
    re.compile(r"disregard\s+(all\s+)?previous", re.IGNORECASE),
]

MAX_COMMENTARY_CHARS = 160


def sanitize_text(text: str) -> str:
    """Strip control characters and zero-width chars. Preserves normal unicode."""
    text = _CONTROL_RE.sub("", text)
    text = _ZERO_WIDTH_RE.sub("", text)
    return text


def clean_commentary(text: str, max_chars: int = MAX_COMMENTARY_CHARS) -> str:
    """Collapse whitespace and clip to ``max_chars`` with a trailing "..."."""
    text = _WHITESPACE_RUN_RE.sub(" ", sanitize_text(text)).strip()
    if len(text) > max_chars:
        text = text[: max_chars - 3].rstrip() + "..."
    return text


def detect_injection(text: str) -> bool:
    """Return True if text contains a known prompt injection pattern.

    Heuristic only; false positives are possible but rare.
    """
    return any(p.search(text) for p in _INJECTION_PATTERNS)
