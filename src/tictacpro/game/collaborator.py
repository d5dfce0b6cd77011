"""AI opponent boundary.

The orchestrator only knows ``AiCollaborator.request_move``. The live
implementation, LLMCollaborator, prompts a ModelAdapter as the "AI Prime"
grandmaster and parses its JSON reply into a move plus commentary.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from tictacpro.core.adapter import AdapterError, ModelAdapter
from tictacpro.core.parser import ReplyParser
from tictacpro.core.sanitizer import clean_commentary, sanitize_text
from tictacpro.core.schemas import packaged_schema
from tictacpro.game.board import Board, Mark, render_cells

__all__ = [
    "AiCollaborator",
    "AiMove",
    "CollaboratorError",
    "LLMCollaborator",
    "build_prompt",
]

logger = logging.getLogger(__name__)

_DEFAULT_MAX_TOKENS = 256
_DEFAULT_TIMEOUT_S = 15.0


@dataclass(frozen=True)
class AiMove:
    index: int
    commentary: str


class CollaboratorError(Exception):
    """The AI could not produce a usable move."""

    def __init__(self, reason: str, details: str = ""):
        self.reason = reason  # "adapter", "malformed"
        self.details = details
        super().__init__(f"{reason}: {details}" if details else reason)


class AiCollaborator(ABC):
    """Anything that can pick a move for the automated mark."""

    @abstractmethod
    def request_move(self, board: Board, ai_mark: Mark, human_mark: Mark) -> AiMove:
        """Return the chosen cell and a line of commentary.

        May block. Raises CollaboratorError (or anything else) on failure;
        callers must also check the index, which is not guaranteed legal.
        """


def build_prompt(board: Board, ai_mark: Mark, human_mark: Mark) -> str:
    lines = [
        'You are a Grandmaster Tic-Tac-Toe Artificial Intelligence named "AI Prime".',
        "The current board state is represented by indices 0-8: "
        f"{render_cells(board)}.",
        "Cells showing a number are empty; cells showing X or O are taken.",
        f"You are playing as '{ai_mark.value}'. The human is '{human_mark.value}'.",
        "",
        "Tasks:",
        "1. Select the best next move index (0-8) that is currently empty.",
        "2. Provide a short, witty, or slightly arrogant commentary about your "
        "move or the human's performance. Keep it under 20 words.",
        "",
        "Rules:",
        "- Always win if possible.",
        "- Always block the human if they are about to win.",
        "- If neither, take center or corners.",
        "",
        "Respond with a JSON object like:",
        '  {"index": 4, "commentary": "..."}',
        "",
        "IMPORTANT: Respond with ONLY a single JSON object. "
        "No markdown fences, no explanation before or after.",
    ]
    return "\n".join(lines)


class LLMCollaborator(AiCollaborator):
    """AiCollaborator backed by a language model."""

    def __init__(
        self,
        adapter: ModelAdapter,
        max_tokens: int = _DEFAULT_MAX_TOKENS,
        timeout_s: float = _DEFAULT_TIMEOUT_S,
    ) -> None:
        self._adapter = adapter
        self._max_tokens = max_tokens
        self._timeout_s = timeout_s
        self._parser = ReplyParser()
        self._schema = packaged_schema("ai_move")

    def request_move(self, board: Board, ai_mark: Mark, human_mark: Mark) -> AiMove:
        messages = [{"role": "user", "content": build_prompt(board, ai_mark, human_mark)}]
        context = {
            "board": [None if c is None else c.value for c in board],
            "ai_mark": ai_mark.value,
            "human_mark": human_mark.value,
        }
        try:
            response = self._adapter.query(
                messages,
                max_tokens=self._max_tokens,
                timeout_s=self._timeout_s,
                context=context,
            )
        except AdapterError as e:
            raise CollaboratorError("adapter", str(e)) from e

        result = self._parser.parse(sanitize_text(response.raw_text), self._schema)
        if result.injection_detected:
            logger.warning(
                "Possible prompt injection in reply from %s", response.model_id
            )
        if not result.success:
            raise CollaboratorError("malformed", result.error or "")

        logger.debug(
            "%s chose %s in %.0f ms",
            response.model_id, result.payload["index"], response.latency_ms,
        )
        return AiMove(
            index=int(result.payload["index"]),
            commentary=clean_commentary(result.payload["commentary"]),
        )
