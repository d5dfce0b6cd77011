"""BasicBot — the training opponent, and the fallback when the AI fails."""

from __future__ import annotations

import random

from tictacpro.game.board import Board, empty_cells

DEFAULT_BOT_DELAY_S = 0.6


class BasicBot:
    """Picks a uniformly random empty cell.

    ``delay_s`` is how long the orchestrator waits before playing the bot's
    move so the human can see the turn change.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        delay_s: float = DEFAULT_BOT_DELAY_S,
    ) -> None:
        self._rng = rng or random.Random()
        self.delay_s = delay_s

    def choose(self, board: Board) -> int:
        available = empty_cells(board)
        if not available:
            raise ValueError("No empty cells to choose from")
        return self._rng.choice(available)
