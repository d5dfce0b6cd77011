"""Mock AI strategies for offline play and testing.

Each strategy matches the MockAdapter signature:
    (messages: list[dict], context: dict) -> str

``context`` carries "board" (9 entries of "X", "O" or None), "ai_mark" and
"human_mark", as supplied by LLMCollaborator.

Strategies:
- grandmaster_strategy: win, else block, else centre, corners, edges.
- first_empty_strategy: lowest-numbered empty cell.
- garbage_strategy: non-JSON text (adversarial testing).
- occupied_strategy: well-formed JSON naming a taken cell (adversarial testing).
"""

from __future__ import annotations

import json
from typing import Any

from tictacpro.game.board import WIN_LINES

# Preference order once nothing needs winning or blocking
_PREFERRED_CELLS = (4, 0, 2, 6, 8, 1, 3, 5, 7)


def grandmaster_strategy(
    messages: list[dict[str, str]], context: dict[str, Any]
) -> str:
    board = context["board"]
    ai, human = context["ai_mark"], context["human_mark"]

    index = _completing_cell(board, ai)
    if index is not None:
        line = "Inevitable. Three in a row, as foretold."
    else:
        index = _completing_cell(board, human)
        if index is not None:
            line = "Nice try. I saw that coming three moves ago."
        else:
            index = next(i for i in _PREFERRED_CELLS if board[i] is None)
            line = "Positional dominance. Your move, mortal."
    return json.dumps({"index": index, "commentary": line})


def first_empty_strategy(
    messages: list[dict[str, str]], context: dict[str, Any]
) -> str:
    index = context["board"].index(None)
    return json.dumps({"index": index, "commentary": "Top-left is a fine place to start."})


def garbage_strategy(
    messages: list[dict[str, str]], context: dict[str, Any]
) -> str:
    return "I refuse to play by your rules!!! %%% ~~~"


def occupied_strategy(
    messages: list[dict[str, str]], context: dict[str, Any]
) -> str:
    board = context["board"]
    taken = [i for i, cell in enumerate(board) if cell is not None]
    index = taken[0] if taken else 0
    return json.dumps({"index": index, "commentary": "I'll just sit here, thanks."})


def _completing_cell(board: list, mark: str) -> int | None:
    """Return the empty cell that gives ``mark`` three in a row, if any."""
    for line in WIN_LINES:
        cells = [board[i] for i in line]
        if cells.count(mark) == 2 and cells.count(None) == 1:
            return line[cells.index(None)]
    return None


STRATEGY_REGISTRY = {
    "grandmaster": grandmaster_strategy,
    "first_empty": first_empty_strategy,
    "garbage": garbage_strategy,
    "occupied": occupied_strategy,
}
