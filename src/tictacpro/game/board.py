"""Board model and evaluator.

A board is an immutable 9-tuple of cells, row-major: index = row * 3 + col.
Each cell holds a Mark or None. ``evaluate`` is the only place that decides
whether a board is won, drawn, or still in play.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

__all__ = [
    "Board",
    "Evaluation",
    "GameStatus",
    "Mark",
    "WIN_LINES",
    "BOARD_SIZE",
    "empty_board",
    "empty_cells",
    "evaluate",
    "render_cells",
]

BOARD_SIZE = 9


class Mark(Enum):
    """The two symbols a player can place. X always moves first."""

    X = "X"
    O = "O"

    @property
    def other(self) -> Mark:
        return Mark.O if self is Mark.X else Mark.X


class GameStatus(Enum):
    ONGOING = "ongoing"
    X_WON = "x_won"
    O_WON = "o_won"
    DRAW = "draw"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.ONGOING

    @property
    def winner(self) -> Mark | None:
        if self is GameStatus.X_WON:
            return Mark.X
        if self is GameStatus.O_WON:
            return Mark.O
        return None

    @classmethod
    def won_by(cls, mark: Mark) -> GameStatus:
        return cls.X_WON if mark is Mark.X else cls.O_WON


Board = tuple[Optional[Mark], ...]

# Eight lines to check for a win: 3 rows, 3 cols, 2 diagonals
WIN_LINES: tuple[tuple[int, int, int], ...] = (
    # Rows
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    # Columns
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    # Diagonals
    (0, 4, 8),
    (2, 4, 6),
)


@dataclass(frozen=True)
class Evaluation:
    """Outcome of a board: status plus the winning triple, if any."""

    status: GameStatus
    winning_line: tuple[int, int, int] | None = None


def empty_board() -> Board:
    return (None,) * BOARD_SIZE


def empty_cells(board: Board) -> list[int]:
    """Return indices of unoccupied cells in ascending order."""
    return [i for i, cell in enumerate(board) if cell is None]


def evaluate(board: Board) -> Evaluation:
    """Classify a board as won, drawn, or ongoing.

    Lines are scanned in fixed order (rows, columns, diagonals) and the first
    complete line wins. Two distinct winners at once can only come from a
    board built by illegal play; the first line in scan order is reported.
    """
    for line in WIN_LINES:
        a, b, c = line
        mark = board[a]
        if mark is not None and mark == board[b] == board[c]:
            return Evaluation(GameStatus.won_by(mark), line)
    if all(cell is not None for cell in board):
        return Evaluation(GameStatus.DRAW)
    return Evaluation(GameStatus.ONGOING)


def render_cells(board: Board) -> str:
    """Pipe-joined board, empty cells shown as their index: ``0|X|2|...``."""
    return "|".join(
        str(i) if cell is None else cell.value for i, cell in enumerate(board)
    )
