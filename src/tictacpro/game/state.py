"""Game state, modes, move application, and score tracking."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from tictacpro.game.board import (
    BOARD_SIZE,
    Board,
    GameStatus,
    Mark,
    empty_board,
    evaluate,
)

__all__ = [
    "GameState",
    "Mode",
    "ScoreTally",
    "ScoreTracker",
    "STARTING_MARK",
    "apply_move",
    "is_open_cell",
    "new_game",
]

STARTING_MARK = Mark.X

WELCOME_COMMENTARY = "Welcome to the arena. Choose your mode and begin."
RESET_COMMENTARY = "A new round begins. Don't disappoint me."
DRAW_COMMENTARY = "A stalemate? I expected better."


class Mode(Enum):
    LOCAL_PVP = "pvp"
    VS_BASIC_BOT = "basic"
    VS_AI = "ai"

    @property
    def automated_mark(self) -> Mark | None:
        """The mark played by the machine in this mode, if any."""
        if self is Mode.LOCAL_PVP:
            return None
        return Mark.O

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]

    @property
    def intro(self) -> str:
        return _MODE_INTROS[self]


_MODE_LABELS = {
    Mode.LOCAL_PVP: "Local 2-Player",
    Mode.VS_BASIC_BOT: "VS Training Bot",
    Mode.VS_AI: "VS Artificial Intelligence Grandmaster",
}

_MODE_INTROS = {
    Mode.LOCAL_PVP: "Entering local multiplayer combat.",
    Mode.VS_BASIC_BOT: "Entering local multiplayer combat.",
    Mode.VS_AI: "You dare challenge the Artificial Intelligence Grandmaster?",
}


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of one game.

    Only the TurnOrchestrator holds the current snapshot; everything else
    receives copies and proposes changes through ``apply_move``.
    """

    board: Board
    current_mark: Mark
    status: GameStatus
    winning_line: tuple[int, int, int] | None
    mode: Mode
    automated_turn_in_flight: bool
    commentary: str

    @property
    def is_automated_turn(self) -> bool:
        """True when the machine is due to move in an ongoing game."""
        return (
            self.status is GameStatus.ONGOING
            and self.current_mark is self.mode.automated_mark
        )


def new_game(mode: Mode, commentary: str = WELCOME_COMMENTARY) -> GameState:
    return GameState(
        board=empty_board(),
        current_mark=STARTING_MARK,
        status=GameStatus.ONGOING,
        winning_line=None,
        mode=mode,
        automated_turn_in_flight=False,
        commentary=commentary,
    )


def victory_commentary(mark: Mark) -> str:
    return f"{mark.value} has claimed victory!"


def _is_cell_index(index: object) -> bool:
    return (
        isinstance(index, int)
        and not isinstance(index, bool)
        and 0 <= index < BOARD_SIZE
    )


def is_open_cell(board: Board, index: object) -> bool:
    """True if ``index`` names an empty cell on ``board``."""
    return _is_cell_index(index) and board[index] is None


def apply_move(state: GameState, index: int) -> GameState | None:
    """Place the current mark at ``index`` and return the resulting state.

    Returns None, leaving ``state`` untouched, when the index is off the
    board, the cell is taken, the game is over, or an automated move is
    outstanding.
    """
    if not _is_cell_index(index):
        return None
    if state.board[index] is not None:
        return None
    if state.status is not GameStatus.ONGOING:
        return None
    if state.automated_turn_in_flight:
        return None

    cells = list(state.board)
    cells[index] = state.current_mark
    board = tuple(cells)
    result = evaluate(board)

    if result.status is GameStatus.ONGOING:
        commentary = state.commentary
    elif result.status is GameStatus.DRAW:
        commentary = DRAW_COMMENTARY
    else:
        commentary = victory_commentary(result.status.winner)

    return replace(
        state,
        board=board,
        current_mark=state.current_mark.other,
        status=result.status,
        winning_line=result.winning_line,
        commentary=commentary,
    )


# ----------------------------------------------------------------------
# Scoring
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class ScoreTally:
    x_wins: int = 0
    o_wins: int = 0
    draws: int = 0

    @property
    def games(self) -> int:
        return self.x_wins + self.o_wins + self.draws


class ScoreTracker:
    """Win/draw counters for one mode session.

    ``record`` is called once per finished game; ``reset`` when the mode
    changes. There are no other ways to change the counts.
    """

    def __init__(self) -> None:
        self._x_wins = 0
        self._o_wins = 0
        self._draws = 0

    def record(self, status: GameStatus) -> None:
        if status is GameStatus.X_WON:
            self._x_wins += 1
        elif status is GameStatus.O_WON:
            self._o_wins += 1
        elif status is GameStatus.DRAW:
            self._draws += 1
        else:
            raise ValueError(f"Cannot record a non-terminal status: {status}")

    def reset(self) -> None:
        self._x_wins = 0
        self._o_wins = 0
        self._draws = 0

    @property
    def tally(self) -> ScoreTally:
        return ScoreTally(
            x_wins=self._x_wins, o_wins=self._o_wins, draws=self._draws
        )
