"""TurnOrchestrator — owns the live game and sequences every turn.

Human moves arrive through ``select_cell``. When the machine is due to
move, the orchestrator flags the turn as in flight and hands the work to a
single background worker: the training bot after its delay, or the AI
collaborator with a hard timeout and a training-bot fallback. The worker
reports back through the same lock that guards human moves.

Each automated request is tagged with the game generation it was issued
for. ``reset`` and ``change_mode`` bump the generation, so a reply that
arrives after either is dropped instead of landing on the new game, and
the worker stops waiting on it so the next game is not held up.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import replace
from typing import Callable

from tictacpro.game.board import Board, Mark, empty_cells
from tictacpro.game.bot import BasicBot
from tictacpro.game.collaborator import AiCollaborator, AiMove, CollaboratorError
from tictacpro.game.state import (
    RESET_COMMENTARY,
    GameState,
    Mode,
    ScoreTally,
    ScoreTracker,
    apply_move,
    is_open_cell,
    new_game,
)

__all__ = ["FALLBACK_COMMENTARY", "TurnOrchestrator"]

logger = logging.getLogger(__name__)

FALLBACK_COMMENTARY = "My circuits flickered, but I still see your defeat."

DEFAULT_AI_TIMEOUT_S = 20.0

# How often a pending AI call checks whether its game was abandoned
_CANCEL_POLL_S = 0.05

Listener = Callable[[GameState, ScoreTally], None]


class TurnOrchestrator:
    """State machine for one play session.

    The score tracker is passed in and survives resets; it is zeroed only
    by ``change_mode``. Call ``close`` (or use as a context manager) to stop
    the worker threads.
    """

    def __init__(
        self,
        scores: ScoreTracker | None = None,
        *,
        mode: Mode = Mode.LOCAL_PVP,
        bot: BasicBot | None = None,
        collaborator: AiCollaborator | None = None,
        ai_timeout_s: float = DEFAULT_AI_TIMEOUT_S,
    ) -> None:
        self._scores = scores if scores is not None else ScoreTracker()
        self._bot = bot or BasicBot()
        self._collaborator = collaborator
        self._ai_timeout_s = ai_timeout_s

        self._lock = threading.RLock()
        self._state = new_game(mode)
        self._generation = 0
        self._cancel = threading.Event()
        self._pending: Future | None = None
        self._listeners: list[Listener] = []

        self._turns = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="automated-turn",
        )
        # Separate pool so a hung AI call can be abandoned after the timeout
        self._ai_calls = ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="ai-call",
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        with self._lock:
            return self._state

    @property
    def scores(self) -> ScoreTally:
        with self._lock:
            return self._scores.tally

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener(state, scores)`` after every accepted change."""
        with self._lock:
            self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def select_cell(self, index: int) -> bool:
        """Play ``index`` for the side to move. Returns False if rejected."""
        with self._lock:
            new_state = apply_move(self._state, index)
            if new_state is None:
                logger.debug(
                    "Rejected move at %r (status=%s, in_flight=%s)",
                    index, self._state.status.value,
                    self._state.automated_turn_in_flight,
                )
                return False
            self._commit(new_state)
            self._start_automated_turn_if_due()
        self._notify()
        return True

    def reset(self) -> None:
        """Start a fresh game in the same mode. Scores are kept."""
        with self._lock:
            self._begin_new_game(self._state.mode, RESET_COMMENTARY)
        self._notify()

    def change_mode(self, mode: Mode) -> None:
        """Switch mode, start a fresh game and zero the scores."""
        with self._lock:
            self._scores.reset()
            self._begin_new_game(mode, mode.intro)
        logger.info("Mode changed to %s", mode.value)
        self._notify()

    def wait_for_automated_turn(self, timeout: float | None = None) -> bool:
        """Block until the most recent automated turn has finished.

        Returns False if it is still running after ``timeout`` seconds.
        """
        with self._lock:
            pending = self._pending
        if pending is None:
            return True
        try:
            pending.result(timeout=timeout)
        except FutureTimeoutError:
            return False
        except CancelledError:
            pass
        return True

    def close(self) -> None:
        with self._lock:
            self._generation += 1
            self._cancel.set()
        self._turns.shutdown(wait=True, cancel_futures=True)
        self._ai_calls.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> TurnOrchestrator:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals: state transitions (lock held)
    # ------------------------------------------------------------------

    def _commit(self, new_state: GameState) -> None:
        previous = self._state
        self._state = new_state
        if not previous.status.is_terminal and new_state.status.is_terminal:
            self._scores.record(new_state.status)
            logger.info("Game over: %s", new_state.status.value)

    def _begin_new_game(self, mode: Mode, commentary: str) -> None:
        self._generation += 1
        self._cancel.set()
        self._cancel = threading.Event()
        if self._pending is not None:
            self._pending.cancel()
        self._state = new_game(mode, commentary)

    def _start_automated_turn_if_due(self) -> None:
        state = self._state
        if not state.is_automated_turn or state.automated_turn_in_flight:
            return
        self._state = replace(state, automated_turn_in_flight=True)
        self._pending = self._turns.submit(
            self._run_automated_turn,
            self._generation,
            self._cancel,
            state.mode,
            state.board,
            state.current_mark,
        )

    # ------------------------------------------------------------------
    # Internals: worker side
    # ------------------------------------------------------------------

    def _run_automated_turn(
        self,
        generation: int,
        cancel: threading.Event,
        mode: Mode,
        board: Board,
        mark: Mark,
    ) -> None:
        try:
            if mode is Mode.VS_AI:
                move = self._ask_collaborator(board, mark, cancel)
            elif cancel.wait(self._bot.delay_s):
                move = None
            else:
                move = self._bot.choose(board), None
        except Exception:
            logger.exception("Automated turn failed; playing the first open cell")
            move = (
                empty_cells(board)[0],
                FALLBACK_COMMENTARY if mode is Mode.VS_AI else None,
            )

        if move is None:
            logger.debug("Automated turn for game %d abandoned", generation)
            return
        self._complete_automated_turn(generation, *move)

    def _ask_collaborator(
        self, board: Board, ai_mark: Mark, cancel: threading.Event
    ) -> tuple[int, str] | None:
        """Get the AI's move, or a training-bot move if anything goes wrong.

        Returns None when the game was reset or left while the AI was
        still thinking.
        """
        try:
            move = self._request_ai_move(board, ai_mark, cancel)
            index, commentary = move.index, move.commentary
            if not isinstance(commentary, str):
                raise CollaboratorError(
                    "malformed", f"commentary is {type(commentary).__name__}",
                )
            if is_open_cell(board, index):
                return index, commentary
            logger.warning(
                "AI chose unplayable cell %r; falling back to random move", index,
            )
        except CancelledError:
            return None
        except FutureTimeoutError:
            logger.warning(
                "AI move timed out after %.1fs; falling back to random move",
                self._ai_timeout_s,
            )
        except Exception as e:
            logger.warning("AI move failed (%r); falling back to random move", e)
        return self._bot.choose(board), FALLBACK_COMMENTARY

    def _request_ai_move(
        self, board: Board, ai_mark: Mark, cancel: threading.Event
    ) -> AiMove:
        """Wait for the collaborator, giving up early if ``cancel`` is set.

        Raises CancelledError when the game is abandoned and
        FutureTimeoutError when the AI takes longer than the timeout.
        """
        if self._collaborator is None:
            raise CollaboratorError("unavailable", "no AI collaborator configured")
        future = self._ai_calls.submit(
            self._collaborator.request_move, board, ai_mark, ai_mark.other,
        )
        deadline = time.monotonic() + self._ai_timeout_s
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                future.cancel()
                raise FutureTimeoutError()
            try:
                return future.result(timeout=min(remaining, _CANCEL_POLL_S))
            except FutureTimeoutError:
                # The collaborator raised TimeoutError itself
                if future.done():
                    raise
                if cancel.is_set():
                    future.cancel()
                    raise CancelledError() from None

    def _complete_automated_turn(
        self, generation: int, index: int, commentary: str | None
    ) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug(
                    "Dropping automated move for stale game %d (now %d)",
                    generation, self._generation,
                )
                return
            state = replace(self._state, automated_turn_in_flight=False)
            new_state = apply_move(state, index)
            if new_state is None:
                logger.warning("Automated move at %r was rejected", index)
                self._state = state
            else:
                if commentary is not None:
                    new_state = replace(new_state, commentary=commentary)
                self._commit(new_state)
        self._notify()

    def _notify(self) -> None:
        with self._lock:
            state = self._state
            scores = self._scores.tally
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state, scores)
            except Exception:
                logger.exception("State listener %r failed", listener)
