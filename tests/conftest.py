"""Shared test fixtures for tictacpro."""

import random
import threading

import pytest

from tictacpro.game.board import Mark
from tictacpro.game.bot import BasicBot
from tictacpro.game.collaborator import AiCollaborator, AiMove
from tictacpro.game.orchestrator import TurnOrchestrator
from tictacpro.game.state import Mode, ScoreTracker

X, O = Mark.X, Mark.O

# Generous join timeout for worker threads
WAIT_S = 5.0


def board_of(text: str):
    """Build a board from a 9-char string: 'X', 'O', anything else empty."""
    assert len(text) == 9
    return tuple(Mark(c) if c in "XO" else None for c in text)


class ScriptedCollaborator(AiCollaborator):
    """Returns queued moves in order; raises queued exceptions."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def request_move(self, board, ai_mark, human_mark):
        self.calls.append((board, ai_mark, human_mark))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class BlockingCollaborator(AiCollaborator):
    """Blocks until released, then answers with ``move``."""

    def __init__(self, move: AiMove):
        self.move = move
        self.started = threading.Event()
        self.release = threading.Event()

    def request_move(self, board, ai_mark, human_mark):
        self.started.set()
        self.release.wait(WAIT_S)
        return self.move


@pytest.fixture
def bot():
    return BasicBot(rng=random.Random(42), delay_s=0.0)


@pytest.fixture
def scores():
    return ScoreTracker()


@pytest.fixture
def make_orchestrator(bot, scores):
    """Factory that builds orchestrators and closes them after the test."""
    created = []

    def factory(mode=Mode.LOCAL_PVP, collaborator=None, ai_timeout_s=WAIT_S, bot_=None):
        orch = TurnOrchestrator(
            scores,
            mode=mode,
            bot=bot_ or bot,
            collaborator=collaborator,
            ai_timeout_s=ai_timeout_s,
        )
        created.append(orch)
        return orch

    yield factory
    for orch in created:
        orch.close()

