"""tictacpro — Tic-Tac-Toe against a friend, a training bot, or a language model."""

__version__ = "0.1.0"
