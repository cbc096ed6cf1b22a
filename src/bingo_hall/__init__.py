"""Multiplayer bingo rooms with a shared card generator and win-pattern verifier."""

from .card import FREE, generate_card
from .patterns import CATALOGUE, Pattern
from .verify import find_winning_pattern, has_win
from .version import __version__

__all__ = [
    "CATALOGUE",
    "FREE",
    "Pattern",
    "__version__",
    "find_winning_pattern",
    "generate_card",
    "has_win",
]
