"""Win verification against the pattern catalogue.

``drawn`` is whatever set of values the caller trusts: the room's drawn
numbers on the server, or the values under a player's marked cells on the
client (see :func:`marked_values`). The free cell is covered regardless.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, Optional, Sequence, Set, Tuple

from .card import FREE, SIZE, Cell, ensure_card_shape
from .patterns import CATALOGUE, COLUMN, ROW, Pattern


def _covered(value: Cell, drawn: AbstractSet[Cell]) -> bool:
    return value == FREE or value in drawn


def _matches(card: Sequence[Sequence[Cell]], pattern: Pattern, drawn: AbstractSet[Cell]) -> bool:
    if pattern.category == ROW:
        row = pattern.cells[0][0]
        return all(_covered(value, drawn) for value in card[row])
    if pattern.category == COLUMN:
        col = pattern.cells[0][1]
        return all(_covered(row[col], drawn) for row in card)
    return all(_covered(card[r][c], drawn) for r, c in pattern.cells)


def find_winning_pattern(
    card: Sequence[Sequence[Cell]], drawn: Iterable[Cell]
) -> Optional[Pattern]:
    """Return the first catalogue pattern fully covered on ``card``, or None.

    Raises MalformedCardError when ``card`` is not a 5x5 grid.
    """
    ensure_card_shape(card)
    drawn_set = drawn if isinstance(drawn, (set, frozenset)) else set(drawn)
    for pattern in CATALOGUE:
        if _matches(card, pattern, drawn_set):
            return pattern
    return None


def has_win(card: Sequence[Sequence[Cell]], drawn: Iterable[Cell]) -> bool:
    return find_winning_pattern(card, drawn) is not None


def marked_values(
    card: Sequence[Sequence[Cell]], positions: Iterable[Tuple[int, int]]
) -> Set[Cell]:
    """Values under the marked (row, col) positions; out-of-grid positions are ignored."""
    ensure_card_shape(card)
    values: Set[Cell] = set()
    for row, col in positions:
        if 0 <= row < SIZE and 0 <= col < SIZE:
            values.add(card[row][col])
    return values
