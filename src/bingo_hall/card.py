"""Card generation for the 75-ball game.

A card is five rows of five cells. Column ``c`` draws from its own block of
fifteen numbers (B 1-15, I 16-30, N 31-45, G 46-60, O 61-75) and the centre
cell holds the :data:`FREE` sentinel instead of a number.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

from .errors import MalformedCardError
from .rng import RandomSource, create_rng

FREE = "FREE"
SIZE = 5
FREE_CELL: Tuple[int, int] = (2, 2)
LETTERS = "BINGO"
COLUMN_RANGES: Tuple[Tuple[int, int], ...] = (
    (1, 15),
    (16, 30),
    (31, 45),
    (46, 60),
    (61, 75),
)
MAX_NUMBER = COLUMN_RANGES[-1][1]

Cell = Union[int, str]
Card = List[List[Cell]]


def draw_unique(rng: RandomSource, low: int, high: int, count: int) -> List[int]:
    """Collect ``count`` distinct integers from ``[low, high]`` by rejection sampling."""
    if count > high - low + 1:
        raise ValueError(f"Cannot draw {count} unique numbers from [{low}, {high}]")
    numbers: List[int] = []
    while len(numbers) < count:
        num = rng.randint(low, high)
        if num not in numbers:
            numbers.append(num)
    return numbers


def generate_card(rng: RandomSource | None = None) -> Card:
    rng = rng or create_rng("py_random")
    columns = [draw_unique(rng, low, high, SIZE) for low, high in COLUMN_RANGES]
    card: Card = [[columns[c][r] for c in range(SIZE)] for r in range(SIZE)]
    row, col = FREE_CELL
    card[row][col] = FREE
    return card


def column_letter(number: int) -> str:
    for letter, (low, high) in zip(LETTERS, COLUMN_RANGES):
        if low <= number <= high:
            return letter
    return ""


def ensure_card_shape(card: Sequence[Sequence[Cell]]) -> None:
    if not isinstance(card, Sequence) or len(card) != SIZE:
        raise MalformedCardError(f"Card must have {SIZE} rows")
    for row in card:
        if isinstance(row, str) or not isinstance(row, Sequence) or len(row) != SIZE:
            raise MalformedCardError(f"Every card row must have {SIZE} cells")
