"""The fixed catalogue of winning shapes.

Order matters: :func:`bingo_hall.verify.find_winning_pattern` walks
:data:`CATALOGUE` front to back and stops at the first shape that is covered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .card import SIZE

Coord = Tuple[int, int]

ROW = "row"
COLUMN = "column"
DIAGONAL = "diagonal"
BOX = "box"
CORNER = "corner"
FLOWER = "flower"
CATEGORIES = (ROW, COLUMN, DIAGONAL, BOX, CORNER, FLOWER)


@dataclass(frozen=True)
class Pattern:
    name: str
    category: str
    cells: Tuple[Coord, ...]

    def render(self, mark: str = "X", blank: str = ".") -> str:
        """ASCII grid of the shape, one text line per card row."""
        cells = set(self.cells)
        lines = []
        for r in range(SIZE):
            lines.append(" ".join(mark if (r, c) in cells else blank for c in range(SIZE)))
        return "\n".join(lines)


def _shapes(category: str, named: List[Tuple[str, List[Coord]]]) -> Tuple[Pattern, ...]:
    return tuple(Pattern(name, category, tuple(cells)) for name, cells in named)


ROW_PATTERNS = _shapes(ROW, [(f"row-{r}", [(r, c) for c in range(SIZE)]) for r in range(SIZE)])

COLUMN_PATTERNS = _shapes(
    COLUMN, [(f"column-{c}", [(r, c) for r in range(SIZE)]) for c in range(SIZE)]
)

DIAGONAL_PATTERNS = _shapes(
    DIAGONAL,
    [
        ("anti-diagonal", [(0, 4), (1, 3), (3, 1), (4, 0)]),
        ("main-diagonal", [(0, 0), (1, 1), (3, 3), (4, 4)]),
        ("upper-anti-diagonal", [(0, 3), (1, 2), (2, 1), (3, 0)]),
        ("lower-anti-diagonal", [(1, 4), (2, 3), (3, 2), (4, 1)]),
        ("upper-diagonal", [(0, 1), (1, 2), (2, 3), (3, 4)]),
        ("upper-left-diagonal", [(0, 0), (1, 1), (2, 2), (3, 3)]),
    ],
)

# 2x2 blocks; the four blocks touching the free cell are not part of the game.
BOX_PATTERNS = _shapes(
    BOX,
    [
        ("box-top-left", [(0, 0), (0, 1), (1, 0), (1, 1)]),
        ("box-top-middle", [(0, 1), (0, 2), (1, 1), (1, 2)]),
        ("box-top-middle-right", [(0, 2), (0, 3), (1, 2), (1, 3)]),
        ("box-top-right", [(0, 3), (0, 4), (1, 3), (1, 4)]),
        ("box-middle-left", [(1, 0), (1, 1), (2, 0), (2, 1)]),
        ("box-middle-right", [(1, 3), (1, 4), (2, 3), (2, 4)]),
        ("box-lower-right", [(2, 3), (2, 4), (3, 3), (3, 4)]),
        ("box-lower-left", [(2, 0), (2, 1), (3, 0), (3, 1)]),
        ("box-bottom-left", [(3, 0), (3, 1), (4, 0), (4, 1)]),
        ("box-bottom-middle-left", [(3, 1), (3, 2), (4, 1), (4, 2)]),
        ("box-bottom-middle-right", [(3, 2), (3, 3), (4, 2), (4, 3)]),
        ("box-bottom-right", [(3, 3), (3, 4), (4, 3), (4, 4)]),
    ],
)

CORNER_PATTERN = Pattern("four-corners", CORNER, ((0, 0), (0, 4), (4, 0), (4, 4)))

FLOWER_PATTERNS = _shapes(
    FLOWER,
    [
        ("flower-cross", [(0, 2), (2, 0), (2, 4), (4, 2)]),
        ("flower-center", [(1, 2), (2, 1), (2, 3), (3, 2)]),
        ("flower-top-left", [(0, 1), (1, 0), (1, 2), (2, 1)]),
        ("flower-top-right", [(0, 3), (1, 2), (1, 4), (2, 3)]),
        ("flower-bottom-left", [(2, 1), (3, 0), (3, 2), (4, 1)]),
        ("flower-bottom-right", [(2, 3), (3, 2), (3, 4), (4, 3)]),
    ],
)

CATALOGUE: Tuple[Pattern, ...] = (
    ROW_PATTERNS
    + COLUMN_PATTERNS
    + DIAGONAL_PATTERNS
    + BOX_PATTERNS
    + (CORNER_PATTERN,)
    + FLOWER_PATTERNS
)

BY_NAME: Dict[str, Pattern] = {p.name: p for p in CATALOGUE}


def patterns_in(category: str) -> Tuple[Pattern, ...]:
    if category not in CATEGORIES:
        raise ValueError(f"Unknown pattern category: {category}")
    return tuple(p for p in CATALOGUE if p.category == category)
