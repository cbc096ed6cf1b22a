from __future__ import annotations

from typing import Iterable, List

import pytest

from bingo_hall.card import FREE
from bingo_hall.rng import RandomSource


class ScriptedSource(RandomSource):
    """Replays a fixed list of integers for randint/choice."""

    def __init__(self, values: Iterable[int]):
        super().__init__(engine="scripted")
        self._values: List[int] = list(values)
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        value = self._values[self.calls]
        self.calls += 1
        assert a <= value <= b
        return value

    def choice(self, seq):
        return seq[0]

    def shuffle(self, arr):
        return None


@pytest.fixture
def sample_card():
    return [
        [3, 20, 35, 50, 70],
        [7, 16, 31, 46, 61],
        [1, 22, FREE, 55, 75],
        [12, 30, 44, 60, 66],
        [15, 28, 40, 48, 73],
    ]
