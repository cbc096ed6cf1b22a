from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np


@dataclass
class RandomSource:
    """Entropy source handed to the card generator and the room draw pool."""

    engine: str

    def randint(self, a: int, b: int) -> int:
        raise NotImplementedError

    def choice(self, seq: Sequence[int]) -> int:
        raise NotImplementedError

    def shuffle(self, arr: List[int]) -> None:
        raise NotImplementedError


class PyRandomSource(RandomSource):
    def __init__(self, seed: Optional[int] = None):
        super().__init__(engine="py_random")
        self._rng = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[int]) -> int:
        return self._rng.choice(list(seq))

    def shuffle(self, arr: List[int]) -> None:
        self._rng.shuffle(arr)


class NumpyPCG64Source(RandomSource):
    def __init__(self, seed: Optional[int] = None):
        super().__init__(engine="numpy_pcg64")
        self._rng = np.random.Generator(np.random.PCG64(seed))

    def randint(self, a: int, b: int) -> int:
        return int(self._rng.integers(low=a, high=b + 1))

    def choice(self, seq: Sequence[int]) -> int:
        return int(self._rng.choice(list(seq)))

    def shuffle(self, arr: List[int]) -> None:
        self._rng.shuffle(arr)


def create_rng(engine: str, seed: Optional[int] = None) -> RandomSource:
    """Build a source by engine name; ``seed=None`` draws from OS entropy."""
    engine = (engine or "py_random").strip().lower()
    if engine == "py_random":
        return PyRandomSource(seed)
    if engine == "numpy_pcg64":
        return NumpyPCG64Source(seed)
    raise ValueError(f"Unsupported RNG engine: {engine}")


def derive_room_seed(base_seed: int, room_code: str, purpose: str) -> int:
    """Derive a per-room seed from base seed, room code, and purpose using sha256.

    Returns a 63-bit positive integer suitable for seeding common RNGs.
    """
    s = f"{base_seed}|{room_code}|{purpose}".encode("utf-8")
    digest = hashlib.sha256(s).digest()
    # take first 8 bytes, mask to 63 bits to ensure non-negative
    val = int.from_bytes(digest[:8], byteorder="big") & ((1 << 63) - 1)
    return val
