from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Sequence

from .card import COLUMN_RANGES, FREE, FREE_CELL, SIZE, Card, Cell, ensure_card_shape
from .errors import MalformedCardError


def card_to_json(card: Sequence[Sequence[Cell]]) -> Card:
    return [list(row) for row in card]


def card_from_json(data: Any) -> Card:
    """Parse a wire card and check it could have come from the generator.

    Raises MalformedCardError on shape, type, range, duplicate or free-cell problems.
    """
    if not isinstance(data, list):
        raise MalformedCardError("Card must be a list of rows")
    ensure_card_shape(data)
    card: Card = []
    for r, row in enumerate(data):
        parsed = []
        for c, value in enumerate(row):
            if (r, c) == FREE_CELL:
                if value != FREE:
                    raise MalformedCardError(f"Cell {FREE_CELL} must be {FREE!r}")
                parsed.append(FREE)
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise MalformedCardError(f"Cell ({r},{c}) must be an integer")
            low, high = COLUMN_RANGES[c]
            if not low <= value <= high:
                raise MalformedCardError(f"Cell ({r},{c}) value {value} outside {low}-{high}")
            parsed.append(value)
        card.append(parsed)
    for c in range(SIZE):
        column = [card[r][c] for r in range(SIZE) if (r, c) != FREE_CELL]
        if len(set(column)) != len(column):
            raise MalformedCardError(f"Column {c} repeats a number")
    return card


def canonical_json_dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=True, sort_keys=True, separators=(",", ":"))


def card_hash(card: Sequence[Sequence[Cell]]) -> str:
    payload = canonical_json_dumps(card_to_json(card))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def ensure_parent(path: Path, *, mkdirs: bool) -> None:
    parent = path.parent
    if not parent.exists() and mkdirs:
        parent.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, data: object, *, mkdirs: bool = True, overwrite: bool = False) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    text = json.dumps(data, ensure_ascii=True, sort_keys=True, indent=2)
    path.write_text(text + "\n", encoding="utf-8")


def card_document(card: Sequence[Sequence[Cell]], *, engine: str, seed: int | None) -> Dict[str, object]:
    return {
        "card": card_to_json(card),
        "card_hash": card_hash(card),
        "rng_engine": engine,
        "seed": seed,
    }
