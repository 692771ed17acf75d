from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List, Sequence, Tuple

from .board import CELL_COUNT, MAX_DIFFICULTY, MIN_DIFFICULTY, Cell
from .engine import apply_cell_edit

logger = logging.getLogger(__name__)

Suggestion = Tuple[str, int]


def _clamp_difficulty(value: Any) -> int:
    try:
        d = int(value)
    except (TypeError, ValueError):
        return MIN_DIFFICULTY
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, d))


def normalize_suggestions(items: Iterable[Any]) -> List[Suggestion]:
    """Keeps entries with a non-blank text, clamps difficulty, caps at 25."""
    out: List[Suggestion] = []
    for it in items:
        if not isinstance(it, dict):
            continue
        text = str(it.get("text") or "").strip()
        if not text:
            continue
        out.append((text, _clamp_difficulty(it.get("difficulty"))))
        if len(out) >= CELL_COUNT:
            break
    return out


def parse_suggestions(text: str) -> List[Suggestion]:
    """Parses a suggestion service reply: a JSON array of {text, difficulty}.

    A reply that is not valid JSON gives an empty list.
    """
    if not text:
        return []
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.warning("goal suggestion reply is not valid JSON: %s", e)
        return []
    if not isinstance(data, list):
        logger.warning("goal suggestion reply is not a list: %r", type(data).__name__)
        return []
    return normalize_suggestions(data)


def apply_suggestions(cells: Sequence[Cell], suggestions: Sequence[Suggestion]) -> Tuple[Cell, ...]:
    """Writes suggestions onto cells in position order; extra cells are left as they are."""
    ordered = sorted(cells, key=lambda c: c.position)
    result: Tuple[Cell, ...] = tuple(cells)
    for cell, (text, difficulty) in zip(ordered, suggestions):
        result = apply_cell_edit(result, cell.id, text=text, difficulty=difficulty)
    return result
