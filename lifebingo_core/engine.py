from __future__ import annotations

import math
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .board import CELL_COUNT, GRID_SIZE, MAX_DIFFICULTY, MIN_DIFFICULTY, Cell, SubGoal

# Fill order for auto-layout: center first, then ring by ring, corners last.
INSIDE_OUT_POSITIONS: Tuple[int, ...] = (
    12, 7, 11, 13, 17, 6, 8, 16, 18, 2, 10, 14, 22, 1, 3, 5, 9, 15, 19, 21, 23, 0, 4, 20, 24,
)


def _build_lines() -> Tuple[Tuple[str, Tuple[int, ...]], ...]:
    lines: List[Tuple[str, Tuple[int, ...]]] = []
    for r in range(GRID_SIZE):
        lines.append((f"row-{r}", tuple(r * GRID_SIZE + c for c in range(GRID_SIZE))))
    for c in range(GRID_SIZE):
        lines.append((f"col-{c}", tuple(r * GRID_SIZE + c for r in range(GRID_SIZE))))
    lines.append(("diag", tuple(i * GRID_SIZE + i for i in range(GRID_SIZE))))
    lines.append(("anti-diag", tuple(i * GRID_SIZE + (GRID_SIZE - 1 - i) for i in range(GRID_SIZE))))
    return tuple(lines)


# 5 rows, 5 columns, 2 diagonals
LINES = _build_lines()


def _by_position(cells: Iterable[Cell]) -> Dict[int, Cell]:
    return {cell.position: cell for cell in cells}


def completed_lines(cells: Iterable[Cell]) -> List[str]:
    """Names of the lines whose five cells are all achieved and non-empty."""
    grid = _by_position(cells)
    done: List[str] = []
    for name, positions in LINES:
        if all(p in grid and grid[p].is_achieved() for p in positions):
            done.append(name)
    return done


def compute_bingo_count(cells: Iterable[Cell]) -> int:
    """Counts completed lines among the 12 possible. Input order does not matter."""
    return len(completed_lines(cells))


def achieved_count(cells: Iterable[Cell]) -> int:
    return sum(1 for cell in cells if cell.is_achieved())


def completion_percent(cells: Iterable[Cell]) -> int:
    # half-up rounding, matching how the web client displays it
    return int(math.floor(achieved_count(cells) / CELL_COUNT * 100 + 0.5))


def _check_difficulty(difficulty: int) -> int:
    if isinstance(difficulty, bool) or not isinstance(difficulty, int):
        raise ValueError(f"difficulty must be an integer, got {difficulty!r}")
    if not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
        raise ValueError(f"difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}, got {difficulty}")
    return difficulty


def toggle_achievement(cells: Sequence[Cell], cell_id: str) -> Tuple[Cell, ...]:
    """Flips `achieved` on the matching cell. Unknown ids leave the cells unchanged."""
    return tuple(replace(c, achieved=not c.achieved) if c.id == cell_id else c for c in cells)


def apply_cell_edit(
    cells: Sequence[Cell],
    cell_id: str,
    text: Optional[str] = None,
    difficulty: Optional[int] = None,
    sub_goals: Optional[Iterable[SubGoal]] = None,
) -> Tuple[Cell, ...]:
    """Merges a partial edit into the matching cell.

    Blanking the text (empty or whitespace only) always clears `achieved`;
    any other edit keeps the prior `achieved` value. Raises ValueError for
    a difficulty outside 1-5.
    """
    if difficulty is not None:
        _check_difficulty(difficulty)
    out: List[Cell] = []
    for cell in cells:
        if cell.id != cell_id:
            out.append(cell)
            continue
        new_text = cell.text if text is None else text
        edited = replace(
            cell,
            text=new_text,
            difficulty=cell.difficulty if difficulty is None else difficulty,
            sub_goals=cell.sub_goals if sub_goals is None else tuple(sub_goals),
            achieved=False if new_text.strip() == '' else cell.achieved,
        )
        out.append(edited)
    return tuple(out)


def toggle_sub_goal(cells: Sequence[Cell], cell_id: str, sub_goal_id: str) -> Tuple[Cell, ...]:
    """Flips `done` on one sub-goal. Never touches the parent's `achieved`."""
    out: List[Cell] = []
    for cell in cells:
        if cell.id == cell_id and any(sg.id == sub_goal_id for sg in cell.sub_goals):
            subs = tuple(replace(sg, done=not sg.done) if sg.id == sub_goal_id else sg for sg in cell.sub_goals)
            out.append(replace(cell, sub_goals=subs))
        else:
            out.append(cell)
    return tuple(out)


def auto_layout(cells: Sequence[Cell]) -> Tuple[Cell, ...]:
    """Moves easy goals to the center and hard ones to the edges.

    Cells are sorted by difficulty and dealt onto INSIDE_OUT_POSITIONS;
    ties go by current position, whatever order the cells arrive in.
    The result is in position order.
    """
    ranked = sorted(cells, key=lambda c: (c.difficulty, c.position))
    placed = [replace(cell, position=pos) for cell, pos in zip(ranked, INSIDE_OUT_POSITIONS)]
    return tuple(sorted(placed, key=lambda c: c.position))


def sub_goal_progress(cell: Cell) -> Tuple[int, int, int]:
    """Returns (done, total, percent) for a cell's sub-goals; percent is 0 with none."""
    total = len(cell.sub_goals)
    done = sum(1 for sg in cell.sub_goals if sg.done)
    if total == 0:
        return 0, 0, 0
    return done, total, int(math.floor(done / total * 100 + 0.5))


def check_cells(cells: Sequence[Cell]) -> List[str]:
    """Lists precondition problems in a cell collection. Nothing is repaired here."""
    problems: List[str] = []
    if len(cells) != CELL_COUNT:
        problems.append(f"expected {CELL_COUNT} cells, found {len(cells)}")
    positions = [c.position for c in cells]
    dupes = sorted({p for p in positions if positions.count(p) > 1})
    if dupes:
        problems.append(f"duplicate positions: {dupes}")
    missing = sorted(set(range(CELL_COUNT)) - set(positions))
    if missing:
        problems.append(f"missing positions: {missing}")
    for cell in cells:
        if cell.achieved and cell.is_empty():
            problems.append(f"cell {cell.id} is achieved but empty")
        if not MIN_DIFFICULTY <= cell.difficulty <= MAX_DIFFICULTY:
            problems.append(f"cell {cell.id} has difficulty {cell.difficulty}")
    return problems
