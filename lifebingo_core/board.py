from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

GRID_SIZE = 5
CELL_COUNT = GRID_SIZE * GRID_SIZE
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
THEME_IDS: Tuple[str, ...] = ('pink', 'blue', 'green', 'purple', 'orange')
DEFAULT_THEME = 'pink'
DEFAULT_START_YEAR = 2026


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time as epoch milliseconds (the persisted timestamp unit)."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SubGoal:
    """One concrete step towards a goal."""
    id: str
    text: str = ''
    done: bool = False


@dataclass(frozen=True)
class Cell:
    """One of the 25 goal slots. `position` is row-major: row = pos // 5, col = pos % 5."""
    id: str
    text: str = ''
    difficulty: int = MIN_DIFFICULTY
    achieved: bool = False
    position: int = 0
    sub_goals: Tuple[SubGoal, ...] = ()

    @property
    def row(self) -> int:
        return self.position // GRID_SIZE

    @property
    def col(self) -> int:
        return self.position % GRID_SIZE

    def is_empty(self) -> bool:
        return self.text.strip() == ''

    def is_achieved(self) -> bool:
        """Achieved and carrying text; an emptied cell never counts."""
        return self.achieved and bool(self.text)


@dataclass(frozen=True)
class Profile:
    year: int
    month: Optional[int] = None  # 1-12, None means the whole year
    theme: str = DEFAULT_THEME

    def period_key(self) -> int:
        """Sortable period value, e.g. 2025/03 -> 202503, 2025 -> 202500."""
        return self.year * 100 + (self.month or 0)

    def label(self) -> str:
        if self.month:
            return f"{self.year}-{self.month:02d}"
        return str(self.year)


@dataclass(frozen=True)
class Board:
    """A full 25-cell goal grid tied to a period and a theme."""
    id: str
    profile: Profile
    items: Tuple[Cell, ...]  # canonical order is by position
    created_at: int = 0
    updated_at: int = 0

    def cell_at(self, position: int) -> Optional[Cell]:
        for cell in self.items:
            if cell.position == position:
                return cell
        return None

    def with_items(self, items: Iterable[Cell]) -> 'Board':
        """Returns a copy carrying `items` with `updated_at` refreshed."""
        return replace(self, items=tuple(items), updated_at=now_ms())

    def pretty(self, width: int = 12) -> str:
        """Generates a plain-text grid: '*' marks achieved goals, '.' empty slots."""
        lines: List[str] = []
        by_pos = {c.position: c for c in self.items}
        for r in range(GRID_SIZE):
            row: List[str] = []
            for c in range(GRID_SIZE):
                cell = by_pos.get(r * GRID_SIZE + c)
                if cell is None or cell.is_empty():
                    label = '.'
                else:
                    label = cell.text.strip()
                    if len(label) > width - 2:
                        label = label[:width - 3] + '~'
                    label = ('*' if cell.is_achieved() else ' ') + label
                row.append(label.ljust(width))
            lines.append('|'.join(row).rstrip())
        return "\n".join(lines)


def empty_cells() -> Tuple[Cell, ...]:
    return tuple(Cell(id=new_id(), position=i) for i in range(CELL_COUNT))


def new_board(year: int, month: Optional[int] = None, theme: str = DEFAULT_THEME) -> Board:
    """Creates a board of 25 empty cells for the given period."""
    ts = now_ms()
    return Board(
        id=new_id(),
        profile=Profile(year=year, month=month, theme=theme),
        items=empty_cells(),
        created_at=ts,
        updated_at=ts,
    )
