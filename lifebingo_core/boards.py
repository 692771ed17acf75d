from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .board import DEFAULT_START_YEAR, THEME_IDS, Board, Profile, SubGoal, new_board, now_ms
from .engine import (
    achieved_count,
    apply_cell_edit,
    auto_layout,
    completed_lines,
    completion_percent,
    toggle_achievement,
    toggle_sub_goal,
)

_UNSET: Any = object()


# ---------- single board mutations (each refreshes updated_at) ----------

def toggle_board_cell(board: Board, cell_id: str) -> Board:
    return board.with_items(toggle_achievement(board.items, cell_id))


def edit_board_cell(
    board: Board,
    cell_id: str,
    text: Optional[str] = None,
    difficulty: Optional[int] = None,
    sub_goals: Optional[Iterable[SubGoal]] = None,
) -> Board:
    return board.with_items(apply_cell_edit(board.items, cell_id, text=text, difficulty=difficulty, sub_goals=sub_goals))


def toggle_board_sub_goal(board: Board, cell_id: str, sub_goal_id: str) -> Board:
    return board.with_items(toggle_sub_goal(board.items, cell_id, sub_goal_id))


def auto_layout_board(board: Board) -> Board:
    return board.with_items(auto_layout(board.items))


def update_profile(board: Board, year: Optional[int] = None, month: Any = _UNSET, theme: Optional[str] = None) -> Board:
    """Changes the board's period and/or theme. Pass month=None to cover the whole year."""
    profile = board.profile
    if year is not None:
        if isinstance(year, bool) or not isinstance(year, int):
            raise ValueError(f"year must be an integer, got {year!r}")
        profile = replace(profile, year=year)
    if month is not _UNSET:
        if month is not None and (isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12):
            raise ValueError(f"month must be 1-12 or None, got {month!r}")
        profile = replace(profile, month=month)
    if theme is not None:
        if theme not in THEME_IDS:
            raise ValueError(f"unknown theme {theme!r}; expected one of {', '.join(THEME_IDS)}")
        profile = replace(profile, theme=theme)
    return replace(board, profile=profile, updated_at=now_ms())


def board_stats(board: Board) -> Dict[str, Any]:
    """Derived display values. Recomputed on demand, never persisted."""
    lines = completed_lines(board.items)
    return {
        "achieved": achieved_count(board.items),
        "bingo": len(lines),
        "progress": completion_percent(board.items),
        "lines": lines,
    }


# ---------- board collection ----------

def next_board(boards: Sequence[Board]) -> Board:
    """A fresh board for the year after the latest one (or the default start year)."""
    if boards:
        year = max(b.profile.year for b in boards) + 1
    else:
        year = DEFAULT_START_YEAR
    return new_board(year)


def sort_for_listing(boards: Iterable[Board]) -> List[Board]:
    """Newest period first; whole-year boards sort after that year's monthly ones."""
    return sorted(boards, key=lambda b: b.profile.period_key(), reverse=True)


def resolve_active(boards: Sequence[Board], active_id: Optional[str]) -> Optional[Board]:
    for b in boards:
        if b.id == active_id:
            return b
    return boards[0] if boards else None


def find_board(boards: Iterable[Board], board_id: str) -> Optional[Board]:
    for b in boards:
        if b.id == board_id:
            return b
    return None


def describe_profile(profile: Profile) -> str:
    return f"{profile.label()} ({profile.theme})"
