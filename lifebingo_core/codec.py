"""JSON conversion for boards.

The persisted shape keeps the field names the web client has always stored
(camelCase, ``isAchieved``/``isDone``); derived values such as the bingo
count are never written.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List

from .board import DEFAULT_THEME, THEME_IDS, Board, Cell, Profile, SubGoal, new_id


def sub_goal_to_json(sg: SubGoal) -> Dict[str, Any]:
    return {"id": sg.id, "text": sg.text, "isDone": bool(sg.done)}


def sub_goal_from_json(obj: Dict[str, Any]) -> SubGoal:
    return SubGoal(id=str(obj.get("id") or new_id()), text=str(obj.get("text", "")), done=bool(obj.get("isDone", False)))


def sub_goals_from_json(items: Iterable[Dict[str, Any]]) -> List[SubGoal]:
    return [sub_goal_from_json(it) for it in items]


def cell_to_json(cell: Cell) -> Dict[str, Any]:
    return {
        "id": cell.id,
        "text": cell.text,
        "difficulty": int(cell.difficulty),
        "isAchieved": bool(cell.achieved),
        "position": int(cell.position),
        "subGoals": [sub_goal_to_json(sg) for sg in cell.sub_goals],
    }


def cell_from_json(obj: Dict[str, Any]) -> Cell:
    return Cell(
        id=str(obj["id"]),
        text=str(obj.get("text", "")),
        difficulty=int(obj.get("difficulty", 1)),
        achieved=bool(obj.get("isAchieved", False)),
        position=int(obj["position"]),
        sub_goals=tuple(sub_goals_from_json(obj.get("subGoals") or [])),
    )


def profile_to_json(profile: Profile) -> Dict[str, Any]:
    out: Dict[str, Any] = {"year": int(profile.year), "theme": profile.theme}
    if profile.month is not None:
        out["month"] = int(profile.month)
    return out


def profile_from_json(obj: Dict[str, Any]) -> Profile:
    month = obj.get("month")
    if month is not None and not 1 <= int(month) <= 12:
        raise ValueError(f"month must be 1-12, got {month!r}")
    theme = obj.get("theme")
    return Profile(
        year=int(obj["year"]),
        month=int(month) if month is not None else None,
        theme=theme if theme in THEME_IDS else DEFAULT_THEME,
    )


def board_to_json(board: Board) -> Dict[str, Any]:
    return {
        "id": board.id,
        "profile": profile_to_json(board.profile),
        "items": [cell_to_json(c) for c in sorted(board.items, key=lambda c: c.position)],
        "createdAt": int(board.created_at),
        "updatedAt": int(board.updated_at),
    }


def board_from_json(obj: Dict[str, Any]) -> Board:
    """Raises KeyError/ValueError/TypeError on a malformed payload (including a month outside 1-12)."""
    return Board(
        id=str(obj["id"]),
        profile=profile_from_json(obj["profile"]),
        items=tuple(cell_from_json(c) for c in obj["items"]),
        created_at=int(obj.get("createdAt", 0)),
        updated_at=int(obj.get("updatedAt", 0)),
    )


def dumps_boards(boards: Iterable[Board]) -> str:
    return json.dumps([board_to_json(b) for b in boards], ensure_ascii=False, indent=2)


def loads_boards(text: str) -> List[Board]:
    data = json.loads(text)
    if isinstance(data, dict):
        data = [data]
    return [board_from_json(b) for b in data]
