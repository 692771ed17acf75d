from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from lifebingo_core.board import Board
from lifebingo_core.boards import (
    auto_layout_board,
    board_stats,
    edit_board_cell,
    next_board,
    sort_for_listing,
    toggle_board_cell,
    toggle_board_sub_goal,
    update_profile,
)
from lifebingo_core.codec import board_from_json, board_to_json, sub_goals_from_json
from lifebingo_core.engine import check_cells
from lifebingo_core.store import BoardStore
from lifebingo_core.suggest import apply_suggestions, normalize_suggestions

DEFAULT_DB = os.getenv("LIFEBINGO_DB", "data/lifebingo.db")

logger = logging.getLogger(__name__)

app = Flask(__name__)
store = BoardStore(DEFAULT_DB)


def _board_payload(board: Board) -> Dict[str, Any]:
    # stats ride alongside the board; they are never part of the stored shape
    return {"board": board_to_json(board), "stats": board_stats(board)}


def _load_or_404(board_id: str) -> Tuple[Optional[Board], Any]:
    board = store.load_board(board_id)
    if board is None:
        return None, (jsonify({"ok": False, "error": f"board {board_id} not found"}), 404)
    return board, None


def _save_and_reply(board: Board) -> Any:
    store.save_board(board)
    return jsonify({"ok": True, **_board_payload(board)})


# ---------- Board collection ----------

@app.get("/api/boards")
def api_boards() -> Any:
    boards = store.load_or_create_boards()
    active_id = store.get_active_id()
    if active_id not in {b.id for b in boards}:
        active_id = boards[0].id
    return jsonify({
        "ok": True,
        "activeId": active_id,
        "boards": [_board_payload(b) for b in sort_for_listing(boards)],
    })


@app.post("/api/boards")
def api_create_board() -> Any:
    boards = store.load_boards()
    board = next_board(boards)
    store.save_board(board)
    store.set_active_id(board.id)
    logger.info("created board %s for %d", board.id, board.profile.year)
    return jsonify({"ok": True, **_board_payload(board)}), 201


@app.get("/api/boards/<board_id>")
def api_board(board_id: str) -> Any:
    board, err = _load_or_404(board_id)
    if err:
        return err
    return jsonify({"ok": True, **_board_payload(board)})


@app.delete("/api/boards/<board_id>")
def api_delete_board(board_id: str) -> Any:
    if not store.delete_board(board_id):
        return jsonify({"ok": False, "error": f"board {board_id} not found"}), 404
    return jsonify({"ok": True, "deleted": board_id})


@app.post("/api/active")
def api_set_active() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    board_id = body.get("id")
    if not isinstance(board_id, str) or store.load_board(board_id) is None:
        return jsonify({"ok": False, "error": "unknown board id"}), 404
    store.set_active_id(board_id)
    return jsonify({"ok": True, "activeId": board_id})


@app.post("/api/import")
def api_import() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    raw = body.get("board")
    if not isinstance(raw, dict):
        return jsonify({"ok": False, "error": "board required"}), 400
    try:
        board = board_from_json(raw)
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": f"bad board: {e}"}), 400
    problems = check_cells(board.items)
    if problems:
        return jsonify({"ok": False, "error": "bad board: " + "; ".join(problems), "problems": problems}), 400
    return _save_and_reply(board)


# ---------- Cell intents ----------

@app.post("/api/boards/<board_id>/toggle")
def api_toggle(board_id: str) -> Any:
    board, err = _load_or_404(board_id)
    if err:
        return err
    body = request.get_json(force=True, silent=True) or {}
    cell_id = str(body.get("cellId", ""))
    cell = next((c for c in board.items if c.id == cell_id), None)
    if cell is not None and cell.is_empty() and not cell.achieved:
        # an empty slot is edited, never stamped
        return jsonify({"ok": False, "error": "set a goal before stamping it"}), 400
    return _save_and_reply(toggle_board_cell(board, cell_id))


@app.post("/api/boards/<board_id>/edit")
def api_edit(board_id: str) -> Any:
    board, err = _load_or_404(board_id)
    if err:
        return err
    body = request.get_json(force=True, silent=True) or {}
    text = body.get("text")
    subs_in = body.get("subGoals")
    try:
        sub_goals = sub_goals_from_json(subs_in) if isinstance(subs_in, list) else None
        updated = edit_board_cell(
            board,
            str(body.get("cellId", "")),
            text=str(text) if text is not None else None,
            difficulty=body.get("difficulty"),
            sub_goals=sub_goals,
        )
    except (AttributeError, ValueError) as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    return _save_and_reply(updated)


@app.post("/api/boards/<board_id>/subgoal")
def api_subgoal(board_id: str) -> Any:
    board, err = _load_or_404(board_id)
    if err:
        return err
    body = request.get_json(force=True, silent=True) or {}
    return _save_and_reply(toggle_board_sub_goal(board, str(body.get("cellId", "")), str(body.get("subGoalId", ""))))


@app.post("/api/boards/<board_id>/autolayout")
def api_autolayout(board_id: str) -> Any:
    board, err = _load_or_404(board_id)
    if err:
        return err
    return _save_and_reply(auto_layout_board(board))


@app.post("/api/boards/<board_id>/profile")
def api_profile(board_id: str) -> Any:
    board, err = _load_or_404(board_id)
    if err:
        return err
    body = request.get_json(force=True, silent=True) or {}
    kwargs: Dict[str, Any] = {"year": body.get("year"), "theme": body.get("theme")}
    if "month" in body:
        kwargs["month"] = body["month"]
    try:
        updated = update_profile(board, **kwargs)
    except ValueError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    return _save_and_reply(updated)


@app.post("/api/boards/<board_id>/suggestions")
def api_suggestions(board_id: str) -> Any:
    board, err = _load_or_404(board_id)
    if err:
        return err
    body = request.get_json(force=True, silent=True) or {}
    items = body.get("suggestions")
    if not isinstance(items, list):
        return jsonify({"ok": False, "error": "suggestions must be a list"}), 400
    suggestions = normalize_suggestions(items)
    return _save_and_reply(board.with_items(apply_suggestions(board.items, suggestions)))


# Entrypoint for "python app.py"
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=debug)
