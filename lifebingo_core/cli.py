from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from .board import Board
from .boards import (
    auto_layout_board,
    board_stats,
    describe_profile,
    edit_board_cell,
    find_board,
    next_board,
    resolve_active,
    sort_for_listing,
    toggle_board_cell,
    toggle_board_sub_goal,
)
from .codec import dumps_boards, loads_boards
from .engine import check_cells, sub_goal_progress
from .store import BoardStore


def _print_board(board: Board) -> None:
    stats = board_stats(board)
    print(f"Board {board.id}  {describe_profile(board.profile)}")
    print(board.pretty())
    print(f"\nAchieved: {stats['achieved']}  Bingo: {stats['bingo']}  Progress: {stats['progress']}%")
    for cell in sorted(board.items, key=lambda c: c.position):
        if not cell.sub_goals:
            continue
        done, total, pct = sub_goal_progress(cell)
        print(f"  [{cell.position}] {cell.text}: {done}/{total} steps ({pct}%)")


def _cell_id_at(board: Board, position: int) -> Optional[str]:
    cell = board.cell_at(position)
    return cell.id if cell is not None else None


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Life Bingo boards in the terminal')
    parser.add_argument('--db', default=os.getenv('LIFEBINGO_DB', 'data/lifebingo.db'), help='SQLite DB file path')
    parser.add_argument('--board', default=None, help='Board id (defaults to the active board)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('list', help='List boards, newest period first')
    sub.add_parser('show', help='Show the board grid and stats')
    sub.add_parser('new', help='Create a board for the next year and make it active')
    p_toggle = sub.add_parser('toggle', help='Stamp or un-stamp a goal')
    p_toggle.add_argument('position', type=int)
    p_edit = sub.add_parser('edit', help='Set the goal text (empty string clears it)')
    p_edit.add_argument('position', type=int)
    p_edit.add_argument('text')
    p_edit.add_argument('--difficulty', type=int, choices=range(1, 6), default=None)
    p_sub = sub.add_parser('subgoal', help='Tick a sub-goal by its 1-based index')
    p_sub.add_argument('position', type=int)
    p_sub.add_argument('index', type=int)
    sub.add_parser('sort', help='Put easy goals in the center')
    p_export = sub.add_parser('export', help='Write all boards to a JSON file')
    p_export.add_argument('file')
    p_import = sub.add_parser('import', help='Load boards from a JSON file')
    p_import.add_argument('file')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format='%(levelname)s %(name)s: %(message)s')
    store = BoardStore(args.db)

    if args.command == 'import':
        with open(args.file, 'r', encoding='utf-8') as f:
            imported = loads_boards(f.read())
        for b in imported:
            problems = check_cells(b.items)
            if problems:
                print(f"error: board {b.id}: " + "; ".join(problems), file=sys.stderr)
                return 1
        for b in imported:
            store.save_board(b)
        print(f"Imported {len(imported)} board(s).")
        return 0

    boards = store.load_or_create_boards()
    active_id = store.get_active_id()

    if args.command == 'list':
        for b in sort_for_listing(boards):
            stats = board_stats(b)
            mark = '>' if b.id == active_id else ' '
            print(f"{mark} {b.id}  {describe_profile(b.profile):<20} {stats['progress']:>3}%  bingo {stats['bingo']}")
        return 0

    if args.command == 'export':
        with open(args.file, 'w', encoding='utf-8') as f:
            f.write(dumps_boards(boards))
        print(f"Exported {len(boards)} board(s) to {args.file}.")
        return 0

    if args.command == 'new':
        board = next_board(boards)
        store.save_board(board)
        store.set_active_id(board.id)
        _print_board(board)
        return 0

    if args.board:
        board = find_board(boards, args.board)
        if board is None:
            print(f"error: no board with id {args.board}", file=sys.stderr)
            return 1
    else:
        board = resolve_active(boards, active_id)
        assert board is not None  # load_or_create_boards never returns an empty list

    if args.command == 'show':
        _print_board(board)
        return 0

    if args.command in ('toggle', 'edit', 'subgoal'):
        cell_id = _cell_id_at(board, args.position)
        if cell_id is None:
            print(f"error: position must be 0-24, got {args.position}", file=sys.stderr)
            return 1
        if args.command == 'toggle':
            cell = board.cell_at(args.position)
            if cell is not None and cell.is_empty() and not cell.achieved:
                print('error: set a goal before stamping it', file=sys.stderr)
                return 1
            board = toggle_board_cell(board, cell_id)
        elif args.command == 'edit':
            board = edit_board_cell(board, cell_id, text=args.text, difficulty=args.difficulty)
        else:
            cell = board.cell_at(args.position)
            subs = cell.sub_goals if cell is not None else ()
            if not 1 <= args.index <= len(subs):
                print(f"error: goal {args.position} has {len(subs)} sub-goal(s)", file=sys.stderr)
                return 1
            board = toggle_board_sub_goal(board, cell_id, subs[args.index - 1].id)
    elif args.command == 'sort':
        board = auto_layout_board(board)

    store.save_board(board)
    _print_board(board)
    return 0


if __name__ == '__main__':
    sys.exit(main())
