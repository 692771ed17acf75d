"""
Life Bingo core Python package.

Pure board logic plus the thin persistence and command-line layers that the
Flask app (app.py) builds on.
Modules:
- board.py: Board, Cell, SubGoal, Profile and new-board construction
- engine.py: bingo lines, achievement/edit rules, auto-layout
- boards.py: board-level mutations, stats and the board collection
- codec.py: JSON shape shared by the store, the API and export files
- store.py: SQLite BoardStore
- suggest.py: applying goal suggestions to a board
- cli.py: terminal front end
"""
