"""
GamesHub core Python package.

Pure board logic for the puzzle games plus the bookkeeping around it.
Modules:
- rng.py: RandomSource, make_random
- grid.py: grid aliases, Move, InvalidGridError, shape checks
- merge.py: sliding-merge engine (apply_move, has_any_legal_move, spawn_random_tile)
- constraint.py: number-placement generator, solver and validator
- matching.py: memory-game deck and flip/resolve state machine
- state.py: MergeSession, SudokuSession, MemorySession
- codec.py: JSON-ready encoding of grids and sessions
- db.py: sqlite session store
- cli.py: command-line driver
"""
