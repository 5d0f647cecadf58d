from __future__ import annotations

from typing import Any, Dict, List, Optional

from .constraint import Difficulty, PuzzleInstance, is_solved_grid
from .grid import (
    CONSTRAINT_SIZE,
    FrozenGrid,
    GridLike,
    InvalidGridError,
    check_constraint_grid,
    check_merge_grid,
    freeze_grid,
    iter_coords,
)
from .matching import ALLOWED_PAIRS, Card
from .state import MemorySession, MergeSession, SudokuSession, empty_notes


def grid_to_json(grid: GridLike) -> List[List[int]]:
    return [[int(v) for v in row] for row in grid]


def _coerce_grid(obj: Any, what: str) -> FrozenGrid:
    if not isinstance(obj, list) or not all(isinstance(row, list) for row in obj):
        raise InvalidGridError(f'{what} must be a list of rows')
    return freeze_grid(obj)


def merge_grid_from_json(obj: Any) -> FrozenGrid:
    grid = _coerce_grid(obj, 'grid')
    check_merge_grid(grid)
    return grid


def constraint_grid_from_json(obj: Any) -> FrozenGrid:
    grid = _coerce_grid(obj, 'grid')
    check_constraint_grid(grid)
    return grid


def parse_grid_string(text: str) -> FrozenGrid:
    """Parses an 81-character row-major puzzle string; '0' or '.' mark blanks."""
    cells = [ch for ch in text if not ch.isspace()]
    if len(cells) != CONSTRAINT_SIZE * CONSTRAINT_SIZE:
        raise InvalidGridError(f'expected 81 cells, got {len(cells)}')
    values: List[int] = []
    for ch in cells:
        if ch == '.':
            values.append(0)
        elif ch.isdigit():
            values.append(int(ch))
        else:
            raise InvalidGridError(f'unexpected character in grid: {ch!r}')
    return tuple(tuple(values[r * CONSTRAINT_SIZE:(r + 1) * CONSTRAINT_SIZE]) for r in range(CONSTRAINT_SIZE))


def grid_to_string(grid: GridLike) -> str:
    return ''.join('.' if v == 0 else str(v) for row in grid for v in row)


def _int_field(obj: Dict[str, Any], key: str, default: int = 0) -> int:
    value = obj.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise InvalidGridError(f'{key} must be a non-negative integer')
    return value


# ---------- 2048 ----------

def merge_session_to_json(s: MergeSession) -> Dict[str, Any]:
    return {
        "grid": grid_to_json(s.grid),
        "score": int(s.score),
        "bestScore": int(s.best_score),
        "previous": None if s.previous is None else {
            "grid": grid_to_json(s.previous[0]),
            "score": int(s.previous[1]),
        },
        "gameOver": s.is_over,
    }


def json_to_merge_session(obj: Dict[str, Any]) -> MergeSession:
    if not isinstance(obj, dict):
        raise InvalidGridError('state must be an object')
    prev_in = obj.get("previous")
    previous = None
    if prev_in:
        previous = (merge_grid_from_json(prev_in.get("grid")), _int_field(prev_in, "score"))
    return MergeSession(
        grid=merge_grid_from_json(obj.get("grid")),
        score=_int_field(obj, "score"),
        best_score=_int_field(obj, "bestScore"),
        previous=previous,
    )


# ---------- Sudoku ----------

def puzzle_to_json(p: PuzzleInstance) -> Dict[str, Any]:
    return {
        "clues": grid_to_json(p.clues),
        "solution": grid_to_json(p.solution),
        "locked": p.locked,
        "difficulty": p.difficulty.value,
    }


def json_to_puzzle(obj: Dict[str, Any]) -> PuzzleInstance:
    if not isinstance(obj, dict):
        raise InvalidGridError('puzzle must be an object')
    clues = constraint_grid_from_json(obj.get("clues"))
    solution = constraint_grid_from_json(obj.get("solution"))
    if not is_solved_grid(solution):
        raise InvalidGridError('solution is not a complete valid grid')
    for r, c in iter_coords(CONSTRAINT_SIZE):
        if clues[r][c] != 0 and clues[r][c] != solution[r][c]:
            raise InvalidGridError(f'clue at ({r},{c}) disagrees with the solution')
    return PuzzleInstance(
        clues=clues,
        solution=solution,
        difficulty=Difficulty.parse(obj.get("difficulty", Difficulty.MEDIUM)),
    )


def _notes_from_json(obj: Optional[Any]):
    if obj is None:
        return empty_notes()
    if not isinstance(obj, list) or len(obj) != CONSTRAINT_SIZE:
        raise InvalidGridError('notes must have 9 rows')
    rows = []
    for row in obj:
        if not isinstance(row, list) or len(row) != CONSTRAINT_SIZE:
            raise InvalidGridError('notes rows must have 9 cells')
        rows.append(tuple(tuple(sorted({int(d) for d in cell if 1 <= int(d) <= 9})) for cell in row))
    return tuple(rows)


def sudoku_session_to_json(s: SudokuSession) -> Dict[str, Any]:
    return {
        "puzzle": puzzle_to_json(s.puzzle),
        "working": grid_to_json(s.working),
        "mistakes": int(s.mistakes),
        "hintsRemaining": int(s.hints_remaining),
        "elapsed": int(s.elapsed),
        "notes": [[list(cell) for cell in row] for row in s.notes],
        "wrongCells": [[r, c] for (r, c) in s.wrong_cells()],
        "solved": s.is_solved,
        "score": s.score,
    }


def json_to_sudoku_session(obj: Dict[str, Any]) -> SudokuSession:
    if not isinstance(obj, dict):
        raise InvalidGridError('state must be an object')
    puzzle = json_to_puzzle(obj.get("puzzle"))
    working = constraint_grid_from_json(obj.get("working", [list(r) for r in puzzle.clues]))
    for r, c in iter_coords(CONSTRAINT_SIZE):
        if puzzle.clues[r][c] != 0 and working[r][c] != puzzle.clues[r][c]:
            raise InvalidGridError(f'clue at ({r},{c}) was overwritten')
    return SudokuSession(
        puzzle=puzzle,
        working=working,
        mistakes=_int_field(obj, "mistakes"),
        hints_remaining=_int_field(obj, "hintsRemaining"),
        elapsed=_int_field(obj, "elapsed"),
        notes=_notes_from_json(obj.get("notes")),
    )


# ---------- Memory ----------

def memory_session_to_json(s: MemorySession) -> Dict[str, Any]:
    return {
        "deck": [{"symbol": c.symbol, "faceUp": c.face_up, "matched": c.matched} for c in s.deck],
        "open": list(s.open_indices),
        "moves": int(s.moves),
        "elapsed": int(s.elapsed),
        "pairs": s.pairs,
        "matchedPairs": s.matched_pairs,
        "complete": s.is_complete,
        "best": None if s.best is None else {"leastMoves": s.best[0], "bestTime": s.best[1]},
    }


def json_to_memory_session(obj: Dict[str, Any]) -> MemorySession:
    if not isinstance(obj, dict):
        raise InvalidGridError('state must be an object')
    deck_in = obj.get("deck")
    if not isinstance(deck_in, list) or len(deck_in) // 2 not in ALLOWED_PAIRS or len(deck_in) % 2:
        raise InvalidGridError('deck has an unsupported size')
    if not all(isinstance(c, dict) and "symbol" in c for c in deck_in):
        raise InvalidGridError('every card needs a symbol')
    deck = tuple(
        Card(symbol=str(c["symbol"]), face_up=bool(c.get("faceUp")), matched=bool(c.get("matched")))
        for c in deck_in
    )
    open_in = obj.get("open", [])
    if not isinstance(open_in, list) or len(open_in) > 2:
        raise InvalidGridError('at most two cards can be open')
    open_indices = tuple(int(i) for i in open_in)
    if any(not 0 <= i < len(deck) for i in open_indices):
        raise InvalidGridError('open card index out of range')
    if len(set(open_indices)) != len(open_indices):
        raise InvalidGridError('open card indices must be distinct')
    if any(not deck[i].face_up or deck[i].matched for i in open_indices):
        raise InvalidGridError('open cards must be face up and unmatched')
    best_in = obj.get("best")
    best = None
    if best_in:
        best = (_int_field(best_in, "leastMoves"), _int_field(best_in, "bestTime"))
    return MemorySession(
        deck=deck,
        open_indices=open_indices,
        moves=_int_field(obj, "moves"),
        elapsed=_int_field(obj, "elapsed"),
        best=best,
    )


SESSION_CODECS = {
    "merge": (merge_session_to_json, json_to_merge_session),
    "sudoku": (sudoku_session_to_json, json_to_sudoku_session),
    "memory": (memory_session_to_json, json_to_memory_session),
}
