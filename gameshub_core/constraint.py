from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set, Union

from .grid import (
    CONSTRAINT_SIZE,
    REGION_SIZE,
    Coord,
    FrozenGrid,
    Grid,
    GridLike,
    InvalidGridError,
    check_constraint_grid,
    check_coord,
    clone_grid,
    empty_grid,
    freeze_grid,
    grids_equal,
    iter_coords,
)
from .logging_config import get_logger
from .rng import RandomSource, shuffled

logger = get_logger(__name__)

DIGITS = tuple(range(1, CONSTRAINT_SIZE + 1))
FULL_UNIT = frozenset(DIGITS)


class Difficulty(str, Enum):
    EASY = 'easy'
    MEDIUM = 'medium'
    HARD = 'hard'

    @classmethod
    def parse(cls, value: Union['Difficulty', str]) -> 'Difficulty':
        if isinstance(value, Difficulty):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidGridError(f'unknown difficulty: {value!r}') from None


# Cells cleared from a full solution per difficulty (more removed = fewer clues).
REMOVALS: Dict[Difficulty, int] = {
    Difficulty.EASY: 36,
    Difficulty.MEDIUM: 46,
    Difficulty.HARD: 54,
}

BASE_SCORE: Dict[Difficulty, int] = {
    Difficulty.EASY: 1200,
    Difficulty.MEDIUM: 1500,
    Difficulty.HARD: 2000,
}
SECONDS_PER_POINT = 5
MISTAKE_PENALTY = 50


@dataclass(frozen=True)
class PuzzleInstance:
    """A generated puzzle: the clue grid handed to the player and the solution it came from."""
    clues: FrozenGrid
    solution: FrozenGrid
    difficulty: Difficulty = Difficulty.MEDIUM

    @property
    def locked(self) -> List[List[bool]]:
        return [[v != 0 for v in row] for row in self.clues]

    def working_grid(self) -> Grid:
        """A fresh mutable copy of the clues for the player to fill in."""
        return clone_grid(self.clues)

    @property
    def clue_count(self) -> int:
        return sum(1 for row in self.clues for v in row if v != 0)


# ---------- Rules ----------

def _can_place(grid: GridLike, row: int, col: int, value: int) -> bool:
    for i in range(CONSTRAINT_SIZE):
        if grid[row][i] == value or grid[i][col] == value:
            return False
    r0 = row // REGION_SIZE * REGION_SIZE
    c0 = col // REGION_SIZE * REGION_SIZE
    for r in range(r0, r0 + REGION_SIZE):
        for c in range(c0, c0 + REGION_SIZE):
            if grid[r][c] == value:
                return False
    return True


def is_placement_valid(grid: GridLike, row: int, col: int, value: int) -> bool:
    """True if ``value`` is not already used in the row, column or 3x3 region of (row, col)."""
    check_constraint_grid(grid)
    check_coord(row, col, CONSTRAINT_SIZE)
    if value not in DIGITS:
        raise InvalidGridError(f'placement value out of range: {value!r}')
    return _can_place(grid, row, col, value)


def conflicting_cells(grid: GridLike) -> List[Coord]:
    """Filled cells whose value repeats in their row, column or region."""
    check_constraint_grid(grid)
    buf = clone_grid(grid)
    out: List[Coord] = []
    for r, c in iter_coords(CONSTRAINT_SIZE):
        v = buf[r][c]
        if v == 0:
            continue
        buf[r][c] = 0
        if not _can_place(buf, r, c, v):
            out.append((r, c))
        buf[r][c] = v
    return out


def is_solved_grid(grid: GridLike) -> bool:
    """True if every row, column and region is exactly the digits 1-9."""
    check_constraint_grid(grid)
    units: List[Sequence[int]] = []
    for i in range(CONSTRAINT_SIZE):
        units.append(grid[i])
        units.append([grid[r][i] for r in range(CONSTRAINT_SIZE)])
    for r0 in range(0, CONSTRAINT_SIZE, REGION_SIZE):
        for c0 in range(0, CONSTRAINT_SIZE, REGION_SIZE):
            units.append([grid[r][c] for r in range(r0, r0 + REGION_SIZE) for c in range(c0, c0 + REGION_SIZE)])
    return all(len(unit) == CONSTRAINT_SIZE and frozenset(unit) == FULL_UNIT for unit in units)


# ---------- Search ----------

def _first_empty(grid: GridLike) -> Optional[Coord]:
    for r, c in iter_coords(CONSTRAINT_SIZE):
        if grid[r][c] == 0:
            return (r, c)
    return None


def _has_candidate(grid: GridLike, row: int, col: int) -> bool:
    return any(_can_place(grid, row, col, v) for v in DIGITS)


def _peers(row: int, col: int) -> Set[Coord]:
    r0 = row // REGION_SIZE * REGION_SIZE
    c0 = col // REGION_SIZE * REGION_SIZE
    out = {(row, i) for i in range(CONSTRAINT_SIZE)}
    out.update((i, col) for i in range(CONSTRAINT_SIZE))
    out.update((r, c) for r in range(r0, r0 + REGION_SIZE) for c in range(c0, c0 + REGION_SIZE))
    out.discard((row, col))
    return out


def _dead_end(grid: GridLike) -> bool:
    """True if some empty cell has no digit left."""
    return any(
        grid[r][c] == 0 and not _has_candidate(grid, r, c)
        for r, c in iter_coords(CONSTRAINT_SIZE)
    )


def _peers_alive(grid: GridLike, row: int, col: int) -> bool:
    """After a placement at (row, col): every empty peer still has a digit left."""
    return all(
        grid[r][c] != 0 or _has_candidate(grid, r, c)
        for r, c in _peers(row, col)
    )


def _fill(buf: Grid, rng: Optional[RandomSource]) -> bool:
    """Backtracking fill of ``buf`` in place; failed branches are reset to 0."""
    pos = _first_empty(buf)
    if pos is None:
        return True
    r, c = pos
    candidates = shuffled(DIGITS, rng) if rng is not None else DIGITS
    for value in candidates:
        if _can_place(buf, r, c, value):
            buf[r][c] = value
            if _peers_alive(buf, r, c) and _fill(buf, rng):
                return True
            buf[r][c] = 0
    return False


def _count(buf: Grid, limit: int) -> int:
    pos = _first_empty(buf)
    if pos is None:
        return 1
    r, c = pos
    total = 0
    for value in DIGITS:
        if _can_place(buf, r, c, value):
            buf[r][c] = value
            if _peers_alive(buf, r, c):
                total += _count(buf, limit - total)
            buf[r][c] = 0
            if total >= limit:
                break
    return total


def solve(grid: GridLike, rng: Optional[RandomSource] = None) -> Optional[Grid]:
    """
    Completes ``grid`` by backtracking and returns the solved copy, or None when no
    completion exists. The input is left untouched.

    With ``rng`` the digit order is reshuffled at every cell (used for generation);
    without it digits are tried in ascending order.
    """
    check_constraint_grid(grid)
    if conflicting_cells(grid) or _dead_end(grid):
        return None
    buf = clone_grid(grid)
    if not _fill(buf, rng):
        return None
    return buf


def count_solutions(grid: GridLike, limit: int = 2) -> int:
    """Counts completions of ``grid``, stopping once ``limit`` have been found."""
    check_constraint_grid(grid)
    if limit < 1:
        raise ValueError('limit must be positive')
    if conflicting_cells(grid) or _dead_end(grid):
        return 0
    return _count(clone_grid(grid), limit)


# ---------- Generation ----------

def generate_solved_grid(rng: RandomSource) -> Grid:
    """A uniformly varied complete grid from a randomized fill of the empty board."""
    started = time.perf_counter()
    buf = empty_grid(CONSTRAINT_SIZE)
    if not _fill(buf, rng):
        raise RuntimeError('empty grid could not be filled')
    logger.debug("generated solved grid in %.1f ms", (time.perf_counter() - started) * 1000)
    return buf


def derive_clue_grid(
    solution: GridLike,
    difficulty: Union[Difficulty, str],
    rng: RandomSource,
    require_unique: bool = False,
) -> Grid:
    """
    Clears cells of ``solution`` in shuffled order until the difficulty's removal count
    is reached. Uniqueness of the resulting puzzle is not checked unless
    ``require_unique`` is set, in which case removals that would admit a second
    completion are skipped and fewer cells may end up cleared.
    """
    level = Difficulty.parse(difficulty)
    if not is_solved_grid(solution):
        raise InvalidGridError('clues can only be derived from a solved grid')
    target = REMOVALS[level]
    clues = clone_grid(solution)
    removed = 0
    for r, c in shuffled(iter_coords(CONSTRAINT_SIZE), rng):
        if removed >= target:
            break
        backup = clues[r][c]
        clues[r][c] = 0
        if require_unique and _count(clone_grid(clues), 2) != 1:
            clues[r][c] = backup
            continue
        removed += 1
    if removed < target:
        logger.debug("unique derivation stopped at %d of %d removals", removed, target)
    return clues


def new_puzzle(
    difficulty: Union[Difficulty, str],
    rng: RandomSource,
    require_unique: bool = False,
) -> PuzzleInstance:
    level = Difficulty.parse(difficulty)
    solution = generate_solved_grid(rng)
    clues = derive_clue_grid(solution, level, rng, require_unique=require_unique)
    puzzle = PuzzleInstance(clues=freeze_grid(clues), solution=freeze_grid(solution), difficulty=level)
    logger.info("new %s puzzle with %d clues", level.value, puzzle.clue_count)
    return puzzle


# ---------- Checking a working grid ----------

def validate(working: GridLike, solution: GridLike) -> bool:
    """True if every filled cell of ``working`` matches ``solution``; blanks are ignored."""
    check_constraint_grid(working)
    check_constraint_grid(solution)
    return all(
        working[r][c] == 0 or working[r][c] == solution[r][c]
        for r, c in iter_coords(CONSTRAINT_SIZE)
    )


def is_complete(working: GridLike, solution: GridLike) -> bool:
    check_constraint_grid(working)
    check_constraint_grid(solution)
    return grids_equal(working, solution)


def _check_locked_mask(locked: Sequence[Sequence[bool]]) -> None:
    if len(locked) != CONSTRAINT_SIZE or any(
        not isinstance(row, (list, tuple)) or len(row) != CONSTRAINT_SIZE for row in locked
    ):
        raise InvalidGridError('locked mask must be 9x9')
    if not all(isinstance(v, bool) for row in locked for v in row):
        raise InvalidGridError('locked mask must hold booleans')


def find_hint_cell(
    working: GridLike,
    locked: Sequence[Sequence[bool]],
    solution: GridLike,
) -> Optional[Coord]:
    """First unlocked cell (row-major) that is blank or wrong, or None when all are correct."""
    check_constraint_grid(working)
    check_constraint_grid(solution)
    _check_locked_mask(locked)
    for r, c in iter_coords(CONSTRAINT_SIZE):
        if locked[r][c]:
            continue
        if working[r][c] != solution[r][c]:
            return (r, c)
    return None


def compute_score(difficulty: Union[Difficulty, str], elapsed_seconds: int, mistakes: int) -> int:
    level = Difficulty.parse(difficulty)
    penalty = int(elapsed_seconds) // SECONDS_PER_POINT + int(mistakes) * MISTAKE_PENALTY
    return max(0, BASE_SCORE[level] - penalty)
