from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple, Union

from .grid import (
    MERGE_SIZE,
    Coord,
    Grid,
    GridLike,
    Move,
    check_merge_grid,
    clone_grid,
    empty_grid,
    grids_equal,
    iter_coords,
    rotate,
)
from .logging_config import get_logger
from .rng import RandomSource

logger = get_logger(__name__)

FOUR_PROBABILITY = 0.1


@dataclass(frozen=True)
class MoveResult:
    """Outcome of one slide: the new grid, points from merges, and whether anything moved."""
    grid: Grid
    points_gained: int
    changed: bool


def slide_row_left(row: List[int]) -> Tuple[List[int], int]:
    """Compacts a row to the left and merges equal neighbours at most once each."""
    tiles = [v for v in row if v != 0]
    out: List[int] = []
    points = 0
    i = 0
    while i < len(tiles):
        if i + 1 < len(tiles) and tiles[i] == tiles[i + 1]:
            merged = tiles[i] * 2
            out.append(merged)
            points += merged
            i += 2  # the right tile is consumed
        else:
            out.append(tiles[i])
            i += 1
    out.extend([0] * (len(row) - len(out)))
    return out, points


def apply_move(grid: GridLike, direction: Union[Move, int, str]) -> MoveResult:
    """Slides every tile in ``direction`` and returns a new grid; never spawns a tile."""
    check_merge_grid(grid)
    move = Move.parse(direction)
    turned = rotate(grid, move.value)
    points = 0
    slid: Grid = []
    for row in turned:
        new_row, gained = slide_row_left(row)
        slid.append(new_row)
        points += gained
    result = rotate(slid, (4 - move.value) % 4)
    return MoveResult(grid=result, points_gained=points, changed=not grids_equal(grid, result))


def has_any_legal_move(grid: GridLike) -> bool:
    """True if any cell is empty or two orthogonal neighbours hold the same value."""
    check_merge_grid(grid)
    n = len(grid)
    for r, c in iter_coords(n):
        v = grid[r][c]
        if v == 0:
            return True
        if c + 1 < n and grid[r][c + 1] == v:
            return True
        if r + 1 < n and grid[r + 1][c] == v:
            return True
    return False


def empty_cells(grid: GridLike) -> List[Coord]:
    return [(r, c) for r, c in iter_coords(len(grid)) if grid[r][c] == 0]


def spawn_random_tile(grid: GridLike, rng: RandomSource) -> Grid:
    """Returns a copy with a 2 (90%) or 4 (10%) placed on a uniformly chosen empty cell."""
    check_merge_grid(grid)
    out = clone_grid(grid)
    empties = empty_cells(out)
    if not empties:
        return out
    r, c = empties[rng.randrange(len(empties))]
    out[r][c] = 4 if rng.random() < FOUR_PROBABILITY else 2
    logger.debug("spawned %d at (%d,%d)", out[r][c], r, c)
    return out


def new_merge_grid(rng: RandomSource) -> Grid:
    """Starting position: an empty board seeded with two random tiles."""
    grid = empty_grid(MERGE_SIZE)
    grid = spawn_random_tile(grid, rng)
    return spawn_random_tile(grid, rng)
