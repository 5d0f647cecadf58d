from __future__ import annotations

from enum import IntEnum
from typing import List, Optional, Sequence, Tuple, Union

Coord = Tuple[int, int]
Grid = List[List[int]]
GridLike = Sequence[Sequence[int]]  # lists or tuples of rows, row-major
FrozenGrid = Tuple[Tuple[int, ...], ...]

MERGE_SIZE = 4
CONSTRAINT_SIZE = 9
REGION_SIZE = 3


class InvalidGridError(ValueError):
    """Raised when a grid, direction or difficulty is malformed."""


class Move(IntEnum):
    """Slide direction; the value is the number of quarter turns that map it to LEFT."""
    LEFT = 0
    UP = 1
    RIGHT = 2
    DOWN = 3

    @classmethod
    def parse(cls, value: Union['Move', int, str]) -> 'Move':
        if isinstance(value, Move):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise InvalidGridError(f'unknown direction: {value!r}') from None
        if isinstance(value, str):
            key = value.strip().upper()
            for move in cls:
                if key == move.name or key == move.name[0]:
                    return move
        raise InvalidGridError(f'unknown direction: {value!r}')


def empty_grid(size: int) -> Grid:
    return [[0] * size for _ in range(size)]


def clone_grid(grid: GridLike) -> Grid:
    return [list(row) for row in grid]


def freeze_grid(grid: GridLike) -> FrozenGrid:
    return tuple(tuple(row) for row in grid)


def grids_equal(a: GridLike, b: GridLike) -> bool:
    return len(a) == len(b) and all(list(ra) == list(rb) for ra, rb in zip(a, b))


def rotate_left(grid: GridLike) -> Grid:
    """Rotates a square grid a quarter turn counter-clockwise."""
    n = len(grid)
    out = empty_grid(n)
    for r in range(n):
        for c in range(n):
            out[n - 1 - c][r] = grid[r][c]
    return out


def rotate(grid: GridLike, turns: int) -> Grid:
    out = clone_grid(grid)
    for _ in range(turns % 4):
        out = rotate_left(out)
    return out


def iter_coords(size: int):
    for r in range(size):
        for c in range(size):
            yield (r, c)


def _check_square(grid: GridLike, size: int, what: str) -> None:
    if not isinstance(grid, (list, tuple)) or len(grid) != size:
        raise InvalidGridError(f'{what} must have {size} rows')
    for r, row in enumerate(grid):
        if not isinstance(row, (list, tuple)) or len(row) != size:
            raise InvalidGridError(f'{what} row {r} must have {size} cells')
        for c, v in enumerate(row):
            if not isinstance(v, int) or isinstance(v, bool):
                raise InvalidGridError(f'{what} cell ({r},{c}) is not an integer: {v!r}')


def check_merge_grid(grid: GridLike) -> None:
    """Checks a 4x4 grid of zeros and powers of two (>= 2)."""
    _check_square(grid, MERGE_SIZE, 'merge grid')
    for r, c in iter_coords(MERGE_SIZE):
        v = grid[r][c]
        if v != 0 and (v < 2 or v & (v - 1)):
            raise InvalidGridError(f'merge grid cell ({r},{c}) is not a power of two: {v}')


def check_constraint_grid(grid: GridLike) -> None:
    """Checks a 9x9 grid of digits 0-9 (0 = unfilled)."""
    _check_square(grid, CONSTRAINT_SIZE, 'constraint grid')
    for r, c in iter_coords(CONSTRAINT_SIZE):
        v = grid[r][c]
        if v < 0 or v > 9:
            raise InvalidGridError(f'constraint grid cell ({r},{c}) out of range: {v}')


def check_coord(row: int, col: int, size: int) -> None:
    if not (0 <= row < size and 0 <= col < size):
        raise InvalidGridError(f'cell ({row},{col}) is outside a {size}x{size} grid')


def pretty(grid: GridLike, blank: str = '.', highlight: Optional[Coord] = None) -> str:
    """Generates a human-readable string for any square grid."""
    width = max(len(str(v)) for row in grid for v in row)
    lines: List[str] = []
    for r, row in enumerate(grid):
        cells: List[str] = []
        for c, v in enumerate(row):
            text = blank if v == 0 else str(v)
            if highlight == (r, c):
                text = f'[{text}]'
            cells.append(text.rjust(width))
        lines.append(' '.join(cells))
    return '\n'.join(lines)
