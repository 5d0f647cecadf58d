from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union

from .constraint import (
    DIGITS,
    Difficulty,
    PuzzleInstance,
    compute_score,
    find_hint_cell,
    is_complete,
    new_puzzle,
    solve,
    validate,
)
from .errors import LockedCellError, NoHintsLeftError, UnsolvableGridError
from .grid import (
    CONSTRAINT_SIZE,
    Coord,
    FrozenGrid,
    InvalidGridError,
    Move,
    check_coord,
    clone_grid,
    freeze_grid,
    grids_equal,
    iter_coords,
)
from .logging_config import get_logger
from .matching import (
    DEFAULT_PAIRS,
    Deck,
    flip_card,
    hide_unmatched,
    is_deck_complete,
    make_deck,
    matched_pairs,
    resolve_pair,
    reveal_all,
)
from .merge import MoveResult, apply_move, has_any_legal_move, new_merge_grid, spawn_random_tile
from .rng import RandomSource

logger = get_logger(__name__)

DEFAULT_HINTS = 3

Notes = Tuple[Tuple[Tuple[int, ...], ...], ...]  # 9x9 of sorted pencil-mark digits


def empty_notes() -> Notes:
    return tuple(tuple(() for _ in range(CONSTRAINT_SIZE)) for _ in range(CONSTRAINT_SIZE))


def _set_cell(grid: FrozenGrid, row: int, col: int, value: int) -> FrozenGrid:
    out = clone_grid(grid)
    out[row][col] = value
    return freeze_grid(out)


def _set_note(notes: Notes, row: int, col: int, digits: Tuple[int, ...]) -> Notes:
    rows = [list(r) for r in notes]
    rows[row][col] = digits
    return tuple(tuple(r) for r in rows)


@dataclass(frozen=True)
class MergeSession:
    """Bookkeeping for one sliding-merge game: board, score, best score and one undo step."""
    grid: FrozenGrid
    score: int = 0
    best_score: int = 0
    previous: Optional[Tuple[FrozenGrid, int]] = None

    @classmethod
    def start(cls, rng: RandomSource, best_score: int = 0) -> 'MergeSession':
        return cls(grid=freeze_grid(new_merge_grid(rng)), best_score=best_score)

    @property
    def is_over(self) -> bool:
        return not has_any_legal_move(self.grid)

    def play(self, direction: Union[Move, int, str], rng: RandomSource) -> Tuple['MergeSession', MoveResult]:
        """Slides the board; a tile is spawned and the move recorded only when something moved."""
        result = apply_move(self.grid, direction)
        if not result.changed:
            return self, result
        grid = spawn_random_tile(result.grid, rng)
        score = self.score + result.points_gained
        session = MergeSession(
            grid=freeze_grid(grid),
            score=score,
            best_score=max(self.best_score, score),
            previous=(self.grid, self.score),
        )
        return session, result

    def undo(self) -> 'MergeSession':
        if self.previous is None:
            return self
        grid, score = self.previous
        return replace(self, grid=grid, score=score, previous=None)

    def restart(self, rng: RandomSource) -> 'MergeSession':
        return MergeSession.start(rng, best_score=self.best_score)


@dataclass(frozen=True)
class SudokuSession:
    """A puzzle in progress: the player's working grid plus mistakes, hints and elapsed time."""
    puzzle: PuzzleInstance
    working: FrozenGrid
    mistakes: int = 0
    hints_remaining: int = DEFAULT_HINTS
    elapsed: int = 0
    notes: Notes = empty_notes()

    @classmethod
    def start(
        cls,
        difficulty: Union[Difficulty, str],
        rng: RandomSource,
        require_unique: bool = False,
    ) -> 'SudokuSession':
        puzzle = new_puzzle(difficulty, rng, require_unique=require_unique)
        return cls(puzzle=puzzle, working=puzzle.clues)

    @property
    def locked(self) -> List[List[bool]]:
        return self.puzzle.locked

    @property
    def is_valid(self) -> bool:
        return validate(self.working, self.puzzle.solution)

    @property
    def is_solved(self) -> bool:
        return is_complete(self.working, self.puzzle.solution)

    @property
    def score(self) -> int:
        return compute_score(self.puzzle.difficulty, self.elapsed, self.mistakes)

    def wrong_cells(self) -> List[Coord]:
        solution = self.puzzle.solution
        return [
            (r, c) for r, c in iter_coords(CONSTRAINT_SIZE)
            if self.working[r][c] != 0 and self.working[r][c] != solution[r][c]
        ]

    def _check_editable(self, row: int, col: int) -> None:
        check_coord(row, col, CONSTRAINT_SIZE)
        if self.puzzle.clues[row][col] != 0:
            raise LockedCellError(f'cell ({row},{col}) is a clue')

    def place(self, row: int, col: int, value: int) -> 'SudokuSession':
        """Writes a digit; a digit that disagrees with the solution still lands but counts as a mistake."""
        self._check_editable(row, col)
        if value not in DIGITS:
            raise InvalidGridError(f'digit out of range: {value!r}')
        mistakes = self.mistakes
        if value != self.puzzle.solution[row][col]:
            mistakes += 1
        return replace(self, working=_set_cell(self.working, row, col, value), mistakes=mistakes)

    def clear(self, row: int, col: int) -> 'SudokuSession':
        self._check_editable(row, col)
        return replace(
            self,
            working=_set_cell(self.working, row, col, 0),
            notes=_set_note(self.notes, row, col, ()),
        )

    def toggle_note(self, row: int, col: int, value: int) -> 'SudokuSession':
        self._check_editable(row, col)
        if value not in DIGITS:
            raise InvalidGridError(f'digit out of range: {value!r}')
        digits = set(self.notes[row][col])
        digits.symmetric_difference_update({value})
        return replace(self, notes=_set_note(self.notes, row, col, tuple(sorted(digits))))

    def hint(self) -> Tuple['SudokuSession', Optional[Coord]]:
        """Reveals the first blank or wrong cell. Costs one hint and counts one mistake."""
        if self.hints_remaining <= 0:
            raise NoHintsLeftError('no hints remaining')
        cell = find_hint_cell(self.working, self.locked, self.puzzle.solution)
        if cell is None:
            return self, None
        r, c = cell
        session = replace(
            self,
            working=_set_cell(self.working, r, c, self.puzzle.solution[r][c]),
            hints_remaining=self.hints_remaining - 1,
            mistakes=self.mistakes + 1,
        )
        return session, cell

    def solve_now(self) -> 'SudokuSession':
        """Fills the whole working grid by solving the clues."""
        solved = solve(self.puzzle.clues)
        if solved is None:
            raise UnsolvableGridError('clue grid has no completion')
        if not grids_equal(solved, self.puzzle.solution):
            # The clues admit more than one completion; keep the one validation checks against.
            logger.debug("clues have another completion; using the stored solution")
            solved = clone_grid(self.puzzle.solution)
        return replace(self, working=freeze_grid(solved), notes=empty_notes())

    def with_elapsed(self, seconds: int) -> 'SudokuSession':
        return replace(self, elapsed=max(0, int(seconds)))


@dataclass(frozen=True)
class MemorySession:
    """A memory game in progress. ``best`` is (least moves, time of that run)."""
    deck: Deck
    open_indices: Tuple[int, ...] = ()
    moves: int = 0
    elapsed: int = 0
    best: Optional[Tuple[int, int]] = None

    @classmethod
    def start(
        cls,
        rng: RandomSource,
        pairs: int = DEFAULT_PAIRS,
        best: Optional[Tuple[int, int]] = None,
    ) -> 'MemorySession':
        return cls(deck=make_deck(rng, pairs), best=best)

    @property
    def pairs(self) -> int:
        return len(self.deck) // 2

    @property
    def matched_pairs(self) -> int:
        return matched_pairs(self.deck)

    @property
    def is_complete(self) -> bool:
        return is_deck_complete(self.deck)

    def flip(self, index: int) -> 'MemorySession':
        """Opens a card; opening the second card of a pair counts as a move."""
        deck, open_indices = flip_card(self.deck, self.open_indices, index)
        moves = self.moves + 1 if len(open_indices) == 2 else self.moves
        return replace(self, deck=deck, open_indices=open_indices, moves=moves)

    def resolve(self) -> Tuple['MemorySession', bool]:
        deck, matched = resolve_pair(self.deck, self.open_indices)
        session = replace(self, deck=deck, open_indices=())
        if is_deck_complete(deck):
            session = replace(session, best=self._better_best())
        return session, matched

    def reveal(self) -> 'MemorySession':
        """Shows every card. Pending open cards are dropped; the caller hides the deck again later."""
        return replace(self, deck=reveal_all(self.deck), open_indices=())

    def hide(self) -> 'MemorySession':
        return replace(self, deck=hide_unmatched(self.deck), open_indices=())

    def _better_best(self) -> Tuple[int, int]:
        if self.best is None:
            return (self.moves, self.elapsed)
        least_moves, best_time = self.best
        if self.moves < least_moves or (self.moves == least_moves and self.elapsed < best_time):
            return (self.moves, self.elapsed)
        return self.best

    def with_elapsed(self, seconds: int) -> 'MemorySession':
        return replace(self, elapsed=max(0, int(seconds)))

    def restart(self, rng: RandomSource, pairs: Optional[int] = None) -> 'MemorySession':
        """New shuffled deck; the best record is kept only for the same deck size."""
        size = self.pairs if pairs is None else pairs
        return MemorySession.start(rng, size, best=self.best if size == self.pairs else None)
