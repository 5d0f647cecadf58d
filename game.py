from __future__ import annotations

# Facade module that re-exports the GamesHub engines.
# Used by the Flask app and the tests; single-responsibility modules live under gameshub_core/*.

from gameshub_core.grid import (  # noqa: F401
    Coord,
    Grid,
    InvalidGridError,
    Move,
    clone_grid,
    empty_grid,
    freeze_grid,
    pretty,
)
from gameshub_core.rng import RandomSource, make_random  # noqa: F401
from gameshub_core.errors import (  # noqa: F401
    GameRuleError,
    IllegalFlipError,
    LockedCellError,
    NoHintsLeftError,
    UnsolvableGridError,
)
from gameshub_core.merge import (  # noqa: F401
    MoveResult,
    apply_move,
    has_any_legal_move,
    new_merge_grid,
    slide_row_left,
    spawn_random_tile,
)
from gameshub_core.constraint import (  # noqa: F401
    Difficulty,
    PuzzleInstance,
    REMOVALS,
    compute_score,
    conflicting_cells,
    count_solutions,
    derive_clue_grid,
    find_hint_cell,
    generate_solved_grid,
    is_complete,
    is_placement_valid,
    is_solved_grid,
    new_puzzle,
    solve,
    validate,
)
from gameshub_core.matching import (  # noqa: F401
    Card,
    flip_card,
    hide_unmatched,
    is_deck_complete,
    make_deck,
    resolve_pair,
    reveal_all,
)
from gameshub_core.state import MemorySession, MergeSession, SudokuSession  # noqa: F401
from gameshub_core.db import (  # noqa: F401
    DEFAULT_DB,
    db_delete_session,
    db_list_sessions,
    db_load_session,
    db_store_session,
)


def main() -> None:
    # CLI driver delegated to gameshub_core.cli
    from gameshub_core.cli import main as _main
    raise SystemExit(_main())


if __name__ == '__main__':
    main()
