from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .codec import grid_to_string, parse_grid_string
from .constraint import Difficulty, solve
from .grid import InvalidGridError, Move, pretty
from .logging_config import get_logger, setup_logging
from .rng import make_random
from .state import MergeSession, SudokuSession

logger = get_logger(__name__)


def _cmd_sudoku_new(args: argparse.Namespace) -> int:
    rng = make_random(args.seed)
    session = SudokuSession.start(args.difficulty, rng, require_unique=args.unique)
    puzzle = session.puzzle
    print(f'Difficulty: {puzzle.difficulty.value} ({puzzle.clue_count} clues)')
    print(pretty(puzzle.clues))
    print('\nPuzzle string:', grid_to_string(puzzle.clues))
    if args.show_solution:
        print('\nSolution:')
        print(pretty(puzzle.solution))
    return 0


def _cmd_sudoku_solve(args: argparse.Namespace) -> int:
    grid = parse_grid_string(args.grid)
    solved = solve(grid)
    if solved is None:
        print('error: grid has no solution', file=sys.stderr)
        return 1
    print(pretty(solved))
    return 0


def _cmd_merge_play(args: argparse.Namespace) -> int:
    rng = make_random(args.seed)
    session = MergeSession.start(rng)
    print('Initial board:')
    print(pretty(session.grid))
    for ch in args.moves:
        if ch.isspace() or ch == ',':
            continue
        move = Move.parse(ch)
        session, result = session.play(move, rng)
        if not result.changed:
            print(f'\n{move.name.lower()}: nothing moved')
            continue
        print(f'\n{move.name.lower()}: +{result.points_gained} (score {session.score})')
        print(pretty(session.grid))
        if session.is_over:
            print('\nNo moves left. Game over.')
            break
    print(f'\nFinal score: {session.score}')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='gameshub', description='GamesHub puzzle engines')
    parser.add_argument('--log-level', default=None, help='Logging level (DEBUG, INFO, WARNING, ...)')
    games = parser.add_subparsers(dest='game', required=True)

    sudoku = games.add_parser('sudoku', help='Number-placement puzzle')
    sudoku_cmds = sudoku.add_subparsers(dest='command', required=True)

    new = sudoku_cmds.add_parser('new', help='Generate a new puzzle')
    new.add_argument('--difficulty', choices=[d.value for d in Difficulty], default=Difficulty.MEDIUM.value)
    new.add_argument('--seed', type=int, default=None, help='RNG seed')
    new.add_argument('--unique', action='store_true', help='Only remove clues that keep a single solution')
    new.add_argument('--show-solution', action='store_true', help='Print the solution too')
    new.set_defaults(func=_cmd_sudoku_new)

    slv = sudoku_cmds.add_parser('solve', help='Solve an 81-character puzzle string')
    slv.add_argument('grid', help="Row-major digits, '0' or '.' for blanks")
    slv.set_defaults(func=_cmd_sudoku_solve)

    merge = games.add_parser('merge', help='Sliding-merge puzzle (2048)')
    merge_cmds = merge.add_subparsers(dest='command', required=True)
    play = merge_cmds.add_parser('play', help='Apply a move script, e.g. LURD')
    play.add_argument('--seed', type=int, default=None, help='RNG seed')
    play.add_argument('--moves', default='', help='Moves as letters L, U, R, D')
    play.set_defaults(func=_cmd_merge_play)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        return args.func(args)
    except InvalidGridError as e:
        logger.debug("rejected input", exc_info=True)
        print(f'error: {e}', file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
