import unittest

from game import (
    InvalidGridError,
    Move,
    apply_move,
    has_any_legal_move,
    make_random,
    new_merge_grid,
    slide_row_left,
    spawn_random_tile,
)


class ScriptedRandom:
    """Replays fixed choices: randrange picks the given indices, random() the given floats."""

    def __init__(self, indices, floats):
        self._indices = list(indices)
        self._floats = list(floats)

    def randrange(self, stop):
        i = self._indices.pop(0)
        assert 0 <= i < stop
        return i

    def random(self):
        return self._floats.pop(0)

    def shuffle(self, x):
        pass


def _row_grid(row):
    return [list(row), [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]]


def _column(grid, c):
    return [grid[r][c] for r in range(4)]


def _random_grid(rng):
    values = [0, 0, 0, 2, 2, 4, 4, 8, 16]
    return [[values[rng.randrange(len(values))] for _ in range(4)] for _ in range(4)]


class TestApplyMove(unittest.TestCase):
    def test_given_triple_two_then_four_when_moving_left_then_only_first_pair_merges(self):
        res = apply_move(_row_grid([2, 2, 2, 4]), Move.LEFT)
        self.assertEqual(res.grid[0], [4, 2, 4, 0])
        self.assertEqual(res.points_gained, 4)
        self.assertTrue(res.changed)

    def test_given_gap_in_row_when_moving_left_then_compacts_before_merging(self):
        res = apply_move(_row_grid([2, 0, 2, 2]), Move.LEFT)
        self.assertEqual(res.grid[0], [4, 2, 0, 0])
        self.assertEqual(res.points_gained, 4)

    def test_given_merged_tile_next_to_equal_tile_when_sliding_then_no_second_merge(self):
        out, points = slide_row_left([4, 2, 2, 0])
        self.assertEqual(out, [4, 4, 0, 0])
        self.assertEqual(points, 4)
        out2, points2 = slide_row_left([2, 2, 2, 2])
        self.assertEqual(out2, [4, 4, 0, 0])
        self.assertEqual(points2, 8)

    def test_given_row_when_moving_right_then_tiles_pack_to_the_right(self):
        res = apply_move(_row_grid([2, 2, 2, 4]), Move.RIGHT)
        self.assertEqual(res.grid[0], [0, 2, 4, 4])
        self.assertEqual(res.points_gained, 4)

    def test_given_column_when_moving_up_and_down_then_tiles_pack_vertically(self):
        grid = [[2, 0, 0, 0], [2, 0, 0, 0], [4, 0, 0, 0], [0, 0, 0, 0]]
        up = apply_move(grid, Move.UP)
        self.assertEqual(_column(up.grid, 0), [4, 4, 0, 0])
        self.assertEqual(up.points_gained, 4)
        down = apply_move(grid, Move.DOWN)
        self.assertEqual(_column(down.grid, 0), [0, 0, 4, 4])
        self.assertEqual(down.points_gained, 4)

    def test_given_direction_names_and_ints_when_moving_then_same_as_enum(self):
        grid = _row_grid([0, 2, 0, 2])
        expected = apply_move(grid, Move.RIGHT).grid
        self.assertEqual(apply_move(grid, 'right').grid, expected)
        self.assertEqual(apply_move(grid, 'R').grid, expected)
        self.assertEqual(apply_move(grid, 2).grid, expected)
        with self.assertRaises(InvalidGridError):
            apply_move(grid, 'sideways')
        with self.assertRaises(InvalidGridError):
            apply_move(grid, 7)

    def test_given_packed_row_when_moving_same_direction_twice_then_second_is_unchanged(self):
        first = apply_move(_row_grid([0, 2, 8, 2]), Move.LEFT)
        self.assertEqual(first.grid[0], [2, 8, 2, 0])
        second = apply_move(first.grid, Move.LEFT)
        self.assertFalse(second.changed)
        self.assertEqual(second.points_gained, 0)
        self.assertEqual(second.grid, first.grid)

    def test_given_any_board_when_repeating_a_move_then_only_new_merges_can_change_it(self):
        rng = make_random(7)
        for _ in range(30):
            grid = _random_grid(rng)
            for move in Move:
                first = apply_move(grid, move)
                second = apply_move(first.grid, move)
                if second.changed:
                    self.assertGreater(second.points_gained, 0)
                else:
                    self.assertEqual(second.grid, first.grid)

    def test_given_any_board_when_moving_then_sum_grows_by_points_gained(self):
        rng = make_random(11)
        for _ in range(50):
            grid = _random_grid(rng)
            before = sum(map(sum, grid))
            for move in Move:
                res = apply_move(grid, move)
                self.assertEqual(sum(map(sum, res.grid)), before + res.points_gained)

    def test_given_board_when_moving_then_input_not_mutated_and_no_tile_spawned(self):
        grid = [[0, 0, 0, 0], [0, 2, 0, 0], [0, 0, 0, 0], [0, 0, 0, 2]]
        snapshot = [row[:] for row in grid]
        res = apply_move(grid, Move.LEFT)
        self.assertEqual(grid, snapshot)
        self.assertEqual(sum(1 for row in res.grid for v in row if v), 2)

    def test_given_nothing_can_move_when_moving_then_changed_false(self):
        grid = _row_grid([2, 4, 8, 16])
        res = apply_move(grid, Move.LEFT)
        self.assertFalse(res.changed)
        self.assertEqual(res.points_gained, 0)

    def test_given_malformed_grid_when_moving_then_invalid_grid_error(self):
        with self.assertRaises(InvalidGridError):
            apply_move([[0, 0, 0, 0]] * 3, Move.LEFT)
        with self.assertRaises(InvalidGridError):
            apply_move(_row_grid([3, 0, 0, 0]), Move.LEFT)
        with self.assertRaises(InvalidGridError):
            apply_move(_row_grid([1, 0, 0, 0]), Move.LEFT)


class TestLegalMovesAndSpawn(unittest.TestCase):
    def test_given_full_board_without_equal_neighbours_when_checking_then_no_moves(self):
        grid = [
            [2, 4, 2, 4],
            [4, 2, 4, 2],
            [2, 4, 2, 4],
            [4, 2, 4, 2],
        ]
        self.assertFalse(has_any_legal_move(grid))

    def test_given_empty_cell_or_equal_neighbours_when_checking_then_moves_exist(self):
        with_gap = [
            [2, 4, 2, 4],
            [4, 2, 4, 2],
            [2, 4, 0, 4],
            [4, 2, 4, 2],
        ]
        self.assertTrue(has_any_legal_move(with_gap))
        vertical_pair = [
            [2, 4, 2, 4],
            [2, 8, 4, 2],
            [16, 4, 2, 4],
            [4, 2, 4, 2],
        ]
        self.assertTrue(has_any_legal_move(vertical_pair))
        horizontal_pair = [
            [2, 4, 2, 4],
            [4, 2, 4, 2],
            [2, 4, 2, 4],
            [4, 2, 8, 8],
        ]
        self.assertTrue(has_any_legal_move(horizontal_pair))

    def test_given_scripted_random_when_spawning_then_chosen_empty_cell_gets_two_or_four(self):
        grid = _row_grid([2, 0, 4, 0])
        two = spawn_random_tile(grid, ScriptedRandom([0], [0.5]))
        # empties in row-major order start with (0,1)
        self.assertEqual(two[0][1], 2)
        four = spawn_random_tile(grid, ScriptedRandom([1], [0.05]))
        self.assertEqual(four[0][3], 4)
        self.assertEqual(grid[0], [2, 0, 4, 0])  # input untouched

    def test_given_full_board_when_spawning_then_returned_unchanged(self):
        grid = [
            [2, 4, 2, 4],
            [4, 2, 4, 2],
            [2, 4, 2, 4],
            [4, 2, 4, 2],
        ]
        self.assertEqual(spawn_random_tile(grid, ScriptedRandom([], [])), grid)

    def test_given_many_spawns_when_counting_values_then_mostly_twos(self):
        rng = make_random(3)
        empty = [[0] * 4 for _ in range(4)]
        values = [v for _ in range(2000) for row in spawn_random_tile(empty, rng) for v in row if v]
        fours = values.count(4) / len(values)
        self.assertEqual(set(values), {2, 4})
        self.assertGreater(fours, 0.05)
        self.assertLess(fours, 0.15)

    def test_given_seed_when_starting_board_then_two_tiles_and_deterministic(self):
        a = new_merge_grid(make_random(42))
        b = new_merge_grid(make_random(42))
        self.assertEqual(a, b)
        self.assertEqual(sum(1 for row in a for v in row if v), 2)


if __name__ == '__main__':
    unittest.main(verbosity=2)
