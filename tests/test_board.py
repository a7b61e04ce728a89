"""Tests for grid state, move resolution and terminal checks."""

import random

import pytest

from board import Board, Direction, MergeEvent, build_traversals


def make_board(rows, seed=0):
    board = Board(rng=random.Random(seed))
    board.load(rows)
    return board


def row_board(row):
    return make_board([row, [0] * 4, [0] * 4, [0] * 4])


class TestConstruction:
    def test_starts_empty(self):
        board = Board()
        assert board.grid == [[0] * 4 for _ in range(4)]
        assert board.tiles() == {}

    @pytest.mark.parametrize("size", [0, -1, 2.5])
    def test_invalid_size(self, size):
        with pytest.raises(ValueError):
            Board(size)

    def test_load_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            Board().load([[0, 0], [0, 0]])

    def test_load_rejects_non_power_of_two(self):
        with pytest.raises(ValueError):
            row_board([3, 0, 0, 0])

    def test_reset_clears_cells(self):
        board = row_board([2, 4, 8, 16])
        board.reset()
        assert not board.tiles()


class TestTraversals:
    def test_right_reverses_columns(self):
        rows, cols = build_traversals(Direction.RIGHT.vector, 4)
        assert rows == [0, 1, 2, 3]
        assert cols == [3, 2, 1, 0]

    def test_down_reverses_rows(self):
        rows, cols = build_traversals(Direction.DOWN.vector, 4)
        assert rows == [3, 2, 1, 0]
        assert cols == [0, 1, 2, 3]

    @pytest.mark.parametrize("direction", [Direction.UP, Direction.LEFT])
    def test_up_and_left_are_ascending(self, direction):
        assert build_traversals(direction.vector, 4) == ([0, 1, 2, 3], [0, 1, 2, 3])


class TestApplyMove:
    def test_slide_left(self):
        board = row_board([0, 0, 0, 2])
        result = board.apply_move(Direction.LEFT)
        assert result.changed
        assert result.merges == []
        assert board.grid[0] == [2, 0, 0, 0]

    def test_three_equal_tiles_merge_once(self):
        board = row_board([2, 2, 2, 0])
        result = board.apply_move(Direction.LEFT)
        assert board.grid[0] == [4, 2, 0, 0]
        assert result.merges == [MergeEvent(0, 0, 4)]

    def test_rightmost_pair_merges_first(self):
        board = row_board([0, 2, 2, 2])
        board.apply_move(Direction.RIGHT)
        assert board.grid[0] == [0, 0, 2, 4]

    def test_two_pairs_merge_separately(self):
        board = row_board([2, 2, 2, 2])
        result = board.apply_move(Direction.LEFT)
        assert board.grid[0] == [4, 4, 0, 0]
        assert result.merges == [MergeEvent(0, 0, 4), MergeEvent(0, 1, 4)]

    def test_merged_tile_does_not_merge_again(self):
        board = row_board([4, 2, 2, 0])
        board.apply_move(Direction.LEFT)
        assert board.grid[0] == [4, 4, 0, 0]

    def test_up_and_down_move_columns(self):
        board = make_board([[2, 0, 0, 0], [0, 0, 0, 0], [2, 0, 0, 0], [4, 0, 0, 0]])
        board.apply_move(Direction.DOWN)
        assert [row[0] for row in board.grid] == [0, 0, 4, 4]
        result = board.apply_move(Direction.UP)
        assert [row[0] for row in board.grid] == [8, 0, 0, 0]
        assert result.merges == [MergeEvent(0, 0, 8)]

    def test_merge_events_follow_traversal_order(self):
        board = make_board([[2, 2, 0, 0], [4, 4, 0, 0], [0, 0, 0, 0], [8, 8, 0, 0]])
        result = board.apply_move(Direction.RIGHT)
        assert [(m.row, m.col, m.value) for m in result.merges] == [(0, 3, 4), (1, 3, 8), (3, 3, 16)]

    def test_rejected_move_leaves_grid_identical(self):
        rows = [[2, 4, 8, 16], [4, 8, 16, 32], [0, 0, 0, 0], [0, 0, 0, 0]]
        board = make_board(rows)
        result = board.apply_move(Direction.LEFT)
        assert not result.changed
        assert result.merges == []
        assert board.grid == rows

    def test_conservation_of_value(self):
        rng = random.Random(1234)
        for _ in range(200):
            rows = [[rng.choice([0, 0, 2, 2, 4, 8]) for _ in range(4)] for _ in range(4)]
            board = make_board(rows)
            before = sum(map(sum, rows))
            result = board.apply_move(rng.choice(list(Direction)))
            after = sum(map(sum, board.grid))
            # Each merge turns two tiles of v/2 into one tile of v.
            assert after == before
            merged_cells = [(m.row, m.col) for m in result.merges]
            assert len(merged_cells) == len(set(merged_cells))
            for merge in result.merges:
                assert board.get(merge.row, merge.col) == merge.value


class TestSpawn:
    def test_spawn_fills_empty_cell(self):
        board = Board(rng=random.Random(7))
        spawned = board.spawn_tile()
        assert spawned is not None
        row, col, value = spawned
        assert value in (2, 4)
        assert board.tiles() == {(row, col): value}

    def test_spawn_on_full_board_is_noop(self):
        rows = [[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]]
        board = make_board(rows)
        assert board.random_empty_cell() is None
        assert board.spawn_tile() is None
        assert board.grid == rows

    def test_random_empty_cell_only_picks_empty(self):
        board = make_board([[2, 2, 2, 2], [2, 0, 2, 2], [2, 2, 2, 2], [2, 2, 2, 0]])
        for _ in range(20):
            assert board.random_empty_cell() in {(1, 1), (3, 3)}

    def test_spawn_value_distribution(self):
        board = Board(rng=random.Random(42))
        trials = 5000
        fours = 0
        for _ in range(trials):
            board.reset()
            _, _, value = board.spawn_tile()
            fours += value == 4
        assert 0.08 < fours / trials < 0.12

    def test_spawn_position_is_uniform(self):
        board = Board(rng=random.Random(99))
        trials = 8000
        counts = {}
        for _ in range(trials):
            board.reset()
            row, col, _ = board.spawn_tile()
            counts[(row, col)] = counts.get((row, col), 0) + 1
        assert len(counts) == 16
        expected = trials / 16
        for count in counts.values():
            assert abs(count - expected) < expected * 0.25


class TestTerminalChecks:
    def test_full_board_without_pairs_has_no_moves(self):
        board = make_board([[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]])
        assert not board.has_empty_cell()
        assert not board.has_adjacent_equal_pair()
        assert not board.moves_available()

    def test_full_board_with_vertical_pair_has_moves(self):
        board = make_board([[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [2, 8, 16, 32]])
        assert board.has_adjacent_equal_pair()
        assert board.moves_available()

    def test_empty_cell_means_moves_available(self):
        board = make_board([[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 0, 4], [4, 2, 4, 2]])
        assert board.moves_available()

    def test_empty_cells_are_not_pairs(self):
        assert not Board().has_adjacent_equal_pair()

    def test_max_value(self):
        board = make_board([[2, 0, 0, 0], [0, 2048, 0, 0], [0, 0, 0, 0], [0, 0, 0, 4]])
        assert board.max_value() == 2048
