# board.py
# This file holds the grid state and the slide-and-merge move resolution for a 2048 game.

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
import random

DEFAULT_BOARD_SIZE = 4
WIN_TILE = 2048
SPAWN_FOUR_PROBABILITY = 0.1

class Direction(Enum):
    """Represents the possible move directions."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def vector(self) -> Tuple[int, int]:
        """Unit vector (dx, dy): dx moves along columns, dy along rows."""
        return _VECTORS[self]

_VECTORS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

@dataclass(frozen=True)
class MergeEvent:
    """A merge of two equal tiles into `value` at (row, col)."""
    row: int
    col: int
    value: int

@dataclass
class MoveResult:
    """Result of applying a move to the board."""
    changed: bool = False
    merges: List[MergeEvent] = field(default_factory=list)

# --- Board Helper Functions ---

def is_power_of_two(value: int) -> bool:
    """
    Checks whether a cell value is a legal tile value.
    Args:
        value (int): The value to check.
    Returns:
        bool: True for 2, 4, 8, ...
    """
    return value >= 2 and (value & (value - 1)) == 0

def build_traversals(vector: Tuple[int, int], size: int) -> Tuple[List[int], List[int]]:
    """
    Builds the row and column processing order for a move.
    Cells nearest the edge the tiles move towards come first.
    Args:
        vector (Tuple[int, int]): The (dx, dy) movement vector.
        size (int): The dimension of the board.
    Returns:
        Tuple[List[int], List[int]]: The row order and the column order.
    """
    dx, dy = vector
    rows = list(range(size))
    cols = list(range(size))
    if dx == 1:
        cols.reverse()
    if dy == 1:
        rows.reverse()
    return rows, cols


class Board:
    """
    An N x N grid of tile values, where 0 marks an empty cell.

    The board only knows about tiles. Score, win/loss status and the busy guard
    live in the session that owns it.
    """

    def __init__(self, size: int = DEFAULT_BOARD_SIZE, rng: Optional[random.Random] = None,
                 spawn_four_probability: float = SPAWN_FOUR_PROBABILITY):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("Board size must be a positive integer.")
        if not 0.0 <= spawn_four_probability <= 1.0:
            raise ValueError("Spawn probability must be between 0 and 1.")
        self.size = size
        self.rng = rng if rng is not None else random.Random()
        self.spawn_four_probability = spawn_four_probability
        self._cells: List[List[int]] = []
        self.reset()

    def __str__(self) -> str:
        return "\n".join("\t".join(map(str, row)) for row in self._cells)

    @property
    def grid(self) -> List[List[int]]:
        """A copy of the rows of the board."""
        return [list(row) for row in self._cells]

    def reset(self) -> None:
        """Empties every cell."""
        self._cells = [[0] * self.size for _ in range(self.size)]

    def load(self, rows: List[List[int]]) -> None:
        """
        Replaces the board contents with the given rows.
        Args:
            rows (List[List[int]]): An N x N matrix of 0 or powers of two.
        Raises:
            ValueError: If the shape or any value is invalid.
        """
        if len(rows) != self.size or not all(len(row) == self.size for row in rows):
            raise ValueError(f"Board must be a {self.size}x{self.size} matrix.")
        for row in rows:
            for value in row:
                if value != 0 and not is_power_of_two(value):
                    raise ValueError(f"Invalid tile value: {value}")
        self._cells = [list(row) for row in rows]

    def get(self, row: int, col: int) -> int:
        return self._cells[row][col]

    def within_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def empty_cells(self) -> List[Tuple[int, int]]:
        """
        Get coordinates of empty cells.
        Returns:
            List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
        """
        return [
            (row, col)
            for row in range(self.size)
            for col in range(self.size)
            if self._cells[row][col] == 0
        ]

    def tiles(self) -> Dict[Tuple[int, int], int]:
        """Snapshot of every non-empty cell, keyed by (row, col)."""
        return {
            (row, col): value
            for row, line in enumerate(self._cells)
            for col, value in enumerate(line)
            if value != 0
        }

    # --- Spawning ---

    def random_empty_cell(self) -> Optional[Tuple[int, int]]:
        """
        Picks an empty cell uniformly at random.
        Returns:
            Optional[Tuple[int, int]]: The (row, col) picked, or None if the board is full.
        """
        cells = self.empty_cells()
        if not cells:
            return None
        return cells[self.rng.randrange(len(cells))]

    def spawn_tile(self) -> Optional[Tuple[int, int, int]]:
        """
        Adds a new tile (90% chance of 2, 10% chance of 4) to a random empty cell.
        Returns:
            Optional[Tuple[int, int, int]]: (row, col, value) of the new tile,
                                            or None if the board is full.
        """
        cell = self.random_empty_cell()
        if cell is None:
            return None
        row, col = cell
        value = 4 if self.rng.random() < self.spawn_four_probability else 2
        self._cells[row][col] = value
        return row, col, value

    # --- Move Resolution ---

    def find_farthest_position(self, row: int, col: int,
                               vector: Tuple[int, int]) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """
        Walks from (row, col) along the vector while the next cell is empty.
        Args:
            row (int): Starting row.
            col (int): Starting column.
            vector (Tuple[int, int]): The (dx, dy) movement vector.
        Returns:
            Tuple[Tuple[int, int], Tuple[int, int]]: The landing spot and the first cell
                                                     past it (which may be out of bounds).
        """
        dx, dy = vector
        while True:
            previous = (row, col)
            row, col = row + dy, col + dx
            if not self.within_bounds(row, col) or self._cells[row][col] != 0:
                return previous, (row, col)

    def apply_move(self, direction: Direction) -> MoveResult:
        """
        Slides every tile in the given direction, merging equal neighbours.
        A tile produced by a merge does not merge again during the same move.
        Args:
            direction (Direction): The direction to move.
        Returns:
            MoveResult: Whether any tile moved, and the merges in traversal order.
        """
        vector = direction.vector
        rows, cols = build_traversals(vector, self.size)
        merged = [[False] * self.size for _ in range(self.size)]
        result = MoveResult()

        for row in rows:
            for col in cols:
                value = self._cells[row][col]
                if value == 0:
                    continue

                farthest, (next_row, next_col) = self.find_farthest_position(row, col, vector)

                if (self.within_bounds(next_row, next_col)
                        and self._cells[next_row][next_col] == value
                        and not merged[next_row][next_col]):
                    merged_value = value * 2
                    self._cells[next_row][next_col] = merged_value
                    self._cells[row][col] = 0
                    merged[next_row][next_col] = True
                    result.merges.append(MergeEvent(next_row, next_col, merged_value))
                    result.changed = True
                elif farthest != (row, col):
                    far_row, far_col = farthest
                    self._cells[far_row][far_col] = value
                    self._cells[row][col] = 0
                    result.changed = True

        return result

    # --- Game State Checks ---

    def has_empty_cell(self) -> bool:
        return any(value == 0 for row in self._cells for value in row)

    def has_adjacent_equal_pair(self) -> bool:
        """
        Checks for two equal tiles side by side. Only right and down neighbours are
        compared since adjacency is symmetric.
        """
        for row in range(self.size):
            for col in range(self.size):
                value = self._cells[row][col]
                if value == 0:
                    continue
                if row < self.size - 1 and self._cells[row + 1][col] == value:
                    return True
                if col < self.size - 1 and self._cells[row][col + 1] == value:
                    return True
        return False

    def moves_available(self) -> bool:
        return self.has_empty_cell() or self.has_adjacent_equal_pair()

    def max_value(self) -> int:
        return max(max(row) for row in self._cells)
