from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from .pieces import Piece


Coordinate = Tuple[int, int]


class Board:
    """Discrete 2D grid of locked cells.

    The grid uses 0 for empty cells and ``index + 1`` of the locking piece otherwise,
    so every value lies in [0, 7]. Row 0 is the top of the board.
    """

    def __init__(self, width: int = 10, height: int = 20) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def is_occupied(self, row: int, col: int) -> bool:
        # Out of bounds counts as blocked
        if not self.is_inside(row, col):
            return True
        return self.grid[row, col] != 0

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        for x, y in cells:
            if self.is_occupied(y, x):
                return False
        return True

    def lock(self, piece: Piece, origin_x: int, origin_y: int) -> None:
        """Write the piece's cells into the grid.

        Assumes the placement was already validated with ``can_place``.
        """
        for dy in range(piece.height):
            for dx in range(piece.width):
                v = piece.mask[dy, dx]
                if v:
                    self.grid[origin_y + dy, origin_x + dx] = v

    def clear_full_lines(self) -> int:
        cleared = 0
        y = self.height - 1
        while y >= 0:
            if np.all(self.grid[y] != 0):
                # Shift everything above down one row, then re-check this same row
                self.grid[1 : y + 1] = self.grid[0:y].copy()
                self.grid[0] = 0
                cleared += 1
            else:
                y -= 1
        return cleared

    def get_max_height(self) -> int:
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        return self.height - int(non_empty_rows[0])

    def column_heights(self) -> np.ndarray:
        filled = self.grid != 0
        first = np.argmax(filled, axis=0)
        return np.where(filled.any(axis=0), self.height - first, 0)

    def count_holes(self) -> int:
        holes = 0
        for x in range(self.width):
            column = self.grid[:, x]
            seen_block = False
            for cell in column:
                if cell != 0:
                    seen_block = True
                elif seen_block:
                    holes += 1
        return holes

    def bumpiness(self) -> int:
        return int(np.abs(np.diff(self.column_heights())).sum())

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()


def format_grid(grid: np.ndarray) -> str:
    return "\n".join("".join("█" if cell else "·" for cell in row) for row in grid)


def print_grid(grid: np.ndarray) -> None:
    print(format_grid(grid))
