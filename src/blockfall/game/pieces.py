from __future__ import annotations

from enum import IntEnum
from typing import List, Tuple

import numpy as np


class TetrominoType(IntEnum):
    I = 0
    O = 1
    T = 2
    S = 3
    Z = 4
    J = 5
    L = 6


Shape = np.ndarray


BASE_SHAPES: Tuple[Shape, ...] = (
    np.array([[1, 1, 1, 1]], dtype=np.int8),  # I
    np.array([[1, 1], [1, 1]], dtype=np.int8),  # O
    np.array([[0, 1, 0], [1, 1, 1]], dtype=np.int8),  # T
    np.array([[0, 1, 1], [1, 1, 0]], dtype=np.int8),  # S
    np.array([[1, 1, 0], [0, 1, 1]], dtype=np.int8),  # Z
    np.array([[1, 0, 0], [1, 1, 1]], dtype=np.int8),  # J
    np.array([[0, 0, 1], [1, 1, 1]], dtype=np.int8),  # L
)

PIECE_COLORS: Tuple[Tuple[int, int, int], ...] = (
    (0, 240, 240),  # I
    (240, 240, 0),  # O
    (160, 0, 240),  # T
    (0, 240, 0),    # S
    (240, 0, 0),    # Z
    (0, 0, 240),    # J
    (240, 160, 0),  # L
)

EMPTY_COLOR = (20, 20, 26)


def color_for_value(v: int) -> Tuple[int, int, int]:
    """Map a board cell value to RGB; negative values (falling piece overlay) use abs."""
    v = abs(int(v))
    if v == 0:
        return EMPTY_COLOR
    if 1 <= v <= len(PIECE_COLORS):
        return PIECE_COLORS[v - 1]
    return (200, 200, 200)


class Piece:
    """A colored, oriented piece.

    The mask stores ``index + 1`` in every filled cell and 0 elsewhere, so one array
    answers both "is this cell filled" and "which color paints it".
    """

    def __init__(self, template: Shape, index: int) -> None:
        index = int(index)
        if not 0 <= index < len(BASE_SHAPES):
            raise ValueError(f"piece index out of range: {index}")
        self.index = index
        template = np.asarray(template)
        self.mask = np.where(template != 0, index + 1, 0).astype(np.int8)

    @classmethod
    def from_type(cls, kind: TetrominoType | int) -> "Piece":
        index = int(kind)
        return cls(BASE_SHAPES[index], index)

    @property
    def kind(self) -> TetrominoType:
        return TetrominoType(self.index)

    @property
    def value(self) -> int:
        return self.index + 1

    @property
    def width(self) -> int:
        return int(self.mask.shape[1])

    @property
    def height(self) -> int:
        return int(self.mask.shape[0])

    def rotate(self) -> "Piece":
        # (y, x) of an HxW mask lands at (x, H - 1 - y)
        return Piece(np.rot90(self.mask, 1, axes=(1, 0)), self.index)

    def cells_at(self, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
        h, w = self.mask.shape
        cells: List[Tuple[int, int]] = []
        for dy in range(h):
            for dx in range(w):
                if self.mask[dy, dx]:
                    cells.append((origin_x + dx, origin_y + dy))
        return cells

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return self.index == other.index and np.array_equal(self.mask, other.mask)

    def __repr__(self) -> str:
        return f"Piece(kind={self.kind.name}, shape={self.mask.shape})"
