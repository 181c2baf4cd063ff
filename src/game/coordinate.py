"""
A cell on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# Boards are square. Position notation reads N lines of N characters, so keep the side length within reason.
MIN_BOARD_SIZE = 1
MAX_BOARD_SIZE = 64
DEFAULT_BOARD_SIZE = 7


@dataclass(frozen=True, order=True)
class Coordinate:
    row: int
    col: int

    @classmethod
    def from_index(cls, index: int, size: int) -> Coordinate:
        """Row-major cell index: 0 is the top-left cell, size*size - 1 the bottom-right one."""
        row, col = divmod(index, size)
        return cls(row, col)

    def to_notation(self) -> str:
        return f"{self.row},{self.col}"

    def index(self, size: int) -> int:
        return self.row * size + self.col

    def is_within(self, size: int) -> bool:
        return (0 <= self.row < size) and (0 <= self.col < size)

    def shifted(self, offset: tuple[int, int]) -> Coordinate:
        return Coordinate(self.row + offset[0], self.col + offset[1])

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"
