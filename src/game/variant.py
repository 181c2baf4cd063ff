"""
Board variants: the geometry (which cells touch) and which pair of edges every player tries to connect.

Adding a variant means adding an enum member plus an entry in NEIGHBOR_OFFSETS. Everything else
(rule engine, union-find, brute-force checks in the tests) reads the geometry from here.
"""

from dataclasses import dataclass
from enum import StrEnum

from src.core.exceptions import UnsupportedVariantError
from src.game.coordinate import Coordinate

Offset = tuple[int, int]


class Variant(StrEnum):
    """Values are the tags used in transcript notation."""

    STANDARD = "Standard"
    SQUARE = "Square"

    @classmethod
    def from_tag(cls, tag: str) -> "Variant":
        """Unknown tags must fail, never silently default to Standard."""
        for variant in cls:
            if variant.value == tag:
                return variant
        raise UnsupportedVariantError(f"Unknown variant tag: {tag!r}")

    @property
    def neighbor_offsets(self) -> tuple[Offset, ...]:
        return NEIGHBOR_OFFSETS[self]

    def neighbors(self, coord: Coordinate, size: int) -> list[Coordinate]:
        return [
            neighbor
            for neighbor in (coord.shifted(offset) for offset in self.neighbor_offsets)
            if neighbor.is_within(size)
        ]


NEIGHBOR_OFFSETS: dict[Variant, tuple[Offset, ...]] = {
    # Hex cells on a rhombus: the 4 orthogonal neighbours plus one diagonal pair
    Variant.STANDARD: ((-1, 0), (1, 0), (0, -1), (0, 1), (-1, 1), (1, -1)),
    Variant.SQUARE: ((-1, 0), (1, 0), (0, -1), (0, 1)),
}


class Axis(StrEnum):
    ROWS = "rows"  # top edge (row 0) <-> bottom edge (row size-1)
    COLS = "cols"  # left edge (col 0) <-> right edge (col size-1)


@dataclass(frozen=True)
class EdgePair:
    """The two opposite edges a player must connect."""

    axis: Axis

    def touches_edge_a(self, coord: Coordinate) -> bool:
        return (coord.row if self.axis == Axis.ROWS else coord.col) == 0

    def touches_edge_b(self, coord: Coordinate, size: int) -> bool:
        return (coord.row if self.axis == Axis.ROWS else coord.col) == size - 1


def edge_pair(player: int, variant: Variant) -> EdgePair:
    """
    Player 0 connects top <-> bottom, player 1 connects left <-> right.

    NOTE: For more than two players the pairing simply alternates (even players: rows, odd players: cols)
    for every variant we have. This is a placeholder until a proper multi-player layout is decided on.
    """
    _ = variant
    return EdgePair(Axis.ROWS if player % 2 == 0 else Axis.COLS)
