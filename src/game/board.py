"""The board state of one match: configuration, which player owns which cell, whose turn it is, and the status."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from src.core.exceptions import InvalidConfigError
from src.game.connectivity import Connectivity
from src.game.coordinate import (
    DEFAULT_BOARD_SIZE,
    MAX_BOARD_SIZE,
    MIN_BOARD_SIZE,
    Coordinate,
)
from src.game.moves import PlayerId, Status
from src.game.variant import Variant

MIN_PLAYERS = 2
# Position notation writes one digit per occupied cell
MAX_PLAYERS = 10


@dataclass(frozen=True)
class Config:
    size: int = DEFAULT_BOARD_SIZE
    num_players: int = 2
    variant: Variant = Variant.STANDARD

    def __post_init__(self) -> None:
        if not (MIN_BOARD_SIZE <= self.size <= MAX_BOARD_SIZE):
            raise InvalidConfigError(
                f"Board size must be between {MIN_BOARD_SIZE} and {MAX_BOARD_SIZE}, got {self.size}"
            )
        if not (MIN_PLAYERS <= self.num_players <= MAX_PLAYERS):
            raise InvalidConfigError(
                f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {self.num_players}"
            )
        if not isinstance(self.variant, Variant):
            raise InvalidConfigError(f"Unknown variant: {self.variant!r}")

    @property
    def total_cells(self) -> int:
        return self.size * self.size


@dataclass
class BoardState:
    """
    Sparse ownership map: unoccupied cells are simply absent from `cells`.

    NOTE: Two states compare equal when config, stones, turn and status agree. The move count and the
    union-find are bookkeeping that can be derived, and position notation does not carry them.
    """

    config: Config
    cells: dict[Coordinate, PlayerId] = field(default_factory=dict)
    move_count: int = field(default=0, compare=False)
    current_player: PlayerId = 0
    status: Status = field(default_factory=Status.in_progress)
    connectivity: Optional[Connectivity] = field(
        default=None, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.connectivity is None:
            self.rebuild_connectivity()

    @classmethod
    def new(cls, config: Optional[Config] = None) -> BoardState:
        """Empty board, player 0 to move."""
        return cls(config or Config())

    @property
    def size(self) -> int:
        return self.config.size

    def owner(self, coord: Coordinate) -> Optional[PlayerId]:
        return self.cells.get(coord)

    def is_occupied(self, coord: Coordinate) -> bool:
        return coord in self.cells

    def is_full(self) -> bool:
        return len(self.cells) >= self.config.total_cells

    def empty_cells(self) -> list[Coordinate]:
        """Row-major order"""
        return [coord for coord in self.all_cells() if coord not in self.cells]

    def all_cells(self) -> Iterator[Coordinate]:
        for row in range(self.size):
            for col in range(self.size):
                yield Coordinate(row, col)

    def next_player(self, player: PlayerId) -> PlayerId:
        return (player + 1) % self.config.num_players

    def rebuild_connectivity(self) -> None:
        self.connectivity = Connectivity.from_cells(
            self.config.size, self.config.num_players, self.config.variant, self.cells
        )

    def is_connected(self, player: PlayerId) -> bool:
        assert self.connectivity is not None
        return self.connectivity.is_connected(player)

    def copy(self) -> BoardState:
        """Independent copy. Cells and union-find are duplicated, everything else is immutable."""
        assert self.connectivity is not None
        return BoardState(
            config=self.config,
            cells=dict(self.cells),
            move_count=self.move_count,
            current_player=self.current_player,
            status=self.status,
            connectivity=self.connectivity.copy(),
        )
