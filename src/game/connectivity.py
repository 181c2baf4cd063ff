"""
Incremental win detection.

Disjoint-set (union-find) over plain integer indices:
* 0 .. size*size - 1           -> the cells (row-major index)
* size*size + 2*player         -> player's virtual "edge A" node
* size*size + 2*player + 1     -> player's virtual "edge B" node

A stone is unioned with its same-owner neighbours and with its owner's virtual edge nodes when it lies on one
of those edges. The owner has won as soon as both virtual edge nodes of that player share a root.
Path compression + union by size keep every operation near-constant amortized.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from src.game.coordinate import Coordinate
from src.game.moves import PlayerId
from src.game.variant import Variant, edge_pair


@dataclass
class Connectivity:
    size: int
    num_players: int
    variant: Variant
    parent: list[int] = field(default_factory=list)
    weight: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.parent:
            self.reset()

    @property
    def num_nodes(self) -> int:
        return self.size * self.size + 2 * self.num_players

    def reset(self) -> None:
        self.parent = list(range(self.num_nodes))
        self.weight = [1] * self.num_nodes

    def copy(self) -> Connectivity:
        return Connectivity(
            self.size,
            self.num_players,
            self.variant,
            parent=list(self.parent),
            weight=list(self.weight),
        )

    def edge_nodes(self, player: PlayerId) -> tuple[int, int]:
        base = self.size * self.size + 2 * player
        return base, base + 1

    def find(self, node: int) -> int:
        root = node
        while self.parent[root] != root:
            root = self.parent[root]
        # path compression
        while self.parent[node] != root:
            self.parent[node], node = root, self.parent[node]
        return root

    def union(self, a: int, b: int) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return
        if self.weight[root_a] < self.weight[root_b]:
            root_a, root_b = root_b, root_a
        self.parent[root_b] = root_a
        self.weight[root_a] += self.weight[root_b]

    def add_stone(
        self, coord: Coordinate, player: PlayerId, cells: Mapping[Coordinate, PlayerId]
    ) -> bool:
        """
        Register a freshly placed stone (already present in `cells`).

        Returns True if the placement connects the player's two edges.
        """
        cell = coord.index(self.size)
        for neighbor in self.variant.neighbors(coord, self.size):
            if cells.get(neighbor) == player:
                self.union(cell, neighbor.index(self.size))

        edges = edge_pair(player, self.variant)
        edge_a, edge_b = self.edge_nodes(player)
        if edges.touches_edge_a(coord):
            self.union(cell, edge_a)
        if edges.touches_edge_b(coord, self.size):
            self.union(cell, edge_b)
        return self.is_connected(player)

    def is_connected(self, player: PlayerId) -> bool:
        edge_a, edge_b = self.edge_nodes(player)
        return self.find(edge_a) == self.find(edge_b)

    @classmethod
    def from_cells(
        cls,
        size: int,
        num_players: int,
        variant: Variant,
        cells: Mapping[Coordinate, PlayerId],
    ) -> Connectivity:
        """Rebuild from scratch (after a swap, or when decoding a position)."""
        connectivity = cls(size, num_players, variant)
        for coord, player in cells.items():
            connectivity.add_stone(coord, player, cells)
        return connectivity

    def connected_players(self) -> list[PlayerId]:
        return [
            player for player in range(self.num_players) if self.is_connected(player)
        ]
