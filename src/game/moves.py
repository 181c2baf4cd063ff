"""
Moves a player can make, and the status of a match.

A Move is a closed union: either a Placement (claim one empty cell) or an Action (swap / resign / pass).
Code that inspects a move should `match` on it and end with `assert_never`, so a new kind of move cannot be
forgotten silently.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, assert_never

from src.game.coordinate import Coordinate

PlayerId = int


class ActionKind(StrEnum):
    """Values are the keywords used in transcript notation."""

    SWAP = "swap"
    RESIGN = "resign"
    PASS = "pass"  # only recorded when a bot forfeits its turn


@dataclass(frozen=True)
class Placement:
    player: PlayerId
    coord: Coordinate

    def __str__(self) -> str:
        return f"Player {self.player} places at {self.coord}"


@dataclass(frozen=True)
class Action:
    player: PlayerId
    kind: ActionKind

    def __str__(self) -> str:
        return f"Player {self.player} performs action {self.kind}"


Move = Placement | Action


def move_player(move: Move) -> PlayerId:
    match move:
        case Placement(player=player) | Action(player=player):
            return player
        case _:
            assert_never(move)


class StatusKind(StrEnum):
    IN_PROGRESS = "InProgress"
    WON = "Won"
    RESIGNED = "Resigned"
    DRAWN = "Drawn"


@dataclass(frozen=True)
class Status:
    """
    InProgress | Won(player) | Resigned(player) | Drawn

    Status only ever moves away from InProgress, never back.
    """

    kind: StatusKind
    player: Optional[PlayerId] = None

    @classmethod
    def in_progress(cls) -> Status:
        return cls(StatusKind.IN_PROGRESS)

    @classmethod
    def won(cls, player: PlayerId) -> Status:
        return cls(StatusKind.WON, player)

    @classmethod
    def resigned(cls, player: PlayerId) -> Status:
        return cls(StatusKind.RESIGNED, player)

    @classmethod
    def drawn(cls) -> Status:
        return cls(StatusKind.DRAWN)

    @property
    def is_in_progress(self) -> bool:
        return self.kind == StatusKind.IN_PROGRESS

    def to_notation(self) -> str:
        """InProgress, Won:0, Resigned:1, Drawn"""
        if self.player is None:
            return self.kind.value
        return f"{self.kind.value}:{self.player}"

    def __str__(self) -> str:
        return self.to_notation()
