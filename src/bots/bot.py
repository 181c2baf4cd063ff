"""
Contract for bots.

A bot is anything with a name and a `choose_move` method. The registry and the controller only rely on this
Protocol, so a bot may just as well forward the position to a remote process/service.
"""

from typing import Protocol

from src.game.board import BoardState
from src.game.moves import Move


class Bot(Protocol):
    name: str

    def choose_move(self, state: BoardState) -> Move:
        """Return the move to play for `state.current_player`. The state is a copy; mutating it has no effect."""
        ...
