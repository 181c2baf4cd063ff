"""A bot that picks a random empty cell. Useful as a baseline opponent and for randomized self-play tests."""

import random
from typing import Optional

from src.game.board import BoardState
from src.game.moves import Action, ActionKind, Move, Placement


class RandomBot:
    name = "random_bot"

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)

    def choose_move(self, state: BoardState) -> Move:
        player = state.current_player
        empty_cells = state.empty_cells()
        if not empty_cells:
            return Action(player, ActionKind.RESIGN)
        return Placement(player, self.rng.choice(empty_cells))
