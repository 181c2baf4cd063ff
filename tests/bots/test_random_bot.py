"""Unit tests for src/bots/random_bot.py"""

from src.bots.random_bot import RandomBot
from src.game import rules
from src.game.board import BoardState, Config
from src.game.coordinate import Coordinate
from src.game.moves import Action, ActionKind, Placement


def test_plays_on_an_empty_cell() -> None:
    state = BoardState.new(Config(size=3))
    state = rules.apply(state, Placement(0, Coordinate(1, 1)))
    move = RandomBot(seed=0).choose_move(state)
    assert isinstance(move, Placement)
    assert move.player == 1
    assert move.coord in state.empty_cells()


def test_same_seed_same_game() -> None:
    def play(seed: int) -> list[object]:
        bot = RandomBot(seed=seed)
        state = BoardState.new(Config(size=5))
        moves = []
        while state.status.is_in_progress:
            move = bot.choose_move(state)
            state = rules.apply(state, move)
            moves.append(move)
        return moves

    assert play(42) == play(42)


def test_resigns_without_empty_cells() -> None:
    """Only reachable when handed a full board that is still in progress."""
    state = BoardState.new(Config(size=1))
    state.cells[Coordinate(0, 0)] = 1
    assert RandomBot().choose_move(state) == Action(0, ActionKind.RESIGN)
