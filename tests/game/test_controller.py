"""Unit tests for src/game/controller.py"""

import threading
from typing import Iterator

import pytest

from src.bots.random_bot import RandomBot
from src.bots.registry import BotRegistry
from src.core.exceptions import (
    BotNotFoundError,
    BotTimeoutError,
    CellOccupiedError,
    GameAlreadyOverError,
    IllegalBotMoveError,
    InvalidConfigError,
    NotYourSeatError,
    ReservedMoveError,
)
from src.core.settings import EngineSettings
from src.core.shared_types import ForfeitPolicy, Phase
from src.game.board import BoardState, Config
from src.game.controller import GameController
from src.game.coordinate import Coordinate
from src.game.moves import Action, ActionKind, Move, Placement, Status
from src.game.variant import Variant


# --- MOCK BOTS ---
class FirstCellBot:
    """Always plays (0, 0), whether that cell is free or not."""

    name = "first_cell"

    def choose_move(self, state: BoardState) -> Move:
        return Placement(state.current_player, Coordinate(0, 0))


class FirstEmptyBot:
    name = "first_empty"

    def choose_move(self, state: BoardState) -> Move:
        return Placement(state.current_player, state.empty_cells()[0])


class CrashingBot:
    name = "crashing"

    def choose_move(self, state: BoardState) -> Move:
        raise RuntimeError("segfault (not really)")


class NotAMoveBot:
    name = "not_a_move"

    def choose_move(self, state: BoardState) -> Move:
        return "3,3"  # type: ignore[return-value]


class PassingBot:
    name = "passing"

    def choose_move(self, state: BoardState) -> Move:
        return Action(state.current_player, ActionKind.PASS)


class VandalBot:
    """Scribbles over the state it is given, then plays a legal move."""

    name = "vandal"

    def choose_move(self, state: BoardState) -> Move:
        move = Placement(state.current_player, state.empty_cells()[0])
        for coord in state.empty_cells():
            state.cells[coord] = state.current_player
        return move


class HangingBot:
    name = "hanging"

    def __init__(self) -> None:
        self.release = threading.Event()

    def choose_move(self, state: BoardState) -> Move:
        self.release.wait(timeout=10)
        return Placement(state.current_player, state.empty_cells()[0])


@pytest.fixture
def hanging_bot() -> Iterator[HangingBot]:
    bot = HangingBot()
    try:
        yield bot
    finally:
        bot.release.set()


@pytest.fixture
def registry(hanging_bot: HangingBot) -> BotRegistry:
    registry = BotRegistry()
    for bot in (
        FirstCellBot(),
        FirstEmptyBot(),
        CrashingBot(),
        NotAMoveBot(),
        PassingBot(),
        VandalBot(),
        RandomBot(seed=3),
        hanging_bot,
    ):
        registry.with_bot(bot)
    registry.freeze()
    return registry


FAST = EngineSettings(bot_timeout_seconds=0.2)


# --- SETUP ---
def test_new_match() -> None:
    with GameController(Config(size=5)) as controller:
        assert controller.phase == Phase.IN_PROGRESS
        assert controller.current_player == 0
        assert not controller.is_bot_turn
        assert controller.state == BoardState.new(Config(size=5))
        assert controller.winner is None


def test_unknown_bot(registry: BotRegistry) -> None:
    with pytest.raises(BotNotFoundError):
        GameController(Config(), {1: "deep_blue"}, registry)


@pytest.mark.parametrize("seat", [-1, 2, 5])
def test_bot_on_missing_seat(registry: BotRegistry, seat: int) -> None:
    with pytest.raises(InvalidConfigError):
        GameController(Config(), {seat: "first_empty"}, registry)


# --- HUMAN MOVES ---
def test_submit_moves() -> None:
    with GameController(Config(size=7)) as controller:
        controller.submit_move(Placement(0, Coordinate(3, 3)))
        state = controller.submit_move(Action(1, ActionKind.SWAP))
        assert state.cells == {Coordinate(3, 3): 1}
        assert controller.current_player == 0
        assert len(controller.history) == 2


def test_rejected_human_move_can_be_retried() -> None:
    with GameController(Config(size=7)) as controller:
        controller.submit_move(Placement(0, Coordinate(3, 3)))
        with pytest.raises(CellOccupiedError):
            controller.submit_move(Placement(1, Coordinate(3, 3)))
        assert controller.current_player == 1
        assert len(controller.history) == 1
        controller.submit_move(Placement(1, Coordinate(2, 2)))
        assert controller.current_player == 0


def test_submit_for_bot_seat(registry: BotRegistry) -> None:
    with GameController(Config(), {0: "first_empty"}, registry) as controller:
        with pytest.raises(NotYourSeatError):
            controller.submit_move(Placement(0, Coordinate(0, 0)))


def test_human_cannot_pass() -> None:
    with GameController(Config(size=3)) as controller:
        with pytest.raises(ReservedMoveError):
            controller.submit_move(Action(0, ActionKind.PASS))
        assert controller.history == []
        assert "pass" not in controller.export_transcript()


def test_passes_from_a_transcript_are_replayed() -> None:
    """Recorded forfeits stay valid history when a match is restored."""
    text = "config: size=3 players=2 variant=Standard\nmoves:\nP0 pass\n"
    with GameController.from_transcript(text) as controller:
        assert controller.current_player == 1
        assert controller.history == [Action(0, ActionKind.PASS)]


def test_resignation_finishes_the_match() -> None:
    with GameController(Config(size=7)) as controller:
        controller.submit_move(Action(0, ActionKind.RESIGN))
        assert controller.phase == Phase.FINISHED
        assert controller.current_player is None
        assert controller.winner == 1
        assert controller.legal_moves() == []
        with pytest.raises(GameAlreadyOverError):
            controller.submit_move(Placement(1, Coordinate(0, 0)))


def test_resignation_with_three_players_has_no_winner() -> None:
    with GameController(Config(size=7, num_players=3)) as controller:
        controller.submit_move(Action(0, ActionKind.RESIGN))
        assert controller.winner is None


def test_win() -> None:
    with GameController(Config(size=1)) as controller:
        controller.submit_move(Placement(0, Coordinate(0, 0)))
        assert controller.phase == Phase.FINISHED
        assert controller.winner == 0


# --- BOT TURNS ---
def test_illegal_bot_move_is_forfeited(registry: BotRegistry) -> None:
    """The bot targets an occupied cell: the turn is skipped and the human can continue."""
    with GameController(Config(size=7), {1: "first_cell"}, registry, FAST) as controller:
        controller.submit_move(Placement(0, Coordinate(0, 0)))
        forfeit = controller.play_bot_turn()

        assert forfeit is not None
        assert forfeit.player == 1
        assert isinstance(forfeit.error, IllegalBotMoveError)
        assert isinstance(forfeit.error.__cause__, CellOccupiedError)
        assert controller.history[-1] == Action(1, ActionKind.PASS)
        assert controller.current_player == 0
        assert controller.phase == Phase.IN_PROGRESS

        controller.submit_move(Placement(0, Coordinate(1, 1)))
        assert controller.current_player == 1


def test_forfeit_with_loss_policy(registry: BotRegistry) -> None:
    settings = EngineSettings(bot_timeout_seconds=0.2, forfeit_policy=ForfeitPolicy.LOSS)
    with GameController(Config(size=7), {1: "crashing"}, registry, settings) as controller:
        controller.submit_move(Placement(0, Coordinate(0, 0)))
        forfeit = controller.play_bot_turn()
        assert forfeit is not None
        assert controller.state.status == Status.resigned(1)
        assert controller.phase == Phase.FINISHED
        assert controller.winner == 0


def test_loss_policy_needs_two_players(registry: BotRegistry) -> None:
    settings = EngineSettings(forfeit_policy=ForfeitPolicy.LOSS)
    with pytest.raises(InvalidConfigError):
        GameController(Config(num_players=3), {2: "first_empty"}, registry, settings)

    # Without bots nobody can forfeit
    with GameController(Config(num_players=3), settings=settings) as controller:
        assert controller.phase == Phase.IN_PROGRESS


@pytest.mark.parametrize("bot_name", ["crashing", "not_a_move", "passing"])
def test_misbehaving_bots_forfeit(registry: BotRegistry, bot_name: str) -> None:
    with GameController(Config(size=7), {0: bot_name}, registry, FAST) as controller:
        forfeit = controller.play_bot_turn()
        assert forfeit is not None
        assert isinstance(forfeit.error, IllegalBotMoveError)
        assert controller.forfeits == [forfeit]
        assert controller.state.cells == {}


def test_bot_timeout(registry: BotRegistry, hanging_bot: HangingBot) -> None:
    settings = EngineSettings(bot_timeout_seconds=0.05)
    with GameController(Config(size=7), {0: "hanging"}, registry, settings) as controller:
        forfeit = controller.play_bot_turn()
        assert forfeit is not None
        assert isinstance(forfeit.error, BotTimeoutError)
        assert controller.current_player == 1
        assert controller.state.cells == {}

        # The late answer is discarded
        hanging_bot.release.set()
        assert controller.state.cells == {}
        assert controller.history == [Action(0, ActionKind.PASS)]


def test_bot_gets_a_copy_of_the_state(registry: BotRegistry) -> None:
    with GameController(Config(size=3), {0: "vandal"}, registry, FAST) as controller:
        assert controller.play_bot_turn() is None
        assert controller.state.cells == {Coordinate(0, 0): 0}


def test_play_bot_turn_on_human_seat(registry: BotRegistry) -> None:
    with GameController(Config(), {1: "first_empty"}, registry) as controller:
        with pytest.raises(NotYourSeatError):
            controller.play_bot_turn()


def test_advance_stops_at_human(registry: BotRegistry) -> None:
    with GameController(Config(size=7), {0: "first_empty"}, registry, FAST) as controller:
        assert controller.advance() == []
        assert controller.current_player == 1
        assert controller.history == [Placement(0, Coordinate(0, 0))]
        # Nothing to do while the human is on turn
        assert controller.advance() == []


@pytest.mark.parametrize("variant", list(Variant))
def test_bot_versus_bot_until_the_end(registry: BotRegistry, variant: Variant) -> None:
    config = Config(size=6, variant=variant)
    with GameController(config, {0: "random_bot", 1: "first_empty"}, registry, FAST) as controller:
        assert controller.advance() == []
        assert controller.phase == Phase.FINISHED
        assert controller.current_player is None
        assert not controller.state.status.is_in_progress


def test_advance_gives_up_when_every_bot_forfeits(registry: BotRegistry) -> None:
    with GameController(Config(size=7), {0: "crashing", 1: "passing"}, registry, FAST) as controller:
        forfeits = controller.advance()
        assert [forfeit.player for forfeit in forfeits] == [0, 1]
        assert controller.phase == Phase.IN_PROGRESS
        assert controller.history == [
            Action(0, ActionKind.PASS),
            Action(1, ActionKind.PASS),
        ]


# --- EXPORT / RESTORE ---
def test_export() -> None:
    with GameController(Config(size=3)) as controller:
        controller.submit_move(Placement(0, Coordinate(1, 1)))
        assert controller.export_transcript() == (
            "config: size=3 players=2 variant=Standard\nmoves:\nP0 1,1\n"
        )
        assert controller.export_position() == (
            "size=3\ngrid=...\n.0.\n...\nturn=1\nstatus=InProgress\n"
        )


def test_export_after_finish() -> None:
    with GameController(Config(size=3)) as controller:
        controller.submit_move(Action(0, ActionKind.RESIGN))
        assert controller.export_transcript().endswith("P0 resign\n")


def test_from_transcript(registry: BotRegistry) -> None:
    text = "config: size=5 players=2 variant=Square\nmoves:\nP0 2,2\nP1 swap\n"
    with GameController.from_transcript(text, {1: "first_empty"}, registry, FAST) as controller:
        assert controller.config == Config(size=5, variant=Variant.SQUARE)
        assert controller.state.cells == {Coordinate(2, 2): 1}
        assert controller.current_player == 0
        assert controller.export_transcript() == text

        controller.submit_move(Placement(0, Coordinate(0, 0)))
        assert controller.advance() == []
        assert controller.history[-1] == Placement(1, Coordinate(0, 1))
