"""
The GameController is the entrypoint into the domain layer for the service layer.
It owns the board state of exactly one match and is responsible for orchestrating a turn:

1. find out whose turn it is
2. get a candidate move (submitted by a human, or asked from a registered bot under a time budget)
3. let the rule engine validate / apply it
4. append it to the history

Matches share nothing but the (read-only) bot registry, so several controllers can run side by side.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from types import TracebackType
from typing import Iterable, Mapping, Optional, Self

from src.bots.bot import Bot
from src.bots.registry import BotRegistry, create_default_registry
from src.core.exceptions import (
    BotError,
    BotTimeoutError,
    GameAlreadyOverError,
    IllegalBotMoveError,
    InvalidConfigError,
    NotYourSeatError,
    ReservedMoveError,
    RuleViolation,
)
from src.core.settings import EngineSettings
from src.core.shared_types import ForfeitPolicy, Phase
from src.game import rules
from src.game.board import BoardState, Config
from src.game.moves import (
    Action,
    ActionKind,
    Move,
    Placement,
    PlayerId,
    StatusKind,
    move_player,
)
from src.game.position import encode_position
from src.game.transcript import Transcript, decode_transcript, encode_transcript

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Forfeit:
    """A bot turn that did not produce a legal move in time."""

    player: PlayerId
    bot_name: str
    move_number: int
    error: BotError


class GameController:
    def __init__(
        self,
        config: Optional[Config] = None,
        bots: Optional[Mapping[PlayerId, str]] = None,
        registry: Optional[BotRegistry] = None,
        settings: Optional[EngineSettings] = None,
        history: Iterable[Move] = (),
    ) -> None:
        """
        Set up a match. `bots` maps a seat (player id) to the name of a registered bot; every other seat is human.

        Unknown bot names fail right here (BotNotFoundError), not halfway through the match.
        """
        self.phase = Phase.SETUP
        self.config = config or Config()
        self.settings = settings or EngineSettings()
        self.registry = registry or create_default_registry()
        self.bot_names: dict[PlayerId, str] = dict(bots or {})
        self._bots: dict[PlayerId, Bot] = self._resolve_bots(self.bot_names)
        if (
            self._bots
            and self.settings.forfeit_policy == ForfeitPolicy.LOSS
            and self.config.num_players > 2
        ):
            # A resignation ends the match for every player
            raise InvalidConfigError(
                "Forfeit policy 'loss' is only supported for two player matches with bots"
            )

        self.state = BoardState.new(self.config)
        self.history: list[Move] = []
        self.forfeits: list[Forfeit] = []
        self._executor: Optional[ThreadPoolExecutor] = None

        self.phase = Phase.IN_PROGRESS
        for move in history:
            self._commit(move)
        logger.info(
            "Match set up: size=%s players=%s variant=%s bots=%s",
            self.config.size,
            self.config.num_players,
            self.config.variant,
            self.bot_names,
        )

    @classmethod
    def from_transcript(
        cls,
        text: str | bytes,
        bots: Optional[Mapping[PlayerId, str]] = None,
        registry: Optional[BotRegistry] = None,
        settings: Optional[EngineSettings] = None,
    ) -> Self:
        """Resume a match from (untrusted) transcript notation."""
        transcript, _ = decode_transcript(text)
        return cls(transcript.config, bots, registry, settings, history=transcript.moves)

    # --- MATCH INFO ---
    @property
    def current_player(self) -> Optional[PlayerId]:
        """None once the match is finished."""
        if self.phase != Phase.IN_PROGRESS:
            return None
        return self.state.current_player

    @property
    def is_bot_turn(self) -> bool:
        return self.current_player in self._bots

    @property
    def winner(self) -> Optional[PlayerId]:
        """
        The player who connected their edges. In a two player match, a resignation hands the win to the opponent.
        (With more players a resignation ends the match without a winner.)
        """
        status = self.state.status
        if status.kind == StatusKind.WON:
            return status.player
        if status.kind == StatusKind.RESIGNED and self.config.num_players == 2:
            assert status.player is not None
            return self.state.next_player(status.player)
        return None

    def legal_moves(self) -> list[Move]:
        return rules.legal_moves(self.state)

    def export_transcript(self) -> str:
        return encode_transcript(self.transcript())

    def export_position(self) -> str:
        return encode_position(self.state)

    def transcript(self) -> Transcript:
        return Transcript(self.config, list(self.history))

    # --- PLAYING ---
    def submit_move(self, move: Move) -> BoardState:
        """
        Human-originated move. A RuleViolation propagates to the caller, the match state stays untouched and the
        same player can try again.
        """
        player = move_player(move)
        if player in self._bots:
            raise NotYourSeatError(
                f"Player {player} is played by bot {self.bot_names[player]!r}"
            )
        if isinstance(move, Action) and move.kind == ActionKind.PASS:
            raise ReservedMoveError("Passes are recorded for forfeited bot turns only")
        self._commit(move)
        return self.state

    def play_bot_turn(self) -> Optional[Forfeit]:
        """
        Let the bot whose turn it is make a move.

        A timeout, an illegal reply, or a crashing bot forfeits the turn (see EngineSettings.forfeit_policy) instead
        of aborting the match. Returns the Forfeit if that happened, otherwise None.
        """
        if self.phase != Phase.IN_PROGRESS:
            raise GameAlreadyOverError(f"Match is {self.phase}")
        player = self.state.current_player
        bot = self._bots.get(player)
        if bot is None:
            raise NotYourSeatError(f"Player {player} is not played by a bot")

        try:
            move = self._ask_bot(bot, player)
            self._commit_bot_move(move, player)
        except BotError as error:
            return self._forfeit(player, error)
        return None

    def advance(self) -> list[Forfeit]:
        """
        Play bot turns until a human is to move or the match ends.

        Stops early when every seat forfeited in a row (all bots broken), otherwise such a match would never end.
        """
        forfeits: list[Forfeit] = []
        consecutive = 0
        while self.phase == Phase.IN_PROGRESS and self.is_bot_turn:
            forfeit = self.play_bot_turn()
            if forfeit is None:
                consecutive = 0
                continue
            forfeits.append(forfeit)
            consecutive += 1
            if consecutive >= self.config.num_players:
                logger.warning(
                    "Every seat forfeited in a row, stop advancing the match"
                )
                break
        return forfeits

    def close(self) -> None:
        """
        Stop the bot worker threads. Python cannot kill a thread: a bot that hangs keeps running in the
        background, but its answer is discarded.

        NOTE: executor workers are not daemon threads. The interpreter waits for a hung bot before it exits
        (e.g. at the end of `gamey selfplay`), so bots must return eventually.
        """
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    # -- PRIVATE HELPERS ---
    def _resolve_bots(self, bot_names: Mapping[PlayerId, str]) -> dict[PlayerId, Bot]:
        bots: dict[PlayerId, Bot] = {}
        for player, name in bot_names.items():
            if not (0 <= player < self.config.num_players):
                raise InvalidConfigError(
                    f"Cannot seat bot {name!r} as player {player} in a {self.config.num_players} player match"
                )
            bots[player] = self.registry.lookup(name)
        return bots

    def _commit(self, move: Move) -> None:
        """Apply through the rule engine. The state is only replaced once the move has been accepted."""
        self.state = rules.apply(self.state, move)
        self.history.append(move)
        logger.debug("Move %s: %s", len(self.history), move)
        if not self.state.status.is_in_progress:
            self.phase = Phase.FINISHED
            logger.info(
                "Match finished after %s moves: %s", len(self.history), self.state.status
            )

    def _ask_bot(self, bot: Bot, player: PlayerId) -> Move:
        """Run the bot in a worker thread. It gets a copy of the state, so a late answer cannot touch ours."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.settings.bot_workers, thread_name_prefix="bot"
            )
        future = self._executor.submit(bot.choose_move, self.state.copy())
        try:
            return future.result(timeout=self.settings.bot_timeout_seconds)
        except FuturesTimeoutError:
            future.cancel()
            raise BotTimeoutError(
                f"Bot {self.bot_names[player]!r} did not answer within {self.settings.bot_timeout_seconds}s"
            ) from None
        except Exception as error:
            raise IllegalBotMoveError(
                f"Bot {self.bot_names[player]!r} failed: {error!r}"
            ) from error

    def _commit_bot_move(self, move: Move, player: PlayerId) -> None:
        if not isinstance(move, (Placement, Action)):
            raise IllegalBotMoveError(
                f"Bot {self.bot_names[player]!r} returned {move!r} instead of a move"
            )
        if isinstance(move, Action) and move.kind == ActionKind.PASS:
            raise IllegalBotMoveError("Bots cannot pass; passes are recorded forfeits")
        try:
            self._commit(move)
        except RuleViolation as violation:
            raise IllegalBotMoveError(
                f"Bot {self.bot_names[player]!r} played an illegal move ({type(violation).__name__}): {violation}"
            ) from violation

    def _forfeit(self, player: PlayerId, error: BotError) -> Forfeit:
        forfeit = Forfeit(player, self.bot_names[player], len(self.history), error)
        self.forfeits.append(forfeit)
        logger.warning("Player %s forfeits the turn: %s", player, error)

        kind = (
            ActionKind.RESIGN
            if self.settings.forfeit_policy == ForfeitPolicy.LOSS
            else ActionKind.PASS
        )
        self._commit(Action(player, kind))
        return forfeit
