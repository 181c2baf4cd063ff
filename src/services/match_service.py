"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from typing import Optional
from uuid import UUID

from src.api.models import (
    AdvanceRequest,
    CreateMatchRequest,
    DeleteMatchRequest,
    GetMatchRequest,
    ImportTranscriptRequest,
    MatchResponse,
    MoveRequest,
)
from src.bots.registry import BotRegistry, create_default_registry
from src.core.exceptions import RepositoryError
from src.core.models import MatchModel
from src.core.settings import EngineSettings
from src.db.repository import MatchRepository
from src.game.board import Config
from src.game.controller import Forfeit, GameController
from src.game.moves import Move
from src.game.transcript import parse_move_line
from src.game.variant import Variant

logger = logging.getLogger(__name__)


class MatchService:
    """Orchestration of layers for one kind of request at a time. Every request rebuilds the match from its transcript."""

    def __init__(
        self,
        repository: MatchRepository,
        registry: Optional[BotRegistry] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.repo = repository
        self.registry = registry or create_default_registry()
        self.settings = settings or EngineSettings()

    # -- API routes logic ---
    def create_match(self, request: CreateMatchRequest) -> MatchResponse:
        """Set up a new match. If a bot has the first turn, it plays right away."""
        config = Config(
            size=request.size,
            num_players=request.num_players,
            variant=Variant.from_tag(request.variant),
        )
        with GameController(
            config, request.bots, self.registry, self.settings
        ) as controller:
            forfeits = controller.advance()
            _, match_id = self.repo.create_match(self._to_model(controller))
            logger.info("Created match %s", match_id)
            return self._create_match_response(match_id, controller, forfeits)

    def import_transcript(self, request: ImportTranscriptRequest) -> MatchResponse:
        """Continue a match recorded elsewhere. The transcript is validated move by move."""
        with GameController.from_transcript(
            request.transcript, request.bots, self.registry, self.settings
        ) as controller:
            forfeits = controller.advance()
            _, match_id = self.repo.create_match(self._to_model(controller))
            logger.info("Imported match %s (%s moves)", match_id, len(controller.history))
            return self._create_match_response(match_id, controller, forfeits)

    def make_move(self, request: MoveRequest) -> MatchResponse:
        """A human move, followed by the replies of any bots that are up next."""
        stored_model = self._fetch_match(request.match_id)
        with self._restore(stored_model) as controller:
            move = self._parse_move(controller.config, request.player, request.move)
            controller.submit_move(move)
            forfeits = controller.advance()
            self.repo.update_match(request.match_id, self._to_model(controller))
            return self._create_match_response(request.match_id, controller, forfeits)

    def advance(self, request: AdvanceRequest) -> MatchResponse:
        stored_model = self._fetch_match(request.match_id)
        with self._restore(stored_model) as controller:
            forfeits = controller.advance()
            self.repo.update_match(request.match_id, self._to_model(controller))
            return self._create_match_response(request.match_id, controller, forfeits)

    def get_match(self, request: GetMatchRequest) -> MatchResponse:
        """
        Retrieve current match state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        stored_model = self._fetch_match(request.match_id)
        with self._restore(stored_model) as controller:
            return self._create_match_response(request.match_id, controller, [])

    def delete_match(self, request: DeleteMatchRequest) -> None:
        self.repo.delete_match(request.match_id)

    # -- Internal helpers --
    def _restore(self, model: MatchModel) -> GameController:
        bots = {int(seat): name for seat, name in model.bots.items()}
        return GameController.from_transcript(
            model.transcript, bots, self.registry, self.settings
        )

    def _parse_move(self, config: Config, player: int, move_text: str) -> Move:
        """Reuse the transcript move syntax: 'P<player> <move>'"""
        return parse_move_line(f"P{player} {move_text}", config, line_number=1)

    def _to_model(self, controller: GameController) -> MatchModel:
        return MatchModel(
            transcript=controller.export_transcript(),
            position=controller.export_position(),
            bots={str(seat): name for seat, name in controller.bot_names.items()},
            phase=controller.phase.value,
        )

    def _create_match_response(
        self, match_id: UUID, controller: GameController, forfeits: list[Forfeit]
    ) -> MatchResponse:
        """Convert the match state to a MatchResponse (for match with given ID.)"""
        return MatchResponse(
            match_id=match_id,
            phase=controller.phase.value,
            status=controller.state.status.to_notation(),
            current_player=controller.current_player,
            winner=controller.winner,
            bots=dict(controller.bot_names),
            position=controller.export_position(),
            transcript=controller.export_transcript(),
            forfeits=[
                f"Player {forfeit.player} ({forfeit.bot_name}): {forfeit.error}"
                for forfeit in forfeits
            ],
        )

    def _fetch_match(self, match_id: UUID) -> MatchModel:
        """Attempt to find the match in the repository and raise error if it fails."""
        match_model = self.repo.get_match(match_id)
        if match_model is None:
            raise RepositoryError(f"Match with {match_id=} not found.")
        return match_model
