"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.game.variant import Variant

PlayerSeat = int
BotName = str

# Moves a human may submit. 'pass' is reserved for forfeited bot turns.
MOVE_KEYWORDS = ("swap", "resign")


# --- REQUEST MODELS ---
class CreateMatchRequest(BaseModel):
    size: int = 7
    num_players: int = 2
    variant: str = Variant.STANDARD.value
    bots: dict[PlayerSeat, BotName] = {}

    @field_validator("variant")
    @classmethod
    def validate_variant(cls, value: str) -> str:
        if value not in {variant.value for variant in Variant}:
            raise InvalidRequestError(
                f"Unknown variant {value!r}. Pick one from {', '.join(v.value for v in Variant)}"
            )
        return value


class MoveRequest(BaseModel):
    match_id: UUID
    player: PlayerSeat
    move: str

    @field_validator("move")
    @classmethod
    def validate_move(cls, value: str) -> str:
        """Either '<row>,<col>' or one of the move keywords."""

        def _is_cell(value: str) -> bool:
            row, separator, col = value.partition(",")
            return bool(separator) and row.isdecimal() and col.isdecimal()

        if value not in MOVE_KEYWORDS and not _is_cell(value):
            raise InvalidRequestError(
                f"Cannot interpret move: {value!r}. Use '<row>,<col>', 'swap' or 'resign'."
            )
        return value


class AdvanceRequest(BaseModel):
    """Let the bots play until a human is to move."""

    match_id: UUID


class ImportTranscriptRequest(BaseModel):
    transcript: str
    bots: dict[PlayerSeat, BotName] = {}


class GetMatchRequest(BaseModel):
    match_id: UUID


class DeleteMatchRequest(BaseModel):
    match_id: UUID


# --- RESPONSE MODELS ---
class MatchResponse(BaseModel):
    match_id: UUID
    phase: str
    status: str
    current_player: Optional[PlayerSeat]
    winner: Optional[PlayerSeat]
    bots: dict[PlayerSeat, BotName]
    position: str
    transcript: str
    forfeits: list[str] = []
