"""Implementation of (Match)Repository using SQLAlchemy"""

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.exceptions import ParseError, RepositoryError
from src.core.models import MatchModel
from src.db.schema import DBMatch
from src.game.transcript import decode_transcript


class SQLMatchRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_match(self, match_id: UUID) -> MatchModel | None:
        """Get match by ID, if record exists."""
        match_db = self._fetch_match(match_id)
        if match_db:
            return self._to_model(match_db)
        return None

    def create_match(self, match: MatchModel) -> tuple[MatchModel, UUID]:
        """Store new match and return the stored data + newly created match ID."""
        self._check_transcript(match)
        new_id = uuid4()
        match_db = DBMatch(
            id=new_id,
            transcript=match.transcript,
            position=match.position,
            bots=match.bots,
            phase=match.phase,
        )
        self.db.add(match_db)
        self.db.commit()
        self.db.refresh(match_db)
        return self._to_model(match_db), new_id

    def update_match(self, match_id: UUID, match: MatchModel) -> MatchModel | None:
        """Add new info to existing record."""
        self._check_transcript(match)
        match_db = self._fetch_match(match_id)
        if not match_db:
            return None
        match_db.transcript = match.transcript
        match_db.position = match.position
        match_db.bots = match.bots
        match_db.phase = match.phase
        self.db.commit()
        self.db.refresh(match_db)
        return self._to_model(match_db)

    def delete_match(self, match_id: UUID) -> MatchModel | None:
        """Remove a match's record."""
        match_db = self._fetch_match(match_id)
        if not match_db:
            return None
        match_model = self._to_model(match_db)
        self.db.delete(match_db)
        self.db.commit()
        return match_model

    def _check_transcript(self, match: MatchModel) -> None:
        """Only replayable transcripts are stored: the transcript is what a match is restored from."""
        try:
            decode_transcript(match.transcript)
        except ParseError as error:
            raise RepositoryError(f"Refusing to store an invalid transcript: {error}") from error

    def _fetch_match(self, match_id: UUID) -> DBMatch | None:
        query = select(DBMatch).where(DBMatch.id == match_id)
        return self.db.scalar(query)

    def _to_model(self, match_db: DBMatch) -> MatchModel:
        """Convert SQLAlchemy model to data transfer model."""
        return MatchModel(
            transcript=match_db.transcript,
            position=match_db.position,
            bots=dict(match_db.bots),
            phase=match_db.phase,
        )
