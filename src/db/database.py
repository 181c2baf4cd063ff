"""Generate database session"""

from typing import Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.settings import EngineSettings, load_settings
from src.db.schema import Base


def create_session_factory(
    settings: Optional[EngineSettings] = None,
) -> sessionmaker[Session]:
    """Engine + session factory for the configured database. Makes sure all tables exist."""
    settings = settings or load_settings()
    engine: Engine = create_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)


def get_db(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
