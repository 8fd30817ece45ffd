"""Generate database session"""

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings
from src.db.schema import Base


def make_session_factory(settings: Settings) -> sessionmaker[Session]:
    """Engine + session factory for the configured database. Tables are created if missing."""
    engine = create_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)
