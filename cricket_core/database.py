from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from cricket_core.config import settings

engine = create_engine(settings.DATABASE_URL, echo=False)
SessionLocal = sessionmaker(bind=engine)


class Base(DeclarativeBase):
    pass


def init_db(bind=None):
    """Create all tables"""
    from cricket_core.models import player, team, venue  # noqa
    Base.metadata.create_all(bind=bind or engine)


def get_session():
    """Get a database session - for direct use (caller must close)"""
    return SessionLocal()
