"""Database connection and session management."""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from survey_fleet.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = None
SessionLocal = None


def init_db(database_url: Optional[str] = None):
    """Initialize database connection and create tables.

    Args:
        database_url: SQLAlchemy connection string (defaults to DATABASE_URL)

    Returns:
        Session factory bound to the new engine
    """
    global engine, SessionLocal

    # Register models on Base.metadata before create_all
    from survey_fleet.persistence import models  # noqa: F401

    url = database_url or get_settings().database_url
    if engine is not None:
        engine.dispose()

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection so every session sees the same in-memory database
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=False, **kwargs)
    else:
        engine = create_engine(url, echo=False, pool_pre_ping=True)

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized (%s)", engine.url.render_as_string(hide_password=True))
    return SessionLocal


def get_session_factory():
    """Return the session factory, initializing the database on first use."""
    if SessionLocal is None:
        init_db()
    return SessionLocal


def get_db() -> Iterator[Session]:
    """Get database session.

    Returns:
        Database session
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for scripts and background jobs; closed on exit."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def close_db():
    """Close database connection."""
    global engine, SessionLocal
    if engine:
        engine.dispose()
    engine = None
    SessionLocal = None
