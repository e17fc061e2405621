"""
SQLAlchemy engine and session. Supports PostgreSQL and SQLite (for local runs and tests).
Sync usage; one session per request via get_db.
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from tracker.config import settings

logger = logging.getLogger(__name__)

_is_sqlite = "sqlite" in settings.database_url
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
engine = create_engine(
    settings.database_url,
    pool_pre_ping=not _is_sqlite,
    connect_args=_connect_args,
    echo=settings.debug,  # DEBUG=true logs every SQL statement
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db():
    """When using SQLite: create tables. PostgreSQL schema is managed by alembic. Call once at app startup."""
    if not _is_sqlite:
        return
    # Import all models so they register with Base before create_all
    from tracker.models import user, topic, subtopic, problem, completed_problem  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("SQLite schema ready (%s)", settings.database_url)


def get_db():
    """Dependency: yield a DB session, close after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
