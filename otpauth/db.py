"""
Database configuration with lazy initialization.

The engine is created on first access so the app can import (and answer
health checks) before the database is reachable.
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .core.config import settings

logger = logging.getLogger(__name__)

# Global engine instance (lazily initialized)
_engine = None
_SessionLocal = None

Base = declarative_base()


def get_engine():
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        # Log database URL safely (only scheme and first few chars, not full connection string)
        db_url_safe = settings.DATABASE_URL[:30] + "..." if len(settings.DATABASE_URL) > 30 else settings.DATABASE_URL
        logger.info(f"[DB] Creating database engine for: {db_url_safe}")

        if settings.DATABASE_URL.startswith("sqlite"):
            # SQLite: minimal settings for dev
            _engine = create_engine(
                settings.DATABASE_URL,
                connect_args={"check_same_thread": False},
            )
        else:
            # PostgreSQL: production-ready pooling
            _engine = create_engine(
                settings.DATABASE_URL,
                pool_size=20,
                max_overflow=10,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
    return _engine


def get_session_local():
    """Get or create the SessionLocal class."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def init_db():
    """Create tables for all registered models."""
    from . import models  # noqa: F401  (registers models with Base)
    Base.metadata.create_all(bind=get_engine())


def get_db():
    """
    Dependency that provides a database session.
    Used by FastAPI's dependency injection.
    """
    session_class = get_session_local()
    db = session_class()
    try:
        yield db
    finally:
        db.close()
