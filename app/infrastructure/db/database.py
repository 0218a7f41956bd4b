"""
Database configuration and session management.
"""

from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import NullPool

from app.config import settings


class DatabaseConfigurationError(RuntimeError):
    """DATABASE_URL is not set."""


def normalize_database_url(url: str) -> str:
    """Use the psycopg2 driver for plain postgres URLs."""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg2://" + url[len("postgresql://"):]
    return url


@lru_cache()
def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create the SQLAlchemy engine on first use.

    Raises:
        DatabaseConfigurationError: if no URL is given and DATABASE_URL is unset
    """
    url = database_url or settings.database_url
    if not url:
        raise DatabaseConfigurationError(
            "DATABASE_URL is missing: please set it in .env.local / .env"
        )
    return create_engine(
        normalize_database_url(url),
        poolclass=NullPool,
        echo=settings.debug,
    )


# Create SessionLocal class; bound to the engine in get_session_factory()
SessionLocal = sessionmaker(autoflush=False)

# Create declarative base
Base = declarative_base()


def get_session_factory(database_url: Optional[str] = None) -> sessionmaker:
    SessionLocal.configure(bind=get_engine(database_url))
    return SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function to get database session.
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
