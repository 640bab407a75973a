"""
Database Configuration
SQLAlchemy engine and session management for the optional relational store.
Supports both SQLite (local dev) and PostgreSQL (production).
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create database engine with settings appropriate for the backend."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}  # Needed for SQLite
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    
    # PostgreSQL settings
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the given engine."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Initialize database tables."""
    from app.models import User, Project, Generation  # noqa
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")
