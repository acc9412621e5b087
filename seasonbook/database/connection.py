"""Database connection and session management using SQLAlchemy.

This module handles:
1. Database engine creation (pooled for server databases, plain for SQLite)
2. Session factory configuration for ORM operations
3. Session helpers for scripts, the CLI and the FastAPI dependency system

Key Concepts for Beginners:

Database Engine: The core interface to the database. Think of it as the
"connection factory" that manages the actual database connections.

Session: A workspace for ORM operations. All database operations (queries,
inserts, updates) happen within a session context.

Session Patterns Provided:
1. get_session(): Generator session with automatic commit/rollback
2. get_session_context(): Same thing as a context manager for with statements
3. get_db(): FastAPI dependency injection pattern
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ..config.settings import settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    SQLite does not use a sized connection pool, so pool_size is only passed
    to server databases. check_same_thread is turned off so the background
    migration runner can open sessions from worker threads.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        echo=echo,
        pool_size=settings.database_pool_size,
        pool_pre_ping=True,  # Test connections before use (handles disconnects)
    )


# Created once at module load time and reused throughout the application
engine = build_engine(settings.database_url, echo=settings.database_echo)

# autocommit=False: services call session.commit() at the end of each operation
# autoflush=False: no surprise writes while a state transition is half-applied
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_session() -> Generator[Session, None, None]:
    """Get database session with automatic commit/rollback and cleanup.

    Usage:
        for session in get_session():
            athlete = session.get(Athlete, 1)
            # Automatically committed and closed

    If any exception occurs, the transaction is rolled back and the
    exception is re-raised.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
    """Context manager wrapper for database sessions.

    Usage:
        with get_session_context() as session:
            session.add(Athlete(name="Jordan"))
            # Automatically committed and closed when exiting 'with' block
    """
    yield from get_session()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions.

    Unlike get_session(), this does not commit: the services called by each
    route commit their own work. It only ensures the session is closed.
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
