"""Database initialization script.

Database Lifecycle Operations:
- create_database(): Initialize schema from SQLAlchemy models
- drop_database(): Remove all tables (destructive operation)
- reset_database(): Complete refresh (drop + create)

create_all() safely handles existing tables, and drop_all() safely handles
missing ones, so every operation here can be re-run.
"""

import logging

from ..config.settings import settings
from .connection import engine
from .models import Base

logger = logging.getLogger(__name__)


def create_database():
    """Create database schema and all tables from SQLAlchemy models.

    For SQLite the database file lives under data/database, so that directory
    is created first.
    """
    try:
        if settings.database_url.startswith("sqlite"):
            data_dir = settings.data_dir / "database"
            data_dir.mkdir(parents=True, exist_ok=True)

        Base.metadata.create_all(bind=engine)

        logger.info("Database tables created successfully")

    except Exception:
        logger.exception("Failed to create database")
        raise


def drop_database():
    """Drop all database tables - DESTRUCTIVE OPERATION.

    WARNING: This operation cannot be undone. All seasons, records and
    statistics will be lost.
    """
    try:
        Base.metadata.drop_all(bind=engine)

        logger.info("Database tables dropped successfully")

    except Exception:
        logger.exception("Failed to drop database")
        raise


def reset_database():
    """Reset database by dropping and recreating all tables."""
    logger.info("Resetting database...")

    drop_database()
    create_database()

    logger.info("Database reset complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_database()
