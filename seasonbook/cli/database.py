"""
CLI commands for managing the seasonbook database.

Example usage:
    seasonbook db init
    seasonbook db reset --yes
"""

import logging

import typer

from ..database.init_db import create_database, reset_database
from .common import setup_logging

app = typer.Typer(help="Database management commands")
logger = logging.getLogger(__name__)


@app.command("init")
def init_db():
    """
    Initialize the database with required tables and structure.

    This command must be run first. It creates all tables defined by the
    SQLAlchemy models and is safe to run again.
    """
    setup_logging()
    typer.echo("Initializing database...")
    try:
        create_database()
        typer.echo("✅ Database initialized successfully!")
    except Exception as e:
        typer.echo(f"❌ Database initialization failed: {e}")
        raise typer.Exit(1) from e


@app.command("reset")
def reset_db(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Drop and recreate every table. All athletes, seasons and records are lost."""
    setup_logging()
    if not yes:
        typer.confirm("This deletes all data. Continue?", abort=True)
    try:
        reset_database()
        typer.echo("✅ Database reset complete")
    except Exception as e:
        typer.echo(f"❌ Database reset failed: {e}")
        raise typer.Exit(1) from e
