"""CLI interface for the seasonbook engine."""

import typer

from .athletes import app as athletes_app
from .database import app as database_app
from .games import app as games_app
from .seasons import app as seasons_app

main = typer.Typer(help="Seasonbook CLI")

# Add sub-applications
main.add_typer(database_app, name="db", help="Database management commands")
main.add_typer(athletes_app, name="athletes", help="Athlete and maintenance commands")
main.add_typer(games_app, name="games", help="Game statistics commands")
main.add_typer(seasons_app, name="seasons", help="Season lifecycle commands")
