"""CLI commands for creating, ending and reviewing seasons."""

import logging
from datetime import datetime

import typer
from rich.table import Table

from ..athletes import get_athlete
from ..exceptions import SeasonbookError
from ..seasons.lifecycle import SeasonLifecycle, format_rate
from ..seasons.naming import SportType
from .common import console, open_session, setup_logging

app = typer.Typer(help="Season lifecycle commands")
logger = logging.getLogger(__name__)


@app.command("list")
def list_seasons(
    athlete_id: int = typer.Argument(..., help="Athlete ID"),
) -> None:
    """Show every season of an athlete, newest first."""
    try:
        with open_session() as session:
            athlete = get_athlete(session, athlete_id)
            table = Table(title=f"Seasons for {athlete.name}")
            table.add_column("ID", justify="right")
            table.add_column("Season", style="cyan")
            table.add_column("Sport")
            table.add_column("Status")
            table.add_column("Start")
            table.add_column("End")
            table.add_column("Games", justify="right")
            table.add_column("AVG", justify="right")

            for season in sorted(athlete.seasons, key=lambda s: s.start_date, reverse=True):
                snapshot = season.statistics
                table.add_row(
                    str(season.id),
                    season.display_name,
                    SportType(season.sport).display_name,
                    "[green]Active[/green]" if season.is_active else "Archived",
                    f"{season.start_date:%Y-%m-%d}",
                    f"{season.end_date:%Y-%m-%d}" if season.end_date else "-",
                    str(season.total_games),
                    format_rate(snapshot.batting_average) if snapshot else "-",
                )
        console.print(table)
    except SeasonbookError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e


@app.command("new")
def new_season(
    athlete_id: int = typer.Argument(..., help="Athlete ID"),
    name: str = typer.Argument(..., help='Season name, e.g. "Spring 2026"'),
    sport: SportType | None = typer.Option(None, "--sport", help="Sport (default from settings)"),
    start: datetime | None = typer.Option(
        None, "--start", formats=["%Y-%m-%d"], help="Start date (default: today)"
    ),
    inactive: bool = typer.Option(
        False, "--inactive", help="Create the season archived instead of ending the current one"
    ),
    notes: str = typer.Option("", "--notes", help="Free-text notes"),
) -> None:
    """End the current season and start a new one.

    Examples:
        seasonbook seasons new 1 "Fall 2026"
        seasonbook seasons new 1 "Spring 2024" --start 2024-02-01 --inactive
    """
    setup_logging()
    try:
        with open_session() as session:
            athlete = get_athlete(session, athlete_id)
            season = SeasonLifecycle(session).create_season(
                athlete,
                name,
                sport=sport.value if sport else None,
                start_date=start,
                make_active=not inactive,
                notes=notes,
            )
            state = "active" if season.is_active else "archived"
            console.print(f"✅ Created season {season.id} ({season.display_name}), {state}")
    except SeasonbookError as e:
        console.print(f"❌ Could not create season: {e}", style="red")
        raise typer.Exit(1) from e


@app.command("end")
def end_season(season_id: int = typer.Argument(..., help="Season ID")) -> None:
    """Archive a season and freeze its statistics."""
    setup_logging()
    try:
        with open_session() as session:
            lifecycle = SeasonLifecycle(session)
            season = lifecycle.archive(lifecycle.get_season(season_id))
            console.print(f"✅ {season.display_name} is archived")
            console.print(lifecycle.summarize(season))
    except SeasonbookError as e:
        console.print(f"❌ Could not end season: {e}", style="red")
        raise typer.Exit(1) from e


@app.command("reactivate")
def reactivate_season(season_id: int = typer.Argument(..., help="Season ID")) -> None:
    """Make an archived season active again; the current active season is archived."""
    setup_logging()
    try:
        with open_session() as session:
            lifecycle = SeasonLifecycle(session)
            season = lifecycle.reactivate(lifecycle.get_season(season_id))
            console.print(f"✅ {season.display_name} is active again")
    except SeasonbookError as e:
        console.print(f"❌ Could not reactivate season: {e}", style="red")
        raise typer.Exit(1) from e


@app.command("delete")
def delete_season(
    season_id: int = typer.Argument(..., help="Season ID"),
    reassign_to: int | None = typer.Option(
        None, "--reassign-to", help="Move the season's records to this season instead of unlinking them"
    ),
) -> None:
    """Delete a season. Its games, practices, clips and tournaments are kept."""
    setup_logging()
    try:
        with open_session() as session:
            lifecycle = SeasonLifecycle(session)
            season = lifecycle.get_season(season_id)
            target = lifecycle.get_season(reassign_to) if reassign_to is not None else None
            moved = lifecycle.delete_season(season, reassign_to=target)
            console.print(f"✅ Deleted season {season_id}; {moved} records moved")
    except SeasonbookError as e:
        console.print(f"❌ Could not delete season: {e}", style="red")
        raise typer.Exit(1) from e


@app.command("status")
def season_status(athlete_id: int = typer.Argument(..., help="Athlete ID")) -> None:
    """Show the active season and what to do next."""
    try:
        with open_session() as session:
            athlete = get_athlete(session, athlete_id)
            status = SeasonLifecycle(session).check_season_status(athlete)
            if status.season is not None:
                console.print(f"Active season: {status.season.display_name}")
            if status.message:
                console.print(f"💡 {status.message}", style="yellow")
            else:
                console.print("✅ Season is up to date")
    except SeasonbookError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e
