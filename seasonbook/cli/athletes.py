"""
CLI commands for athletes and their maintenance jobs.

Maintenance Workflow:
1. repair       heal forward/back reference drift
2. migrate      infer seasons for records logged before seasons existed
3. recalculate  rebuild cumulative statistics from scratch
4. export       write career or game-log statistics to CSV

Every job is safe to run again; a second run reports nothing to do.
"""

import logging
from pathlib import Path

import typer

from ..athletes import create_athlete, delete_athlete, get_athlete
from ..exceptions import MigrationCancelledError, SeasonbookError
from ..export import export_athlete_statistics_csv, export_game_log_csv
from ..migration import SeasonMigrator, needs_migration
from ..repair import ConsistencyRepairer
from ..seasons.lifecycle import SeasonLifecycle, format_rate
from ..stats.aggregator import StatisticsService
from .common import console, open_session, setup_logging

app = typer.Typer(help="Athlete commands")
logger = logging.getLogger(__name__)


@app.command("create")
def create(name: str = typer.Argument(..., help="Athlete name")) -> None:
    """Create an athlete."""
    setup_logging()
    try:
        with open_session() as session:
            athlete = create_athlete(session, name)
            console.print(f"✅ Created athlete {athlete.id} ({athlete.name})")
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e


@app.command("delete")
def delete(
    athlete_id: int = typer.Argument(..., help="Athlete ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Delete an athlete with all seasons, records and statistics."""
    setup_logging()
    try:
        with open_session() as session:
            athlete = get_athlete(session, athlete_id)
            if not yes:
                typer.confirm(f"Delete {athlete.name} and everything they recorded?", abort=True)
            counts = delete_athlete(session, athlete)
            summary = ", ".join(f"{count} {kind}" for kind, count in counts.items())
            console.print(f"✅ Deleted athlete {athlete_id}: {summary}")
    except SeasonbookError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e


@app.command("migrate")
def migrate(
    athlete_id: int = typer.Argument(..., help="Athlete ID"),
    skip_repair: bool = typer.Option(
        False, "--skip-repair", help="Do not run consistency repair before migrating"
    ),
) -> None:
    """Assign seasons to records created before seasons existed."""
    setup_logging()
    try:
        with open_session() as session:
            athlete = get_athlete(session, athlete_id)
            if not needs_migration(session, athlete):
                console.print("✅ Nothing to migrate")
                return

            result = SeasonMigrator(session).migrate(athlete, repair_first=not skip_repair)
            console.print(
                f"✅ Linked {result.records_linked} records to {len(result.season_names)} seasons "
                f"({result.seasons_created} new)"
            )
            for name in result.season_names:
                console.print(f"   • {name}")
    except MigrationCancelledError as e:
        console.print(f"⚠️  {e}", style="yellow")
        raise typer.Exit(1) from e
    except SeasonbookError as e:
        console.print(f"❌ Migration failed: {e}", style="red")
        logger.exception(f"Migration failed for athlete {athlete_id}")
        raise typer.Exit(1) from e


@app.command("repair")
def repair(athlete_id: int = typer.Argument(..., help="Athlete ID")) -> None:
    """Heal records that are missing from, or wrongly listed in, an athlete's collections."""
    setup_logging()
    try:
        with open_session() as session:
            report = ConsistencyRepairer(session).repair(get_athlete(session, athlete_id))
            if not report.total:
                console.print("✅ No consistency issues found")
                return
            console.print(
                f"🔧 Repaired {report.total} records: {report.orphaned} orphaned, "
                f"{report.misattributed} misattributed, {report.duplicates} duplicate listings"
            )
    except SeasonbookError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e


@app.command("recalculate")
def recalculate(athlete_id: int = typer.Argument(..., help="Athlete ID")) -> None:
    """Rebuild cumulative statistics from every completed game and tagged clip."""
    setup_logging()
    try:
        with open_session() as session:
            stats = StatisticsService(session).recalculate_athlete_statistics(
                get_athlete(session, athlete_id)
            )
            console.print(
                f"✅ {stats.total_games} games, {stats.hits}/{stats.at_bats}, "
                f"AVG {format_rate(stats.batting_average)}, OPS {format_rate(stats.ops)}"
            )
    except SeasonbookError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e


@app.command("export")
def export(
    athlete_id: int = typer.Argument(..., help="Athlete ID"),
    game_log: bool = typer.Option(False, "--game-log", help="Export the game log instead of career stats"),
    season_id: int | None = typer.Option(None, "--season", help="Only games of this season"),
    output: Path | None = typer.Option(None, "--output", "-o", help="CSV file to write"),
) -> None:
    """Export statistics to CSV (printed when no output file is given)."""
    try:
        with open_session() as session:
            athlete = get_athlete(session, athlete_id)
            if game_log or season_id is not None:
                season = SeasonLifecycle(session).get_season(season_id) if season_id else None
                csv = export_game_log_csv(athlete, season=season, output=output)
            else:
                csv = export_athlete_statistics_csv(athlete, output=output)
    except SeasonbookError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(1) from e

    if output is None:
        typer.echo(csv, nl=False)
    else:
        console.print(f"✅ Wrote {output}")
