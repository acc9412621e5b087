"""CLI commands for editing game lines."""

import logging

import typer

from ..database.models import Game
from ..games import GameService
from .common import console, open_session, setup_logging

app = typer.Typer(help="Game statistics commands")
logger = logging.getLogger(__name__)


def _print_line(line) -> None:
    console.print(
        f"   {line.hits}/{line.at_bats}, {line.home_runs} HR, {line.rbis} RBI, "
        f"{line.walks} BB, {line.strikeouts} K"
    )


@app.command("stats")
def add_stats(
    game_id: int = typer.Argument(..., help="Game ID"),
    singles: int = typer.Option(0, "--singles", min=0),
    doubles: int = typer.Option(0, "--doubles", min=0),
    triples: int = typer.Option(0, "--triples", min=0),
    home_runs: int = typer.Option(0, "--home-runs", min=0),
    runs: int = typer.Option(0, "--runs", min=0),
    rbis: int = typer.Option(0, "--rbis", min=0),
    strikeouts: int = typer.Option(0, "--strikeouts", min=0),
    walks: int = typer.Option(0, "--walks", min=0),
) -> None:
    """Add hand-entered totals to a game line.

    Example:
        seasonbook games stats 12 --singles 2 --home-runs 1 --rbis 3
    """
    setup_logging()
    with open_session() as session:
        game = session.get(Game, game_id)
        if game is None:
            console.print(f"❌ Game {game_id} not found", style="red")
            raise typer.Exit(1)

        line = GameService(session).add_manual_statistics(
            game,
            singles=singles,
            doubles=doubles,
            triples=triples,
            home_runs=home_runs,
            runs=runs,
            rbis=rbis,
            strikeouts=strikeouts,
            walks=walks,
        )
        console.print(f"✅ Updated game {game_id} vs {game.opponent}")
        _print_line(line)


@app.command("rebuild")
def rebuild(game_id: int = typer.Argument(..., help="Game ID")) -> None:
    """Rebuild a game line from the play results of its clips."""
    setup_logging()
    with open_session() as session:
        game = session.get(Game, game_id)
        if game is None:
            console.print(f"❌ Game {game_id} not found", style="red")
            raise typer.Exit(1)

        line = GameService(session).rebuild_line_from_clips(game)
        console.print(f"✅ Rebuilt game {game_id} vs {game.opponent} from its clips")
        _print_line(line)
