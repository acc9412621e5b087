"""Smoke tests for the typer CLI against an in-memory database."""

from contextlib import contextmanager
from datetime import datetime

import pytest
from typer.testing import CliRunner

from seasonbook.cli import common, main
from seasonbook.config import settings
from seasonbook.database.models import Season

runner = CliRunner()


@pytest.fixture
def cli_session(session, monkeypatch, tmp_path):
    """Point every CLI command at the test session."""

    @contextmanager
    def test_session_context():
        yield session
        session.commit()

    monkeypatch.setattr(common, "get_session_context", test_session_context)
    monkeypatch.setattr(settings, "log_file", tmp_path / "logs" / "cli.log")
    return session


def test_cli_lists_command_groups():
    result = runner.invoke(main, ["--help"])

    assert result.exit_code == 0
    for group in ("db", "athletes", "games", "seasons"):
        assert group in result.stdout


def test_create_athlete_and_season(cli_session):
    result = runner.invoke(main, ["athletes", "create", "Jordan Reyes"])
    assert result.exit_code == 0, result.stdout
    assert "Created athlete 1" in result.stdout

    result = runner.invoke(
        main, ["seasons", "new", "1", "Spring 2026", "--start", "2026-03-01", "--sport", "softball"]
    )
    assert result.exit_code == 0, result.stdout
    season = cli_session.query(Season).one()
    assert season.sport == "softball"
    assert season.start_date == datetime(2026, 3, 1)
    assert season.is_active

    result = runner.invoke(main, ["seasons", "list", "1"])
    assert result.exit_code == 0
    assert "Spring 2026" in result.stdout


def test_end_and_reactivate_season(cli_session, athlete, lifecycle):
    season = lifecycle.create_season(athlete, "Spring 2026")

    result = runner.invoke(main, ["seasons", "end", str(season.id)])
    assert result.exit_code == 0, result.stdout
    assert "Season Overview" in result.stdout
    assert not season.is_active

    result = runner.invoke(main, ["seasons", "reactivate", str(season.id)])
    assert result.exit_code == 0, result.stdout
    assert season.is_active

    result = runner.invoke(main, ["seasons", "reactivate", str(season.id)])
    assert result.exit_code == 1
    assert "already active" in result.stdout


def test_status_for_new_athlete(cli_session, athlete):
    result = runner.invoke(main, ["seasons", "status", str(athlete.id)])

    assert result.exit_code == 0
    assert "Create your first season" in result.stdout


def test_migrate_and_repair(cli_session, athlete, make_game):
    make_game(athlete, datetime(2024, 3, 10), opponent="Tigers")
    make_game(athlete, datetime(2024, 9, 10), opponent="Lions", listed=False)

    result = runner.invoke(main, ["athletes", "repair", str(athlete.id)])
    assert result.exit_code == 0, result.stdout
    assert "1 orphaned" in result.stdout

    result = runner.invoke(main, ["athletes", "migrate", str(athlete.id)])
    assert result.exit_code == 0, result.stdout
    assert "Linked 2 records to 2 seasons" in result.stdout

    result = runner.invoke(main, ["athletes", "migrate", str(athlete.id)])
    assert result.exit_code == 0
    assert "Nothing to migrate" in result.stdout


def test_export_prints_csv(cli_session, athlete, make_game):
    make_game(athlete, datetime(2024, 3, 10), at_bats=4, hits=2, singles=2)
    runner.invoke(main, ["athletes", "recalculate", str(athlete.id)])

    result = runner.invoke(main, ["athletes", "export", str(athlete.id)])

    assert result.exit_code == 0, result.stdout
    assert result.stdout.startswith("Season,Games,AB,H")
    assert "Career,1,4,2" in result.stdout


def test_game_stats_commands(cli_session, athlete, game_service):
    game = game_service.create_game(athlete, "Tigers", datetime(2026, 4, 1))

    result = runner.invoke(
        main, ["games", "stats", str(game.id), "--singles", "2", "--strikeouts", "1"]
    )
    assert result.exit_code == 0, result.stdout
    assert "2/3" in result.stdout

    result = runner.invoke(main, ["games", "rebuild", str(game.id)])
    assert result.exit_code == 0, result.stdout
    assert "0/0" in result.stdout

    result = runner.invoke(main, ["games", "stats", "999"])
    assert result.exit_code == 1
    assert "Game 999 not found" in result.stdout


def test_unknown_athlete_exits_with_error(cli_session):
    result = runner.invoke(main, ["athletes", "repair", "42"])

    assert result.exit_code == 1
    assert "Athlete 42 not found" in result.stdout
