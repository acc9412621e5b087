"""Tests for season inference over records that predate seasons."""

import logging
import threading
from datetime import datetime

import pytest
from sqlalchemy import select

from seasonbook.athletes import create_athlete
from seasonbook.database.models import Athlete, Game, Practice, Season
from seasonbook.events import MigrationCompleted, SeasonArchived
from seasonbook.exceptions import MigrationCancelledError
from seasonbook.migration import (
    ALL_DATA,
    MigrationRunner,
    SeasonMigrator,
    bucket_records,
    needs_migration,
)

SPRING_2024 = [datetime(2024, 3, 10), datetime(2024, 4, 2), datetime(2024, 5, 20)]
FALL_2024 = [datetime(2024, 8, 15), datetime(2024, 9, 1)]


@pytest.fixture
def migrator(session, events, lifecycle):
    return SeasonMigrator(session, events, lifecycle)


@pytest.fixture
def five_games(athlete, make_game):
    return [
        make_game(athlete, date, opponent=f"Team {i}", at_bats=4, hits=1, singles=1)
        for i, date in enumerate(SPRING_2024 + FALL_2024)
    ]


def seasons_of(session, athlete):
    return list(
        session.scalars(
            select(Season).where(Season.athlete_id == athlete.id).order_by(Season.start_date)
        )
    )


def test_migration_converges(migrator, session, athlete, five_games, events):
    """Five unlinked games over two half-years end up in exactly two seasons."""
    assert needs_migration(session, athlete)

    result = migrator.migrate(athlete)

    assert all(game.season is not None for game in five_games)
    seasons = seasons_of(session, athlete)
    assert [s.name for s in seasons] == ["Spring 2024", "Fall 2024"]
    spring, fall = seasons
    assert fall.is_active and fall.end_date is None
    assert not spring.is_active
    assert spring.start_date == datetime(2024, 3, 10)
    assert spring.end_date == datetime(2024, 5, 20)
    assert spring.statistics.total_games == 3
    assert spring.statistics.at_bats == 12
    assert all(s.inferred for s in seasons)
    assert result.seasons_created == 2
    assert result.records_linked == 5
    assert athlete.seasons_migrated_at is not None
    assert events.history(athlete.id)[-1] == MigrationCompleted(
        athlete_id=athlete.id, seasons_created=2, records_linked=5
    )

    assignments = {game.id: game.season_id for game in five_games}
    rerun = migrator.migrate(athlete)

    assert rerun.skipped
    assert not needs_migration(session, athlete)
    assert len(seasons_of(session, athlete)) == 2
    assert {game.id: game.season_id for game in five_games} == assignments


def test_needs_migration_predicate(session, athlete, make_game, lifecycle):
    assert not needs_migration(session, athlete), "no records, nothing to migrate"

    make_game(athlete, datetime(2024, 3, 10))
    assert needs_migration(session, athlete)

    lifecycle.create_season(athlete, "Spring 2026")
    assert not needs_migration(session, athlete), "user seasons stop the migration"


def test_boundary_dates_belong_to_the_half_they_start(migrator, athlete, make_game, caplog):
    first_of_fall = make_game(athlete, datetime(2024, 7, 1), opponent="A")
    last_of_spring = make_game(athlete, datetime(2024, 6, 30), opponent="B")

    with caplog.at_level(logging.INFO, logger="seasonbook.migration"):
        migrator.migrate(athlete)

    assert first_of_fall.season.name == "Fall 2024"
    assert last_of_spring.season.name == "Spring 2024"
    ambiguous = [
        r for r in caplog.records if getattr(r, "category", None) == "MigrationAmbiguityWarning"
    ]
    assert len(ambiguous) == 1


def test_bucket_records_handles_undated_records():
    dated = Practice(id=1, date=datetime(2023, 2, 1))
    later = Practice(id=2, date=datetime(2023, 10, 1))
    undated = Practice(id=3)

    buckets = bucket_records([dated, later, undated])
    assert [b.label for b in buckets] == ["Spring 2023", "Fall 2023"]
    assert buckets[-1].records == [later, undated]

    only_undated = bucket_records([Practice(id=4), Practice(id=5)])
    assert [b.label for b in only_undated] == [ALL_DATA]
    assert only_undated[0].key is None


def test_migration_covers_every_record_kind(migrator, session, athlete):
    practice = Practice(date=datetime(2024, 2, 3), athlete=athlete)
    game = Game(date=datetime(2024, 2, 4), opponent="Tigers", athlete=athlete)
    session.add_all([practice, game])
    athlete.practices.append(practice)
    athlete.games.append(game)
    session.commit()

    migrator.migrate(athlete)

    assert practice.season is game.season
    assert practice.season.name == "Spring 2024"
    assert practice.season.is_active


def test_migration_repairs_drift_first(migrator, session, athlete, make_game):
    orphan = make_game(athlete, datetime(2024, 4, 1), listed=False)

    migrator.migrate(athlete)

    assert orphan in athlete.games
    assert orphan.season is not None


def test_cancelled_migration_is_valid_and_resumable(
    migrator, session, athlete, five_games, events
):
    cancel = threading.Event()

    def cancel_after_first_bucket(event):
        if isinstance(event, SeasonArchived):
            cancel.set()

    events.subscribe(cancel_after_first_bucket)

    with pytest.raises(MigrationCancelledError):
        migrator.migrate(athlete, cancel_event=cancel)

    seasons = seasons_of(session, athlete)
    assert [s.name for s in seasons] == ["Spring 2024"]
    assert not seasons[0].is_active
    assert seasons[0].statistics is not None
    assert sum(1 for g in five_games if g.season is None) == 2
    assert needs_migration(session, athlete), "an interrupted run can be resumed"

    result = migrator.migrate(athlete)

    assert result.seasons_created == 1
    assert result.records_linked == 2
    seasons = seasons_of(session, athlete)
    assert [s.name for s in seasons] == ["Spring 2024", "Fall 2024"]
    assert [s.is_active for s in seasons] == [False, True]


def test_runner_migrates_in_background(session_factory, session, athlete, five_games, events):
    athlete_id = athlete.id
    session.close()

    runner = MigrationRunner(session_factory, events, max_workers=1)
    try:
        result = runner.submit(athlete_id).result(timeout=30)
    finally:
        runner.shutdown()

    assert result.seasons_created == 2
    check = session_factory()
    try:
        migrated = check.get(Athlete, athlete_id)
        assert migrated.seasons_migrated_at is not None
        assert migrated.active_season.name == "Fall 2024"
    finally:
        check.close()


def test_runner_cancel_without_job(session_factory):
    runner = MigrationRunner(session_factory, max_workers=1)
    try:
        assert runner.cancel(12345) is False
    finally:
        runner.shutdown()


def test_migration_leaves_other_athletes_alone(migrator, session, athlete, make_game):
    other = create_athlete(session, "Sam Ortiz")
    theirs = make_game(other, datetime(2024, 4, 1))
    make_game(athlete, datetime(2024, 4, 1))

    migrator.migrate(athlete)

    assert theirs.season is None
    assert seasons_of(session, other) == []
