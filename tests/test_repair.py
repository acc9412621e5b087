"""Tests for forward/back reference repair."""

import logging
from datetime import datetime

import pytest

from seasonbook.athletes import create_athlete
from seasonbook.database.models import Practice, VideoClip
from seasonbook.events import ConsistencyRepaired
from seasonbook.repair import ConsistencyRepairer


@pytest.fixture
def repairer(session, events):
    return ConsistencyRepairer(session, events)


@pytest.fixture
def athlete_b(session):
    return create_athlete(session, "Bailey Chen")


@pytest.fixture
def athlete_c(session):
    return create_athlete(session, "Casey Moore")


def test_orphaned_game_is_relisted(repairer, athlete, make_game, events):
    """A game pointing at A but missing from A.games is added back."""
    game = make_game(athlete, datetime(2026, 4, 1), listed=False)
    assert game not in athlete.games

    report = repairer.repair(athlete)

    assert game in athlete.games
    assert report.orphaned == 1
    assert report.total == 1
    assert report.by_kind == {"game": 1}
    assert events.history(athlete.id)[-1] == ConsistencyRepaired(
        athlete_id=athlete.id, repaired_count=1
    )


def test_misattributed_game_is_pointed_back(repairer, athlete_b, athlete_c, make_game, session):
    """A game in B's collection that points at C gets its back-reference set to B."""
    game = make_game(athlete_c, datetime(2026, 4, 1), listed=False)
    athlete_b.games.append(game)
    session.commit()

    report = repairer.repair(athlete_b)

    assert game.athlete is athlete_b
    assert game in athlete_b.games
    assert report.misattributed == 1


def test_second_pass_changes_nothing(
    repairer, athlete, athlete_b, athlete_c, make_game, session, events
):
    orphan = make_game(athlete, datetime(2026, 4, 1), listed=False)
    stray = make_game(athlete_c, datetime(2026, 4, 2), listed=False)
    athlete_b.games.append(stray)
    session.commit()

    repairer.repair(athlete)
    repairer.repair(athlete_b)
    events.clear()

    assert repairer.repair(athlete).total == 0
    assert repairer.repair(athlete_b).total == 0
    assert repairer.repair(athlete_c).total == 0
    assert orphan.athlete is athlete
    assert stray.athlete is athlete_b
    assert events.history() == [], "a clean pass publishes nothing"


def test_record_listed_by_two_athletes_converges(repairer, athlete, athlete_b, make_game, session):
    """The owner named by the back-reference keeps the record; the stray listing goes."""
    game = make_game(athlete, datetime(2026, 4, 1))
    athlete_b.games.append(game)
    session.commit()

    report = repairer.repair(athlete_b)

    assert report.duplicates == 1
    assert game.athlete is athlete
    assert game in athlete.games
    assert game not in athlete_b.games
    assert repairer.repair(athlete).total == 0
    assert repairer.repair(athlete_b).total == 0


def test_unowned_record_is_claimed(repairer, athlete, session):
    practice = Practice(date=datetime(2026, 4, 1))
    session.add(practice)
    athlete.practices.append(practice)
    session.commit()

    report = repairer.repair(athlete)

    assert practice.athlete is athlete
    assert report.by_kind == {"practice": 1}


def test_repair_covers_every_kind(repairer, athlete, session, caplog):
    clip = VideoClip(file_name="a.mov", athlete=athlete)
    practice = Practice(athlete=athlete)
    session.add_all([clip, practice])
    session.commit()

    with caplog.at_level(logging.INFO, logger="seasonbook.repair"):
        report = repairer.repair(athlete)

    assert report.orphaned == 2
    assert clip in athlete.video_clips
    assert practice in athlete.practices
    assert any(getattr(r, "category", None) == "ReferenceDriftWarning" for r in caplog.records)


def test_repair_all(repairer, athlete, athlete_b, make_game):
    make_game(athlete, datetime(2026, 4, 1), listed=False)
    make_game(athlete_b, datetime(2026, 4, 1), listed=False)

    reports = repairer.repair_all()

    assert [r.total for r in reports] == [1, 1]
