"""Tests for athlete creation and cascading deletion."""

from datetime import datetime

import pytest
from sqlalchemy import func, select

from seasonbook.athletes import create_athlete, delete_athlete, get_athlete, list_athletes
from seasonbook.database.models import Game, Practice, Season
from seasonbook.exceptions import AthleteNotFoundError


def test_create_and_get_athlete(session):
    athlete = create_athlete(session, "  Jordan Reyes ")

    assert athlete.name == "Jordan Reyes"
    assert get_athlete(session, athlete.id) is athlete
    assert list_athletes(session) == [athlete]


def test_create_athlete_requires_name(session):
    with pytest.raises(ValueError):
        create_athlete(session, "  ")


def test_get_missing_athlete(session):
    with pytest.raises(AthleteNotFoundError):
        get_athlete(session, 999)


def test_delete_athlete_cascades(session, athlete, game_service, linking, make_game):
    game = game_service.create_game(athlete, "Tigers", datetime(2026, 4, 1))
    game_service.end(game)
    linking.record_created(Practice(date=datetime(2026, 4, 2)), athlete)
    make_game(athlete, datetime(2025, 4, 1), opponent="Orphan", listed=False)

    other = create_athlete(session, "Sam Ortiz")
    theirs = make_game(other, datetime(2026, 4, 1))
    athlete.games.append(theirs)
    session.commit()

    counts = delete_athlete(session, athlete)

    assert counts["game"] == 2
    assert counts["practice"] == 1
    assert counts["season"] == 1
    assert session.scalar(select(func.count()).select_from(Season)) == 0
    assert session.scalar(select(func.count()).select_from(Practice)) == 0
    assert list(session.scalars(select(Game))) == [theirs]
    assert theirs.athlete is other
