"""Tests for linking new records to the active season."""

from datetime import datetime

import pytest

from seasonbook.athletes import create_athlete
from seasonbook.database.models import Practice, Tournament, VideoClip
from seasonbook.events import SeasonActivated

from .conftest import NOW


def test_linking_is_idempotent(linking, lifecycle, athlete, session):
    practice = Practice(date=datetime(2026, 4, 2), notes="Tee work")
    session.add(practice)

    first = linking.link_to_active_season(practice, athlete)
    second = linking.link_to_active_season(practice, athlete)

    assert first is second
    assert practice.season is first
    assert athlete.practices.count(practice) == 1
    assert len(first.practices) == 1


def test_linking_provisions_default_season_once(linking, athlete, session, events):
    for day in (1, 2, 3):
        linking.record_created(Practice(date=datetime(2026, 4, day)), athlete)

    activations = [e for e in events.history(athlete.id) if isinstance(e, SeasonActivated)]
    assert len(activations) == 1
    assert len(athlete.seasons) == 1
    assert len(athlete.practices) == 3


def test_relinking_after_season_change(linking, lifecycle, athlete, session):
    tournament = Tournament(name="Memorial Day Classic", date=datetime(2026, 5, 25))
    spring = linking.record_created(tournament, athlete)

    fall = lifecycle.create_season(athlete, "Fall 2026")
    linking.link_to_active_season(tournament, athlete)

    assert spring is not fall
    assert tournament.season is fall
    assert athlete.tournaments == [tournament]


def test_record_created_dates_undated_clips(linking, athlete):
    clip = VideoClip(file_name="swing.mov", is_highlight=True)

    season = linking.record_created(clip, athlete)

    assert clip.date == NOW
    assert clip.athlete is athlete
    assert season.highlights == [clip]


def test_linking_keeps_existing_owner(linking, athlete, session):
    """Linking never rewrites a record's back-reference; that is repair's job."""
    other = create_athlete(session, "Sam Ortiz")
    practice = Practice(date=datetime(2026, 4, 2), athlete=other)
    session.add(practice)

    linking.link_to_active_season(practice, athlete)

    assert practice.athlete is other
    assert practice in athlete.practices


def test_linking_rejects_unknown_record(linking, athlete):
    with pytest.raises(TypeError):
        linking.link_to_active_season(object(), athlete)
