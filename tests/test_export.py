"""Tests for CSV export."""

import io
from datetime import datetime

import pandas as pd

from seasonbook.database.models import VideoClip
from seasonbook.export import (
    career_statistics_frame,
    export_athlete_statistics_csv,
    export_game_log_csv,
    export_play_by_play_csv,
    game_log_frame,
)


def _play_ball(game_service, athlete, opponent, day, at_bats, hits):
    game = game_service.create_game(athlete, opponent, datetime(2026, 4, day))
    game.statistics.at_bats = at_bats
    game.statistics.hits = hits
    game.statistics.singles = hits
    game_service.end(game)
    return game


def test_career_statistics_include_season_snapshots(lifecycle, game_service, athlete):
    spring = lifecycle.create_season(athlete, "Spring 2026", start_date=datetime(2026, 3, 1))
    _play_ball(game_service, athlete, "Tigers", 1, at_bats=4, hits=2)
    lifecycle.create_season(athlete, "Fall 2026", start_date=datetime(2026, 7, 1))

    frame = career_statistics_frame(athlete)

    assert list(frame["Season"]) == ["Career", "Spring 2026"]
    assert frame.iloc[0]["H"] == 2
    assert frame.iloc[1]["AVG"] == ".500"
    assert spring.statistics is not None


def test_game_log_filters_by_season(lifecycle, game_service, athlete):
    spring = lifecycle.create_season(athlete, "Spring 2026")
    _play_ball(game_service, athlete, "Tigers", 1, at_bats=4, hits=1)
    lifecycle.create_season(athlete, "Fall 2026")
    _play_ball(game_service, athlete, "Lions", 2, at_bats=3, hits=3)
    game_service.create_game(athlete, "Bears", datetime(2026, 4, 3))  # Not finished

    everything = game_log_frame(athlete)
    spring_only = game_log_frame(athlete, season=spring)

    assert list(everything["Opponent"]) == ["Lions", "Tigers"]
    assert list(spring_only["Opponent"]) == ["Tigers"]
    assert spring_only.iloc[0]["AVG"] == ".250"


def test_csv_round_trips_through_pandas(game_service, athlete, tmp_path):
    _play_ball(game_service, athlete, "Tigers", 1, at_bats=3, hits=1)
    output = tmp_path / "exports" / "log.csv"

    csv = export_game_log_csv(athlete, output=output)

    assert output.read_text() == csv
    frame = pd.read_csv(io.StringIO(csv))
    assert frame.loc[0, "Opponent"] == "Tigers"
    assert frame.loc[0, "AB"] == 3


def test_statistics_export_without_games(athlete):
    csv = export_athlete_statistics_csv(athlete)

    assert csv.splitlines()[0].startswith("Season,Games,AB,H")
    assert len(csv.splitlines()) == 1


def test_play_by_play(game_service, linking, athlete):
    game = game_service.create_game(athlete, "Tigers", datetime(2026, 4, 1))
    linking.record_created(
        VideoClip(file_name="hr.mov", play_result="home_run", is_highlight=True, game=game),
        athlete,
    )
    linking.record_created(VideoClip(file_name="tee.mov"), athlete)

    frame = pd.read_csv(io.StringIO(export_play_by_play_csv(athlete)))

    assert set(frame["Context"]) == {"vs Tigers", "Practice"}
    assert set(frame["Play Result"]) == {"Home Run", "Unrecorded"}
