"""CSV exports of career, season and game statistics.

Exports only read AthleteStatistics, SeasonStatistics and game lines; they
never recompute or modify stored statistics.
"""

import logging
from datetime import datetime
from pathlib import Path

import pandas as pd

from .database.models import Athlete, Game, Season
from .seasons.lifecycle import format_rate
from .stats.aggregator import batting_average, on_base_percentage, slugging_percentage
from .stats.play_results import PlayResultType

logger = logging.getLogger(__name__)

LINE_COLUMNS = {
    "at_bats": "AB",
    "hits": "H",
    "singles": "1B",
    "doubles": "2B",
    "triples": "3B",
    "home_runs": "HR",
    "runs": "R",
    "rbis": "RBI",
    "walks": "BB",
    "strikeouts": "K",
}


def _line(stats) -> dict:
    row = {label: getattr(stats, field) for field, label in LINE_COLUMNS.items()}
    avg = batting_average(stats.hits, stats.at_bats)
    obp = on_base_percentage(stats.hits, stats.walks, stats.at_bats)
    slg = slugging_percentage(stats.total_bases, stats.at_bats)
    row.update(
        AVG=format_rate(avg),
        OBP=format_rate(obp),
        SLG=format_rate(slg),
        OPS=format_rate(obp + slg),
    )
    return row


def career_statistics_frame(athlete: Athlete) -> pd.DataFrame:
    """One row for the career totals followed by one per season snapshot, newest first."""
    rows = []
    if athlete.statistics is not None:
        stats = athlete.statistics
        rows.append({"Season": "Career", "Games": stats.total_games, **_line(stats)})

    seasons = sorted(athlete.seasons, key=lambda s: s.start_date, reverse=True)
    for season in seasons:
        snapshot = season.statistics
        if snapshot is None:
            continue
        rows.append({"Season": season.display_name, "Games": snapshot.total_games, **_line(snapshot)})

    columns = ["Season", "Games", *LINE_COLUMNS.values(), "AVG", "OBP", "SLG", "OPS"]
    return pd.DataFrame(rows, columns=columns)


def game_log_frame(athlete: Athlete, season: Season | None = None) -> pd.DataFrame:
    """Completed games of the athlete, newest first, optionally for one season."""
    games: list[Game] = [
        game
        for game in athlete.games
        if game.is_complete
        and game.statistics is not None
        and (season is None or game.season_id == season.id)
    ]
    games.sort(key=lambda g: g.date or datetime.min, reverse=True)

    rows = [
        {
            "Date": game.date.strftime("%Y-%m-%d") if game.date else "Unknown",
            "Opponent": game.opponent,
            "Season": game.season.display_name if game.season else "",
            **_line(game.statistics),
        }
        for game in games
    ]
    columns = ["Date", "Opponent", "Season", *LINE_COLUMNS.values(), "AVG", "OBP", "SLG", "OPS"]
    return pd.DataFrame(rows, columns=columns)


def play_by_play_frame(
    athlete: Athlete, season: Season | None = None, game: Game | None = None
) -> pd.DataFrame:
    clips = [
        clip
        for clip in athlete.video_clips
        if (season is None or clip.season_id == season.id)
        and (game is None or clip.game_id == game.id)
    ]
    clips.sort(key=lambda c: c.date or datetime.min, reverse=True)

    rows = []
    for clip in clips:
        result = PlayResultType.parse(clip.play_result) if clip.play_result else None
        rows.append(
            {
                "Date": clip.date.strftime("%Y-%m-%d %H:%M") if clip.date else "Unknown",
                "Context": f"vs {clip.game.opponent}" if clip.game else "Practice",
                "Play Result": result.display_name if result else "Unrecorded",
                "Highlight": "Yes" if clip.is_highlight else "No",
                "Video File": clip.file_name,
            }
        )
    return pd.DataFrame(rows, columns=["Date", "Context", "Play Result", "Highlight", "Video File"])


def _write(df: pd.DataFrame, output: Path | None, what: str) -> str:
    csv = df.to_csv(index=False)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(csv)
        logger.info(f"Wrote {len(df)} {what} rows to {output}")
    return csv


def export_athlete_statistics_csv(athlete: Athlete, output: Path | None = None) -> str:
    return _write(career_statistics_frame(athlete), output, "statistics")


def export_game_log_csv(
    athlete: Athlete, season: Season | None = None, output: Path | None = None
) -> str:
    return _write(game_log_frame(athlete, season), output, "game log")


def export_play_by_play_csv(
    athlete: Athlete,
    season: Season | None = None,
    game: Game | None = None,
    output: Path | None = None,
) -> str:
    return _write(play_by_play_frame(athlete, season, game), output, "play")
