"""Statistics aggregation: game lines -> cumulative and season statistics.

Three kinds of roll-up live here:

1. fold_game_into_cumulative(): adds one ended game to the athlete's all-time
   AthleteStatistics. It does NOT check for duplicates; callers claim the game
   first with claim_game_for_aggregation(), which is what makes the fold
   happen exactly once per game.
2. compute_snapshot(): a pure function that sums everything currently linked
   to a season into a new SeasonStatistics. The season lifecycle stores it
   when the season is archived.
3. StatisticsService.recalculate_*(): rebuild totals from scratch, used after
   deletions or manual edits.

Rate formulas (stored on every aggregate row):
    batting_average     = hits / at_bats
    on_base_percentage  = (hits + walks) / (at_bats + walks)
    slugging_percentage = total_bases / at_bats,
                          total_bases = singles + 2*doubles + 3*triples + 4*home_runs
    ops                 = on_base_percentage + slugging_percentage
A zero denominator yields 0.0.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ..database.models import (
    AGGREGATE_ONLY_FIELDS,
    COUNT_FIELDS,
    RATE_FIELDS,
    Athlete,
    AthleteStatistics,
    Game,
    GameStatistics,
    Season,
    SeasonStatistics,
    VideoClip,
)
from ..events import EventChannel, StatisticsUpdated
from ..exceptions import DuplicateAggregationError
from ..records import GAME, VIDEO_CLIP, owned_records
from .play_results import PlayResultType, apply_play_result

logger = logging.getLogger(__name__)


def batting_average(hits: int, at_bats: int) -> float:
    return hits / at_bats if at_bats > 0 else 0.0


def on_base_percentage(hits: int, walks: int, at_bats: int) -> float:
    plate_appearances = at_bats + walks
    return (hits + walks) / plate_appearances if plate_appearances > 0 else 0.0


def slugging_percentage(total_bases: int, at_bats: int) -> float:
    return total_bases / at_bats if at_bats > 0 else 0.0


def refresh_rates(stats) -> None:
    """Recompute the stored rate columns of an aggregate statistics row."""
    stats.batting_average = batting_average(stats.hits, stats.at_bats)
    stats.on_base_percentage = on_base_percentage(stats.hits, stats.walks, stats.at_bats)
    stats.slugging_percentage = slugging_percentage(stats.total_bases, stats.at_bats)
    stats.ops = stats.on_base_percentage + stats.slugging_percentage


def add_counts(target, source: GameStatistics) -> None:
    for field in COUNT_FIELDS:
        setattr(target, field, getattr(target, field) + getattr(source, field))


def reset_counts(stats) -> None:
    for field in COUNT_FIELDS + AGGREGATE_ONLY_FIELDS:
        setattr(stats, field, 0)
    refresh_rates(stats)


def ensure_statistics(athlete: Athlete) -> AthleteStatistics:
    """Return the athlete's cumulative statistics, creating the row if missing."""
    if athlete.statistics is None:
        athlete.statistics = AthleteStatistics()
        logger.info(f"Created cumulative statistics for athlete {athlete.id}")
    return athlete.statistics


def claim_game_for_aggregation(game: Game) -> None:
    """Mark a game as folded into the cumulative statistics.

    Raises:
        DuplicateAggregationError: if the game was already claimed
    """
    if game.aggregated_at is not None:
        raise DuplicateAggregationError(
            f"Game {game.id} was already aggregated at {game.aggregated_at.isoformat()}"
        )
    game.aggregated_at = datetime.now()


def fold_game_into_cumulative(game: Game, athlete_stats: AthleteStatistics) -> AthleteStatistics:
    """Add an ended game's batting line to the athlete's all-time totals.

    Must be called exactly once per game, when it ends. A game without a
    statistics row still counts as a game played.
    """
    if game.statistics is not None:
        add_counts(athlete_stats, game.statistics)
    athlete_stats.total_games += 1
    refresh_rates(athlete_stats)
    athlete_stats.updated_at = datetime.now()

    logger.info(
        f"Folded game {game.id} into cumulative stats: "
        f"{athlete_stats.hits}/{athlete_stats.at_bats}, AVG {athlete_stats.batting_average:.3f}"
    )
    return athlete_stats


def compute_snapshot(season: Season) -> SeasonStatistics:
    """Sum everything currently linked to a season into a new snapshot.

    Completed games contribute their batting lines; video clips that are not
    attached to a game contribute their tagged play result. Nothing on the
    season or its records is modified, and the returned row is not attached
    to the season.
    """
    snapshot = SeasonStatistics()

    completed = [game for game in season.games if game.is_complete]
    snapshot.total_games = len(completed)
    for game in completed:
        if game.statistics is not None:
            add_counts(snapshot, game.statistics)

    for clip in season.video_clips:
        if clip.game_id is None and clip.play_result:
            apply_play_result(snapshot, PlayResultType.parse(clip.play_result))

    refresh_rates(snapshot)
    snapshot.computed_at = datetime.now()
    return snapshot


def store_snapshot(season: Season) -> SeasonStatistics:
    """Write a fresh snapshot onto the season, overwriting an earlier one in place."""
    fresh = compute_snapshot(season)
    if season.statistics is None:
        season.statistics = fresh
        return fresh

    stored = season.statistics
    for field in COUNT_FIELDS + AGGREGATE_ONLY_FIELDS + RATE_FIELDS:
        setattr(stored, field, getattr(fresh, field))
    stored.computed_at = fresh.computed_at
    return stored


def count_clip_play_result(clip: VideoClip, athlete: Athlete) -> bool:
    """Count the play result of a newly saved clip.

    A clip from a game adds to that game's line. The athlete's totals only
    change when the game has already been folded in; otherwise the fold at the
    end of the game picks the clip up. A clip outside any game goes straight
    into the athlete's totals, the same way recalculation counts it.

    Returns:
        True if the athlete's cumulative statistics changed
    """
    if not clip.play_result:
        return False
    result = PlayResultType.parse(clip.play_result)

    game = clip.game
    if game is not None:
        if game.statistics is None:
            game.statistics = GameStatistics()
        apply_play_result(game.statistics, result)
        if game.aggregated_at is None:
            return False
        delta = GameStatistics()
        apply_play_result(delta, result)
        stats = ensure_statistics(athlete)
        add_counts(stats, delta)
    else:
        stats = ensure_statistics(athlete)
        apply_play_result(stats, result)

    refresh_rates(stats)
    stats.updated_at = datetime.now()
    logger.info(f"Counted {result.value} from clip {clip.file_name!r} for athlete {athlete.id}")
    return True


class StatisticsService:
    """Rebuilds statistics from scratch.

    Used when incremental aggregation can no longer be trusted, for example
    after a completed game was deleted or its line was edited by hand.
    """

    def __init__(self, session: Session, events: EventChannel | None = None):
        self.session = session
        self.events = events or EventChannel(keep_history=False)

    def recalculate_athlete_statistics(self, athlete: Athlete) -> AthleteStatistics:
        """Recompute the athlete's cumulative statistics from every record they own.

        Every completed game counted here is marked aggregated, so a late
        "game ended" event for it stays a no-op.
        """
        logger.info(f"Recalculating statistics for athlete {athlete.id}")
        try:
            stats = ensure_statistics(athlete)
            reset_counts(stats)

            completed = [g for g in owned_records(self.session, athlete, GAME) if g.is_complete]
            stats.total_games = len(completed)
            now = datetime.now()
            for game in completed:
                if game.statistics is not None:
                    add_counts(stats, game.statistics)
                if game.aggregated_at is None:
                    game.aggregated_at = now

            for clip in owned_records(self.session, athlete, VIDEO_CLIP):
                if clip.game_id is None and clip.play_result:
                    apply_play_result(stats, PlayResultType.parse(clip.play_result))

            refresh_rates(stats)
            stats.updated_at = now
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception(f"Failed to recalculate statistics for athlete {athlete.id}")
            raise

        logger.info(
            f"Recalculated athlete {athlete.id}: AVG {stats.batting_average:.3f}, "
            f"OBP {stats.on_base_percentage:.3f}, OPS {stats.ops:.3f}"
        )
        self.events.publish(StatisticsUpdated(athlete_id=athlete.id))
        return stats

    def recalculate_game_statistics(self, game: Game) -> GameStatistics:
        """Rebuild a game's batting line from the play results of its clips."""
        try:
            if game.statistics is None:
                game.statistics = GameStatistics()
            line = game.statistics
            for field in COUNT_FIELDS:
                setattr(line, field, 0)

            for clip in game.video_clips:
                if clip.play_result:
                    apply_play_result(line, PlayResultType.parse(clip.play_result))

            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(f"Recalculated game {game.id}: {line.hits}/{line.at_bats}")
        return line
