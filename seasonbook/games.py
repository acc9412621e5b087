"""Game lifecycle: create, start, end, edit and delete games.

Game lifecycle events drive two parts of the engine:
- create_game() links the new game to the athlete's active season.
- end() folds the game's batting line into the athlete's cumulative
  statistics. The game is claimed first (Game.aggregated_at), so a repeated
  end() for the same game is a logged no-op instead of a double count.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from .database.models import Athlete, Game, GameStatistics, Tournament
from .events import EventChannel, StatisticsUpdated
from .exceptions import DuplicateAggregationError
from .linking import LinkingService
from .stats.aggregator import (
    StatisticsService,
    add_counts,
    claim_game_for_aggregation,
    ensure_statistics,
    fold_game_into_cumulative,
    refresh_rates,
)
from .stats.play_results import add_manual_statistic

logger = logging.getLogger(__name__)


class GameService:
    """Game creation and lifecycle management for one database session."""

    def __init__(
        self,
        session: Session,
        events: EventChannel | None = None,
        linking: LinkingService | None = None,
    ):
        self.session = session
        self.events = events or EventChannel(keep_history=False)
        self.linking = linking or LinkingService(session, self.events)

    def create_game(
        self,
        athlete: Athlete,
        opponent: str,
        date: datetime,
        tournament: Tournament | None = None,
        is_live: bool = False,
    ) -> Game | None:
        """Create a game, attach empty statistics and link it to the active season.

        Returns None when the athlete already has a game against the same
        opponent on the same day.
        """
        for existing in athlete.games:
            if (
                existing.opponent == opponent
                and existing.date is not None
                and existing.date.date() == date.date()
            ):
                logger.info(f"Duplicate game vs {opponent} on {date:%Y-%m-%d}; not creating")
                return None

        if is_live:
            for other in athlete.games:
                other.is_live = False

        game = Game(opponent=opponent, date=date, is_live=is_live, athlete=athlete)
        game.statistics = GameStatistics()

        if tournament is None:
            tournament = next((t for t in athlete.tournaments if t.is_active), None)
        if tournament is not None:
            game.tournament = tournament

        self.session.add(game)
        self.linking.link_to_active_season(game, athlete)
        logger.info(f"Created game {game.id} vs {opponent} for athlete {athlete.id}")
        return game

    def start(self, game: Game) -> Game:
        """Mark a game live; any other live game of the athlete stops being live."""
        athlete = game.athlete
        if athlete is None:
            raise ValueError(f"Game {game.id} has no athlete")

        for other in athlete.games:
            if other is not game:
                other.is_live = False
        game.is_live = True
        self.session.commit()

        logger.info(f"Started game {game.id} for athlete {athlete.id}")
        return game

    def end(self, game: Game) -> bool:
        """End a game and fold its statistics into the athlete's totals.

        Returns:
            True if the game was aggregated now, False if it had been already
        """
        athlete = game.athlete
        if athlete is None:
            raise ValueError(f"Game {game.id} has no athlete")

        game.is_live = False
        game.is_complete = True
        try:
            claim_game_for_aggregation(game)
        except DuplicateAggregationError as e:
            self.session.commit()
            logger.info(f"Not aggregating again: {e}")
            return False

        try:
            fold_game_into_cumulative(game, ensure_statistics(athlete))
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception(f"Failed to aggregate game {game.id}")
            raise

        logger.info(f"Ended game {game.id} for athlete {athlete.id}")
        self.events.publish(StatisticsUpdated(athlete_id=athlete.id, game_id=game.id))
        return True

    def add_manual_statistics(self, game: Game, **counts: int) -> GameStatistics:
        """Add hand-entered totals (singles, doubles, ..., walks) to a game line.

        When the game was already folded into the athlete's totals, the same
        amounts are added there too, so the totals stay equal to a full
        recalculation.
        """
        athlete = game.athlete
        if athlete is None:
            raise ValueError(f"Game {game.id} has no athlete")

        delta = GameStatistics()
        add_manual_statistic(delta, **counts)
        try:
            if game.statistics is None:
                game.statistics = GameStatistics()
            add_counts(game.statistics, delta)
            if game.aggregated_at is not None:
                stats = ensure_statistics(athlete)
                add_counts(stats, delta)
                refresh_rates(stats)
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception(f"Failed to add manual statistics to game {game.id}")
            raise

        logger.info(f"Added manual statistics to game {game.id}: {counts}")
        if game.aggregated_at is not None:
            self.events.publish(StatisticsUpdated(athlete_id=athlete.id, game_id=game.id))
        return game.statistics

    def rebuild_line_from_clips(self, game: Game) -> GameStatistics:
        """Replace a game line with the play results of its clips.

        Cumulative statistics are rebuilt afterwards if the game had already
        been counted.
        """
        stats_service = StatisticsService(self.session, self.events)
        line = stats_service.recalculate_game_statistics(game)
        if game.aggregated_at is not None and game.athlete is not None:
            stats_service.recalculate_athlete_statistics(game.athlete)
        return line

    def delete_game(self, game: Game) -> None:
        """Delete a game, its statistics and its clips.

        Cumulative statistics are not adjusted here; run
        StatisticsService.recalculate_athlete_statistics afterwards if the
        game had been aggregated.
        """
        game_id, was_aggregated = game.id, game.aggregated_at is not None
        for clip in list(game.video_clips):
            self.session.delete(clip)
        self.session.delete(game)
        self.session.commit()

        if was_aggregated:
            logger.warning(f"Deleted aggregated game {game_id}; cumulative stats are now stale")
        else:
            logger.info(f"Deleted game {game_id}")
