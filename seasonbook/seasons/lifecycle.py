"""Season state machine.

States: ACTIVE and ARCHIVED. For any athlete, at most one season is ACTIVE
at every committed state:

    activate(season, athlete)   archive every other active season, then activate
    archive(season)             set end date, store snapshot, deactivate (no-op if archived)
    reactivate(season)          activate() for a season that is currently archived
    ensure_active_season(a)     return the active season or provision a default one

Every transition is applied in a single transaction. The previously active
season is archived and flushed before the new one is switched on, which the
partial unique index on seasons(athlete_id) WHERE is_active requires, and
the commit makes the swap visible to readers all at once. Events are
published after the commit.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config.settings import settings
from ..database.models import Athlete, Season
from ..events import EventChannel, SeasonActivated, SeasonArchived
from ..exceptions import InvariantViolationError, SeasonNotFoundError
from ..stats.aggregator import store_snapshot
from .naming import SportType, half_year_label

logger = logging.getLogger(__name__)

SEASON_RECORD_COLLECTIONS = ("games", "practices", "video_clips", "tournaments")


@dataclass(frozen=True)
class HasActiveSeason:
    season: Season


@dataclass(frozen=True)
class NeedsSeason:
    athlete: Athlete


ActiveSeasonState = HasActiveSeason | NeedsSeason


class SeasonRecommendation(Enum):
    CREATE_FIRST = "create_first"
    NO_ACTIVE_SEASON = "no_active_season"
    CONSIDER_ENDING = "consider_ending"
    OK = "ok"


@dataclass(frozen=True)
class SeasonStatus:
    recommendation: SeasonRecommendation
    season: Season | None = None

    @property
    def message(self) -> str | None:
        if self.recommendation is SeasonRecommendation.CREATE_FIRST:
            return "Create your first season to start tracking games and videos"
        if self.recommendation is SeasonRecommendation.NO_ACTIVE_SEASON:
            return "No active season. Create a new season or reactivate an old one"
        if self.recommendation is SeasonRecommendation.CONSIDER_ENDING:
            return (
                f"{self.season.display_name} has been active for a long time. "
                "Consider ending it and starting a new season"
            )
        return None


def _belongs_to(season: Season, athlete: Athlete) -> bool:
    if season.athlete is not None:
        return season.athlete is athlete
    return season.athlete_id is not None and season.athlete_id == athlete.id


def format_rate(value: float) -> str:
    """Baseball style: .333 below one, 1.000 and up as is."""
    formatted = f"{value:.3f}"
    return formatted[1:] if formatted.startswith("0") else formatted


class SeasonLifecycle:
    """Creates seasons and moves them between ACTIVE and ARCHIVED.

    Args:
        session: Database session; each public method commits its own work
        events: Channel that receives SeasonActivated / SeasonArchived
        clock: Source of "now", injectable for tests
    """

    def __init__(
        self,
        session: Session,
        events: EventChannel | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session = session
        self.events = events or EventChannel(keep_history=False)
        self.clock = clock

    # ---------------------------------------------------------------- queries

    def get_season(self, season_id: int) -> Season:
        season = self.session.get(Season, season_id)
        if season is None:
            raise SeasonNotFoundError(f"Season {season_id} not found")
        return season

    def active_seasons(self, athlete: Athlete) -> list[Season]:
        self.session.flush()
        return list(
            self.session.scalars(
                select(Season).where(Season.athlete_id == athlete.id, Season.is_active.is_(True))
            )
        )

    def active_season_state(self, athlete: Athlete) -> ActiveSeasonState:
        active = self.active_seasons(athlete)
        if active:
            return HasActiveSeason(active[0])
        return NeedsSeason(athlete)

    # ------------------------------------------------------------ transitions

    def activate(self, season: Season, athlete: Athlete) -> Season:
        """Make `season` the athlete's only active season.

        Raises:
            InvariantViolationError: if the season belongs to another athlete
        """
        if not _belongs_to(season, athlete):
            raise InvariantViolationError(
                f"Season {season.id} belongs to athlete {season.athlete_id}, not {athlete.id}"
            )

        try:
            archived = [
                self.archive_in_place(other)
                for other in self.active_seasons(athlete)
                if other is not season
            ]
            # The old active season must be written before the new one turns on
            self.session.flush()

            season.is_active = True
            season.end_date = None
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        for other in archived:
            self._publish_archived(other)
        logger.info(f"Activated season {season.id} ({season.name}) for athlete {athlete.id}")
        self.events.publish(
            SeasonActivated(athlete_id=athlete.id, season_id=season.id, season_name=season.name)
        )
        return season

    def archive(self, season: Season, end_date: datetime | None = None) -> Season:
        """End an active season and freeze its statistics.

        Archiving a season that is not active is a no-op.
        """
        if not season.is_active:
            logger.info(f"Season {season.id} is already archived; nothing to do")
            return season

        try:
            self.archive_in_place(season, end_date)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self._publish_archived(season)
        return season

    def reactivate(self, season: Season) -> Season:
        """Bring an archived season back; the currently active one is archived.

        Archiving it again later replaces its snapshot with a fresh one.

        Raises:
            InvariantViolationError: if the season is already active
        """
        if season.is_active:
            raise InvariantViolationError(f"Season {season.id} is already active")
        return self.activate(season, season.athlete)

    def ensure_active_season(self, athlete: Athlete, sport: str | None = None) -> Season:
        """Return the athlete's active season, provisioning a default one if needed.

        The default season is named after the current half-year, e.g. "Fall 2026".
        """
        state = self.active_season_state(athlete)
        if isinstance(state, HasActiveSeason):
            return state.season

        now = self.clock()
        season = Season(
            athlete=athlete,
            name=half_year_label(now),
            sport=SportType(sport or settings.default_sport).value,
            start_date=now,
            is_active=True,
            notes="",
        )
        try:
            self.session.add(season)
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception(f"Failed to create default season for athlete {athlete.id}")
            raise

        logger.info(f"Created default season {season.name} for athlete {athlete.id}")
        self.events.publish(
            SeasonActivated(athlete_id=athlete.id, season_id=season.id, season_name=season.name)
        )
        return season

    # ------------------------------------------------------- create / delete

    def create_season(
        self,
        athlete: Athlete,
        name: str,
        sport: str | None = None,
        start_date: datetime | None = None,
        make_active: bool = True,
        notes: str = "",
    ) -> Season:
        """Create a season, by default ending the current one and starting this one.

        A season created with make_active=False is stored as archived, unless
        the athlete has no active season at all, in which case it becomes active.

        Raises:
            InvariantViolationError: if the name is blank
        """
        name = name.strip()
        if not name:
            raise InvariantViolationError("Season name must not be empty")

        start = start_date or self.clock()
        current = self.active_seasons(athlete)
        activate_new = make_active or not current

        archived = []
        try:
            if activate_new:
                archived = [self.archive_in_place(other) for other in current]
                self.session.flush()

            season = Season(
                athlete=athlete,
                name=name,
                sport=SportType(sport or settings.default_sport).value,
                start_date=start,
                end_date=None if activate_new else start,
                is_active=activate_new,
                notes=notes,
            )
            self.session.add(season)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        for other in archived:
            self._publish_archived(other)
        logger.info(f"Created season {season.id} ({season.name}) for athlete {athlete.id}")
        if activate_new:
            self.events.publish(
                SeasonActivated(athlete_id=athlete.id, season_id=season.id, season_name=season.name)
            )
        return season

    def delete_season(self, season: Season, reassign_to: Season | None = None) -> int:
        """Delete a season without deleting any of its records.

        Records are moved to `reassign_to` (a season of the same athlete) or
        left without a season. Returns the number of records moved.
        """
        if reassign_to is not None and (
            reassign_to is season or reassign_to.athlete_id != season.athlete_id
        ):
            raise InvariantViolationError(
                f"Cannot reassign records of season {season.id} to season {reassign_to.id}"
            )

        season_id, athlete_id = season.id, season.athlete_id
        moved = 0
        try:
            for collection in SEASON_RECORD_COLLECTIONS:
                for record in list(getattr(season, collection)):
                    record.season = reassign_to
                    moved += 1
            self.session.delete(season)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        target = f"season {reassign_to.id}" if reassign_to is not None else "no season"
        logger.info(
            f"Deleted season {season_id} of athlete {athlete_id}; moved {moved} records to {target}"
        )
        return moved

    # ---------------------------------------------------------------- reports

    def check_season_status(self, athlete: Athlete, today: datetime | None = None) -> SeasonStatus:
        """Suggest what the athlete should do about their seasons."""
        if not athlete.seasons:
            return SeasonStatus(SeasonRecommendation.CREATE_FIRST)

        state = self.active_season_state(athlete)
        if isinstance(state, NeedsSeason):
            return SeasonStatus(SeasonRecommendation.NO_ACTIVE_SEASON)

        now = today or self.clock()
        cutoff = now - timedelta(days=settings.season_stale_after_days)
        if state.season.start_date < cutoff:
            return SeasonStatus(SeasonRecommendation.CONSIDER_ENDING, state.season)
        return SeasonStatus(SeasonRecommendation.OK, state.season)

    def summarize(self, season: Season) -> str:
        """Plain-text summary of a season for the archive view."""
        lines = [season.display_name, ""]

        if season.start_date and season.end_date:
            lines.append(
                f"Duration: {season.start_date:%b %d, %Y} - {season.end_date:%b %d, %Y}"
            )
            lines.append("")

        lines += [
            "Season Overview",
            f"- Games Played: {season.total_games}",
            f"- Practices: {len(season.practices)}",
            f"- Videos Recorded: {len(season.video_clips)}",
            f"- Highlights: {len(season.highlights)}",
            f"- Tournaments: {len(season.tournaments)}",
        ]

        stats = season.statistics
        if stats is not None and stats.at_bats > 0:
            lines += [
                "",
                "Batting Statistics",
                f"- Batting Average: {format_rate(stats.batting_average)}",
                f"- At Bats: {stats.at_bats}",
                f"- Hits: {stats.hits}",
                f"- Home Runs: {stats.home_runs}",
                f"- RBIs: {stats.rbis}",
                f"- Walks: {stats.walks}",
                f"- Strikeouts: {stats.strikeouts}",
            ]
        return "\n".join(lines)

    # ---------------------------------------------------------------- helpers

    def archive_in_place(self, season: Season, end_date: datetime | None = None) -> Season:
        """Archive without committing, storing a snapshot of the season as it is now."""
        self.session.flush()
        season.end_date = end_date or self.clock()
        store_snapshot(season)
        season.is_active = False
        logger.info(f"Archived season {season.id} ({season.name})")
        return season

    def _publish_archived(self, season: Season) -> None:
        self.events.publish(
            SeasonArchived(athlete_id=season.athlete_id, season_id=season.id, season_name=season.name)
        )
