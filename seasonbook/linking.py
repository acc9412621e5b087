"""Links newly created records to the athlete's active season.

Every record-creation event (game created, practice logged, video saved or
imported, tournament created) ends up in LinkingService.link_to_active_season.
The call provisions a default season when the athlete has none, stamps the
record with the active season and makes sure the record is listed in the
athlete's forward collection exactly once.

Linking is idempotent: calling it again for a record that already points at
the active season changes nothing.
"""

import logging

from sqlalchemy.orm import Session

from .database.models import Athlete, Season
from .events import EventChannel, StatisticsUpdated
from .records import VIDEO_CLIP, kind_of
from .seasons.lifecycle import SeasonLifecycle
from .stats.aggregator import count_clip_play_result

logger = logging.getLogger(__name__)


class LinkingService:
    """Assigns games, practices, video clips and tournaments to seasons."""

    def __init__(
        self,
        session: Session,
        events: EventChannel | None = None,
        lifecycle: SeasonLifecycle | None = None,
    ):
        self.session = session
        self.events = events or EventChannel(keep_history=False)
        self.lifecycle = lifecycle or SeasonLifecycle(session, self.events)

    def link_to_active_season(self, record, athlete: Athlete) -> Season:
        """Point `record` at the athlete's active season.

        Args:
            record: A Game, Practice, VideoClip or Tournament
            athlete: The athlete the record belongs to

        Returns:
            The active season the record now belongs to
        """
        kind = kind_of(record)
        active = self.lifecycle.ensure_active_season(athlete)

        changed = False
        try:
            if record.athlete is None and record.athlete_id is None:
                record.athlete = athlete
                changed = True

            forward = kind.forward_collection(athlete)
            if record not in forward:
                forward.append(record)
                changed = True

            if record.season is not active:
                record.season = active
                changed = True

            if changed:
                self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception(f"Failed to link {kind.name} to season {active.id}")
            raise

        if changed:
            logger.info(f"Linked {kind.name} {record.id} to season {active.display_name}")
        else:
            logger.debug(f"{kind.name} {record.id} already linked to season {active.id}")
        return active

    def record_created(self, record, athlete: Athlete) -> Season:
        """Entry point for practice logging, video capture/import and tournament creation.

        A new clip tagged with a play result is counted into the game line or
        the athlete's totals before it is linked, and StatisticsUpdated is
        published once everything is committed.
        """
        counted = False
        if kind_of(record) is VIDEO_CLIP:
            if record.date is None:
                # Clips are dated by when they were captured
                record.date = self.lifecycle.clock()
            if record.id is None:
                counted = count_clip_play_result(record, athlete)

        self.session.add(record)
        season = self.link_to_active_season(record, athlete)

        if counted:
            try:
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise
            self.events.publish(StatisticsUpdated(athlete_id=athlete.id))
        return season
