"""Season inference for records created before seasons existed.

Athletes that logged games, practices, clips or tournaments before seasons
were introduced have records with no season. The migration clusters those
records into half-year seasons by date:

1. Collect the athlete's unlinked records, oldest first.
2. Bucket each date by half-year ("Spring 2025", "Fall 2025", ...).
3. For each bucket create (or reuse) a season spanning the bucket's dates
   and link every record of the bucket to it.
4. Every bucket but the newest is archived with a statistics snapshot; the
   newest bucket's season becomes the athlete's active season.

Each bucket is committed on its own, oldest first, so a cancelled or
crashed run leaves complete buckets behind and at most one active season.
A later run picks up the remaining records, which is why the guard accepts
athletes whose only seasons are ones this module inferred.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session, sessionmaker

from .athletes import get_athlete
from .config.settings import settings
from .database.connection import SessionLocal
from .database.models import Athlete, Season
from .events import EventChannel, MigrationCompleted, SeasonArchived
from .exceptions import MigrationAmbiguityWarning, MigrationCancelledError
from .records import has_unlinked_records, unlinked_records
from .repair import ConsistencyRepairer
from .seasons.lifecycle import SeasonLifecycle
from .seasons.naming import SeasonKey, SportType, is_bucket_boundary, season_key

logger = logging.getLogger(__name__)

ALL_DATA = "All Data"

_AMBIGUOUS = {"category": MigrationAmbiguityWarning.__name__}


def needs_migration(session: Session, athlete: Athlete) -> bool:
    """True when the athlete has unlinked records and no user-made seasons.

    Seasons created by an earlier, interrupted migration do not count, so
    the migration can be resumed. Once a run completes the athlete is
    stamped and never migrated again.
    """
    if athlete.seasons_migrated_at is not None:
        return False
    if any(not season.inferred for season in athlete.seasons):
        return False
    return has_unlinked_records(session, athlete)


@dataclass
class Bucket:
    label: str
    key: SeasonKey | None
    records: list = field(default_factory=list)

    @property
    def dates(self) -> list[datetime]:
        return [record.date for record in self.records if record.date is not None]

    @property
    def start(self) -> datetime | None:
        return min(self.dates, default=None)

    @property
    def end(self) -> datetime | None:
        return max(self.dates, default=None)


@dataclass
class MigrationResult:
    athlete_id: int
    seasons_created: int = 0
    records_linked: int = 0
    season_names: list[str] = field(default_factory=list)
    skipped: bool = False


def bucket_records(records: list, fall_start_month: int | None = None) -> list[Bucket]:
    """Group records into half-year buckets, oldest bucket first.

    Undated records join the newest bucket. When no record has a date they
    all land in a single "All Data" bucket.
    """
    buckets: dict[SeasonKey, Bucket] = {}
    undated = []
    for record in records:
        if record.date is None:
            undated.append(record)
            continue
        key = season_key(record.date, fall_start_month)
        buckets.setdefault(key, Bucket(label=key.label, key=key)).records.append(record)

    ordered = [buckets[key] for key in sorted(buckets)]
    if undated:
        if ordered:
            ordered[-1].records.extend(undated)
        else:
            ordered.append(Bucket(label=ALL_DATA, key=None, records=undated))
    return ordered


class SeasonMigrator:
    """Assigns unlinked records of one athlete to inferred half-year seasons."""

    def __init__(
        self,
        session: Session,
        events: EventChannel | None = None,
        lifecycle: SeasonLifecycle | None = None,
        repairer: ConsistencyRepairer | None = None,
    ):
        self.session = session
        self.events = events or EventChannel(keep_history=False)
        self.lifecycle = lifecycle or SeasonLifecycle(session, self.events)
        self.repairer = repairer or ConsistencyRepairer(session, self.events)

    def migrate(
        self,
        athlete: Athlete,
        cancel_event: threading.Event | None = None,
        repair_first: bool = True,
        sport: str | None = None,
    ) -> MigrationResult:
        """Run the migration for one athlete.

        Args:
            athlete: Athlete to migrate
            cancel_event: Checked before each bucket; when set the run stops
            repair_first: Heal forward/back reference drift before collecting records
            sport: Sport of created seasons, defaults to settings.default_sport

        Returns:
            MigrationResult; skipped=True when the athlete did not need migrating

        Raises:
            MigrationCancelledError: if cancel_event was set; finished buckets stay committed
        """
        result = MigrationResult(athlete_id=athlete.id)
        if not needs_migration(self.session, athlete):
            logger.info(f"Athlete {athlete.id} does not need season migration")
            result.skipped = True
            return result

        if repair_first:
            self.repairer.repair(athlete)

        buckets = bucket_records(unlinked_records(self.session, athlete))
        sport_value = SportType(sport or settings.default_sport).value
        logger.info(
            f"Migrating athlete {athlete.id}: "
            f"{sum(len(b.records) for b in buckets)} records in {len(buckets)} buckets"
        )

        for index, bucket in enumerate(buckets):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(
                    f"Migration of athlete {athlete.id} cancelled after {index} of {len(buckets)} buckets"
                )
                raise MigrationCancelledError(
                    f"Migration of athlete {athlete.id} cancelled; {index} buckets done"
                )
            newest = index == len(buckets) - 1
            self._migrate_bucket(athlete, bucket, newest, sport_value, result)

        athlete.seasons_migrated_at = datetime.now()
        self.session.commit()

        logger.info(
            f"Migration of athlete {athlete.id} complete: {result.seasons_created} seasons created, "
            f"{result.records_linked} records linked"
        )
        self.events.publish(
            MigrationCompleted(
                athlete_id=athlete.id,
                seasons_created=result.seasons_created,
                records_linked=result.records_linked,
            )
        )
        return result

    def _migrate_bucket(
        self,
        athlete: Athlete,
        bucket: Bucket,
        newest: bool,
        sport: str,
        result: MigrationResult,
    ) -> None:
        archived = False
        try:
            season, created = self._season_for(athlete, bucket, sport)
            for record in bucket.records:
                if record.date is not None and is_bucket_boundary(record.date):
                    logger.info(
                        f"{type(record).__name__} {record.id} dated {record.date:%Y-%m-%d} "
                        f"is on a half-year boundary; assigned to {bucket.label}",
                        extra=_AMBIGUOUS,
                    )
                record.season = season

            if bucket.start is not None and bucket.start < season.start_date:
                season.start_date = bucket.start

            if not newest and season.statistics is None:
                self.lifecycle.archive_in_place(season, bucket.end or season.start_date)
                archived = True
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception(f"Failed to migrate bucket {bucket.label} for athlete {athlete.id}")
            raise

        if created:
            result.seasons_created += 1
        result.records_linked += len(bucket.records)
        result.season_names.append(season.name)
        logger.info(f"Linked {len(bucket.records)} records to {season.name}")

        if archived:
            self.events.publish(
                SeasonArchived(athlete_id=athlete.id, season_id=season.id, season_name=season.name)
            )
        if newest and not season.is_active:
            self.lifecycle.activate(season, athlete)

    def _season_for(self, athlete: Athlete, bucket: Bucket, sport: str) -> tuple[Season, bool]:
        """Reuse the athlete's season with the bucket's name, or create it."""
        for season in athlete.seasons:
            if season.name == bucket.label:
                return season, False

        start = bucket.start or self.lifecycle.clock()
        season = Season(
            athlete=athlete,
            name=bucket.label,
            sport=sport,
            start_date=start,
            end_date=bucket.end,
            is_active=False,
            inferred=True,
            notes="Created from existing records",
        )
        self.session.add(season)
        return season, True


class MigrationRunner:
    """Runs migrations as cancellable background jobs.

    Each job gets its own session from `session_factory` and a cancel event.
    Only one job per athlete runs at a time; submitting again while a job is
    pending returns the existing future.
    """

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        events: EventChannel | None = None,
        max_workers: int | None = None,
    ):
        self.session_factory = session_factory
        self.events = events or EventChannel(keep_history=False)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or settings.migration_workers,
            thread_name_prefix="season-migration",
        )
        self._jobs: dict[int, tuple[Future, threading.Event]] = {}
        self._lock = threading.Lock()

    def submit(self, athlete_id: int) -> Future:
        with self._lock:
            job = self._jobs.get(athlete_id)
            if job is not None and not job[0].done():
                return job[0]

            cancel_event = threading.Event()
            future = self._executor.submit(self._run, athlete_id, cancel_event)
            self._jobs[athlete_id] = (future, cancel_event)
            logger.info(f"Queued season migration for athlete {athlete_id}")
            return future

    def cancel(self, athlete_id: int) -> bool:
        """Ask a running job to stop before its next bucket.

        Returns False when there is no unfinished job for the athlete.
        """
        with self._lock:
            job = self._jobs.get(athlete_id)
        if job is None or job[0].done():
            return False
        future, cancel_event = job
        cancel_event.set()
        future.cancel()
        logger.info(f"Cancellation requested for migration of athlete {athlete_id}")
        return True

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            jobs = list(self._jobs.values())
        for _, cancel_event in jobs:
            cancel_event.set()
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def _run(self, athlete_id: int, cancel_event: threading.Event) -> MigrationResult:
        session = self.session_factory()
        try:
            athlete = get_athlete(session, athlete_id)
            return SeasonMigrator(session, self.events).migrate(athlete, cancel_event)
        except MigrationCancelledError:
            raise
        except Exception:
            logger.exception(f"Background migration failed for athlete {athlete_id}")
            raise
        finally:
            session.close()
