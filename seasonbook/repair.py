"""Consistency repair between forward collections and back-references.

An athlete lists its records in forward collections (athlete.games, ...)
while each record points back at its athlete (game.athlete_id). The two
sides are written separately and can drift apart:

- Orphaned: the record points at athlete X but X does not list it.
  Repair: add it to X's forward collection.
- Misattributed: X lists the record but it points at another athlete Y (or
  at nobody). Repair: point it back at X. When Y lists the record as well,
  the record is Y's and the stray entry in X's list is dropped instead;
  otherwise two athletes would keep stealing the record from each other.

Repair never deletes records, it only realigns references. One pass leaves
no orphaned or misattributed records, so a second pass changes nothing.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.orm import Session

from .database.models import Athlete
from .events import ConsistencyRepaired, EventChannel
from .exceptions import ReferenceDriftWarning
from .records import RECORD_KINDS, owned_records

logger = logging.getLogger(__name__)

_DRIFT = {"category": ReferenceDriftWarning.__name__}


@dataclass
class RepairReport:
    athlete_id: int
    orphaned: int = 0
    misattributed: int = 0
    duplicates: int = 0
    by_kind: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.orphaned + self.misattributed + self.duplicates


class ConsistencyRepairer:
    """Detects and heals forward/back reference drift for athletes."""

    def __init__(self, session: Session, events: EventChannel | None = None):
        self.session = session
        self.events = events or EventChannel(keep_history=False)

    def repair(self, athlete: Athlete) -> RepairReport:
        """Realign every record kind of one athlete in a single transaction."""
        report = RepairReport(athlete_id=athlete.id)
        try:
            for kind in RECORD_KINDS:
                fixed = self._repair_kind(athlete, kind, report)
                if fixed:
                    report.by_kind[kind.name] = fixed
            if report.total:
                self.session.commit()
        except Exception:
            self.session.rollback()
            logger.exception(f"Consistency repair failed for athlete {athlete.id}")
            raise

        if report.total:
            logger.warning(
                f"Repaired athlete {athlete.id}: {report.orphaned} orphaned, "
                f"{report.misattributed} misattributed, {report.duplicates} duplicate listings",
                extra=_DRIFT,
            )
            self.events.publish(
                ConsistencyRepaired(athlete_id=athlete.id, repaired_count=report.total)
            )
        else:
            logger.info(f"No consistency issues found for athlete {athlete.id}")
        return report

    def repair_all(self) -> list[RepairReport]:
        athletes = list(self.session.scalars(select(Athlete).order_by(Athlete.id)))
        return [self.repair(athlete) for athlete in athletes]

    def _repair_kind(self, athlete: Athlete, kind, report: RepairReport) -> int:
        forward = kind.forward_collection(athlete)
        fixed = 0

        for record in owned_records(self.session, athlete, kind):
            if record not in forward:
                forward.append(record)
                report.orphaned += 1
                fixed += 1
                logger.info(f"Re-listed orphaned {kind.name} {record.id}", extra=_DRIFT)

        for record in list(forward):
            if record.athlete_id == athlete.id:
                continue
            other = record.athlete
            if other is not None and record in kind.forward_collection(other):
                forward.remove(record)
                report.duplicates += 1
                logger.info(
                    f"Dropped {kind.name} {record.id} from athlete {athlete.id}; "
                    f"it belongs to athlete {other.id}",
                    extra=_DRIFT,
                )
            else:
                previous = record.athlete_id
                record.athlete = athlete
                report.misattributed += 1
                logger.info(
                    f"Pointed {kind.name} {record.id} back at athlete {athlete.id} "
                    f"(was {previous})",
                    extra=_DRIFT,
                )
            fixed += 1

        return fixed
