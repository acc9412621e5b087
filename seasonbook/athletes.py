"""Athlete creation, lookup and cascading deletion."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from .database.models import Athlete, Season
from .exceptions import AthleteNotFoundError
from .records import RECORD_KINDS, owned_records

logger = logging.getLogger(__name__)


def create_athlete(session: Session, name: str) -> Athlete:
    name = name.strip()
    if not name:
        raise ValueError("Athlete name must not be empty")

    athlete = Athlete(name=name)
    session.add(athlete)
    session.commit()
    logger.info(f"Created athlete {athlete.id} ({athlete.name})")
    return athlete


def get_athlete(session: Session, athlete_id: int) -> Athlete:
    athlete = session.get(Athlete, athlete_id)
    if athlete is None:
        raise AthleteNotFoundError(f"Athlete {athlete_id} not found")
    return athlete


def list_athletes(session: Session) -> list[Athlete]:
    return list(session.scalars(select(Athlete).order_by(Athlete.name)))


def delete_athlete(session: Session, athlete: Athlete) -> dict[str, int]:
    """Delete an athlete together with everything they own.

    Records are found through both sides of the relation (back-reference and
    forward collection), so orphaned records are removed as well. A record
    that is listed by this athlete but points at another one is kept.

    Returns:
        Number of deleted rows per record kind, plus "season"
    """
    counts: dict[str, int] = {}
    try:
        for kind in RECORD_KINDS:
            records = {r.id: r for r in owned_records(session, athlete, kind)}
            for record in kind.forward_collection(athlete):
                # Listed here but owned by someone else: leave it to them
                if record.athlete_id in (None, athlete.id):
                    records.setdefault(record.id, record)
            for record in records.values():
                session.delete(record)
            counts[kind.name] = len(records)

        seasons = list(session.scalars(select(Season).where(Season.athlete_id == athlete.id)))
        for season in seasons:
            session.delete(season)
        counts["season"] = len(seasons)

        session.delete(athlete)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception(f"Failed to delete athlete {athlete.id}")
        raise

    logger.info(f"Deleted athlete {athlete.id}: {counts}")
    return counts
