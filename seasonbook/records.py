"""Registry of activity record kinds.

Games, practices, video clips and tournaments behave the same way as far as
seasons are concerned: each belongs to one athlete, optionally links to one
season, and carries a date. The only difference is which forward collection
on Athlete lists them. RecordKind captures that difference so linking,
migration and repair can treat all four kinds uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from .database.models import Athlete, Game, Practice, Tournament, VideoClip


@dataclass(frozen=True)
class RecordKind:
    name: str
    model: type
    forward_attr: str  # Attribute on Athlete holding the forward collection

    def forward_collection(self, athlete: Athlete) -> list:
        return getattr(athlete, self.forward_attr)


GAME = RecordKind("game", Game, "games")
PRACTICE = RecordKind("practice", Practice, "practices")
VIDEO_CLIP = RecordKind("video_clip", VideoClip, "video_clips")
TOURNAMENT = RecordKind("tournament", Tournament, "tournaments")

RECORD_KINDS = (GAME, PRACTICE, VIDEO_CLIP, TOURNAMENT)

_BY_MODEL = {kind.model: kind for kind in RECORD_KINDS}


def kind_of(record) -> RecordKind:
    """Look up the kind of a record instance."""
    try:
        return _BY_MODEL[type(record)]
    except KeyError:
        raise TypeError(f"Not an activity record: {type(record).__name__}") from None


def owned_records(session: Session, athlete: Athlete, kind: RecordKind) -> list:
    """Records of one kind whose back-reference points at the athlete."""
    session.flush()
    model = kind.model
    return list(
        session.scalars(select(model).where(model.athlete_id == athlete.id).order_by(model.id))
    )


def unlinked_records(session: Session, athlete: Athlete) -> list:
    """All of the athlete's records without a season, oldest first.

    Records without a date sort last.
    """
    session.flush()
    records = []
    for kind in RECORD_KINDS:
        model = kind.model
        records.extend(
            session.scalars(
                select(model).where(model.athlete_id == athlete.id, model.season_id.is_(None))
            )
        )
    return sorted(records, key=_date_sort_key)


def has_unlinked_records(session: Session, athlete: Athlete) -> bool:
    session.flush()
    for kind in RECORD_KINDS:
        model = kind.model
        found = session.scalar(
            select(model.id)
            .where(model.athlete_id == athlete.id, model.season_id.is_(None))
            .limit(1)
        )
        if found is not None:
            return True
    return False


def _date_sort_key(record) -> tuple[bool, datetime, str, int]:
    return (record.date is None, record.date or datetime.min, kind_of(record).name, record.id)
