"""Plate appearance outcomes and how they change a batting line."""

from __future__ import annotations

from enum import Enum


class PlayResultType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    HOME_RUN = "home_run"
    WALK = "walk"
    STRIKEOUT = "strikeout"
    GROUND_OUT = "ground_out"
    FLY_OUT = "fly_out"

    @property
    def is_hit(self) -> bool:
        return self in _HIT_FIELDS

    @property
    def bases(self) -> int:
        return _BASES.get(self, 0)

    @property
    def counts_as_at_bat(self) -> bool:
        # A walk is a plate appearance but not an at-bat
        return self is not PlayResultType.WALK

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def parse(cls, raw: str) -> PlayResultType:
        """Accept the stored value plus a few common spellings ("HR", "homeRun")."""
        key = raw.strip().lower().replace(" ", "_")
        key = _ALIASES.get(key, key)
        return cls(key)


_HIT_FIELDS = {
    PlayResultType.SINGLE: "singles",
    PlayResultType.DOUBLE: "doubles",
    PlayResultType.TRIPLE: "triples",
    PlayResultType.HOME_RUN: "home_runs",
}

_BASES = {
    PlayResultType.SINGLE: 1,
    PlayResultType.DOUBLE: 2,
    PlayResultType.TRIPLE: 3,
    PlayResultType.HOME_RUN: 4,
}

_ALIASES = {"hr": "home_run", "homerun": "home_run", "bb": "walk", "k": "strikeout"}


def apply_play_result(stats, result: PlayResultType) -> None:
    """Add one plate appearance to a statistics row.

    Ground outs and fly outs are only counted separately on rows that track
    them (athlete and season aggregates); on a game line they are just at-bats.
    """
    if result.counts_as_at_bat:
        stats.at_bats += 1

    if result.is_hit:
        stats.hits += 1
        field = _HIT_FIELDS[result]
        setattr(stats, field, getattr(stats, field) + 1)
    elif result is PlayResultType.WALK:
        stats.walks += 1
    elif result is PlayResultType.STRIKEOUT:
        stats.strikeouts += 1
    elif result is PlayResultType.GROUND_OUT and hasattr(stats, "ground_outs"):
        stats.ground_outs += 1
    elif result is PlayResultType.FLY_OUT and hasattr(stats, "fly_outs"):
        stats.fly_outs += 1


def add_manual_statistic(
    stats,
    singles: int = 0,
    doubles: int = 0,
    triples: int = 0,
    home_runs: int = 0,
    runs: int = 0,
    rbis: int = 0,
    strikeouts: int = 0,
    walks: int = 0,
) -> None:
    """Add hand-entered totals to a statistics row.

    Hits and at-bats are derived: every hit and every strikeout is an at-bat.
    """
    hits = singles + doubles + triples + home_runs

    stats.singles += singles
    stats.doubles += doubles
    stats.triples += triples
    stats.home_runs += home_runs
    stats.hits += hits
    stats.at_bats += hits + strikeouts
    stats.runs += runs
    stats.rbis += rbis
    stats.strikeouts += strikeouts
    stats.walks += walks
