"""Half-year season naming.

Dates are bucketed into two halves of the calendar year:

    months 1 .. fall_start_month - 1  -> "Spring <year>"
    months fall_start_month .. 12     -> "Fall <year>"

fall_start_month defaults to 7 (settings.fall_start_month). A date that falls
on the first day of a half belongs to the half that starts on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from ..config.settings import settings

SPRING = "Spring"
FALL = "Fall"


class SportType(str, Enum):
    """Sports a season can be tracked for."""

    BASEBALL = "baseball"
    SOFTBALL = "softball"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True, order=True)
class SeasonKey:
    """Sortable (year, half) bucket. half is 0 for Spring and 1 for Fall."""

    year: int
    half: int

    @property
    def half_name(self) -> str:
        return FALL if self.half else SPRING

    @property
    def label(self) -> str:
        return f"{self.half_name} {self.year}"


def season_key(moment: date | datetime, fall_start_month: int | None = None) -> SeasonKey:
    """Bucket a date into its half-year."""
    fall_start = fall_start_month or settings.fall_start_month
    return SeasonKey(year=moment.year, half=1 if moment.month >= fall_start else 0)


def half_year_label(moment: date | datetime, fall_start_month: int | None = None) -> str:
    """Display name of the half-year a date falls in, e.g. "Fall 2026"."""
    return season_key(moment, fall_start_month).label


def is_bucket_boundary(moment: date | datetime, fall_start_month: int | None = None) -> bool:
    """True when the date is the first day of a half-year."""
    fall_start = fall_start_month or settings.fall_start_month
    return moment.day == 1 and moment.month in (1, fall_start)
