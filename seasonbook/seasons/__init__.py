"""Season lifecycle and naming."""

from .lifecycle import (
    HasActiveSeason,
    NeedsSeason,
    SeasonLifecycle,
    SeasonRecommendation,
    SeasonStatus,
    format_rate,
)
from .naming import SeasonKey, SportType, half_year_label, is_bucket_boundary, season_key

__all__ = [
    "HasActiveSeason",
    "NeedsSeason",
    "SeasonKey",
    "SeasonLifecycle",
    "SeasonRecommendation",
    "SeasonStatus",
    "SportType",
    "format_rate",
    "half_year_label",
    "is_bucket_boundary",
    "season_key",
]
