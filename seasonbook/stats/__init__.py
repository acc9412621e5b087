"""Statistics aggregation."""

from .aggregator import (
    StatisticsService,
    batting_average,
    claim_game_for_aggregation,
    compute_snapshot,
    ensure_statistics,
    fold_game_into_cumulative,
    on_base_percentage,
    refresh_rates,
    slugging_percentage,
)
from .play_results import PlayResultType, add_manual_statistic, apply_play_result

__all__ = [
    "PlayResultType",
    "StatisticsService",
    "add_manual_statistic",
    "apply_play_result",
    "batting_average",
    "claim_game_for_aggregation",
    "compute_snapshot",
    "ensure_statistics",
    "fold_game_into_cumulative",
    "on_base_percentage",
    "refresh_rates",
    "slugging_percentage",
]
