"""
Pydantic schemas for API request/response models.

Response schemas are built straight from SQLAlchemy ORM objects
(from_attributes=True); request schemas validate what clients send before
any season transition runs.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..seasons.naming import SportType

# ========== ATHLETE SCHEMAS ==========


class AthleteCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class AthleteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    seasons_migrated_at: datetime | None = None
    created_at: datetime | None = None


# ========== STATISTICS SCHEMAS ==========


class BattingLineResponse(BaseModel):
    """Counting stats shared by every statistics row."""

    model_config = ConfigDict(from_attributes=True)

    at_bats: int
    hits: int
    singles: int
    doubles: int
    triples: int
    home_runs: int
    runs: int
    rbis: int
    walks: int
    strikeouts: int


class AggregateStatisticsResponse(BattingLineResponse):
    """
    Cumulative or season statistics with stored rates.

    Rates are plain floats; a zero denominator is reported as 0.0.
    """

    ground_outs: int
    fly_outs: int
    total_games: int
    batting_average: float
    on_base_percentage: float
    slugging_percentage: float
    ops: float


# ========== SEASON SCHEMAS ==========


class SeasonCreate(BaseModel):
    """
    Request body for creating a season.

    make_active=True ends the current season; False stores the new season
    as archived unless the athlete has no active season yet.
    """

    name: str = Field(..., min_length=1, max_length=100)
    sport: SportType | None = None
    start_date: datetime | None = None
    make_active: bool = True
    notes: str = ""


class SeasonResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    athlete_id: int
    name: str
    sport: str
    start_date: datetime
    end_date: datetime | None = None
    is_active: bool
    inferred: bool
    notes: str
    total_games: int
    statistics: AggregateStatisticsResponse | None = None  # Snapshot from the last archive


class SeasonStatusResponse(BaseModel):
    recommendation: str
    message: str | None = None
    season: SeasonResponse | None = None


# ========== GAME SCHEMAS ==========


class GameCreate(BaseModel):
    opponent: str = Field(..., min_length=1, max_length=100)
    date: datetime
    is_live: bool = False


class GameResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    athlete_id: int | None = None
    season_id: int | None = None
    opponent: str
    date: datetime | None = None
    is_live: bool
    is_complete: bool
    aggregated_at: datetime | None = None
    statistics: BattingLineResponse | None = None


class ManualStatisticsCreate(BaseModel):
    """Hand-entered totals for one game; hits and at-bats are derived."""

    singles: int = Field(0, ge=0)
    doubles: int = Field(0, ge=0)
    triples: int = Field(0, ge=0)
    home_runs: int = Field(0, ge=0)
    runs: int = Field(0, ge=0)
    rbis: int = Field(0, ge=0)
    strikeouts: int = Field(0, ge=0)
    walks: int = Field(0, ge=0)


class GameEndResponse(BaseModel):
    game: GameResponse
    aggregated: bool  # False when the game had already been counted


# ========== MAINTENANCE SCHEMAS ==========


class MigrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    athlete_id: int
    skipped: bool
    seasons_created: int
    records_linked: int
    season_names: list[str]


class RepairResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    athlete_id: int
    orphaned: int
    misattributed: int
    duplicates: int
    total: int
    by_kind: dict[str, int]
