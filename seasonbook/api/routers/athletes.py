"""
Athlete, season and maintenance API endpoints.

Every route gets a session through Depends(get_db) and hands it to the same
services the CLI uses; the services commit their own work. Engine errors are
translated into HTTP errors:

- AthleteNotFoundError / SeasonNotFoundError -> 404
- InvariantViolationError                     -> 409
- MigrationCancelledError                     -> 409
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ...athletes import create_athlete, get_athlete, list_athletes
from ...database.connection import get_db
from ...database.models import Game, Season
from ...exceptions import (
    AthleteNotFoundError,
    InvariantViolationError,
    MigrationCancelledError,
    SeasonNotFoundError,
)
from ...export import export_athlete_statistics_csv, export_game_log_csv
from ...games import GameService
from ...migration import SeasonMigrator
from ...repair import ConsistencyRepairer
from ...seasons.lifecycle import SeasonLifecycle
from ...stats.aggregator import ensure_statistics
from ..schemas import (
    AggregateStatisticsResponse,
    AthleteCreate,
    AthleteResponse,
    BattingLineResponse,
    GameCreate,
    GameEndResponse,
    GameResponse,
    ManualStatisticsCreate,
    MigrationResponse,
    RepairResponse,
    SeasonCreate,
    SeasonResponse,
    SeasonStatusResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _athlete_or_404(db: Session, athlete_id: int):
    try:
        return get_athlete(db, athlete_id)
    except AthleteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


def _game_or_404(db: Session, athlete_id: int, game_id: int) -> Game:
    game = db.get(Game, game_id)
    if game is None or game.athlete_id != athlete_id:
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
    return game


def _season_or_404(db: Session, athlete_id: int, season_id: int) -> Season:
    season = db.get(Season, season_id)
    if season is None or season.athlete_id != athlete_id:
        raise HTTPException(status_code=404, detail=f"Season {season_id} not found")
    return season


# ========== ATHLETE ENDPOINTS ==========


@router.get("", response_model=list[AthleteResponse])
async def get_athletes(db: Session = Depends(get_db)):
    return list_athletes(db)


@router.post("", response_model=AthleteResponse, status_code=201)
async def post_athlete(payload: AthleteCreate, db: Session = Depends(get_db)):
    try:
        return create_athlete(db, payload.name)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.get("/{athlete_id}/statistics", response_model=AggregateStatisticsResponse)
async def get_statistics(athlete_id: int, db: Session = Depends(get_db)):
    """Cumulative career statistics (all zeros before the first game ends)."""
    athlete = _athlete_or_404(db, athlete_id)
    if athlete.statistics is None:
        ensure_statistics(athlete)
        db.commit()
    return athlete.statistics


# ========== SEASON ENDPOINTS ==========


@router.get("/{athlete_id}/seasons", response_model=list[SeasonResponse])
async def get_seasons(athlete_id: int, db: Session = Depends(get_db)):
    athlete = _athlete_or_404(db, athlete_id)
    return sorted(athlete.seasons, key=lambda s: s.start_date, reverse=True)


@router.get("/{athlete_id}/seasons/status", response_model=SeasonStatusResponse)
async def get_season_status(athlete_id: int, db: Session = Depends(get_db)):
    athlete = _athlete_or_404(db, athlete_id)
    status = SeasonLifecycle(db).check_season_status(athlete)
    return SeasonStatusResponse(
        recommendation=status.recommendation.value,
        message=status.message,
        season=SeasonResponse.model_validate(status.season) if status.season else None,
    )


@router.post("/{athlete_id}/seasons", response_model=SeasonResponse, status_code=201)
async def post_season(athlete_id: int, payload: SeasonCreate, db: Session = Depends(get_db)):
    """
    Create a season.

    With make_active (the default) the current season is archived first and
    its statistics snapshot is written.
    """
    athlete = _athlete_or_404(db, athlete_id)
    try:
        return SeasonLifecycle(db).create_season(
            athlete,
            payload.name,
            sport=payload.sport.value if payload.sport else None,
            start_date=payload.start_date,
            make_active=payload.make_active,
            notes=payload.notes,
        )
    except InvariantViolationError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.post("/{athlete_id}/seasons/{season_id}/archive", response_model=SeasonResponse)
async def archive_season(athlete_id: int, season_id: int, db: Session = Depends(get_db)):
    season = _season_or_404(db, athlete_id, season_id)
    return SeasonLifecycle(db).archive(season)


@router.post("/{athlete_id}/seasons/{season_id}/reactivate", response_model=SeasonResponse)
async def reactivate_season(athlete_id: int, season_id: int, db: Session = Depends(get_db)):
    season = _season_or_404(db, athlete_id, season_id)
    try:
        return SeasonLifecycle(db).reactivate(season)
    except InvariantViolationError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.delete("/{athlete_id}/seasons/{season_id}")
async def delete_season(
    athlete_id: int,
    season_id: int,
    reassign_to: int | None = Query(None, description="Season that receives the records"),
    db: Session = Depends(get_db),
):
    season = _season_or_404(db, athlete_id, season_id)
    target = _season_or_404(db, athlete_id, reassign_to) if reassign_to is not None else None
    try:
        moved = SeasonLifecycle(db).delete_season(season, reassign_to=target)
    except (InvariantViolationError, SeasonNotFoundError) as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return {"deleted": season_id, "records_moved": moved}


# ========== GAME ENDPOINTS ==========


@router.post("/{athlete_id}/games", response_model=GameResponse, status_code=201)
async def post_game(athlete_id: int, payload: GameCreate, db: Session = Depends(get_db)):
    """Create a game and link it to the athlete's active season."""
    athlete = _athlete_or_404(db, athlete_id)
    game = GameService(db).create_game(
        athlete, payload.opponent, payload.date, is_live=payload.is_live
    )
    if game is None:
        raise HTTPException(
            status_code=409,
            detail=f"A game against {payload.opponent} on {payload.date:%Y-%m-%d} already exists",
        )
    return game


@router.post("/{athlete_id}/games/{game_id}/end", response_model=GameEndResponse)
async def end_game(athlete_id: int, game_id: int, db: Session = Depends(get_db)):
    """End a game; its statistics are folded into the career totals exactly once."""
    game = _game_or_404(db, athlete_id, game_id)
    aggregated = GameService(db).end(game)
    return GameEndResponse(game=GameResponse.model_validate(game), aggregated=aggregated)


@router.post("/{athlete_id}/games/{game_id}/statistics", response_model=BattingLineResponse)
async def add_game_statistics(
    athlete_id: int, game_id: int, payload: ManualStatisticsCreate, db: Session = Depends(get_db)
):
    """Add hand-entered totals to a game; ended games update the career totals as well."""
    game = _game_or_404(db, athlete_id, game_id)
    return GameService(db).add_manual_statistics(game, **payload.model_dump())


@router.post("/{athlete_id}/games/{game_id}/rebuild", response_model=BattingLineResponse)
async def rebuild_game_statistics(athlete_id: int, game_id: int, db: Session = Depends(get_db)):
    """Rebuild a game line from the play results of its clips."""
    game = _game_or_404(db, athlete_id, game_id)
    return GameService(db).rebuild_line_from_clips(game)


# ========== MAINTENANCE ENDPOINTS ==========


@router.post("/{athlete_id}/migrate", response_model=MigrationResponse)
async def migrate_athlete(athlete_id: int, db: Session = Depends(get_db)):
    """Infer seasons for records created before seasons existed. No-op when not needed."""
    athlete = _athlete_or_404(db, athlete_id)
    try:
        result = SeasonMigrator(db).migrate(athlete)
    except MigrationCancelledError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return MigrationResponse.model_validate(result)


@router.post("/{athlete_id}/repair", response_model=RepairResponse)
async def repair_athlete(athlete_id: int, db: Session = Depends(get_db)):
    athlete = _athlete_or_404(db, athlete_id)
    return RepairResponse.model_validate(ConsistencyRepairer(db).repair(athlete))


@router.get("/{athlete_id}/export", response_class=PlainTextResponse)
async def export_csv(
    athlete_id: int,
    game_log: bool = Query(False, description="Export the game log instead of career stats"),
    season_id: int | None = Query(None, description="Only games of this season"),
    db: Session = Depends(get_db),
):
    athlete = _athlete_or_404(db, athlete_id)
    if game_log or season_id is not None:
        season = _season_or_404(db, athlete_id, season_id) if season_id is not None else None
        csv = export_game_log_csv(athlete, season=season)
    else:
        csv = export_athlete_statistics_csv(athlete)
    return PlainTextResponse(csv, media_type="text/csv")
