"""Database package initialization."""

from .connection import SessionLocal, engine, get_db, get_session, get_session_context
from .models import (
    Athlete,
    AthleteStatistics,
    Base,
    Game,
    GameStatistics,
    Practice,
    Season,
    SeasonStatistics,
    Tournament,
    VideoClip,
)

__all__ = [
    "Athlete",
    "AthleteStatistics",
    "Base",
    "Game",
    "GameStatistics",
    "Practice",
    "Season",
    "SeasonStatistics",
    "SessionLocal",
    "Tournament",
    "VideoClip",
    "engine",
    "get_db",
    "get_session",
    "get_session_context",
]
