"""Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database. StaticPool keeps a single
connection alive so the schema survives across sessions, and the migration
runner's worker thread can use the same database.
"""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from seasonbook.athletes import create_athlete
from seasonbook.database.models import Base, Game, GameStatistics
from seasonbook.events import EventChannel
from seasonbook.games import GameService
from seasonbook.linking import LinkingService
from seasonbook.seasons.lifecycle import SeasonLifecycle

NOW = datetime(2026, 4, 15, 12, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def events():
    return EventChannel()


@pytest.fixture
def lifecycle(session, events):
    return SeasonLifecycle(session, events, clock=lambda: NOW)


@pytest.fixture
def linking(session, events, lifecycle):
    return LinkingService(session, events, lifecycle)


@pytest.fixture
def game_service(session, events, linking):
    return GameService(session, events, linking)


@pytest.fixture
def athlete(session):
    return create_athlete(session, "Jordan Reyes")


@pytest.fixture
def make_game(session):
    """Create a game that is NOT linked to any season.

    listed=False leaves it out of the athlete's forward collection, which is
    how drifted records look.
    """

    def _make_game(athlete, date, opponent="Tigers", listed=True, complete=True, **line):
        game = Game(athlete=athlete, date=date, opponent=opponent, is_complete=complete)
        game.statistics = GameStatistics(**line)
        session.add(game)
        if listed:
            athlete.games.append(game)
        session.commit()
        return game

    return _make_game
