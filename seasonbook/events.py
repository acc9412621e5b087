"""Notifications emitted by the season engine.

Services do not broadcast on a global bus. Each service is handed an
EventChannel and publishes to it after its database commit, so a subscriber
never observes uncommitted state. Handlers run synchronously in publish
order, which keeps the order of events for any one athlete intact.

Typical subscribers are UI refresh hooks and observability (logging, metrics).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineEvent:
    athlete_id: int
    occurred_at: datetime = field(default_factory=datetime.now, compare=False)


@dataclass(frozen=True)
class SeasonActivated(EngineEvent):
    season_id: int = 0
    season_name: str = ""


@dataclass(frozen=True)
class SeasonArchived(EngineEvent):
    season_id: int = 0
    season_name: str = ""


@dataclass(frozen=True)
class StatisticsUpdated(EngineEvent):
    game_id: int | None = None


@dataclass(frozen=True)
class MigrationCompleted(EngineEvent):
    seasons_created: int = 0
    records_linked: int = 0


@dataclass(frozen=True)
class ConsistencyRepaired(EngineEvent):
    repaired_count: int = 0


EventHandler = Callable[[EngineEvent], None]


class EventChannel:
    """In-process, ordered channel from the engine to its observers."""

    def __init__(self, keep_history: bool = True):
        self._handlers: list[EventHandler] = []
        self._history: list[EngineEvent] = []
        self._keep_history = keep_history

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """Register a handler. Returns a function that removes it again."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: EngineEvent) -> None:
        """Deliver an event to every handler in subscription order.

        A failing handler is logged and skipped; the operation that produced
        the event has already been committed and is not affected.
        """
        if self._keep_history:
            self._history.append(event)
        logger.debug(f"Publishing {type(event).__name__} for athlete {event.athlete_id}")
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Event handler failed for {type(event).__name__}")

    def history(self, athlete_id: int | None = None) -> list[EngineEvent]:
        """Events published so far, optionally for one athlete, in order."""
        if athlete_id is None:
            return list(self._history)
        return [event for event in self._history if event.athlete_id == athlete_id]

    def clear(self) -> None:
        self._history.clear()
