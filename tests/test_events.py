"""Tests for the engine's event channel."""

from seasonbook.events import (
    ConsistencyRepaired,
    EventChannel,
    SeasonActivated,
    SeasonArchived,
    StatisticsUpdated,
)


def test_handlers_receive_events_in_order():
    channel = EventChannel()
    received = []
    channel.subscribe(received.append)

    channel.publish(SeasonArchived(athlete_id=1, season_id=1, season_name="Spring 2026"))
    channel.publish(SeasonActivated(athlete_id=1, season_id=2, season_name="Fall 2026"))

    assert [type(e) for e in received] == [SeasonArchived, SeasonActivated]


def test_failing_handler_does_not_stop_others():
    channel = EventChannel()
    received = []

    def broken(event):
        raise RuntimeError("observer bug")

    channel.subscribe(broken)
    channel.subscribe(received.append)

    channel.publish(StatisticsUpdated(athlete_id=1, game_id=7))

    assert received == [StatisticsUpdated(athlete_id=1, game_id=7)]


def test_unsubscribe():
    channel = EventChannel()
    received = []
    unsubscribe = channel.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    channel.publish(ConsistencyRepaired(athlete_id=1, repaired_count=2))

    assert received == []


def test_history_is_kept_per_athlete():
    channel = EventChannel()
    channel.publish(StatisticsUpdated(athlete_id=1))
    channel.publish(StatisticsUpdated(athlete_id=2))
    channel.publish(ConsistencyRepaired(athlete_id=1, repaired_count=3))

    assert [type(e) for e in channel.history(1)] == [StatisticsUpdated, ConsistencyRepaired]
    assert len(channel.history()) == 3

    channel.clear()
    assert channel.history() == []


def test_history_can_be_disabled():
    channel = EventChannel(keep_history=False)
    channel.publish(StatisticsUpdated(athlete_id=1))

    assert channel.history() == []
