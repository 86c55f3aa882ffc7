"""Tests for the event manager."""

import logging

from agentrace.simulation.events import EventManager, EventPriority, EventType


def test_events_delivered_by_priority_then_time() -> None:
    """Critical events must come first, then earlier timestamps."""
    manager = EventManager()
    manager.emit(EventType.PIT_STOP, {"n": 1}, priority=EventPriority.LOW)
    manager.emit(EventType.PIT_STOP, {"n": 2}, priority=EventPriority.CRITICAL, delay=0.5)
    manager.emit(EventType.PIT_STOP, {"n": 3}, priority=EventPriority.CRITICAL)
    manager.emit(EventType.PIT_STOP, {"n": 4}, priority=EventPriority.HIGH)

    received = []
    manager.subscribe(EventType.PIT_STOP, lambda event: received.append(event.payload["n"]))
    manager.advance_to(1.0)
    manager.process()

    assert received == [3, 2, 4, 1]


def test_delayed_events_wait_for_clock() -> None:
    """An event is not delivered before its timestamp."""
    manager = EventManager()
    received = []
    manager.subscribe(EventType.BREAKDOWN, received.append)
    manager.emit(EventType.BREAKDOWN, delay=2.0)

    manager.advance_to(1.0)
    assert manager.process() == []
    assert manager.queue_count == 1

    manager.advance_to(2.0)
    delivered = manager.process()
    assert len(delivered) == 1
    assert received == delivered
    assert manager.queue_count == 0


def test_failing_handler_is_isolated(caplog) -> None:
    """A raising handler must not stop other handlers or events."""
    manager = EventManager()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    manager.subscribe(EventType.COLLISION, broken)
    manager.subscribe(EventType.COLLISION, received.append)
    manager.emit_collision(1, 2, 0.5)
    manager.emit_collision(3, 4, 0.1)

    with caplog.at_level(logging.ERROR):
        delivered = manager.process()

    assert len(delivered) == 2
    assert len(received) == 2
    assert manager.queue_count == 0
    assert "Handler failed" in caplog.text


def test_emit_during_process_is_deferred() -> None:
    """Events emitted by a handler are queued after the current call."""
    manager = EventManager()
    seen = []

    def chain(event):
        seen.append(event.type)
        manager.emit_pit_stop(event.target_vehicle_id, "follow-up")

    manager.subscribe(EventType.BREAKDOWN, chain)
    manager.subscribe(EventType.PIT_STOP, lambda event: seen.append(event.type))
    manager.emit_breakdown(7, 0.3)

    manager.process()
    assert seen == [EventType.BREAKDOWN]
    assert manager.queue_count == 1

    manager.process()
    assert seen == [EventType.BREAKDOWN, EventType.PIT_STOP]


def test_unsubscribe_stops_delivery() -> None:
    """After unsubscribing, a handler receives nothing."""
    manager = EventManager()
    received = []
    unsubscribe = manager.subscribe(EventType.BATTERY_LOW, received.append)
    unsubscribe()
    manager.emit_battery_low(1, 0.1)
    manager.process()
    assert received == []


def test_convenience_emitters_use_expected_priorities() -> None:
    """Each convenience emitter must use its documented priority."""
    manager = EventManager()
    assert manager.emit_weather_change({"type": "rain"}).priority == EventPriority.HIGH
    assert manager.emit_breakdown(1, 0.2).priority == EventPriority.CRITICAL
    assert manager.emit_obstacle_appear(3, "debris").priority == EventPriority.MEDIUM
    assert manager.emit_overtake_attempt(1, 2).priority == EventPriority.HIGH
    assert manager.emit_battery_low(1, 0.1).priority == EventPriority.MEDIUM
    assert manager.emit_pit_stop(1, "scheduled").priority == EventPriority.MEDIUM
    assert manager.emit_collision(1, 2, 0.4).priority == EventPriority.CRITICAL


def test_events_for_vehicle_includes_global_events() -> None:
    """Vehicle filter must include untargeted events."""
    manager = EventManager()
    manager.emit_breakdown(1, 0.2)
    manager.emit_breakdown(2, 0.2)
    manager.emit_obstacle_appear(0, "debris")

    types = sorted(event.type.value for event in manager.events_for_vehicle(1))
    assert types == ["breakdown", "obstacle_appear"]


def test_event_ids_are_sequential() -> None:
    """Event ids follow emission order."""
    manager = EventManager()
    first = manager.emit(EventType.COLLISION)
    second = manager.emit(EventType.COLLISION)
    assert (first.id, second.id) == ("event_0", "event_1")


def test_reset_clears_queue_and_clock() -> None:
    """Reset must drop pending events and rewind time."""
    manager = EventManager()
    manager.advance_to(5.0)
    manager.emit_breakdown(1, 0.2)
    manager.reset()
    assert manager.queue_count == 0
    assert manager.now == 0.0
