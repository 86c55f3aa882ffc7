"""Race events: prioritized, time-delayed publish/subscribe."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of simulation events."""

    WEATHER_CHANGE = "weather_change"
    BREAKDOWN = "breakdown"
    OBSTACLE_APPEAR = "obstacle_appear"
    OVERTAKE_ATTEMPT = "overtake_attempt"
    BATTERY_LOW = "battery_low"
    PIT_STOP = "pit_stop"
    COLLISION = "collision"


class EventPriority(str, Enum):
    """Delivery priority (critical first)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Numeric rank, higher is delivered first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    EventPriority.LOW: 1,
    EventPriority.MEDIUM: 2,
    EventPriority.HIGH: 3,
    EventPriority.CRITICAL: 4,
}


@dataclass(frozen=True)
class SimulationEvent:
    """A queued occurrence waiting for delivery."""

    id: str
    type: EventType
    timestamp: float
    payload: dict[str, Any] = field(default_factory=dict)
    target_vehicle_id: int | None = None
    priority: EventPriority = EventPriority.MEDIUM
    sequence: int = 0

    def sort_key(self) -> tuple[int, float, int]:
        """Priority descending, then timestamp, then emission order."""
        return (-self.priority.rank, self.timestamp, self.sequence)


EventHandler = Callable[[SimulationEvent], None]


class EventManager:
    """Owns the event queue and its subscribers.

    Timestamps are logical simulation seconds; the owner moves the clock with
    ``advance_to``. Events emitted from inside a handler are held back and
    queued once the current ``process`` call returns.
    """

    def __init__(self):
        """Initialize an empty event manager."""
        self._queue: list[SimulationEvent] = []
        self._deferred: list[SimulationEvent] = []
        self._subscribers: dict[EventType, list[EventHandler]] = {}
        self._next_id = 0
        self._processing = False
        self.now = 0.0

    def advance_to(self, now: float) -> None:
        """Move the logical clock."""
        self.now = now

    def subscribe(self, event_type: EventType, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for an event type.

        Returns:
            Function that removes the handler again
        """
        handlers = self._subscribers.setdefault(event_type, [])
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(
        self,
        event_type: EventType,
        payload: dict[str, Any] | None = None,
        target_vehicle_id: int | None = None,
        priority: EventPriority = EventPriority.MEDIUM,
        delay: float = 0.0,
    ) -> SimulationEvent:
        """Queue an event for delivery at now + delay.

        Args:
            event_type: Event type
            payload: Event data
            target_vehicle_id: Vehicle the event concerns, if any
            priority: Delivery priority
            delay: Seconds until the event becomes due

        Returns:
            The queued event
        """
        event = SimulationEvent(
            id=f"event_{self._next_id}",
            type=event_type,
            timestamp=self.now + max(0.0, delay),
            payload=dict(payload or {}),
            target_vehicle_id=target_vehicle_id,
            priority=priority,
            sequence=self._next_id,
        )
        self._next_id += 1

        if self._processing:
            self._deferred.append(event)
        else:
            self._enqueue([event])
        return event

    def process(self) -> list[SimulationEvent]:
        """Deliver every due event in priority order.

        A failing handler is logged and skipped; the event still counts as
        delivered and the remaining handlers and events still run.

        Returns:
            Events delivered by this call
        """
        if self._processing:
            return []

        self._processing = True
        try:
            due = [event for event in self._queue if event.timestamp <= self.now]
            for event in due:
                self._dispatch(event)
            delivered = {event.id for event in due}
            self._queue = [event for event in self._queue if event.id not in delivered]
        finally:
            self._processing = False
            deferred, self._deferred = self._deferred, []
            if deferred:
                self._enqueue(deferred)

        return due

    def _dispatch(self, event: SimulationEvent) -> None:
        for handler in list(self._subscribers.get(event.type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler failed while processing %s (%s)", event.id, event.type.value)

    def _enqueue(self, events: list[SimulationEvent]) -> None:
        self._queue.extend(events)
        self._queue.sort(key=SimulationEvent.sort_key)

    def pending(self) -> list[SimulationEvent]:
        """Queued events in delivery order."""
        return list(self._queue)

    @property
    def queue_count(self) -> int:
        """Number of queued events."""
        return len(self._queue)

    def clear(self) -> None:
        """Drop all queued events."""
        self._queue = []
        self._deferred = []

    def reset(self) -> None:
        """Clear the queue and rewind the clock for a new race."""
        self.clear()
        self.now = 0.0

    def events_for_vehicle(self, vehicle_id: int) -> list[SimulationEvent]:
        """Queued events that target a vehicle or no vehicle in particular."""
        return [
            event for event in self._queue
            if event.target_vehicle_id is None or event.target_vehicle_id == vehicle_id
        ]

    def emit_weather_change(self, weather: dict[str, Any]) -> SimulationEvent:
        """Announce a weather change."""
        return self.emit(EventType.WEATHER_CHANGE, weather, priority=EventPriority.HIGH)

    def emit_breakdown(self, vehicle_id: int, severity: float) -> SimulationEvent:
        """Announce a mechanical breakdown."""
        return self.emit(
            EventType.BREAKDOWN,
            {"severity": severity},
            target_vehicle_id=vehicle_id,
            priority=EventPriority.CRITICAL,
        )

    def emit_obstacle_appear(self, segment_index: int, obstacle_type: str) -> SimulationEvent:
        """Announce an obstacle on a track segment."""
        return self.emit(
            EventType.OBSTACLE_APPEAR,
            {"segment_index": segment_index, "obstacle_type": obstacle_type},
            priority=EventPriority.MEDIUM,
        )

    def emit_overtake_attempt(self, attacker_id: int, defender_id: int | None) -> SimulationEvent:
        """Announce an overtaking attempt."""
        return self.emit(
            EventType.OVERTAKE_ATTEMPT,
            {"attacker_id": attacker_id, "defender_id": defender_id},
            target_vehicle_id=attacker_id,
            priority=EventPriority.HIGH,
        )

    def emit_battery_low(self, vehicle_id: int, level: float) -> SimulationEvent:
        """Announce a low energy level."""
        return self.emit(
            EventType.BATTERY_LOW,
            {"level": level},
            target_vehicle_id=vehicle_id,
            priority=EventPriority.MEDIUM,
        )

    def emit_pit_stop(self, vehicle_id: int, reason: str) -> SimulationEvent:
        """Announce a pit entry."""
        return self.emit(
            EventType.PIT_STOP,
            {"reason": reason},
            target_vehicle_id=vehicle_id,
            priority=EventPriority.MEDIUM,
        )

    def emit_collision(self, vehicle_id: int, other_id: int, severity: float) -> SimulationEvent:
        """Announce a collision between two vehicles."""
        return self.emit(
            EventType.COLLISION,
            {"other_id": other_id, "severity": severity},
            target_vehicle_id=vehicle_id,
            priority=EventPriority.CRITICAL,
        )
