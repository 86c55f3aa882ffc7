"""Read-only race state handed to the state callback after every tick."""

from dataclasses import dataclass
from typing import Any

from agentrace.models import Vehicle, Weather
from agentrace.simulation.events import SimulationEvent


@dataclass(frozen=True)
class VehicleSnapshot:
    """Per-vehicle summary at the end of a tick."""

    id: int
    name: str
    position: tuple[float, float]
    heading: float
    speed: float
    current_segment: int
    segment_progress: float
    distance: float
    laps: int
    race_position: int
    energy_level: float
    tire_wear: float
    in_pit: bool
    overtakes: int
    positions_lost: int
    hazards_triggered: int
    lap_times: tuple[float, ...]

    @classmethod
    def from_vehicle(cls, vehicle: Vehicle, race_position: int) -> "VehicleSnapshot":
        return cls(
            id=vehicle.id,
            name=vehicle.name,
            position=tuple(vehicle.position),
            heading=vehicle.heading,
            speed=vehicle.speed,
            current_segment=vehicle.current_segment,
            segment_progress=vehicle.segment_progress,
            distance=vehicle.distance,
            laps=vehicle.laps,
            race_position=race_position,
            energy_level=vehicle.energy.level,
            tire_wear=vehicle.tire_wear,
            in_pit=vehicle.in_pit,
            overtakes=vehicle.overtakes,
            positions_lost=vehicle.positions_lost,
            hazards_triggered=vehicle.hazards_triggered,
            lap_times=tuple(vehicle.lap_times),
        )

    @property
    def best_lap(self) -> float | None:
        return min(self.lap_times) if self.lap_times else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "position": list(self.position),
            "heading": self.heading,
            "speed": self.speed,
            "current_segment": self.current_segment,
            "segment_progress": self.segment_progress,
            "distance": self.distance,
            "laps": self.laps,
            "race_position": self.race_position,
            "energy_level": self.energy_level,
            "tire_wear": self.tire_wear,
            "in_pit": self.in_pit,
            "overtakes": self.overtakes,
            "positions_lost": self.positions_lost,
            "hazards_triggered": self.hazards_triggered,
            "lap_times": list(self.lap_times),
        }


@dataclass(frozen=True)
class EventSummary:
    """A queued event as shown in a snapshot."""

    id: str
    type: str
    timestamp: float
    priority: str
    target_vehicle_id: int | None = None

    @classmethod
    def from_event(cls, event: SimulationEvent) -> "EventSummary":
        return cls(
            id=event.id,
            type=event.type.value,
            timestamp=event.timestamp,
            priority=event.priority.value,
            target_vehicle_id=event.target_vehicle_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "timestamp": self.timestamp,
            "priority": self.priority,
            "target_vehicle_id": self.target_vehicle_id,
        }


@dataclass(frozen=True)
class SimulationSnapshot:
    """Immutable projection of the whole race.

    Safe to keep across ticks: it holds copies and tuples only, never live
    simulation objects.
    """

    timestamp: float  # wall clock, seconds since the epoch
    elapsed_time: float  # simulation seconds
    status: str
    vehicles: tuple[VehicleSnapshot, ...]
    weather: Weather
    current_lap: int
    total_laps: int
    pending_events: tuple[EventSummary, ...] = ()

    @property
    def leader(self) -> VehicleSnapshot | None:
        """Vehicle in first place."""
        return min(self.vehicles, key=lambda v: v.race_position, default=None)

    def vehicle(self, vehicle_id: int) -> VehicleSnapshot | None:
        """Look up a vehicle by id."""
        return next((v for v in self.vehicles if v.id == vehicle_id), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-compatible primitives."""
        return {
            "timestamp": self.timestamp,
            "elapsed_time": self.elapsed_time,
            "status": self.status,
            "vehicles": [v.to_dict() for v in self.vehicles],
            "weather": self.weather.model_dump(mode="json"),
            "current_lap": self.current_lap,
            "total_laps": self.total_laps,
            "pending_events": [e.to_dict() for e in self.pending_events],
        }
