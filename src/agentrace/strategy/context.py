"""Race context handed to decision policies."""

import math
from dataclasses import dataclass, field

from agentrace.models import TrackSegment, Vehicle, Weather


@dataclass(frozen=True)
class NeighborInfo:
    """Another vehicle as seen from the deciding vehicle."""

    vehicle_id: int
    speed: float
    gap: float  # meters along the track
    laps: int = 0


@dataclass(frozen=True)
class Surroundings:
    """Vehicles around the deciding vehicle, nearest first."""

    ahead: tuple[NeighborInfo, ...] = ()
    behind: tuple[NeighborInfo, ...] = ()
    nearby: tuple[NeighborInfo, ...] = ()

    @property
    def distance_to_next(self) -> float:
        """Gap to the nearest car ahead (inf if none)."""
        return self.ahead[0].gap if self.ahead else math.inf

    @property
    def distance_to_previous(self) -> float:
        """Gap to the nearest car behind (inf if none)."""
        return self.behind[0].gap if self.behind else math.inf


@dataclass(frozen=True)
class RaceProgress:
    """Where the race stands for the deciding vehicle."""

    current_lap: int
    total_laps: int
    elapsed_time: float = 0.0

    @property
    def laps_remaining(self) -> int:
        """Laps left for this vehicle."""
        return max(0, self.total_laps - self.current_lap)


@dataclass(frozen=True)
class Hazard:
    """An obstacle detected on an upcoming segment."""

    type: str
    segment_index: int
    distance: int  # segments away


@dataclass(frozen=True)
class DecisionContext:
    """Everything a policy may look at to decide."""

    vehicle: Vehicle
    segment: TrackSegment
    weather: Weather
    progress: RaceProgress
    surroundings: Surroundings = field(default_factory=Surroundings)
    hazards: tuple[Hazard, ...] = ()

    @property
    def energy_level(self) -> float:
        """Energy level of the deciding vehicle."""
        return self.vehicle.energy.level

    @property
    def tire_wear(self) -> float:
        """Tire wear of the deciding vehicle."""
        return self.vehicle.tire_wear
