"""Decision policy interface and shared strategy calculations."""

import math
from abc import ABC, abstractmethod

from agentrace.models import (
    EnergyMode,
    OvertakeIntent,
    PitIntent,
    SegmentType,
    StrategyDecision,
    TrackSegment,
    Vehicle,
    Weather,
    WeatherType,
)
from agentrace.strategy.context import DecisionContext, Surroundings

GRAVITY = 9.81  # m/s²
HAIRPIN_SPEED = 80.0  # km/h

# Overtaking window in meters
MIN_OVERTAKE_GAP = 2.0
MAX_OVERTAKE_GAP = 50.0
MIN_SPEED_ADVANTAGE = 5.0  # km/h
DEFEND_DISTANCE = 10.0


class DecisionPolicy(ABC):
    """Produces a control decision from race context.

    Subclasses implement ``decide``; the helpers below hold the strategy
    rules every policy shares. Agents validate whatever comes back, so a
    policy never needs to clamp its own output.
    """

    def __init__(self, base_risk: float = 0.5):
        """Initialize the policy.

        Args:
            base_risk: Risk tolerance of a fresh car in clear weather
        """
        self.base_risk = base_risk

    @abstractmethod
    def decide(self, context: DecisionContext) -> StrategyDecision:
        """Decide what the vehicle does this tick."""

    def risk_tolerance(self, vehicle: Vehicle, weather: Weather) -> float:
        """How much risk the driver should accept (0-1).

        Worn tires, low energy, rain and wind all make the driver more careful.
        """
        risk = self.base_risk
        risk *= 1 - vehicle.tire_wear * 0.3
        risk *= vehicle.energy.level

        if weather.type == WeatherType.RAIN:
            risk *= 1 - weather.intensity * 0.5
        elif weather.type == WeatherType.WIND:
            risk *= 1 - weather.intensity * 0.2

        return max(0.0, min(1.0, risk))

    def optimal_speed(self, segment: TrackSegment, vehicle: Vehicle, weather: Weather) -> float:
        """Target speed in km/h for the segment in current conditions."""
        target = vehicle.max_speed

        if segment.type == SegmentType.HAIRPIN:
            target = min(target, HAIRPIN_SPEED)
        elif segment.type == SegmentType.CHICANE:
            target = min(target, vehicle.max_speed * 0.7)
        elif segment.is_grip_limited and segment.radius:
            max_lateral = segment.grip * GRAVITY * (1 - vehicle.tire_wear * 0.3)
            target = min(target, math.sqrt(max_lateral * segment.radius) * 3.6)

        if weather.type == WeatherType.RAIN:
            target *= 1 - weather.intensity * 0.3
        elif weather.type == WeatherType.WIND and weather.wind_direction:
            headwind = abs(math.cos(weather.wind_direction))
            target *= 1 - headwind * weather.intensity * 0.1

        return target * (1 - segment.hazard_level * 0.4)

    def pit_necessity(self, vehicle: Vehicle, current_lap: int, total_laps: int) -> PitIntent:
        """Decide whether the vehicle needs to pit.

        Args:
            vehicle: Deciding vehicle
            current_lap: Laps the vehicle has completed
            total_laps: Race distance in laps

        Returns:
            Pit intent
        """
        laps_remaining = total_laps - current_lap

        if vehicle.tire_wear > 0.85:
            # Not worth stopping in the final two laps
            return PitIntent.IMMEDIATE if laps_remaining > 2 else PitIntent.NONE

        if vehicle.energy.level < 0.15:
            return PitIntent.IMMEDIATE

        if laps_remaining <= 3 and vehicle.tire_wear > 0.6:
            return PitIntent.NEXT_LAP

        return PitIntent.NONE

    def assess_overtake(
        self,
        vehicle: Vehicle,
        surroundings: Surroundings,
        segment: TrackSegment,
        risk_tolerance: float,
    ) -> OvertakeIntent:
        """Decide whether to attack the car ahead or defend."""
        if not surroundings.ahead:
            return OvertakeIntent.NONE

        gap = surroundings.distance_to_next
        if gap > MAX_OVERTAKE_GAP or gap < MIN_OVERTAKE_GAP:
            return OvertakeIntent.NONE

        if vehicle.speed - surroundings.ahead[0].speed < MIN_SPEED_ADVANTAGE:
            return OvertakeIntent.NONE

        if segment.type in (SegmentType.CORNER, SegmentType.HAIRPIN):
            return OvertakeIntent.NONE

        if segment.hazard_level > 0.3 and risk_tolerance < 0.7:
            return OvertakeIntent.NONE

        if surroundings.behind and surroundings.distance_to_previous < DEFEND_DISTANCE:
            return OvertakeIntent.DEFEND

        return OvertakeIntent.ATTEMPT if risk_tolerance > 0.6 else OvertakeIntent.NONE

    def energy_mode(
        self,
        vehicle: Vehicle,
        current_lap: int,
        total_laps: int,
        weather: Weather,
    ) -> EnergyMode:
        """Pick an energy management mode from the energy left per lap."""
        laps_remaining = total_laps - current_lap
        energy_per_lap = vehicle.energy.level / max(1, laps_remaining)

        if energy_per_lap < 0.1:
            return EnergyMode.AGGRESSIVE
        if energy_per_lap > 0.15:
            return EnergyMode.CONSERVATIVE
        if weather.type == WeatherType.RAIN:
            return EnergyMode.CONSERVATIVE
        return EnergyMode.BALANCED

    def steering_target(self, vehicle: Vehicle, segment: TrackSegment) -> float:
        """Steering input (-1 to 1) that follows the racing line."""
        steering = 0.0

        if segment.type in (SegmentType.CORNER, SegmentType.HAIRPIN):
            if segment.has_geometry:
                angle_error = segment.direction - vehicle.heading
                steering = max(-1.0, min(1.0, angle_error / math.pi))
        elif segment.type == SegmentType.CHICANE:
            steering = math.sin(vehicle.segment_progress * math.pi * 2) * 0.8

        # Less steering at high speed
        speed_factor = max(0.3, 1 - (vehicle.speed / vehicle.max_speed) * 0.5)
        return steering * speed_factor
