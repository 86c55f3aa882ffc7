"""Deterministic rule-based decision policy."""

from agentrace.models import EnergyMode, SegmentType, StrategyDecision
from agentrace.strategy.base import DecisionPolicy
from agentrace.strategy.context import DecisionContext

# Speed error (km/h) that maps to full throttle or full braking
RESPONSE_RANGE = 50.0

BOOST_MIN_GAP = 5.0
BOOST_MAX_GAP = 50.0


class HeuristicPolicy(DecisionPolicy):
    """Drives toward the optimal speed for each segment.

    Throttle and braking scale with the distance from the optimal speed, so
    the response is gradual. Same context in, same decision out.
    """

    def decide(self, context: DecisionContext) -> StrategyDecision:
        """Make a decision for one tick.

        Args:
            context: Race context for the deciding vehicle

        Returns:
            StrategyDecision
        """
        vehicle = context.vehicle
        segment = context.segment
        weather = context.weather
        progress = context.progress

        risk = self.risk_tolerance(vehicle, weather)
        energy_mode = self.energy_mode(vehicle, progress.current_lap, progress.total_laps, weather)

        target_speed = self.optimal_speed(segment, vehicle, weather)
        throttle, braking = self._speed_control(vehicle.speed, target_speed)

        if energy_mode == EnergyMode.CONSERVATIVE:
            throttle *= 0.8
        elif energy_mode == EnergyMode.AGGRESSIVE:
            throttle = min(1.0, throttle * 1.1)

        gap = context.surroundings.distance_to_next
        boost = (
            segment.type == SegmentType.STRAIGHT
            and BOOST_MIN_GAP < gap < BOOST_MAX_GAP
            and risk > 0.5
        )

        return StrategyDecision(
            throttle=throttle,
            braking=braking,
            steering=self.steering_target(vehicle, segment),
            risk_level=risk,
            overtaking=self.assess_overtake(vehicle, context.surroundings, segment, risk),
            pit=self.pit_necessity(vehicle, progress.current_lap, progress.total_laps),
            boost=boost,
            energy_mode=energy_mode,
        )

    @staticmethod
    def _speed_control(speed: float, target_speed: float) -> tuple[float, float]:
        diff = target_speed - speed
        if diff > 0:
            return min(1.0, diff / RESPONSE_RANGE), 0.0
        return 0.0, min(1.0, -diff / RESPONSE_RANGE)
