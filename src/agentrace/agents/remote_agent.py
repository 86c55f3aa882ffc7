"""Agent that rations consultations of an expensive policy."""

import logging

from pydantic import BaseModel, Field

from agentrace.agents.agent import Agent
from agentrace.models import StrategyDecision, Vehicle, WeatherType
from agentrace.strategy import DecisionContext, DecisionPolicy

logger = logging.getLogger(__name__)


class UpdateTriggers(BaseModel):
    """Conditions that make a RemoteAgent consult its policy again."""

    time_interval: float = Field(
        default=5.0,
        gt=0.0,
        description="Simulation seconds between routine consultations",
    )
    weather_change: bool = Field(default=True, description="Consult when the weather type changes")

    battery_low: bool = Field(default=True, description="Consult as energy runs low")
    battery_low_threshold: float = Field(default=0.2, ge=0.0, le=1.0)
    battery_hysteresis: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Energy change since the last consultation needed to trigger again",
    )

    overtaking_opportunity: bool = Field(default=True, description="Consult when a car ahead is close")
    overtaking_proximity: float = Field(default=20.0, gt=0.0, description="Gap in meters")

    pit_decision: bool = Field(default=True, description="Consult when a pit stop may be needed")
    pit_tire_wear: float = Field(default=0.8, ge=0.0, le=1.0)
    pit_energy: float = Field(default=0.15, ge=0.0, le=1.0)


class RemoteAgent(Agent):
    """Caches the last decision and only re-asks the policy when a trigger fires.

    Intended for policies that call out to a remote service: the tick rate
    stays the same while the number of requests is bounded. Cached decisions
    are returned without being added to the history again.
    """

    def __init__(
        self,
        vehicle: Vehicle,
        policy: DecisionPolicy,
        name: str | None = None,
        max_history: int = 100,
        triggers: UpdateTriggers | None = None,
    ):
        """Initialize the agent.

        Args:
            vehicle: Vehicle this agent drives
            policy: Decision policy to consult
            name: Display name (defaults to the vehicle name)
            max_history: Decisions kept before the oldest is evicted
            triggers: Consultation triggers (defaults apply when omitted)
        """
        super().__init__(vehicle, policy, name=name, max_history=max_history)
        self.triggers = triggers or UpdateTriggers()
        self.consultations = 0
        self._cached: StrategyDecision | None = None
        self._last_update_time = 0.0
        self._last_weather_type: WeatherType | None = None
        self._last_energy_level = 1.0

    def decide(self, context: DecisionContext) -> StrategyDecision:
        """Return the cached decision unless a trigger asks for a fresh one."""
        if not self.is_active:
            return StrategyDecision.safe_default()

        if self._cached is not None and not self.should_update(context):
            return self._cached

        decision = super().decide(context)
        self.consultations += 1
        self._cached = decision
        self._last_update_time = context.progress.elapsed_time
        self._last_weather_type = context.weather.type
        self._last_energy_level = context.energy_level
        logger.debug("Agent %s consulted its policy (%d so far)", self.name, self.consultations)
        return decision

    def should_update(self, context: DecisionContext) -> bool:
        """Check whether any trigger fires for this context."""
        triggers = self.triggers
        energy = context.energy_level

        if context.progress.elapsed_time - self._last_update_time > triggers.time_interval:
            return True

        if triggers.weather_change and context.weather.type != self._last_weather_type:
            return True

        if (
            triggers.battery_low
            and energy < triggers.battery_low_threshold
            and abs(energy - self._last_energy_level) > triggers.battery_hysteresis
        ):
            return True

        if (
            triggers.overtaking_opportunity
            and context.surroundings.ahead
            and context.surroundings.distance_to_next < triggers.overtaking_proximity
        ):
            return True

        if triggers.pit_decision and (
            context.tire_wear > triggers.pit_tire_wear or energy < triggers.pit_energy
        ):
            return True

        return False

    @property
    def cached_decision(self) -> StrategyDecision | None:
        return self._cached

    def force_refresh(self) -> None:
        """Drop the cached decision so the next call consults the policy."""
        self._cached = None

    def reset(self) -> None:
        super().reset()
        self.consultations = 0
        self._cached = None
        self._last_update_time = 0.0
        self._last_weather_type = None
        self._last_energy_level = 1.0
