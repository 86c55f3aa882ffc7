"""Agent: a vehicle paired with a decision policy."""

import logging
from collections import deque
from dataclasses import dataclass

from agentrace.models import OvertakeIntent, PitIntent, StrategyDecision, Vehicle, sanitize_decision
from agentrace.strategy import DecisionContext, DecisionPolicy

logger = logging.getLogger(__name__)


@dataclass
class AgentMetrics:
    """Summary of an agent's decision history."""

    total_decisions: int = 0
    average_risk_level: float = 0.0
    overtake_attempts: int = 0
    pit_decisions: int = 0
    boost_activations: int = 0


class Agent:
    """Drives one vehicle by asking its policy for decisions.

    Every decision passes through ``sanitize_decision`` before it is recorded
    or returned, whatever the policy produced. A failing policy never
    propagates: the agent falls back to the safe default.
    """

    def __init__(
        self,
        vehicle: Vehicle,
        policy: DecisionPolicy,
        name: str | None = None,
        max_history: int = 100,
    ):
        """Initialize the agent.

        Args:
            vehicle: Vehicle this agent drives
            policy: Decision policy to consult
            name: Display name (defaults to the vehicle name)
            max_history: Decisions kept before the oldest is evicted
        """
        self.vehicle = vehicle
        self.policy = policy
        self.name = name or vehicle.name
        self._active = True
        self._history: deque[StrategyDecision] = deque(maxlen=max_history)

    @property
    def id(self) -> int:
        return self.vehicle.id

    @property
    def is_active(self) -> bool:
        return self._active

    def set_active(self, active: bool) -> None:
        """Enable or disable the agent."""
        self._active = active

    @property
    def wear_multiplier(self) -> float:
        """Factor applied to tire wear accrued by this agent's vehicle."""
        return 1.0

    @property
    def consumption_multiplier(self) -> float:
        """Factor applied to energy drained by this agent's vehicle."""
        return 1.0

    def decide(self, context: DecisionContext) -> StrategyDecision:
        """Make a validated decision for one tick.

        Args:
            context: Race context for this agent's vehicle

        Returns:
            StrategyDecision with every field in range
        """
        if not self._active:
            return StrategyDecision.safe_default()

        try:
            decision = self._consult(context)
        except Exception:
            logger.exception("Agent %s failed to decide, using safe default", self.name)
            return StrategyDecision.safe_default()

        self._history.append(decision)
        return decision

    def _consult(self, context: DecisionContext) -> StrategyDecision:
        decision = sanitize_decision(self.policy.decide(context))
        return sanitize_decision(self._adjust(decision, context))

    def _adjust(self, decision: StrategyDecision, context: DecisionContext) -> StrategyDecision:
        """Hook for subclasses to modify the policy's decision."""
        return decision

    @property
    def history(self) -> list[StrategyDecision]:
        """Recorded decisions, oldest first."""
        return list(self._history)

    @property
    def last_decision(self) -> StrategyDecision | None:
        return self._history[-1] if self._history else None

    def clear_history(self) -> None:
        self._history.clear()

    def reset(self) -> None:
        """Clear history, reactivate and respawn the vehicle."""
        self.clear_history()
        self._active = True
        self.vehicle.reset_race_state()

    def metrics(self) -> AgentMetrics:
        """Compute metrics from the decision history."""
        decisions = self._history
        if not decisions:
            return AgentMetrics()

        return AgentMetrics(
            total_decisions=len(decisions),
            average_risk_level=sum(d.risk_level for d in decisions) / len(decisions),
            overtake_attempts=sum(1 for d in decisions if d.overtaking == OvertakeIntent.ATTEMPT),
            pit_decisions=sum(1 for d in decisions if d.pit != PitIntent.NONE),
            boost_activations=sum(1 for d in decisions if d.boost),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, vehicle_id={self.vehicle.id})"
