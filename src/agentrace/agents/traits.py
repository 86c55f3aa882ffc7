"""Driver personalities layered on top of a decision policy."""

from enum import Enum

import numpy as np
from pydantic import BaseModel, Field

from agentrace.agents.agent import Agent
from agentrace.models import EnergyMode, OvertakeIntent, PitIntent, StrategyDecision, Vehicle
from agentrace.strategy import DecisionContext, DecisionPolicy


class Aggressiveness(str, Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


class TireManagement(str, Enum):
    POOR = "poor"
    AVERAGE = "average"
    EXCELLENT = "excellent"


class FuelStrategy(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class OvertakingSkill(str, Enum):
    CAUTIOUS = "cautious"
    NORMAL = "normal"
    BOLD = "bold"


class DefensiveSkill(str, Enum):
    WEAK = "weak"
    AVERAGE = "average"
    STRONG = "strong"


class DriverPreset(str, Enum):
    """Named trait combinations."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"
    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"


TIRE_WEAR_MULTIPLIERS = {
    TireManagement.EXCELLENT: 0.8,
    TireManagement.AVERAGE: 1.0,
    TireManagement.POOR: 1.2,
}

CONSUMPTION_MULTIPLIERS = {
    FuelStrategy.LONG: 0.85,
    FuelStrategy.MEDIUM: 1.0,
    FuelStrategy.SHORT: 1.15,
}

OVERTAKE_SUCCESS_RATES = {
    OvertakingSkill.BOLD: 0.7,
    OvertakingSkill.NORMAL: 0.5,
    OvertakingSkill.CAUTIOUS: 0.3,
}

DEFENSE_SUCCESS_RATES = {
    DefensiveSkill.STRONG: 0.7,
    DefensiveSkill.AVERAGE: 0.5,
    DefensiveSkill.WEAK: 0.3,
}


class DriverTraits(BaseModel):
    """Personality of a simulated driver."""

    aggressiveness: Aggressiveness = Field(default=Aggressiveness.BALANCED)
    tire_management: TireManagement = Field(default=TireManagement.AVERAGE)
    fuel_strategy: FuelStrategy = Field(default=FuelStrategy.MEDIUM)
    overtaking_skill: OvertakingSkill = Field(default=OvertakingSkill.NORMAL)
    defensive_skill: DefensiveSkill = Field(default=DefensiveSkill.AVERAGE)

    @classmethod
    def preset(cls, preset: DriverPreset | str) -> "DriverTraits":
        """Build traits from a named preset."""
        return cls(**_PRESETS[DriverPreset(preset)])

    @property
    def tire_wear_multiplier(self) -> float:
        return TIRE_WEAR_MULTIPLIERS[self.tire_management]

    @property
    def consumption_multiplier(self) -> float:
        return CONSUMPTION_MULTIPLIERS[self.fuel_strategy]

    @property
    def overtake_success_rate(self) -> float:
        return OVERTAKE_SUCCESS_RATES[self.overtaking_skill]

    @property
    def defense_success_rate(self) -> float:
        return DEFENSE_SUCCESS_RATES[self.defensive_skill]


_PRESETS = {
    DriverPreset.BEGINNER: {
        "aggressiveness": Aggressiveness.CONSERVATIVE,
        "tire_management": TireManagement.POOR,
        "fuel_strategy": FuelStrategy.SHORT,
        "overtaking_skill": OvertakingSkill.CAUTIOUS,
        "defensive_skill": DefensiveSkill.WEAK,
    },
    DriverPreset.INTERMEDIATE: {},
    DriverPreset.EXPERT: {
        "tire_management": TireManagement.EXCELLENT,
        "fuel_strategy": FuelStrategy.LONG,
        "defensive_skill": DefensiveSkill.STRONG,
    },
    DriverPreset.AGGRESSIVE: {
        "aggressiveness": Aggressiveness.AGGRESSIVE,
        "fuel_strategy": FuelStrategy.SHORT,
        "overtaking_skill": OvertakingSkill.BOLD,
    },
    DriverPreset.DEFENSIVE: {
        "aggressiveness": Aggressiveness.CONSERVATIVE,
        "tire_management": TireManagement.EXCELLENT,
        "fuel_strategy": FuelStrategy.LONG,
        "overtaking_skill": OvertakingSkill.CAUTIOUS,
        "defensive_skill": DefensiveSkill.STRONG,
    },
}


class TraitAgent(Agent):
    """Agent whose driver traits bend the policy's decisions.

    Aggressiveness scales throttle and risk, tire management shifts pit
    timing, fuel strategy fixes the energy mode, and skill rolls decide
    whether overtakes and defenses hold up.
    """

    def __init__(
        self,
        vehicle: Vehicle,
        policy: DecisionPolicy,
        traits: DriverTraits | None = None,
        rng: np.random.Generator | None = None,
        name: str | None = None,
        max_history: int = 100,
    ):
        """Initialize the agent.

        Args:
            vehicle: Vehicle this agent drives
            policy: Decision policy to consult
            traits: Driver personality (defaults to the intermediate preset)
            rng: Random number generator for skill rolls
            name: Display name (defaults to the vehicle name)
            max_history: Decisions kept before the oldest is evicted
        """
        super().__init__(vehicle, policy, name=name, max_history=max_history)
        self.traits = traits or DriverTraits()
        self.rng = rng if rng is not None else np.random.default_rng()

    @property
    def wear_multiplier(self) -> float:
        return self.traits.tire_wear_multiplier

    @property
    def consumption_multiplier(self) -> float:
        return self.traits.consumption_multiplier

    def _adjust(self, decision: StrategyDecision, context: DecisionContext) -> StrategyDecision:
        traits = self.traits
        throttle = decision.throttle
        braking = decision.braking
        risk = decision.risk_level
        pit = decision.pit
        energy_mode = decision.energy_mode
        overtaking = decision.overtaking

        if traits.aggressiveness == Aggressiveness.AGGRESSIVE:
            throttle = min(1.0, throttle * 1.1)
            risk = min(1.0, risk * 1.2)
        elif traits.aggressiveness == Aggressiveness.CONSERVATIVE:
            throttle *= 0.9
            risk *= 0.8

        # Good tire managers pit early, poor ones stretch the stint
        if traits.tire_management == TireManagement.EXCELLENT and context.tire_wear > 0.7:
            if pit == PitIntent.NONE:
                pit = PitIntent.NEXT_LAP
        elif traits.tire_management == TireManagement.POOR and context.tire_wear < 0.9:
            if pit == PitIntent.IMMEDIATE:
                pit = PitIntent.NEXT_LAP

        if traits.fuel_strategy == FuelStrategy.LONG:
            energy_mode = EnergyMode.CONSERVATIVE
            throttle *= 0.9
        elif traits.fuel_strategy == FuelStrategy.SHORT:
            energy_mode = EnergyMode.AGGRESSIVE
            throttle = min(1.0, throttle * 1.05)

        if decision.overtaking == OvertakeIntent.ATTEMPT:
            if self.rng.random() > traits.overtake_success_rate:
                overtaking = OvertakeIntent.DEFEND
                risk *= 0.7
        elif decision.overtaking == OvertakeIntent.DEFEND:
            if self.rng.random() > traits.defense_success_rate:
                overtaking = OvertakeIntent.NONE
                braking = min(1.0, braking * 1.2)

        return StrategyDecision(
            throttle=throttle,
            braking=braking,
            steering=decision.steering,
            risk_level=risk,
            overtaking=overtaking,
            pit=pit,
            boost=decision.boost,
            energy_mode=energy_mode,
        )
