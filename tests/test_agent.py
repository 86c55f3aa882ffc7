"""Tests for agents: validation, history, remote consultation throttling and traits."""

import numpy as np
import pytest

from agentrace.agents import (
    Agent,
    DriverPreset,
    DriverTraits,
    FuelStrategy,
    RemoteAgent,
    TireManagement,
    TraitAgent,
    UpdateTriggers,
)
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
from agentrace.strategy import (
    DecisionContext,
    DecisionPolicy,
    NeighborInfo,
    RaceProgress,
    Surroundings,
)


class _FixedPolicy(DecisionPolicy):
    """Returns whatever it was given, counting calls."""

    def __init__(self, decision):
        super().__init__()
        self.decision = decision
        self.calls = 0

    def decide(self, context):
        self.calls += 1
        return self.decision


class _BrokenPolicy(DecisionPolicy):
    def decide(self, context):
        raise RuntimeError("policy crashed")


def _sample_vehicle() -> Vehicle:
    return Vehicle(id=1, name="Agent Car", max_speed=220.0)


def _context(vehicle: Vehicle, elapsed: float = 0.0, weather: Weather | None = None,
             surroundings: Surroundings | None = None) -> DecisionContext:
    return DecisionContext(
        vehicle=vehicle,
        segment=TrackSegment(id=0, type=SegmentType.STRAIGHT, length=500.0),
        weather=weather or Weather(),
        progress=RaceProgress(current_lap=1, total_laps=10, elapsed_time=elapsed),
        surroundings=surroundings or Surroundings(),
    )


def test_inactive_agent_returns_safe_default() -> None:
    """An inactive agent never consults its policy."""
    vehicle = _sample_vehicle()
    policy = _FixedPolicy(StrategyDecision(throttle=1.0, boost=True))
    agent = Agent(vehicle, policy)
    agent.set_active(False)

    for elapsed in (0.0, 10.0, 20.0):
        assert agent.decide(_context(vehicle, elapsed)) == StrategyDecision.safe_default()
    assert policy.calls == 0
    assert agent.history == []


def test_out_of_range_policy_output_is_clamped() -> None:
    """Decisions are validated even when the policy misbehaves."""
    vehicle = _sample_vehicle()
    raw = {"throttle": 7.0, "braking": -2.0, "steering": 9.0, "risk_level": -1.0, "pit": "sometime"}
    agent = Agent(vehicle, _FixedPolicy(raw))

    decision = agent.decide(_context(vehicle))

    assert decision.throttle == 1.0
    assert decision.braking == 0.0
    assert decision.steering == 1.0
    assert decision.risk_level == 0.0
    assert decision.pit == PitIntent.NONE


def test_policy_failure_returns_safe_default() -> None:
    vehicle = _sample_vehicle()
    agent = Agent(vehicle, _BrokenPolicy())
    assert agent.decide(_context(vehicle)) == StrategyDecision.safe_default()


def test_history_is_bounded() -> None:
    """Only the most recent decisions are kept."""
    vehicle = _sample_vehicle()
    agent = Agent(vehicle, _FixedPolicy(StrategyDecision()), max_history=100)
    for _ in range(150):
        agent.decide(_context(vehicle))
    assert len(agent.history) == 100


def test_metrics_computed_from_history() -> None:
    vehicle = _sample_vehicle()
    policy = _FixedPolicy(StrategyDecision(risk_level=0.4, overtaking=OvertakeIntent.ATTEMPT, boost=True))
    agent = Agent(vehicle, policy)
    agent.decide(_context(vehicle))
    policy.decision = StrategyDecision(risk_level=0.8, pit=PitIntent.IMMEDIATE)
    agent.decide(_context(vehicle))

    metrics = agent.metrics()
    assert metrics.total_decisions == 2
    assert metrics.average_risk_level == pytest.approx(0.6)
    assert metrics.overtake_attempts == 1
    assert metrics.pit_decisions == 1
    assert metrics.boost_activations == 1


def test_reset_reactivates_and_respawns() -> None:
    vehicle = _sample_vehicle()
    agent = Agent(vehicle, _FixedPolicy(StrategyDecision()))
    agent.decide(_context(vehicle))
    agent.set_active(False)
    vehicle.speed = 150.0
    vehicle.tire_wear = 0.5

    agent.reset()

    assert agent.is_active
    assert agent.history == []
    assert vehicle.speed == 0.0
    assert vehicle.tire_wear == 0.0


def test_remote_agent_reuses_cached_decision() -> None:
    """Without a trigger the policy is consulted only once."""
    vehicle = _sample_vehicle()
    policy = _FixedPolicy(StrategyDecision(throttle=0.9))
    agent = RemoteAgent(vehicle, policy, triggers=UpdateTriggers(time_interval=5.0))

    for step in range(10):
        decision = agent.decide(_context(vehicle, elapsed=step * 0.1))

    assert decision.throttle == 0.9
    assert policy.calls == 1
    assert agent.consultations == 1
    assert len(agent.history) == 1


def test_remote_agent_refreshes_after_interval() -> None:
    vehicle = _sample_vehicle()
    policy = _FixedPolicy(StrategyDecision())
    agent = RemoteAgent(vehicle, policy, triggers=UpdateTriggers(time_interval=5.0))

    agent.decide(_context(vehicle, elapsed=0.0))
    agent.decide(_context(vehicle, elapsed=4.0))
    agent.decide(_context(vehicle, elapsed=5.5))
    assert policy.calls == 2


def test_remote_agent_refreshes_on_weather_change() -> None:
    vehicle = _sample_vehicle()
    policy = _FixedPolicy(StrategyDecision())
    agent = RemoteAgent(vehicle, policy)

    agent.decide(_context(vehicle, elapsed=0.0))
    agent.decide(_context(vehicle, elapsed=0.1, weather=Weather(type=WeatherType.RAIN, intensity=0.5)))
    assert policy.calls == 2


def test_remote_agent_battery_trigger_uses_hysteresis() -> None:
    """Low energy triggers a refresh only after it moved past the band."""
    vehicle = _sample_vehicle()
    policy = _FixedPolicy(StrategyDecision())
    agent = RemoteAgent(vehicle, policy, triggers=UpdateTriggers(pit_decision=False))

    vehicle.energy.level = 0.19
    agent.decide(_context(vehicle, elapsed=0.0))
    vehicle.energy.level = 0.17
    agent.decide(_context(vehicle, elapsed=0.1))
    assert policy.calls == 1

    vehicle.energy.level = 0.12
    agent.decide(_context(vehicle, elapsed=0.2))
    assert policy.calls == 2


def test_remote_agent_refreshes_near_car_ahead() -> None:
    vehicle = _sample_vehicle()
    policy = _FixedPolicy(StrategyDecision())
    agent = RemoteAgent(vehicle, policy)
    close = Surroundings(ahead=(NeighborInfo(vehicle_id=2, speed=180.0, gap=15.0),))

    agent.decide(_context(vehicle, elapsed=0.0))
    agent.decide(_context(vehicle, elapsed=0.1, surroundings=close))
    assert policy.calls == 2


def test_remote_agent_force_refresh() -> None:
    vehicle = _sample_vehicle()
    policy = _FixedPolicy(StrategyDecision())
    agent = RemoteAgent(vehicle, policy)

    agent.decide(_context(vehicle))
    agent.force_refresh()
    agent.decide(_context(vehicle))
    assert policy.calls == 2


def test_trait_presets() -> None:
    """Presets must set the documented traits and multipliers."""
    expert = DriverTraits.preset(DriverPreset.EXPERT)
    beginner = DriverTraits.preset("beginner")

    assert expert.tire_management == TireManagement.EXCELLENT
    assert expert.tire_wear_multiplier == pytest.approx(0.8)
    assert expert.consumption_multiplier == pytest.approx(0.85)
    assert beginner.fuel_strategy == FuelStrategy.SHORT
    assert beginner.tire_wear_multiplier == pytest.approx(1.2)


def test_trait_agent_applies_fuel_strategy() -> None:
    """A long fuel strategy forces conservative energy use and lifts off."""
    vehicle = _sample_vehicle()
    traits = DriverTraits(fuel_strategy=FuelStrategy.LONG)
    agent = TraitAgent(vehicle, _FixedPolicy(StrategyDecision(throttle=1.0)), traits=traits,
                       rng=np.random.default_rng(0))

    decision = agent.decide(_context(vehicle))

    assert decision.energy_mode == EnergyMode.CONSERVATIVE
    assert decision.throttle == pytest.approx(0.9)
    assert agent.consumption_multiplier == pytest.approx(0.85)


def test_trait_agent_excellent_manager_pits_early() -> None:
    vehicle = _sample_vehicle()
    vehicle.tire_wear = 0.75
    traits = DriverTraits(tire_management=TireManagement.EXCELLENT)
    agent = TraitAgent(vehicle, _FixedPolicy(StrategyDecision()), traits=traits, rng=np.random.default_rng(0))
    assert agent.decide(_context(vehicle)).pit == PitIntent.NEXT_LAP


def test_trait_agent_output_always_valid() -> None:
    """Trait adjustments never push a decision out of range."""
    vehicle = _sample_vehicle()
    traits = DriverTraits.preset(DriverPreset.AGGRESSIVE)
    raw = StrategyDecision(throttle=1.0, braking=1.0, risk_level=1.0, overtaking=OvertakeIntent.ATTEMPT)
    agent = TraitAgent(vehicle, _FixedPolicy(raw), traits=traits, rng=np.random.default_rng(3))

    for _ in range(50):
        decision = agent.decide(_context(vehicle))
        assert 0.0 <= decision.throttle <= 1.0
        assert 0.0 <= decision.braking <= 1.0
        assert 0.0 <= decision.risk_level <= 1.0
        assert decision.overtaking in (OvertakeIntent.ATTEMPT, OvertakeIntent.DEFEND)


def test_trait_agent_accepts_mapping_from_policy() -> None:
    """A mapping from the policy is clamped before traits apply, not replaced by the safe default."""
    vehicle = _sample_vehicle()
    agent = TraitAgent(vehicle, _FixedPolicy({"throttle": 5.0, "riskLevel": 0.6}), rng=np.random.default_rng(0))

    decision = agent.decide(_context(vehicle))

    assert decision.throttle == 1.0
    assert decision.risk_level == pytest.approx(0.6)
    assert len(agent.history) == 1
