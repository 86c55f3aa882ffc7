"""Tests for the physics model."""

import math

import pytest

from agentrace.models import (
    EnergyModel,
    EnergyType,
    SegmentType,
    TrackSegment,
    Vehicle,
    Weather,
    WeatherType,
)
from agentrace.simulation.physics import (
    apply_physics,
    calculate_drag_force,
    calculate_max_grip_speed,
    calculate_regen_braking,
    calculate_slip_ratio,
    calculate_target_speed,
    calculate_traction,
)


def _sample_vehicle(**overrides) -> Vehicle:
    """Return a representative test vehicle."""
    values = {"id": 1, "name": "Test", "max_speed": 250.0}
    values.update(overrides)
    return Vehicle(**values)


def _sample_segment(segment_type: SegmentType = SegmentType.STRAIGHT, **overrides) -> TrackSegment:
    """Return a test segment."""
    values = {"id": 0, "type": segment_type, "length": 200.0}
    values.update(overrides)
    return TrackSegment(**values)


def test_traction_reduced_by_rain_and_wear() -> None:
    """Rain and worn tires must both reduce traction."""
    segment = _sample_segment()
    fresh = _sample_vehicle()
    worn = _sample_vehicle(tire_wear=0.8)
    dry = Weather()
    wet = Weather(type=WeatherType.RAIN, intensity=1.0)

    assert calculate_traction(fresh, segment, dry) == pytest.approx(1.0)
    assert calculate_traction(worn, segment, dry) < 1.0
    assert calculate_traction(fresh, segment, wet) == pytest.approx(0.6)


def test_traction_clamped_to_minimum() -> None:
    """Traction must never fall below 0.1."""
    segment = _sample_segment(grip=0.05)
    vehicle = _sample_vehicle(tire_wear=1.0)
    wet = Weather(type=WeatherType.RAIN, intensity=1.0)
    assert calculate_traction(vehicle, segment, wet) == 0.1


def test_slip_ratio_bounds() -> None:
    """Perfect traction means no slip; poor traction caps at 0.5."""
    assert calculate_slip_ratio(1.0) == 0.0
    assert calculate_slip_ratio(0.1) == pytest.approx(0.5)


def test_headwind_increases_drag() -> None:
    """A headwind must add drag compared to still air."""
    vehicle = _sample_vehicle(speed=180.0)
    segment = _sample_segment()
    calm = calculate_drag_force(vehicle, segment, Weather())
    windy = calculate_drag_force(
        vehicle, segment, Weather(type=WeatherType.WIND, intensity=1.0, wind_direction=0.0)
    )
    assert windy > calm > 0.0


def test_grip_speed_infinite_on_straights() -> None:
    """Straights have no cornering limit."""
    assert math.isinf(calculate_max_grip_speed(_sample_segment(), 1.0, Weather()))


def test_grip_speed_uses_radius() -> None:
    """Corner limit must follow sqrt(mu * g * r)."""
    segment = _sample_segment(SegmentType.CORNER, radius=50.0)
    expected = math.sqrt(9.81 * 50.0) * 3.6
    assert calculate_max_grip_speed(segment, 1.0, Weather()) == pytest.approx(expected)


def test_chicane_target_below_grip_limit() -> None:
    """Chicanes must be taken at 80% of the grip limit."""
    vehicle = _sample_vehicle()
    segment = _sample_segment(SegmentType.CHICANE)
    assert calculate_target_speed(vehicle, segment, 100.0) == pytest.approx(80.0)


def test_regen_only_for_braking_battery() -> None:
    """Regeneration needs a battery with a regen rate and negative acceleration."""
    battery = EnergyModel(type=EnergyType.BATTERY, regeneration_rate=0.001)
    fuel = EnergyModel(type=EnergyType.FUEL, regeneration_rate=0.001)

    braking = _sample_vehicle(energy=battery, speed=120.0, acceleration=-6.0)
    accelerating = _sample_vehicle(energy=battery, speed=120.0, acceleration=4.0)
    fuel_car = _sample_vehicle(energy=fuel, speed=120.0, acceleration=-6.0)

    assert calculate_regen_braking(braking) == pytest.approx(0.001 * 0.5)
    assert calculate_regen_braking(accelerating) == 0.0
    assert calculate_regen_braking(fuel_car) == 0.0


def test_physics_accelerates_toward_target() -> None:
    """A slow car on a straight must speed up."""
    vehicle = _sample_vehicle(speed=50.0)
    result = apply_physics(vehicle, _sample_segment(), Weather(), 0.1)
    assert result.speed > 50.0
    assert result.acceleration > 0.0


def test_physics_brakes_for_hairpin() -> None:
    """A fast car entering a hairpin must slow down."""
    vehicle = _sample_vehicle(speed=240.0)
    segment = _sample_segment(SegmentType.HAIRPIN, radius=15.0)
    result = apply_physics(vehicle, segment, Weather(), 0.1)
    assert result.speed < 240.0
    assert result.acceleration < 0.0


def test_physics_does_not_mutate_vehicle() -> None:
    """apply_physics must only read the vehicle."""
    vehicle = _sample_vehicle(speed=100.0)
    apply_physics(vehicle, _sample_segment(), Weather(), 0.1)
    assert vehicle.speed == 100.0
    assert vehicle.acceleration == 0.0


def test_physics_speed_bounds() -> None:
    """Speed must stay within [0, max_speed] from any start."""
    segment = _sample_segment(SegmentType.CORNER, radius=10.0)
    for speed in (0.0, 10.0, 125.0, 250.0):
        vehicle = _sample_vehicle(speed=speed)
        result = apply_physics(vehicle, segment, Weather(type=WeatherType.RAIN, intensity=0.7), 0.5)
        assert 0.0 <= result.speed <= vehicle.max_speed


def test_braking_input_slows_vehicle() -> None:
    """Full braking must end slower than full throttle from the same state."""
    vehicle = _sample_vehicle(speed=150.0)
    segment = _sample_segment()
    throttle = apply_physics(vehicle, segment, Weather(), 0.1, throttle=1.0, braking=0.0)
    brake = apply_physics(vehicle, segment, Weather(), 0.1, throttle=0.0, braking=1.0)
    assert brake.speed < 150.0 < throttle.speed
    assert brake.acceleration < 0.0


def test_zero_throttle_does_not_accelerate() -> None:
    """Without throttle only drag acts below the target speed."""
    vehicle = _sample_vehicle(speed=100.0)
    result = apply_physics(vehicle, _sample_segment(), Weather(), 0.1, throttle=0.0)
    assert result.speed < 100.0
