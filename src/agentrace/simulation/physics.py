"""Vehicle physics: traction, drag, energy and speed integration.

Everything here is a pure function of (vehicle, segment, weather, dt). The
vehicle is only read; the orchestrator decides what to apply from the result.
"""

import math
from dataclasses import dataclass

from agentrace.models import EnergyType, SegmentType, TrackSegment, Vehicle, Weather, WeatherType

GRAVITY = 9.81  # m/s²
AIR_DENSITY = 1.225  # kg/m³ at sea level
DRAG_COEFFICIENT_BASE = 0.3  # Typical for race cars
FRONTAL_AREA = 2.0  # m²
MAX_WIND_SPEED = 20.0  # m/s at intensity 1
IDEAL_SLIP = 0.1
DEFAULT_CORNER_RADIUS = 100.0  # m


@dataclass(frozen=True)
class PhysicsResult:
    """Outcome of one physics step."""

    speed: float  # km/h
    acceleration: float  # m/s²
    traction: float
    slip_ratio: float
    drag_force: float  # N
    battery_drain: float  # energy per meter
    regen_braking: float  # energy per meter
    max_grip_speed: float  # km/h, inf on straights


def calculate_traction(vehicle: Vehicle, segment: TrackSegment, weather: Weather) -> float:
    """Calculate traction from tires, surface and weather.

    Returns:
        Traction coefficient clamped to [0.1, 1.0]
    """
    traction = segment.grip * segment.grip_multiplier * vehicle.grip_coefficient

    # Worn tires lose up to half their grip
    traction *= 1 - vehicle.tire_wear * 0.5

    if weather.type == WeatherType.RAIN:
        traction *= 1 - weather.intensity * 0.4
    elif weather.type == WeatherType.WIND:
        crosswind = abs(math.sin(weather.wind_direction or 0.0)) * weather.intensity * 0.1
        traction *= 1 - crosswind

    # Thinner air at altitude
    traction *= max(0.9, 1 - segment.altitude * 0.0001)

    if segment.bank_angle != 0:
        traction *= math.cos(segment.bank_angle) + math.sin(segment.bank_angle) * 0.3

    return max(0.1, min(1.0, traction))


def calculate_slip_ratio(traction: float) -> float:
    """Slip relative to the ideal slip target, capped at 50%."""
    slip = IDEAL_SLIP * (1 / traction - 1)
    return max(0.0, min(0.5, slip))


def calculate_drag_force(vehicle: Vehicle, segment: TrackSegment, weather: Weather) -> float:
    """Aerodynamic drag force in newtons: F = 0.5 * rho * Cd * A * v²."""
    drag_coefficient = vehicle.drag_coefficient * DRAG_COEFFICIENT_BASE * segment.drag_multiplier

    relative_wind = vehicle.speed / 3.6
    if weather.type == WeatherType.WIND and weather.wind_direction is not None:
        relative_wind += math.cos(weather.wind_direction) * weather.intensity * MAX_WIND_SPEED

    return 0.5 * AIR_DENSITY * drag_coefficient * FRONTAL_AREA * relative_wind ** 2


def calculate_battery_drain(
    vehicle: Vehicle,
    segment: TrackSegment,
    slip_ratio: float,
    drag_force: float,
) -> float:
    """Energy drain per meter under current driving conditions."""
    drain = vehicle.energy.consumption_rate

    # Wheel spin and drag both cost energy
    drain *= 1 + slip_ratio * 2
    drain *= 1 + drag_force / 1000

    acceleration_ratio = max(0.0, vehicle.acceleration) / vehicle.acceleration_profile.acceleration
    drain *= 1 + acceleration_ratio * 0.5

    return drain * segment.energy_multiplier


def calculate_regen_braking(vehicle: Vehicle) -> float:
    """Regenerative braking potential per meter (0 unless braking on a battery)."""
    energy = vehicle.energy
    if energy.type != EnergyType.BATTERY or not energy.regeneration_rate:
        return 0.0
    if vehicle.acceleration >= 0:
        return 0.0

    braking_intensity = abs(vehicle.acceleration) / vehicle.braking_profile.deceleration
    speed_factor = min(1.0, vehicle.speed / 100)  # Max efficiency at 100 km/h
    return energy.regeneration_rate * braking_intensity * speed_factor


def calculate_max_grip_speed(segment: TrackSegment, traction: float, weather: Weather) -> float:
    """Maximum cornering speed in km/h permitted by traction.

    Straights have no grip limit.
    """
    if segment.type == SegmentType.STRAIGHT:
        return math.inf

    radius = segment.radius or DEFAULT_CORNER_RADIUS

    # v = sqrt(mu * g * r)
    max_speed = math.sqrt(traction * GRAVITY * radius) * 3.6

    if weather.type == WeatherType.RAIN:
        max_speed *= 1 - weather.intensity * 0.3

    return max_speed


def calculate_target_speed(vehicle: Vehicle, segment: TrackSegment, max_grip_speed: float) -> float:
    """Speed the vehicle should settle at on this segment."""
    target = vehicle.max_speed

    if segment.type == SegmentType.CHICANE:
        target = min(target, max_grip_speed * 0.8)
    elif segment.is_grip_limited:
        target = min(target, max_grip_speed)

    return target * (1 - segment.hazard_level * 0.3)


def apply_physics(
    vehicle: Vehicle,
    segment: TrackSegment,
    weather: Weather,
    dt: float,
    throttle: float = 1.0,
    braking: float = 0.0,
) -> PhysicsResult:
    """Run one physics step for a vehicle.

    Throttle scales how much of the available acceleration is used toward the
    target speed; braking adds deceleration on top, up to the traction limit.

    Args:
        vehicle: Vehicle to integrate (not modified)
        segment: Segment the vehicle is on
        weather: Current weather
        dt: Step length in seconds
        throttle: Throttle input (0-1)
        braking: Brake input (0-1)

    Returns:
        PhysicsResult with the new speed and telemetry
    """
    traction = calculate_traction(vehicle, segment, weather)
    slip_ratio = calculate_slip_ratio(traction)
    drag_force = calculate_drag_force(vehicle, segment, weather)
    battery_drain = calculate_battery_drain(vehicle, segment, slip_ratio, drag_force)
    regen_braking = calculate_regen_braking(vehicle)
    max_grip_speed = calculate_max_grip_speed(segment, traction, weather)

    target_speed = calculate_target_speed(vehicle, segment, max_grip_speed)
    speed_diff = target_speed - vehicle.speed
    max_acceleration = vehicle.acceleration_profile.acceleration * traction
    max_deceleration = vehicle.braking_profile.deceleration * traction

    if speed_diff > 0:
        acceleration = min(speed_diff / dt, max_acceleration * throttle)
    else:
        acceleration = max(speed_diff / dt, -max_deceleration)

    if braking > 0:
        acceleration = max(acceleration - max_deceleration * braking, -max_deceleration)

    acceleration -= drag_force / vehicle.mass

    speed = max(0.0, min(vehicle.max_speed, vehicle.speed + acceleration * dt))

    return PhysicsResult(
        speed=speed,
        acceleration=acceleration,
        traction=traction,
        slip_ratio=slip_ratio,
        drag_force=drag_force,
        battery_drain=battery_drain,
        regen_braking=regen_braking,
        max_grip_speed=max_grip_speed,
    )
