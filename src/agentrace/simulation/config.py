"""Simulation configuration."""

from pydantic import BaseModel, Field

from agentrace.models import Weather


class WeatherProfile(BaseModel):
    """Starting weather and how often it changes."""

    initial_weather: Weather = Field(default_factory=Weather)
    change_probability: float = Field(
        default=0.1,
        ge=0.0,
        le=60.0,
        description="Expected weather changes per minute of race time",
    )


class EventProbabilities(BaseModel):
    """Per-minute rates for stochastic events."""

    breakdown: float = Field(default=0.01, ge=0.0, description="Per vehicle per minute")
    obstacle_appear: float = Field(default=0.1, ge=0.0, description="Per minute")
    battery_low: float = Field(
        default=0.5,
        ge=0.0,
        description="Per vehicle per minute while energy is below the low threshold",
    )
    collision: float = Field(
        default=0.05,
        ge=0.0,
        description="Per vehicle pair per minute while within collision distance",
    )

    @classmethod
    def disabled(cls) -> "EventProbabilities":
        """No stochastic events at all."""
        return cls(breakdown=0.0, obstacle_appear=0.0, battery_low=0.0, collision=0.0)


class SimulationConfig(BaseModel):
    """Settings for one race."""

    fixed_timestep: float = Field(default=0.05, gt=0.0, le=1.0, description="Tick length in seconds")
    speed_multiplier: float = Field(
        default=1.0,
        ge=0.1,
        le=10.0,
        description="Simulated seconds per wall-clock second",
    )
    total_laps: int = Field(default=10, gt=0, description="Laps needed to finish")

    weather_profile: WeatherProfile = Field(default_factory=WeatherProfile)
    event_probabilities: EventProbabilities = Field(default_factory=EventProbabilities)

    start_stagger: float = Field(
        default=0.05,
        ge=0.0,
        lt=1.0,
        description="Segment progress offset between consecutive grid slots",
    )
    pit_duration: float = Field(default=3.0, gt=0.0, description="Pit stop length in seconds")
    pit_entry_segment: int = Field(default=0, ge=0, description="Segment index of the pit entry")

    boost_multiplier: float = Field(default=1.1, ge=1.0, le=1.5, description="Speed factor for boost")
    overtake_multiplier: float = Field(
        default=1.05,
        ge=1.0,
        le=1.5,
        description="Speed factor while attempting an overtake",
    )

    nearby_distance: float = Field(default=20.0, gt=0.0, description="Radius for 'nearby' vehicles (m)")
    collision_distance: float = Field(default=5.0, gt=0.0, description="Gap below which pairs may collide (m)")
    hazard_lookahead: int = Field(default=3, ge=0, description="Segments scanned for obstacles")
    battery_low_threshold: float = Field(default=0.2, ge=0.0, le=1.0)

    obstacles_single_use: bool = Field(
        default=True,
        description="First vehicle to hit an obstacle clears it; otherwise every vehicle hits it once",
    )
    obstacle_types: list[str] = Field(default_factory=lambda: ["debris", "oil_spill", "retired_car"])
