"""Vehicle performance profile and mutable race state."""

from enum import Enum

from pydantic import BaseModel, Field

# Tire wear accrued per metre at zero throttle and steering
BASE_TIRE_WEAR_PER_METER = 0.00001


class VehicleClass(str, Enum):
    """Vehicle behavior classes (metadata only, no physics differences)."""

    CAR = "car"
    DRONE = "drone"
    BIKE = "bike"
    BOAT = "boat"
    TRUCK = "truck"


class EnergyType(str, Enum):
    """Energy storage types."""

    BATTERY = "battery"
    FUEL = "fuel"


class TireCompound(str, Enum):
    """Available tire compounds."""

    SOFT = "soft"
    MEDIUM = "medium"
    HARD = "hard"


class PerformanceProfile(BaseModel):
    """Acceleration or braking envelope of a vehicle."""

    acceleration: float = Field(default=8.0, gt=0, description="Peak acceleration in m/s²")
    deceleration: float = Field(default=12.0, gt=0, description="Peak deceleration in m/s²")
    turning_radius: float = Field(default=10.0, gt=0, description="Minimum turning radius in meters")


class EnergyModel(BaseModel):
    """Battery or fuel store, normalized to 0-1."""

    type: EnergyType = Field(default=EnergyType.BATTERY, description="Energy storage type")
    capacity: float = Field(default=1.0, gt=0.0, le=1.0, description="Full charge level (0-1)")
    level: float = Field(default=1.0, ge=0.0, le=1.0, description="Current charge level (0-1)")
    consumption_rate: float = Field(
        default=0.00001,
        ge=0.0,
        description="Base energy consumed per meter traveled",
    )
    regeneration_rate: float | None = Field(
        default=None,
        ge=0.0,
        description="Energy recovered per meter under braking (None = no regeneration)",
    )

    @property
    def can_regenerate(self) -> bool:
        """Whether braking can recover energy."""
        return bool(self.regeneration_rate)


class VehicleConfig(BaseModel):
    """Static performance profile supplied once per roster entry."""

    id: int = Field(..., description="Unique vehicle identifier")
    name: str = Field(..., description="Display name")
    behavior_class: VehicleClass = Field(default=VehicleClass.CAR, description="Behavior class")

    mass: float = Field(default=900.0, gt=0, description="Mass in kg")
    max_speed: float = Field(default=280.0, gt=0, description="Top speed in km/h")
    acceleration_profile: PerformanceProfile = Field(default_factory=PerformanceProfile)
    braking_profile: PerformanceProfile = Field(default_factory=PerformanceProfile)
    drag_coefficient: float = Field(default=1.0, ge=0.0, description="Relative drag coefficient")
    grip_coefficient: float = Field(default=1.0, gt=0.0, le=2.0, description="Relative tire grip")
    energy: EnergyModel = Field(default_factory=EnergyModel)


class Vehicle(VehicleConfig):
    """One race participant: static profile plus mutable race state.

    Mutated every tick by the physics model and the orchestrator. A vehicle
    never reads the state of other vehicles.
    """

    position: tuple[float, float] = Field(default=(0.0, 0.0), description="World coordinates")
    heading: float = Field(default=0.0, description="Heading angle in radians")
    speed: float = Field(default=0.0, ge=0.0, description="Current speed in km/h")
    acceleration: float = Field(default=0.0, description="Current acceleration in m/s²")
    current_segment: int = Field(default=0, ge=0, description="Index into the track")
    segment_progress: float = Field(default=0.0, ge=0.0, description="Progress within segment (0-1)")
    distance: float = Field(default=0.0, ge=0.0, description="Cumulative distance in meters")
    laps: int = Field(default=0, ge=0, description="Completed laps")

    tire_compound: TireCompound = Field(default=TireCompound.MEDIUM)
    tire_wear: float = Field(default=0.0, ge=0.0, le=1.0, description="Tire wear (0 = new)")
    in_pit: bool = Field(default=False, description="Currently in the pit lane")
    pit_time_remaining: float = Field(default=0.0, ge=0.0, description="Seconds left in pit")
    overtakes: int = Field(default=0, ge=0)
    positions_lost: int = Field(default=0, ge=0)
    hazards_triggered: int = Field(default=0, ge=0)
    obstacle_hit: bool = Field(default=False, description="Hit an obstacle during the last tick")
    lap_times: list[float] = Field(default_factory=list, description="Completed lap times in seconds")
    lap_start_time: float = Field(default=0.0, description="Elapsed time when the current lap began")

    @classmethod
    def from_config(cls, config: VehicleConfig) -> "Vehicle":
        """Build a fresh vehicle from a roster entry."""
        return cls(**config.model_copy(deep=True).model_dump())

    @property
    def energy_level(self) -> float:
        """Current energy level (0-1)."""
        return self.energy.level

    def debit_energy(self, amount: float) -> None:
        """Remove energy, never dropping below empty."""
        self.energy.level = max(0.0, self.energy.level - max(0.0, amount))

    def credit_energy(self, amount: float) -> None:
        """Add energy, never exceeding capacity."""
        self.energy.level = min(self.energy.capacity, self.energy.level + max(0.0, amount))

    def accrue_tire_wear(
        self,
        distance: float,
        throttle: float,
        steering: float,
        multiplier: float = 1.0,
    ) -> None:
        """Add tire wear for a distance driven with the given inputs."""
        rate = BASE_TIRE_WEAR_PER_METER * (1 + abs(throttle) * 0.5) * (1 + abs(steering) * 0.3)
        self.tire_wear = min(1.0, self.tire_wear + rate * max(0.0, distance) * multiplier)

    def add_tire_damage(self, amount: float) -> None:
        """Add tire wear from an impact."""
        self.tire_wear = min(1.0, self.tire_wear + max(0.0, amount))

    def advance(
        self,
        dt: float,
        throttle: float,
        braking: float,
        steering: float = 0.0,
    ) -> float:
        """Integrate control inputs over dt seconds.

        Args:
            dt: Step length in seconds
            throttle: Throttle input (0-1)
            braking: Brake input (0-1)
            steering: Steering input (-1 to 1)

        Returns:
            Distance traveled in meters
        """
        self.acceleration = (throttle - braking) * self.acceleration_profile.acceleration

        # Acceleration is m/s², speed is km/h
        new_speed = self.speed + self.acceleration * dt * 3.6
        self.speed = max(0.0, min(self.max_speed, new_speed))

        traveled = self.speed * dt / 3.6
        self.distance += traveled

        self.debit_energy(self.energy.consumption_rate * traveled * (1 + throttle * 0.5))
        if self.energy.can_regenerate and braking > 0:
            self.credit_energy(self.energy.regeneration_rate * traveled * braking)

        self.accrue_tire_wear(traveled, throttle, steering)
        return traveled

    def is_raceable(self) -> bool:
        """Check if the vehicle can keep racing without a pit stop."""
        return self.energy.level > 0.05 and self.tire_wear < 0.95

    def enter_pit(self, duration: float) -> None:
        """Start a pit stop lasting duration seconds."""
        self.in_pit = True
        self.pit_time_remaining = duration

    def complete_pit_stop(self) -> None:
        """Finish a pit stop: fresh tires and a full energy store."""
        self.in_pit = False
        self.pit_time_remaining = 0.0
        self.tire_wear = 0.0
        self.energy.level = self.energy.capacity

    def reset_race_state(self) -> None:
        """Reset mutable state for a new race."""
        self.speed = 0.0
        self.acceleration = 0.0
        self.heading = 0.0
        self.current_segment = 0
        self.segment_progress = 0.0
        self.distance = 0.0
        self.laps = 0
        self.tire_wear = 0.0
        self.energy.level = self.energy.capacity
        self.in_pit = False
        self.pit_time_remaining = 0.0
        self.overtakes = 0
        self.positions_lost = 0
        self.hazards_triggered = 0
        self.obstacle_hit = False
        self.lap_times = []
        self.lap_start_time = 0.0
