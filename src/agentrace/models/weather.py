"""Weather model and conditions."""

import math
from enum import Enum

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class WeatherType(str, Enum):
    """Weather condition types."""

    CLEAR = "clear"
    RAIN = "rain"
    WIND = "wind"


class Weather(BaseModel):
    """Global weather state.

    Immutable: a change produces a new instance, so snapshots and decision
    contexts can hold on to it safely.
    """

    model_config = ConfigDict(frozen=True)

    type: WeatherType = Field(default=WeatherType.CLEAR, description="Current weather type")
    intensity: float = Field(default=0.0, ge=0.0, le=1.0, description="Intensity (0-1)")
    wind_direction: float | None = Field(
        default=None,
        description="Wind direction in radians relative to the direction of travel",
    )
    temperature: float | None = Field(default=None, description="Air temperature in Celsius")

    @property
    def is_wet(self) -> bool:
        """Check if it is raining."""
        return self.type == WeatherType.RAIN and self.intensity > 0

    def change(self, rng: np.random.Generator, probability: float) -> "Weather | None":
        """Roll for a weather change.

        Args:
            rng: Random number generator
            probability: Chance of a change for this step

        Returns:
            New Weather instance, or None if the weather holds
        """
        if rng.random() >= probability:
            return None

        types = list(WeatherType)
        new_type = types[int(rng.integers(len(types)))]
        intensity = float(rng.random())
        wind_direction = float(rng.random() * math.pi * 2) if new_type == WeatherType.WIND else None
        temperature = 20.0 + float(rng.random()) * 15.0  # 20-35°C

        return Weather(
            type=new_type,
            intensity=intensity,
            wind_direction=wind_direction,
            temperature=temperature,
        )
