"""
Shared test fixtures and configuration.
"""

import numpy as np
import pytest

from agentrace.models import SegmentType, TrackSegment, VehicleConfig
from agentrace.simulation import EventProbabilities, SimulationConfig, WeatherProfile


@pytest.fixture
def quiet_config():
    """Config with no random events and no weather changes."""
    return SimulationConfig(
        fixed_timestep=0.1,
        total_laps=5,
        weather_profile=WeatherProfile(change_probability=0.0),
        event_probabilities=EventProbabilities.disabled(),
    )


@pytest.fixture
def straight_track():
    """One 1000m straight."""
    return [TrackSegment(id=0, type=SegmentType.STRAIGHT, length=1000.0, start=(0.0, 0.0), end=(1000.0, 0.0))]


@pytest.fixture
def circuit():
    """Four-segment loop with geometry and one tight corner."""
    return [
        TrackSegment(id=0, type=SegmentType.STRAIGHT, length=400.0, start=(0.0, 0.0), end=(400.0, 0.0)),
        TrackSegment(
            id=1, type=SegmentType.CORNER, length=100.0, radius=60.0,
            start=(400.0, 0.0), end=(400.0, 100.0),
        ),
        TrackSegment(id=2, type=SegmentType.STRAIGHT, length=400.0, start=(400.0, 100.0), end=(0.0, 100.0)),
        TrackSegment(
            id=3, type=SegmentType.HAIRPIN, length=100.0, radius=20.0, hazard_level=0.2,
            start=(0.0, 100.0), end=(0.0, 0.0),
        ),
    ]


@pytest.fixture
def roster():
    """Three default cars."""
    return [
        VehicleConfig(id=1, name="Alpha"),
        VehicleConfig(id=2, name="Bravo", max_speed=270.0),
        VehicleConfig(id=3, name="Charlie", grip_coefficient=1.1),
    ]


@pytest.fixture
def rng():
    """Seeded generator."""
    return np.random.default_rng(7)
