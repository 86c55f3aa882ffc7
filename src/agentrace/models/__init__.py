"""Data models for the race simulation."""

from .decision import EnergyMode, OvertakeIntent, PitIntent, StrategyDecision, sanitize_decision
from .track import SegmentType, TrackSegment, track_length
from .vehicle import (
    EnergyModel,
    EnergyType,
    PerformanceProfile,
    TireCompound,
    Vehicle,
    VehicleClass,
    VehicleConfig,
)
from .weather import Weather, WeatherType

__all__ = [
    "EnergyMode",
    "EnergyModel",
    "EnergyType",
    "OvertakeIntent",
    "PerformanceProfile",
    "PitIntent",
    "SegmentType",
    "StrategyDecision",
    "TireCompound",
    "TrackSegment",
    "Vehicle",
    "VehicleClass",
    "VehicleConfig",
    "Weather",
    "WeatherType",
    "sanitize_decision",
    "track_length",
]
