"""Simulation engine components."""

from .config import EventProbabilities, SimulationConfig, WeatherProfile
from .events import EventManager, EventPriority, EventType, SimulationEvent
from .orchestrator import RaceOrchestrator, RaceStatus
from .physics import PhysicsResult, apply_physics
from .snapshot import EventSummary, SimulationSnapshot, VehicleSnapshot

__all__ = [
    "EventManager",
    "EventPriority",
    "EventProbabilities",
    "EventSummary",
    "EventType",
    "PhysicsResult",
    "RaceOrchestrator",
    "RaceStatus",
    "SimulationConfig",
    "SimulationEvent",
    "SimulationSnapshot",
    "VehicleSnapshot",
    "WeatherProfile",
    "apply_physics",
]
