"""Agents pairing vehicles with decision policies."""

from .agent import Agent, AgentMetrics
from .remote_agent import RemoteAgent, UpdateTriggers
from .traits import (
    Aggressiveness,
    DefensiveSkill,
    DriverPreset,
    DriverTraits,
    FuelStrategy,
    OvertakingSkill,
    TireManagement,
    TraitAgent,
)

__all__ = [
    "Agent",
    "AgentMetrics",
    "Aggressiveness",
    "DefensiveSkill",
    "DriverPreset",
    "DriverTraits",
    "FuelStrategy",
    "OvertakingSkill",
    "RemoteAgent",
    "TireManagement",
    "TraitAgent",
    "UpdateTriggers",
]
