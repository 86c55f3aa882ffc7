"""Decision policies and the race context they read."""

from .base import DecisionPolicy
from .context import (
    DecisionContext,
    Hazard,
    NeighborInfo,
    RaceProgress,
    Surroundings,
)
from .heuristic import HeuristicPolicy
from .remote import (
    CallableDecisionProvider,
    DecisionProvider,
    HttpDecisionProvider,
    RemotePolicy,
    build_request_payload,
)

__all__ = [
    "CallableDecisionProvider",
    "DecisionContext",
    "DecisionPolicy",
    "DecisionProvider",
    "Hazard",
    "HeuristicPolicy",
    "HttpDecisionProvider",
    "NeighborInfo",
    "RaceProgress",
    "RemotePolicy",
    "Surroundings",
    "build_request_payload",
]
