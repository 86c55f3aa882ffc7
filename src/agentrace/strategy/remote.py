"""Decision policy backed by an external strategy service."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

import requests

from agentrace.models import StrategyDecision, sanitize_decision
from agentrace.strategy.base import DecisionPolicy
from agentrace.strategy.context import DecisionContext, NeighborInfo
from agentrace.strategy.heuristic import HeuristicPolicy

logger = logging.getLogger(__name__)


class DecisionProvider(ABC):
    """Answers strategy requests with a raw decision mapping."""

    @abstractmethod
    def request(self, payload: dict[str, Any]) -> Any:
        """Ask for a decision.

        Args:
            payload: Race context in wire format

        Returns:
            Raw response, expected to be a decision mapping
        """


class HttpDecisionProvider(DecisionProvider):
    """POSTs the context to a strategy endpoint and returns the JSON reply."""

    def __init__(
        self,
        endpoint: str,
        model_type: str = "default",
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ):
        """Initialize the provider.

        Args:
            endpoint: URL of the strategy service
            model_type: Model identifier forwarded to the service
            timeout: HTTP timeout in seconds
            session: Optional requests session for connection reuse
        """
        self.endpoint = endpoint
        self.model_type = model_type
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def request(self, payload: dict[str, Any]) -> Any:
        body = {
            "context": payload,
            "modelType": self.model_type,
            "requestType": "strategy_decision",
        }
        response = self.session.post(self.endpoint, json=body, timeout=self.timeout)
        response.raise_for_status()
        return response.json()


class CallableDecisionProvider(DecisionProvider):
    """Wraps a plain function as a provider."""

    def __init__(self, func: Callable[[dict[str, Any]], Any]):
        self.func = func

    def request(self, payload: dict[str, Any]) -> Any:
        return self.func(payload)


def _neighbor_payload(neighbor: NeighborInfo) -> dict[str, Any]:
    return {"id": neighbor.vehicle_id, "speed": neighbor.speed, "distance": neighbor.gap}


def build_request_payload(context: DecisionContext) -> dict[str, Any]:
    """Convert a decision context to the provider wire format."""
    vehicle = context.vehicle
    segment = context.segment
    weather = context.weather
    progress = context.progress

    return {
        "vehicle": {
            "speed": vehicle.speed,
            "tireWear": vehicle.tire_wear,
            "energyLevel": vehicle.energy.level,
            "position": list(vehicle.position),
        },
        "surroundings": {
            "ahead": [_neighbor_payload(n) for n in context.surroundings.ahead],
            "behind": [_neighbor_payload(n) for n in context.surroundings.behind],
        },
        "segment": {
            "type": segment.type.value,
            "length": segment.length,
            "grip": segment.grip,
            "hazards": segment.hazard_level,
        },
        "weather": {
            "type": weather.type.value,
            "intensity": weather.intensity,
            "windDirection": weather.wind_direction,
            "temperature": weather.temperature,
        },
        "race": {
            "currentLap": progress.current_lap,
            "totalLaps": progress.total_laps,
            "elapsedTime": progress.elapsed_time,
        },
    }


class RemotePolicy(DecisionPolicy):
    """Delegates decisions to a DecisionProvider with a bounded wait.

    Provider errors, timeouts and malformed replies all fall back to a local
    policy, so ``decide`` always returns within ``timeout`` plus the time the
    fallback takes. A reply that arrives after the timeout is discarded.
    """

    def __init__(
        self,
        provider: DecisionProvider,
        fallback: DecisionPolicy | None = None,
        timeout: float = 0.5,
        base_risk: float = 0.5,
    ):
        """Initialize the policy.

        Args:
            provider: Source of remote decisions
            fallback: Local policy used when the provider fails
            timeout: Seconds to wait for each reply
            base_risk: Base risk tolerance for the shared helpers
        """
        super().__init__(base_risk=base_risk)
        self.provider = provider
        self.fallback = fallback if fallback is not None else HeuristicPolicy(base_risk=base_risk)
        self.timeout = timeout
        self.fallback_count = 0
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="decision-provider")

    def decide(self, context: DecisionContext) -> StrategyDecision:
        """Ask the provider, falling back to the local policy on any failure."""
        payload = build_request_payload(context)
        future = self._executor.submit(self.provider.request, payload)

        try:
            raw = future.result(timeout=self.timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.warning("Decision provider timed out after %.2fs, using fallback", self.timeout)
            return self._fall_back(context)
        except Exception as exc:
            logger.warning("Decision provider failed (%s), using fallback", exc)
            return self._fall_back(context)

        if not isinstance(raw, Mapping):
            logger.warning("Decision provider returned %s instead of a mapping, using fallback", type(raw).__name__)
            return self._fall_back(context)

        return sanitize_decision(raw)

    def _fall_back(self, context: DecisionContext) -> StrategyDecision:
        self.fallback_count += 1
        return self.fallback.decide(context)

    def close(self) -> None:
        """Release the worker thread without waiting for in-flight requests."""
        self._executor.shutdown(wait=False, cancel_futures=True)
