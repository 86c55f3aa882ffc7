"""Strategy decision produced by a decision policy."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any


class OvertakeIntent(str, Enum):
    """Overtaking intent."""

    NONE = "none"
    ATTEMPT = "attempt"
    DEFEND = "defend"


class PitIntent(str, Enum):
    """Pit stop intent."""

    NONE = "none"
    IMMEDIATE = "immediate"
    NEXT_LAP = "next_lap"


class EnergyMode(str, Enum):
    """Energy management mode."""

    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"
    CONSERVATIVE = "conservative"


@dataclass(frozen=True)
class StrategyDecision:
    """Control decision for one vehicle for one tick."""

    throttle: float = 0.5
    braking: float = 0.0
    steering: float = 0.0
    risk_level: float = 0.3
    overtaking: OvertakeIntent = OvertakeIntent.NONE
    pit: PitIntent = PitIntent.NONE
    boost: bool = False
    energy_mode: EnergyMode = EnergyMode.BALANCED

    @classmethod
    def safe_default(cls) -> "StrategyDecision":
        """Decision used when no trustworthy decision is available."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict with string enum values."""
        return {
            "throttle": self.throttle,
            "braking": self.braking,
            "steering": self.steering,
            "risk_level": self.risk_level,
            "overtaking": self.overtaking.value,
            "pit": self.pit.value,
            "boost": self.boost,
            "energy_mode": self.energy_mode.value,
        }


# Wire names used by remote decision providers
_WIRE_KEYS = {
    "throttle": ("throttle",),
    "braking": ("braking",),
    "steering": ("steering",),
    "risk_level": ("riskLevel", "risk_level"),
    "overtaking": ("overtakingDecision", "overtaking"),
    "pit": ("pitDecision", "pit"),
    "boost": ("drsActivation", "boost"),
    "energy_mode": ("energyManagement", "energy_mode"),
}

_DEFAULT = StrategyDecision.safe_default()


def _clamp(value: Any, low: float, high: float, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(low, min(high, number))


def _enum(enum_cls: type[Enum], value: Any, default: Enum) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        return default


def _lookup(raw: Mapping[str, Any], name: str) -> Any:
    for key in _WIRE_KEYS[name]:
        if key in raw:
            return raw[key]
    return None


def sanitize_decision(raw: Any) -> StrategyDecision:
    """Clamp and validate a decision from any source.

    Accepts a StrategyDecision, a mapping (camelCase wire keys or snake_case
    field names), or anything else. Out-of-range numbers are clamped, and
    missing or unknown values fall back to the safe default.

    Args:
        raw: Decision candidate

    Returns:
        A decision whose every field lies in its valid range
    """
    if isinstance(raw, StrategyDecision):
        values = {f.name: getattr(raw, f.name) for f in fields(StrategyDecision)}
    elif isinstance(raw, Mapping):
        values = {name: _lookup(raw, name) for name in _WIRE_KEYS}
    else:
        return StrategyDecision.safe_default()

    boost = values["boost"]
    return StrategyDecision(
        throttle=_clamp(values["throttle"], 0.0, 1.0, _DEFAULT.throttle),
        braking=_clamp(values["braking"], 0.0, 1.0, _DEFAULT.braking),
        steering=_clamp(values["steering"], -1.0, 1.0, _DEFAULT.steering),
        risk_level=_clamp(values["risk_level"], 0.0, 1.0, _DEFAULT.risk_level),
        overtaking=_enum(OvertakeIntent, values["overtaking"], _DEFAULT.overtaking),
        pit=_enum(PitIntent, values["pit"], _DEFAULT.pit),
        boost=boost if isinstance(boost, bool) else _DEFAULT.boost,
        energy_mode=_enum(EnergyMode, values["energy_mode"], _DEFAULT.energy_mode),
    )
