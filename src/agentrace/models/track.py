"""Track segment model."""

import math
from enum import Enum

from pydantic import BaseModel, Field


class SegmentType(str, Enum):
    """Track segment types."""

    STRAIGHT = "straight"
    CORNER = "corner"
    CHICANE = "chicane"
    HAIRPIN = "hairpin"
    S_CURVE = "s-curve"
    DOUBLE_APEX = "double-apex"
    FAST_SWEEP = "fast-sweep"
    SLOW_SWEEP = "slow-sweep"


# Segment types whose speed is capped by lateral grip
GRIP_LIMITED_TYPES = frozenset({
    SegmentType.CORNER,
    SegmentType.HAIRPIN,
    SegmentType.S_CURVE,
    SegmentType.DOUBLE_APEX,
    SegmentType.FAST_SWEEP,
    SegmentType.SLOW_SWEEP,
})


class TrackSegment(BaseModel):
    """One piece of the circuit.

    Everything except ``obstacle`` is fixed for the duration of a race.
    """

    id: int = Field(..., description="Segment identifier")
    type: SegmentType = Field(default=SegmentType.STRAIGHT, description="Segment type")
    length: float = Field(..., gt=0, description="Segment length in meters")

    start: tuple[float, float] | None = Field(default=None, description="Start coordinates")
    end: tuple[float, float] | None = Field(default=None, description="End coordinates")

    grip: float = Field(default=1.0, gt=0.0, le=2.0, description="Surface grip level")
    radius: float | None = Field(default=None, gt=0, description="Corner radius in meters")
    altitude: float = Field(default=0.0, description="Altitude above sea level in meters")
    bank_angle: float = Field(default=0.0, description="Banking angle in radians")
    hazard_level: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Likelihood of hazards (slows everyone down)",
    )

    drag_multiplier: float = Field(default=1.0, gt=0, description="Drag modifier (tunnels, etc.)")
    grip_multiplier: float = Field(default=1.0, gt=0, description="Grip modifier for special surfaces")
    energy_multiplier: float = Field(default=1.0, gt=0, description="Energy use modifier (climbs, etc.)")

    obstacle: str | None = Field(default=None, description="Transient obstacle marker")

    @property
    def has_geometry(self) -> bool:
        """Whether start and end coordinates are known."""
        return self.start is not None and self.end is not None

    @property
    def direction(self) -> float:
        """Direction of travel in radians (0 when geometry is unknown)."""
        if not self.has_geometry:
            return 0.0
        return math.atan2(self.end[1] - self.start[1], self.end[0] - self.start[0])

    def point_at(self, progress: float) -> tuple[float, float] | None:
        """Interpolate world coordinates at a progress fraction."""
        if not self.has_geometry:
            return None
        return (
            self.start[0] + (self.end[0] - self.start[0]) * progress,
            self.start[1] + (self.end[1] - self.start[1]) * progress,
        )

    @property
    def is_grip_limited(self) -> bool:
        """Whether cornering grip caps the speed through this segment."""
        return self.type in GRIP_LIMITED_TYPES


def track_length(segments: list[TrackSegment]) -> float:
    """Total length of a track in meters."""
    return sum(segment.length for segment in segments)
