"""
Activity kinds and their dwell/displacement profiles.

The catalog is ordered: iterating it yields kinds in the fixed order
stopped, walking, running, cycling, vehicle, unknown. Every per-event
re-evaluation walks the kinds in this order.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping

class ActivityKind(str, Enum):
    """Discrete classified modes of movement."""
    STOPPED = "stopped"
    WALKING = "walking"
    RUNNING = "running"
    CYCLING = "cycling"
    VEHICLE = "vehicle"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        """Human-readable name used in log lines."""
        return self.value.capitalize()

class Confidence(str, Enum):
    """Classifier confidence attached to each motion report."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

DEFAULT_MIN_DWELL_SECONDS: Dict[ActivityKind, float] = {
    ActivityKind.STOPPED: 30.0,
    ActivityKind.WALKING: 30.0,
    ActivityKind.RUNNING: 60.0,
    ActivityKind.CYCLING: 60.0,
    ActivityKind.VEHICLE: 60.0,
    ActivityKind.UNKNOWN: 60.0,
}

DEFAULT_MIN_DISPLACEMENT_METERS: Dict[ActivityKind, float] = {
    ActivityKind.STOPPED: 0.0,
    ActivityKind.WALKING: 30.0,
    ActivityKind.RUNNING: 30.0,
    ActivityKind.CYCLING: 50.0,
    ActivityKind.VEHICLE: 50.0,
    ActivityKind.UNKNOWN: 100.0,
}

@dataclass(frozen=True)
class ActivityProfile:
    """Thresholds a kind must pass before it counts as active or as a trip."""
    min_dwell_seconds: float
    min_displacement_meters: float

class ActivityCatalog:
    """
    Immutable table of activity profiles, one per ActivityKind.

    Args:
        min_dwell_seconds: Minimum uninterrupted run, per kind, before promotion
        min_displacement_meters: Minimum distance from the activation point, per kind,
            before a trip starts
    """

    def __init__(self,
                 min_dwell_seconds: Mapping[ActivityKind, float] = DEFAULT_MIN_DWELL_SECONDS,
                 min_displacement_meters: Mapping[ActivityKind, float] = DEFAULT_MIN_DISPLACEMENT_METERS):
        profiles = {}
        for kind in ActivityKind:
            profiles[kind] = ActivityProfile(
                min_dwell_seconds=float(min_dwell_seconds[kind]),
                min_displacement_meters=float(min_displacement_meters[kind]),
            )
        self._profiles = MappingProxyType(profiles)

    @classmethod
    def from_config(cls, config) -> "ActivityCatalog":
        """Build the catalog from an ActivityConfig."""
        return cls(config.min_dwell_seconds, config.min_displacement_meters)

    def profile(self, kind: ActivityKind) -> ActivityProfile:
        return self._profiles[kind]

    def __iter__(self) -> Iterator[ActivityKind]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)
