"""
Engine inputs and mutable state.

EngineState is the single owned value every engine component reads and
mutates. It is not thread-safe; callers serialize access.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from tripsense.engine.activity import ActivityKind, Confidence
from tripsense.engine.geo import Location

class InvariantViolation(RuntimeError):
    """Raised when engine state breaks an invariant the state machine relies on."""

@dataclass(frozen=True)
class MotionEvent:
    """A classified motion report."""
    kind: ActivityKind
    confidence: Confidence
    timestamp: float

@dataclass(frozen=True)
class LocationFix:
    """A position report from the location provider."""
    latitude: float
    longitude: float
    horizontal_accuracy: float
    timestamp: float

    def to_location(self) -> Location:
        return Location(self.latitude, self.longitude, self.horizontal_accuracy, self.timestamp)

@dataclass
class DwellState:
    """Per-kind run tracking."""
    dwell_start_time: Optional[float] = None
    dwell_start_location: Optional[Location] = None
    is_active: bool = False

    def reset(self) -> None:
        """Break the current run."""
        self.dwell_start_time = None
        self.dwell_start_location = None

@dataclass
class EngineState:
    active_kind: Optional[ActivityKind] = None
    # start location of the active kind's latest located run
    active_anchor: Optional[Location] = None
    trip_in_progress: bool = False
    current_location: Optional[Location] = None
    geofence_armed: bool = False
    last_event_time: Optional[float] = None
    dwell: Dict[ActivityKind, DwellState] = field(
        default_factory=lambda: {kind: DwellState() for kind in ActivityKind}
    )

    def check_invariants(self) -> None:
        """Raise InvariantViolation if the state is inconsistent."""
        active = [kind for kind, dwell in self.dwell.items() if dwell.is_active]
        if len(active) > 1:
            raise InvariantViolation(
                f"more than one active kind: {', '.join(kind.value for kind in active)}"
            )
        expected = active[0] if active else None
        if expected != self.active_kind:
            raise InvariantViolation(
                f"active kind {self.active_kind} does not match dwell table ({expected})"
            )
        if self.trip_in_progress and self.active_kind in (None, ActivityKind.STOPPED):
            raise InvariantViolation(f"trip in progress while active kind is {self.active_kind}")
