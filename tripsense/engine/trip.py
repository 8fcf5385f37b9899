"""Trip start and end decisions."""

from enum import Enum
from typing import Callable

import structlog

from tripsense.core.events import BaseEvent
from tripsense.engine.activity import ActivityCatalog, ActivityKind
from tripsense.engine.geo import distance_meters
from tripsense.engine.state import EngineState, InvariantViolation
from tripsense.events.trips import TripStartedEvent, TripEndedEvent

class TripPhase(Enum):
    NO_TRIP = "no_trip"
    TRIP_ACTIVE = "trip_active"

class TripStateMachine:
    """
    Two-state machine: NO_TRIP until displacement confirms a trip, TRIP_ACTIVE
    until stopped becomes the active kind.

    A trip starts when, with a moving kind active, the distance from the point
    where that kind became active to the current fix is strictly greater than
    the kind's minimum displacement plus the fix's horizontal accuracy.
    """

    def __init__(self, catalog: ActivityCatalog, state: EngineState, emit: Callable[[BaseEvent], None]):
        self.catalog = catalog
        self.state = state
        self.emit = emit
        self.logger = structlog.get_logger(component="trip_state_machine")

    @property
    def phase(self) -> TripPhase:
        return TripPhase.TRIP_ACTIVE if self.state.trip_in_progress else TripPhase.NO_TRIP

    def reevaluate(self, now: float) -> TripPhase:
        state = self.state
        kind = state.active_kind

        if kind == ActivityKind.STOPPED:
            if state.trip_in_progress:
                state.trip_in_progress = False
                self.logger.info("Trip ended", kind=kind.value)
                self.emit(TripEndedEvent(kind=kind, reason="stopped", timestamp=now))
            return self.phase

        if state.trip_in_progress or kind is None or state.current_location is None:
            return self.phase

        if state.active_anchor is None:
            raise InvariantViolation(f"active kind {kind.value} has no activation location")

        distance = distance_meters(state.active_anchor, state.current_location)
        threshold = (self.catalog.profile(kind).min_displacement_meters
                     + state.current_location.horizontal_accuracy)
        if distance > threshold:
            state.trip_in_progress = True
            self.logger.info("Trip started", kind=kind.value,
                             distance=round(distance, 1), threshold=round(threshold, 1))
            self.emit(TripStartedEvent(kind=kind, distance_meters=distance, timestamp=now))
        return self.phase
