"""
TripEngine: the single owner of engine state.

All mutation goes through the ingress methods. Each call runs to completion
and returns, in order, the domain events it produced. The engine is not
thread-safe; callers must serialize calls.
"""

from typing import List, Optional

import structlog

from tripsense.core.events import BaseEvent
from tripsense.engine.activation import ActivationPolicy
from tripsense.engine.activity import ActivityCatalog, ActivityKind
from tripsense.engine.dwell import DwellTracker
from tripsense.engine.geofence import GeofenceController
from tripsense.engine.state import EngineState, LocationFix, MotionEvent
from tripsense.engine.trip import TripStateMachine
from tripsense.events.trips import MotionObservedEvent

class TripEngine:
    """
    Runs motion reports and location fixes through dwell tracking, activation,
    trip detection and geofencing.

    Args:
        catalog: Activity profiles (defaults to the built-in table)
        location_provider: Provider the geofence controller drives
        geofence_radius_meters: Radius of the stationary watch region
        producer_name: Producer name stamped on emitted events
    """

    def __init__(self,
                 catalog: Optional[ActivityCatalog] = None,
                 location_provider=None,
                 geofence_radius_meters: float = 30.0,
                 producer_name: str = "trip_engine"):
        self.catalog = catalog or ActivityCatalog()
        self.state = EngineState()
        self.producer_name = producer_name
        self._outbox: List[BaseEvent] = []
        self.logger = structlog.get_logger(component="trip_engine")

        self.dwell = DwellTracker(self.catalog, self.state)
        self.geofence = GeofenceController(
            self.state, self._emit,
            location_provider=location_provider,
            radius_meters=geofence_radius_meters,
        )
        self.activation = ActivationPolicy(self.catalog, self.state, self.geofence, self._emit)
        self.trips = TripStateMachine(self.catalog, self.state, self._emit)

    def _emit(self, event: BaseEvent) -> None:
        event.producer_name = self.producer_name
        self._outbox.append(event)

    def _drain(self) -> List[BaseEvent]:
        events, self._outbox = self._outbox, []
        return events

    def on_motion_event(self, event: MotionEvent) -> List[BaseEvent]:
        """Process one classified motion report."""
        if not self.dwell.observe(event):
            self.logger.debug("Discarded low confidence motion", kind=event.kind.value)
            return []

        self._emit(MotionObservedEvent(
            kind=event.kind,
            confidence=event.confidence,
            label=event.kind.label,
            timestamp=event.timestamp,
        ))
        for kind in self.catalog:
            self.activation.reevaluate(kind)
        self.trips.reevaluate(event.timestamp)

        self.state.check_invariants()
        return self._drain()

    def on_location_fix(self, fix: LocationFix) -> List[BaseEvent]:
        """Process one position fix."""
        location = fix.to_location()
        self.state.current_location = location
        self.dwell.anchor(location)
        if self.state.active_kind is not None and self.state.active_anchor is None:
            self.state.active_anchor = location
        # stopped may have become active before any position was known
        if self.state.active_kind == ActivityKind.STOPPED and not self.state.geofence_armed:
            self.geofence.arm(fix.timestamp)

        self.trips.reevaluate(fix.timestamp)

        self.state.check_invariants()
        return self._drain()

    def on_region_exit(self, timestamp: float) -> List[BaseEvent]:
        """Handle the provider's notification that the watch region was left."""
        if not self.geofence.disarm(timestamp, reason="region_exit"):
            self.logger.warning("Region exit while geofence not armed")
        return self._drain()

    def on_region_enter(self, timestamp: float, region_id: str = "") -> List[BaseEvent]:
        """Region entry is never expected: the region is centered on the current position."""
        self.logger.warning("Unexpected region entry", region_id=region_id, at=timestamp)
        return self._drain()
