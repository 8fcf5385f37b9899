"""Promotion of a dwelling activity kind to the single active kind."""

from typing import Callable

import structlog

from tripsense.core.events import BaseEvent
from tripsense.engine.activity import ActivityCatalog, ActivityKind
from tripsense.engine.geofence import GeofenceController
from tripsense.engine.state import EngineState
from tripsense.events.trips import ActivityChangedEvent, TripEndedEvent

class ActivationPolicy:
    """
    Promotes a kind once its run has lasted strictly longer than its minimum dwell.

    Promotion demotes every other kind and breaks their runs, ends any trip in
    progress (a mode change alone ends the previous trip) and hands geofencing
    to the GeofenceController: armed while stopped, disarmed otherwise.
    """

    def __init__(self,
                 catalog: ActivityCatalog,
                 state: EngineState,
                 geofence: GeofenceController,
                 emit: Callable[[BaseEvent], None]):
        self.catalog = catalog
        self.state = state
        self.geofence = geofence
        self.emit = emit
        self.logger = structlog.get_logger(component="activation_policy")

    def reevaluate(self, kind: ActivityKind) -> bool:
        """
        Promote kind if it has dwelled long enough.

        Returns:
            True if kind was promoted by this call
        """
        dwell = self.state.dwell[kind]
        if dwell.dwell_start_time is None or dwell.is_active:
            return False

        elapsed = self.state.last_event_time - dwell.dwell_start_time
        if elapsed <= self.catalog.profile(kind).min_dwell_seconds:
            return False

        now = self.state.last_event_time
        for other in self.catalog:
            if other == kind:
                continue
            self.state.dwell[other].is_active = False
            self.state.dwell[other].reset()

        dwell.is_active = True
        self.state.active_kind = kind
        self.state.active_anchor = dwell.dwell_start_location
        self.logger.info("Activity changed", kind=kind.value, since=dwell.dwell_start_time, elapsed=elapsed)
        self.emit(ActivityChangedEvent(
            kind=kind,
            since=dwell.dwell_start_time,
            label=kind.label,
            timestamp=now,
        ))

        if self.state.trip_in_progress:
            self.state.trip_in_progress = False
            reason = "stopped" if kind == ActivityKind.STOPPED else "mode_change"
            self.logger.info("Trip ended", kind=kind.value, reason=reason)
            self.emit(TripEndedEvent(kind=kind, reason=reason, timestamp=now))

        if kind == ActivityKind.STOPPED:
            self.geofence.arm(now)
        else:
            self.geofence.disarm(now, reason="activity_changed")
        return True
