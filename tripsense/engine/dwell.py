"""Per-kind tracking of uninterrupted runs of motion reports."""

import structlog

from tripsense.engine.activity import ActivityCatalog, Confidence
from tripsense.engine.geo import Location
from tripsense.engine.state import EngineState, MotionEvent

class DwellTracker:
    """
    Updates the dwell table from classified motion reports.

    A report of one kind starts that kind's run (if not already running) and
    breaks the run of every other kind. Repeated reports of the same kind
    never restart its clock.
    """

    def __init__(self, catalog: ActivityCatalog, state: EngineState):
        self.catalog = catalog
        self.state = state
        self.logger = structlog.get_logger(component="dwell_tracker")

    def observe(self, event: MotionEvent) -> bool:
        """
        Apply a motion report to the dwell table.

        Returns:
            False if the report was discarded for low confidence, True otherwise
        """
        if event.confidence == Confidence.LOW:
            return False

        for kind in self.catalog:
            dwell = self.state.dwell[kind]
            if kind == event.kind:
                if dwell.dwell_start_time is None:
                    dwell.dwell_start_time = event.timestamp
                    dwell.dwell_start_location = self.state.current_location
                    self.logger.debug("Dwell started", kind=kind.value, at=event.timestamp)
                    # a new run of the active kind moves the trip anchor with it
                    if kind == self.state.active_kind and dwell.dwell_start_location is not None:
                        self.state.active_anchor = dwell.dwell_start_location
            elif dwell.dwell_start_time is not None:
                self.logger.debug("Dwell interrupted", kind=kind.value, by=event.kind.value)
                dwell.reset()

        self.state.last_event_time = event.timestamp
        return True

    def anchor(self, location: Location) -> None:
        """Anchor runs that started before any position was known."""
        for kind in self.catalog:
            dwell = self.state.dwell[kind]
            if dwell.dwell_start_time is not None and dwell.dwell_start_location is None:
                dwell.dwell_start_location = location
