"""
Activity log service.

Turns domain events into timestamped log lines. Activity changes, trips and
geofence transitions go to the trip log; every accepted motion report goes to
the debug log, colored by classifier confidence.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Deque, Dict, List, Optional

from tripsense.core.bus import EventBus
from tripsense.core.config import ApplicationConfig
from tripsense.core.events import BaseEvent, EventType
from tripsense.core.registry import ServiceRegistry
from tripsense.core.service import BaseService

CONFIDENCE_COLORS = {
    "high": "green",
    "medium": "yellow",
    "low": "red",
}

@dataclass(frozen=True)
class LogLine:
    text: str
    color: str = "white"

def format_line(timestamp: float, label: str) -> str:
    """Format a log entry as HH:MM:SS: label, in local time."""
    return f"{datetime.fromtimestamp(timestamp).strftime('%H:%M:%S')}: {label}"

class ActivityLogService(BaseService):
    """
    Keeps a bounded trip log and debug log of the engine's domain events.
    """

    CONSUMES_EVENTS: ClassVar[Dict[EventType, str]] = {
        EventType.MOTION_OBSERVED: "handle_event",
        EventType.ACTIVITY_CHANGED: "handle_event",
        EventType.TRIP_STARTED: "handle_event",
        EventType.TRIP_ENDED: "handle_event",
        EventType.GEOFENCE_ARMED: "handle_event",
        EventType.GEOFENCE_DISARMED: "handle_event",
        EventType.SERVICE_ERROR: "handle_event",
    }

    def __init__(self,
                 event_bus: EventBus,
                 service_registry: ServiceRegistry,
                 config: Optional[ApplicationConfig] = None,
                 name: Optional[str] = None,
                 history: Optional[int] = None):
        super().__init__(event_bus, service_registry, name=name or "activity_log", config=config)
        if history is None:
            history = config.trip.log_history if config is not None else 500
        self.trip_log: Deque[LogLine] = deque(maxlen=history)
        self.debug_log: Deque[LogLine] = deque(maxlen=history)

    async def handle_event(self, event: BaseEvent) -> None:
        if event.type == EventType.MOTION_OBSERVED:
            color = CONFIDENCE_COLORS.get(event.confidence, "white")
            self._write(self.debug_log, "debug", format_line(event.timestamp, event.label), color)
        elif event.type == EventType.ACTIVITY_CHANGED:
            # stamped with when the run began, as the run is what got confirmed
            self._write(self.trip_log, "trip", format_line(event.since, event.label))
        elif event.type == EventType.SERVICE_ERROR:
            label = f"{event.service_name} error: {event.error_message}"
            self._write(self.trip_log, "trip", format_line(event.timestamp, label), "red")
        else:
            self._write(self.trip_log, "trip", format_line(event.timestamp, event.label))

    def _write(self, pane: Deque[LogLine], pane_name: str, text: str, color: str = "white") -> None:
        pane.append(LogLine(text, color))
        self.logger.info(text, pane=pane_name, color=color)

    def trip_lines(self) -> List[str]:
        return [line.text for line in self.trip_log]

    def debug_lines(self) -> List[str]:
        return [line.text for line in self.debug_log]
