"""
Event tracing for TripSense.

The tracer keeps the most recent published events in a ring buffer so a
session can be reviewed after replay: which events fired, who produced them
and in what order.
"""

import time
import logging
from typing import Dict, List, Optional, Any, Deque
from collections import deque, Counter
from .events import BaseEvent

# fields carried on every event; the rest of the model is the payload
_ENVELOPE = {'type', 'producer_name', 'timestamp', 'trace_id'}

class EventTracer:
    """
    Ring buffer of published events.

    Args:
        max_events: Number of events kept; older ones are evicted first
    """

    def __init__(self, max_events: int = 1000):
        self.events: Deque[Dict[str, Any]] = deque(maxlen=max_events)
        self.logger = logging.getLogger(__name__)

    def record_event(self, event: BaseEvent) -> None:
        """
        Append an event to the buffer, evicting the oldest when full.

        Args:
            event: The event being published
        """
        self.events.append({
            'type': event.type,
            'producer': event.producer_name,
            'timestamp': event.timestamp,
            'trace_id': event.trace_id,
            'recorded_at': time.time(),
            'payload': event.model_dump(exclude=_ENVELOPE),
        })

    def get_trace(self, trace_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Get all recorded events, or only those carrying a trace ID.

        Args:
            trace_id: The trace ID to filter by, or None for all events
        """
        return [e for e in self.events if trace_id is None or e['trace_id'] == trace_id]

    def get_events_by_type(self, event_type: str) -> List[Dict[str, Any]]:
        """
        Get recorded events of one type, oldest first.

        Args:
            event_type: The event type to filter by
        """
        return [e for e in self.events if e['type'] == event_type]

    def get_events_by_producer(self, producer_name: str) -> List[Dict[str, Any]]:
        """
        Get recorded events from one producer, oldest first.

        Args:
            producer_name: The producer to filter by
        """
        return [e for e in self.events if e['producer'] == producer_name]

    def get_event_count(self) -> int:
        """Number of events currently in the buffer."""
        return len(self.events)

    def clear(self) -> None:
        """Drop all recorded events."""
        self.events.clear()

    def get_event_stats(self) -> Dict[str, Any]:
        """
        Summarize the buffer.

        Returns:
            Dictionary with the total count and counts per event type and per producer
        """
        return {
            'total_events': len(self.events),
            'event_types': dict(Counter(e['type'] for e in self.events)),
            'producers': dict(Counter(e['producer'] for e in self.events)),
        }
