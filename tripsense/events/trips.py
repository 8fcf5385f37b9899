"""
Trip events for TripSense.

This module defines the domain events produced by the trip engine. Every event
carries the time it refers to and a human-readable label for log collaborators.
"""

from typing import Literal, Optional
from tripsense.core.events import BaseEvent, EventType
from tripsense.engine.activity import ActivityKind, Confidence

class MotionObservedEvent(BaseEvent):
    """
    Event published for every accepted (medium or high confidence) motion report.
    """
    type: Literal[EventType.MOTION_OBSERVED] = EventType.MOTION_OBSERVED
    kind: ActivityKind
    confidence: Confidence
    label: str

class ActivityChangedEvent(BaseEvent):
    """
    Event published when a new activity kind becomes active.

    The timestamp is when the promotion happened; since is when the
    uninterrupted run of reports that led to it began.
    """
    type: Literal[EventType.ACTIVITY_CHANGED] = EventType.ACTIVITY_CHANGED
    kind: ActivityKind
    since: float
    label: str

class TripStartedEvent(BaseEvent):
    """
    Event published when displacement under an active moving kind confirms a trip.
    """
    type: Literal[EventType.TRIP_STARTED] = EventType.TRIP_STARTED
    kind: ActivityKind
    distance_meters: float
    label: str = "Trip Started"

class TripEndedEvent(BaseEvent):
    """
    Event published when a trip in progress ends.
    """
    type: Literal[EventType.TRIP_ENDED] = EventType.TRIP_ENDED
    kind: Optional[ActivityKind] = None  # kind whose activation ended the trip
    reason: str = "stopped"  # 'stopped' or 'mode_change'
    label: str = "Trip Ended"

class GeofenceArmedEvent(BaseEvent):
    """
    Event published when continuous location sampling is replaced by a watch region.
    """
    type: Literal[EventType.GEOFENCE_ARMED] = EventType.GEOFENCE_ARMED
    region_id: str
    latitude: float
    longitude: float
    radius_meters: float
    label: str = "Geofence Armed"

class GeofenceDisarmedEvent(BaseEvent):
    """
    Event published when the watch region is dropped and continuous sampling resumes.
    """
    type: Literal[EventType.GEOFENCE_DISARMED] = EventType.GEOFENCE_DISARMED
    region_id: str
    reason: str  # 'region_exit' or 'activity_changed'
    label: str = "Geofence Disarmed"
