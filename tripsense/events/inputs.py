"""
Input events for TripSense.

This module defines the events delivered by the external collaborators: the
motion classifier and the location provider. The trip detection service
converts them into engine inputs.
"""

from typing import Literal
from pydantic import Field
from tripsense.core.events import BaseEvent, EventType
from tripsense.engine.activity import ActivityKind, Confidence
from tripsense.engine.state import MotionEvent, LocationFix

class MotionActivityEvent(BaseEvent):
    """
    Event published when the motion classifier reports an activity.

    The event timestamp is the time the classifier observed the activity,
    not the time of delivery.
    """
    type: Literal[EventType.MOTION_ACTIVITY] = EventType.MOTION_ACTIVITY
    kind: ActivityKind
    confidence: Confidence

    def to_motion_event(self) -> MotionEvent:
        return MotionEvent(
            kind=ActivityKind(self.kind),
            confidence=Confidence(self.confidence),
            timestamp=self.timestamp,
        )

    @classmethod
    def from_motion_event(cls, motion: MotionEvent, producer_name: str = "") -> "MotionActivityEvent":
        return cls(
            producer_name=producer_name,
            kind=motion.kind,
            confidence=motion.confidence,
            timestamp=motion.timestamp,
        )

class LocationFixEvent(BaseEvent):
    """
    Event published when the location provider delivers a position fix.
    """
    type: Literal[EventType.LOCATION_FIX] = EventType.LOCATION_FIX
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    horizontal_accuracy: float = Field(ge=0.0)  # meters

    def to_fix(self) -> LocationFix:
        return LocationFix(
            latitude=self.latitude,
            longitude=self.longitude,
            horizontal_accuracy=self.horizontal_accuracy,
            timestamp=self.timestamp,
        )

class RegionExitedEvent(BaseEvent):
    """
    Event published when the device leaves the monitored region.
    """
    type: Literal[EventType.REGION_EXITED] = EventType.REGION_EXITED
    region_id: str

class RegionEnteredEvent(BaseEvent):
    """
    Event published when the device enters the monitored region.

    The region is always created around the current position, so this
    notification is not expected in normal operation.
    """
    type: Literal[EventType.REGION_ENTERED] = EventType.REGION_ENTERED
    region_id: str
