"""
Core event system for TripSense.

This module defines the base event model and event type enum that form the foundation
of the typed event system. All events in the system should inherit from BaseEvent.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from enum import Enum
import time
import uuid

class EventType(str, Enum):
    """
    Enum defining all event types in the system.

    Using string-based enum to ensure JSON serialization works properly.
    """
    # Input events from the motion classifier and location provider
    MOTION_ACTIVITY = "motion_activity"
    LOCATION_FIX = "location_fix"
    REGION_EXITED = "region_exited"
    REGION_ENTERED = "region_entered"

    # Domain events produced by the trip engine
    MOTION_OBSERVED = "motion_observed"
    ACTIVITY_CHANGED = "activity_changed"
    TRIP_STARTED = "trip_started"
    TRIP_ENDED = "trip_ended"
    GEOFENCE_ARMED = "geofence_armed"
    GEOFENCE_DISARMED = "geofence_disarmed"

    # Application lifecycle events
    APPLICATION_STARTUP_COMPLETED = "application_startup_completed"

    # System events
    SERVICE_ERROR = "service_error"
    SERVICE_STATE_CHANGED = "service_state_changed"

def generate_trace_id() -> str:
    """Generate a unique trace ID for event tracing."""
    return str(uuid.uuid4())

class BaseEvent(BaseModel):
    """
    Base model for all events with common metadata.

    All events in the system should inherit from this class and specify the event type
    and any additional payload fields required for that event.
    """
    model_config = ConfigDict(
        # Allow extra attributes to be specified (useful for future compatibility)
        extra="allow",
        # Use enum values rather than the enum objects themselves
        use_enum_values=True,
    )

    type: EventType
    producer_name: str = ""
    timestamp: float = Field(default_factory=time.time)
    trace_id: Optional[str] = Field(default_factory=generate_trace_id)
