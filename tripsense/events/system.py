"""
System events for TripSense.

This module defines events related to application lifecycle, service state,
and system-level operations.
"""

from typing import Dict, Any, Optional, Literal
from tripsense.core.events import BaseEvent, EventType

class ApplicationStartupCompletedEvent(BaseEvent):
    """
    Event published when application startup has completed.

    This event signals that all services have been started and the
    application is ready to receive motion and location input.
    """
    type: Literal[EventType.APPLICATION_STARTUP_COMPLETED] = EventType.APPLICATION_STARTUP_COMPLETED

class ServiceStateChangedEvent(BaseEvent):
    """
    Event published when a service changes state.

    This event is used to communicate service lifecycle changes
    (started, stopping, stopped).
    """
    type: Literal[EventType.SERVICE_STATE_CHANGED] = EventType.SERVICE_STATE_CHANGED
    service_name: str
    state: str  # 'started', 'stopping', 'stopped', 'error'
    error: Optional[str] = None  # Present only if state is 'error'

class ServiceErrorEvent(BaseEvent):
    """
    Event published when a service encounters an error.

    This event provides details about the error condition so that log
    collaborators can record it before the error propagates.
    """
    type: Literal[EventType.SERVICE_ERROR] = EventType.SERVICE_ERROR
    service_name: str
    error_type: str
    error_message: str
    details: Optional[Dict[str, Any]] = None
