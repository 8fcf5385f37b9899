"""
Trip detection service.

Feeds motion reports, location fixes and region notifications from the bus
into the TripEngine and publishes the engine's domain events, in order.
"""

import asyncio
from typing import Any, ClassVar, Dict, List, Optional

from tripsense.core.bus import EventBus
from tripsense.core.config import ApplicationConfig, BacklogMode, get_config
from tripsense.core.events import BaseEvent, EventType
from tripsense.core.registry import ServiceRegistry
from tripsense.core.service import BaseService
from tripsense.engine.activity import ActivityCatalog
from tripsense.engine.state import InvariantViolation, LocationFix, MotionEvent
from tripsense.engine.trip_engine import TripEngine
from tripsense.events.system import ServiceErrorEvent
from tripsense.events.trips import (
    MotionObservedEvent, ActivityChangedEvent, TripStartedEvent, TripEndedEvent,
    GeofenceArmedEvent, GeofenceDisarmedEvent
)

class TripDetectionService(BaseService):
    """
    Owns the TripEngine and serializes every engine call under one lock.

    Each input event is processed to completion, including publishing the
    resulting domain events, before the next one is accepted. After leaving
    the geofence the service replays the motion classifier's backlog before
    any further fix is processed, so activity changes that happened while
    location updates were paused are not lost.
    """

    PRODUCES_EVENTS: ClassVar[Dict[EventType, Dict[str, Any]]] = {
        EventType.MOTION_OBSERVED: {
            'schema': MotionObservedEvent,
            'description': "A medium or high confidence motion report was accepted"
        },
        EventType.ACTIVITY_CHANGED: {
            'schema': ActivityChangedEvent,
            'description': "A new activity kind became active"
        },
        EventType.TRIP_STARTED: {
            'schema': TripStartedEvent,
            'description': "Displacement confirmed the start of a trip"
        },
        EventType.TRIP_ENDED: {
            'schema': TripEndedEvent,
            'description': "The trip in progress ended"
        },
        EventType.GEOFENCE_ARMED: {
            'schema': GeofenceArmedEvent,
            'description': "Continuous location sampling was replaced by a watch region"
        },
        EventType.GEOFENCE_DISARMED: {
            'schema': GeofenceDisarmedEvent,
            'description': "The watch region was dropped and continuous sampling resumed"
        },
        EventType.SERVICE_ERROR: {
            'schema': ServiceErrorEvent,
            'description': "A service hit an error"
        },
    }

    CONSUMES_EVENTS: ClassVar[Dict[EventType, str]] = {
        EventType.MOTION_ACTIVITY: "handle_event",
        EventType.LOCATION_FIX: "handle_event",
        EventType.REGION_EXITED: "handle_event",
        EventType.REGION_ENTERED: "handle_event",
    }

    def __init__(self,
                 event_bus: EventBus,
                 service_registry: ServiceRegistry,
                 config: Optional[ApplicationConfig] = None,
                 location_provider=None,
                 motion_classifier=None,
                 name: Optional[str] = None):
        """
        Initialize the service.

        Args:
            event_bus: The event bus for publishing and subscribing to events
            service_registry: The service registry for service lifecycle management
            config: Application configuration (loaded from the environment if omitted)
            location_provider: Provider the geofence controller drives
            motion_classifier: Classifier queried for backlog after a region exit
            name: Optional service name
        """
        config = config or get_config()
        super().__init__(event_bus, service_registry, name=name or "trip_detection", config=config)
        self.motion_classifier = motion_classifier
        self.engine = TripEngine(
            catalog=ActivityCatalog.from_config(config.activity),
            location_provider=location_provider,
            geofence_radius_meters=config.trip.geofence_radius_meters,
            producer_name=self.name,
        )
        self._engine_lock = asyncio.Lock()

    async def handle_event(self, event: BaseEvent) -> None:
        """
        Dispatch an input event to the engine.

        Args:
            event: A motion, location or region event
        """
        if event.type == EventType.MOTION_ACTIVITY:
            await self.process_motion(event.to_motion_event())
        elif event.type == EventType.LOCATION_FIX:
            await self.process_fix(event.to_fix())
        elif event.type == EventType.REGION_EXITED:
            await self.process_region_exit(event.timestamp)
        elif event.type == EventType.REGION_ENTERED:
            async with self._engine_lock:
                await self._run(self.engine.on_region_enter, event.timestamp, event.region_id)

    async def process_motion(self, motion: MotionEvent) -> None:
        async with self._engine_lock:
            await self._run(self.engine.on_motion_event, motion)

    async def process_fix(self, fix: LocationFix) -> None:
        async with self._engine_lock:
            await self._run(self.engine.on_location_fix, fix)
            if self.config.trip.poll_backlog_on_fix:
                await self._replay_backlog(fix.timestamp, latest_only=False)

    async def process_region_exit(self, timestamp: float) -> None:
        async with self._engine_lock:
            await self._run(self.engine.on_region_exit, timestamp)
            await self._replay_backlog(
                timestamp,
                latest_only=self.config.trip.backlog_mode == BacklogMode.LATEST
            )

    async def _replay_backlog(self, until: float, latest_only: bool) -> int:
        """
        Feed motion reports queued by the classifier into the engine, oldest first.

        Reports at or before the last processed one are skipped as already seen.

        Returns:
            Number of reports replayed
        """
        if self.motion_classifier is None:
            return 0

        since = self.engine.state.last_event_time
        try:
            backlog = await self.motion_classifier.query_history(since, until, latest_only=latest_only)
        except Exception as e:
            self.logger.error("Motion backlog query failed", error=str(e), exc_info=True)
            return 0

        replayed = 0
        for motion in sorted(backlog, key=lambda m: m.timestamp):
            last = self.engine.state.last_event_time
            if last is not None and motion.timestamp <= last:
                continue
            await self._run(self.engine.on_motion_event, motion)
            replayed += 1

        if replayed:
            self.logger.info("Replayed motion backlog", count=replayed, since=since, until=until)
        return replayed

    async def _run(self, ingress, *args) -> List[BaseEvent]:
        """Call an engine ingress and publish what it emits."""
        try:
            events = ingress(*args)
        except InvariantViolation as e:
            self.logger.error("Engine invariant violated", error=str(e), exc_info=True)
            await self.publish(ServiceErrorEvent(
                service_name=self.name,
                error_type=type(e).__name__,
                error_message=str(e),
            ))
            raise

        for event in events:
            await self.publish(event)
        return events
