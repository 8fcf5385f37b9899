"""
Unit tests for the EventBus and EventTracer.
"""

import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from tripsense.core.bus import EventBus
from tripsense.core.events import EventType
from tripsense.core.registry import EventRegistry
from tripsense.core.tracing import EventTracer
from tripsense.engine.activity import ActivityKind, Confidence
from tripsense.events.inputs import LocationFixEvent, MotionActivityEvent
from tripsense.events.trips import TripStartedEvent

class TestEventBus(unittest.IsolatedAsyncioTestCase):
    """Test cases for the EventBus class."""

    def setUp(self):
        self.registry = EventRegistry()
        self.registry.register_event(EventType.MOTION_ACTIVITY, MotionActivityEvent, "motion")
        self.registry.register_event(EventType.TRIP_STARTED, TripStartedEvent, "trip")
        self.tracer = EventTracer(max_events=10)
        self.bus = EventBus(self.registry, self.tracer)
        self.received = []

    async def _handler(self, event):
        self.received.append(event)

    def _motion(self, timestamp):
        return MotionActivityEvent(kind=ActivityKind.WALKING, confidence=Confidence.HIGH, timestamp=timestamp)

    async def test_publish_in_order(self):
        self.bus.subscribe(EventType.MOTION_ACTIVITY, self._handler, "test")
        for timestamp in (1.0, 2.0, 3.0):
            await self.bus.publish(self._motion(timestamp), "sender")
        self.assertEqual([e.timestamp for e in self.received], [1.0, 2.0, 3.0])
        self.assertTrue(all(e.producer_name == "sender" for e in self.received))
        self.assertIn("test", self.registry.get_event_flow(EventType.MOTION_ACTIVITY)["consumers"])

    async def test_unregistered_event_dropped(self):
        self.bus.subscribe(None, self._handler, "test")
        fix = LocationFixEvent(latitude=0.0, longitude=0.0, horizontal_accuracy=0.0)
        await self.bus.publish(fix, "sender")
        self.assertEqual(self.received, [])
        self.assertEqual(self.tracer.get_event_count(), 0)

    async def test_wildcard_receives_everything(self):
        self.bus.subscribe(None, self._handler, "test")
        await self.bus.publish(self._motion(1.0), "sender")
        await self.bus.publish(TripStartedEvent(kind=ActivityKind.WALKING, distance_meters=40.0), "sender")
        self.assertEqual([e.type for e in self.received], [EventType.MOTION_ACTIVITY, EventType.TRIP_STARTED])

    async def test_unsubscribe(self):
        self.bus.subscribe(EventType.MOTION_ACTIVITY, self._handler, "test")
        self.bus.unsubscribe(EventType.MOTION_ACTIVITY, self._handler)
        await self.bus.publish(self._motion(1.0), "sender")
        self.assertEqual(self.received, [])
        self.assertNotIn(EventType.MOTION_ACTIVITY, self.bus.subscribers)

    async def test_handler_error_is_isolated(self):
        async def failing(event):
            raise RuntimeError("boom")

        self.bus.subscribe(EventType.MOTION_ACTIVITY, failing, "broken")
        self.bus.subscribe(EventType.MOTION_ACTIVITY, self._handler, "test")
        await self.bus.publish(self._motion(1.0), "sender")
        self.assertEqual(len(self.received), 1)

    async def test_tracer_stats(self):
        await self.bus.publish(self._motion(1.0), "classifier")
        await self.bus.publish(self._motion(2.0), "classifier")
        await self.bus.publish(TripStartedEvent(kind=ActivityKind.WALKING, distance_meters=40.0), "engine")

        stats = self.tracer.get_event_stats()
        self.assertEqual(stats["total_events"], 3)
        self.assertEqual(stats["event_types"][EventType.MOTION_ACTIVITY], 2)
        self.assertEqual(stats["producers"]["engine"], 1)
        self.assertEqual(len(self.tracer.get_events_by_producer("classifier")), 2)

class TestEventRegistry(unittest.TestCase):
    """Test cases for the EventRegistry class."""

    def test_conflicting_schema_rejected(self):
        registry = EventRegistry()
        registry.register_event(EventType.MOTION_ACTIVITY, MotionActivityEvent, "motion")
        registry.register_event(EventType.MOTION_ACTIVITY, MotionActivityEvent, "motion again")
        with self.assertRaises(TypeError):
            registry.register_event(EventType.MOTION_ACTIVITY, LocationFixEvent, "wrong")

    def test_unregistered_type_fails_validation(self):
        registry = EventRegistry()
        registry.register_event(EventType.TRIP_STARTED, TripStartedEvent, "trip")
        with self.assertRaises(ValueError):
            registry.validate_schema(LocationFixEvent(latitude=0.0, longitude=0.0, horizontal_accuracy=0.0))

    def test_describe(self):
        registry = EventRegistry()
        registry.register_event(EventType.TRIP_STARTED, TripStartedEvent, "trip")
        registry.register_event(EventType.MOTION_ACTIVITY, MotionActivityEvent, "motion")
        registry.register_producer("trip_detection", EventType.TRIP_STARTED)
        registry.register_consumer("activity_log", EventType.TRIP_STARTED)

        flows = registry.describe()
        self.assertEqual(list(flows), ["motion_activity", "trip_started"])
        self.assertEqual(flows["trip_started"], {
            "description": "trip",
            "schema": "TripStartedEvent",
            "producers": ["trip_detection"],
            "consumers": ["activity_log"],
        })

if __name__ == "__main__":
    unittest.main()
