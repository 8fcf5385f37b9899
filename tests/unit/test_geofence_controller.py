"""
Unit tests for the GeofenceController.
"""

import unittest
from unittest.mock import MagicMock
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from tripsense.core.events import EventType
from tripsense.engine.geo import CircularRegion, Location
from tripsense.engine.geofence import GeofenceController, REGION_IDENTIFIER
from tripsense.engine.state import EngineState

class TestGeofenceController(unittest.TestCase):
    """Test cases for the GeofenceController class."""

    def setUp(self):
        self.state = EngineState()
        self.state.current_location = Location(52.0, 4.0, 8.0, 0.0)
        self.events = []
        self.provider = MagicMock()
        self.controller = GeofenceController(self.state, self.events.append, location_provider=self.provider)

    def test_arm_centers_region_on_current_location(self):
        self.assertTrue(self.controller.arm(10.0))
        self.assertTrue(self.state.geofence_armed)

        expected = CircularRegion(REGION_IDENTIFIER, 52.0, 4.0, 30.0)
        self.provider.stop_updating_location.assert_called_once_with()
        self.provider.start_monitoring.assert_called_once_with(expected)

        armed = self.events[0]
        self.assertEqual(armed.type, EventType.GEOFENCE_ARMED)
        self.assertEqual(armed.radius_meters, 30.0)
        self.assertEqual(armed.timestamp, 10.0)

    def test_arm_is_idempotent(self):
        self.controller.arm(10.0)
        self.assertFalse(self.controller.arm(11.0))
        self.provider.stop_updating_location.assert_called_once()
        self.provider.start_monitoring.assert_called_once()
        self.assertEqual(len(self.events), 1)

    def test_disarm_resumes_updates(self):
        self.controller.arm(10.0)
        self.assertTrue(self.controller.disarm(20.0))
        self.assertFalse(self.state.geofence_armed)
        self.provider.stop_monitoring.assert_called_once()
        self.provider.start_updating_location.assert_called_once_with()

        disarmed = self.events[-1]
        self.assertEqual(disarmed.type, EventType.GEOFENCE_DISARMED)
        self.assertEqual(disarmed.reason, "region_exit")
        self.assertEqual(disarmed.region_id, REGION_IDENTIFIER)

    def test_disarm_is_idempotent(self):
        self.assertFalse(self.controller.disarm(5.0))
        self.controller.arm(10.0)
        self.controller.disarm(20.0)
        self.assertFalse(self.controller.disarm(21.0))
        self.provider.stop_monitoring.assert_called_once()
        self.provider.start_updating_location.assert_called_once()
        self.assertEqual([event.type for event in self.events],
                         [EventType.GEOFENCE_ARMED, EventType.GEOFENCE_DISARMED])

    def test_arm_without_location_is_skipped(self):
        self.state.current_location = None
        self.assertFalse(self.controller.arm(10.0))
        self.assertFalse(self.state.geofence_armed)
        self.provider.stop_updating_location.assert_not_called()
        self.assertEqual(self.events, [])

    def test_custom_radius(self):
        controller = GeofenceController(self.state, self.events.append, radius_meters=75.0)
        controller.arm(1.0)
        self.assertEqual(controller.region.radius_meters, 75.0)

    def test_works_without_provider(self):
        controller = GeofenceController(self.state, self.events.append)
        self.assertTrue(controller.arm(1.0))
        self.assertTrue(controller.disarm(2.0))

if __name__ == "__main__":
    unittest.main()
