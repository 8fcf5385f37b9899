"""
Unit tests for the ActivationPolicy.
"""

import unittest
from unittest.mock import MagicMock
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from tripsense.core.events import EventType
from tripsense.engine.activation import ActivationPolicy
from tripsense.engine.activity import ActivityCatalog, ActivityKind, Confidence
from tripsense.engine.dwell import DwellTracker
from tripsense.engine.geo import Location
from tripsense.engine.geofence import GeofenceController
from tripsense.engine.state import EngineState, MotionEvent

class TestActivationPolicy(unittest.TestCase):
    """Test cases for the ActivationPolicy class."""

    def setUp(self):
        self.state = EngineState()
        self.state.current_location = Location(52.0, 4.0, 5.0, 0.0)
        self.catalog = ActivityCatalog()
        self.events = []
        self.provider = MagicMock()
        self.geofence = GeofenceController(self.state, self.events.append, location_provider=self.provider)
        self.tracker = DwellTracker(self.catalog, self.state)
        self.policy = ActivationPolicy(self.catalog, self.state, self.geofence, self.events.append)

    def _report(self, kind, timestamp):
        self.tracker.observe(MotionEvent(kind, Confidence.HIGH, timestamp))
        return [kind for kind in self.catalog if self.policy.reevaluate(kind)]

    def _types(self):
        return [event.type for event in self.events]

    def test_no_promotion_at_exact_minimum(self):
        """A run lasting exactly the minimum dwell does not activate."""
        self._report(ActivityKind.WALKING, 0.0)
        self.assertEqual(self._report(ActivityKind.WALKING, 30.0), [])
        self.assertIsNone(self.state.active_kind)
        self.assertFalse(self.state.dwell[ActivityKind.WALKING].is_active)

    def test_promotion_after_minimum(self):
        self._report(ActivityKind.WALKING, 0.0)
        self.assertEqual(self._report(ActivityKind.WALKING, 30.5), [ActivityKind.WALKING])
        self.assertEqual(self.state.active_kind, ActivityKind.WALKING)
        self.assertTrue(self.state.dwell[ActivityKind.WALKING].is_active)
        self.assertEqual(self.state.active_anchor, self.state.current_location)

        changed = self.events[0]
        self.assertEqual(changed.type, EventType.ACTIVITY_CHANGED)
        self.assertEqual(changed.kind, "walking")
        self.assertEqual(changed.since, 0.0)
        self.assertEqual(changed.timestamp, 30.5)
        self.assertEqual(changed.label, "Walking")

    def test_already_active_not_promoted_again(self):
        self._report(ActivityKind.WALKING, 0.0)
        self._report(ActivityKind.WALKING, 31.0)
        self.events.clear()
        self.assertEqual(self._report(ActivityKind.WALKING, 90.0), [])
        self.assertEqual(self.events, [])

    def test_promotion_demotes_others(self):
        self._report(ActivityKind.WALKING, 0.0)
        self._report(ActivityKind.WALKING, 31.0)
        self._report(ActivityKind.VEHICLE, 40.0)
        self.assertEqual(self._report(ActivityKind.VEHICLE, 101.0), [ActivityKind.VEHICLE])

        self.assertFalse(self.state.dwell[ActivityKind.WALKING].is_active)
        self.assertEqual(self.state.active_kind, ActivityKind.VEHICLE)
        for kind in self.catalog:
            if kind != ActivityKind.VEHICLE:
                self.assertIsNone(self.state.dwell[kind].dwell_start_time)
        self.state.check_invariants()

    def test_mode_change_ends_trip(self):
        """Promotion of a new kind ends the trip in progress."""
        self._report(ActivityKind.WALKING, 0.0)
        self._report(ActivityKind.WALKING, 31.0)
        self.state.trip_in_progress = True
        self._report(ActivityKind.CYCLING, 40.0)
        self._report(ActivityKind.CYCLING, 101.0)

        self.assertFalse(self.state.trip_in_progress)
        ended = [event for event in self.events if event.type == EventType.TRIP_ENDED]
        self.assertEqual(len(ended), 1)
        self.assertEqual(ended[0].reason, "mode_change")
        self.assertEqual(ended[0].kind, "cycling")

    def test_stopped_promotion_arms_geofence(self):
        self._report(ActivityKind.STOPPED, 0.0)
        self._report(ActivityKind.STOPPED, 31.0)
        self.assertTrue(self.state.geofence_armed)
        self.assertEqual(self._types(), [EventType.ACTIVITY_CHANGED, EventType.GEOFENCE_ARMED])
        self.provider.stop_updating_location.assert_called_once()
        self.provider.start_monitoring.assert_called_once()

    def test_moving_promotion_disarms_geofence(self):
        self._report(ActivityKind.STOPPED, 0.0)
        self._report(ActivityKind.STOPPED, 31.0)
        self._report(ActivityKind.RUNNING, 40.0)
        self._report(ActivityKind.RUNNING, 101.0)
        self.assertFalse(self.state.geofence_armed)
        disarmed = [event for event in self.events if event.type == EventType.GEOFENCE_DISARMED]
        self.assertEqual(len(disarmed), 1)
        self.assertEqual(disarmed[0].reason, "activity_changed")
        self.provider.start_updating_location.assert_called_once()

    def test_skips_kinds_without_run(self):
        self.state.last_event_time = 100.0
        for kind in self.catalog:
            self.assertFalse(self.policy.reevaluate(kind))
        self.assertEqual(self.events, [])

if __name__ == "__main__":
    unittest.main()
