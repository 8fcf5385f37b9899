"""
Unit tests for the DwellTracker.
"""

import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from tripsense.engine.activity import ActivityCatalog, ActivityKind, Confidence
from tripsense.engine.dwell import DwellTracker
from tripsense.engine.geo import Location
from tripsense.engine.state import EngineState, MotionEvent

class TestDwellTracker(unittest.TestCase):
    """Test cases for the DwellTracker class."""

    def setUp(self):
        self.state = EngineState()
        self.tracker = DwellTracker(ActivityCatalog(), self.state)
        self.here = Location(52.0, 4.0, 5.0, 0.0)
        self.state.current_location = self.here

    def _observe(self, kind, timestamp, confidence=Confidence.HIGH):
        return self.tracker.observe(MotionEvent(kind, confidence, timestamp))

    def test_low_confidence_discarded(self):
        """Low-confidence reports change nothing, not even the last event time."""
        self.assertFalse(self._observe(ActivityKind.WALKING, 10.0, Confidence.LOW))
        self.assertIsNone(self.state.dwell[ActivityKind.WALKING].dwell_start_time)
        self.assertIsNone(self.state.last_event_time)

    def test_first_report_starts_run(self):
        self.assertTrue(self._observe(ActivityKind.WALKING, 10.0, Confidence.MEDIUM))
        dwell = self.state.dwell[ActivityKind.WALKING]
        self.assertEqual(dwell.dwell_start_time, 10.0)
        self.assertEqual(dwell.dwell_start_location, self.here)
        self.assertEqual(self.state.last_event_time, 10.0)

    def test_repeated_reports_keep_start(self):
        """Reports of the same kind never restart its clock."""
        self._observe(ActivityKind.WALKING, 10.0)
        self.state.current_location = Location(52.001, 4.0, 5.0, 15.0)
        self._observe(ActivityKind.WALKING, 20.0)
        dwell = self.state.dwell[ActivityKind.WALKING]
        self.assertEqual(dwell.dwell_start_time, 10.0)
        self.assertEqual(dwell.dwell_start_location, self.here)
        self.assertEqual(self.state.last_event_time, 20.0)

    def test_different_kind_breaks_run(self):
        self._observe(ActivityKind.WALKING, 10.0)
        self._observe(ActivityKind.CYCLING, 12.0)
        walking = self.state.dwell[ActivityKind.WALKING]
        self.assertIsNone(walking.dwell_start_time)
        self.assertIsNone(walking.dwell_start_location)
        self.assertEqual(self.state.dwell[ActivityKind.CYCLING].dwell_start_time, 12.0)

    def test_reset_on_switch(self):
        """A, B, A starts a fresh run for A."""
        self._observe(ActivityKind.WALKING, 0.0)
        self._observe(ActivityKind.STOPPED, 5.0)
        self._observe(ActivityKind.WALKING, 8.0)
        self.assertEqual(self.state.dwell[ActivityKind.WALKING].dwell_start_time, 8.0)
        self.assertIsNone(self.state.dwell[ActivityKind.STOPPED].dwell_start_time)

    def test_low_confidence_does_not_break_run(self):
        self._observe(ActivityKind.WALKING, 0.0)
        self._observe(ActivityKind.VEHICLE, 5.0, Confidence.LOW)
        self.assertEqual(self.state.dwell[ActivityKind.WALKING].dwell_start_time, 0.0)

    def test_new_run_of_active_kind_moves_trip_anchor(self):
        old_anchor = Location(51.0, 4.0, 5.0, 0.0)
        self.state.dwell[ActivityKind.WALKING].is_active = True
        self.state.active_kind = ActivityKind.WALKING
        self.state.active_anchor = old_anchor

        self._observe(ActivityKind.STOPPED, 10.0)
        self.assertEqual(self.state.active_anchor, old_anchor)
        self._observe(ActivityKind.WALKING, 20.0)
        self.assertEqual(self.state.active_anchor, self.here)

    def test_new_run_of_other_kind_keeps_trip_anchor(self):
        old_anchor = Location(51.0, 4.0, 5.0, 0.0)
        self.state.dwell[ActivityKind.WALKING].is_active = True
        self.state.active_kind = ActivityKind.WALKING
        self.state.active_anchor = old_anchor

        self._observe(ActivityKind.CYCLING, 10.0)
        self.assertEqual(self.state.active_anchor, old_anchor)

    def test_anchor_runs_started_without_location(self):
        """A run that began before any fix is anchored at the first one."""
        self.state.current_location = None
        self._observe(ActivityKind.RUNNING, 0.0)
        self.assertIsNone(self.state.dwell[ActivityKind.RUNNING].dwell_start_location)

        self.tracker.anchor(self.here)
        self.assertEqual(self.state.dwell[ActivityKind.RUNNING].dwell_start_location, self.here)

        later = Location(53.0, 4.0, 5.0, 9.0)
        self.tracker.anchor(later)
        self.assertEqual(self.state.dwell[ActivityKind.RUNNING].dwell_start_location, self.here)
        self.assertIsNone(self.state.dwell[ActivityKind.WALKING].dwell_start_location)

if __name__ == "__main__":
    unittest.main()
