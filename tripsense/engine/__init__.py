"""
Activity dwell, activation and trip boundary detection.

The engine is synchronous and owns no I/O: TripEngine in
tripsense.engine.trip_engine ties the components together.
"""

from .activity import ActivityKind, Confidence, ActivityProfile, ActivityCatalog
from .geo import Location, CircularRegion
from .state import MotionEvent, LocationFix, DwellState, EngineState, InvariantViolation
