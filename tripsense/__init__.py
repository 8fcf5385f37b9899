"""
TripSense - trip start and end detection from classified motion and location.

This package infers sustained activities (stopped, walking, running, cycling,
vehicle, unknown) from a motion classifier's reports, confirms trips by
displacement from location fixes, and arms a small geofence while stationary
so continuous location sampling can be switched off.

Features:
- Debounced activity activation with reset-on-switch hysteresis
- Distance-confirmed trip start, stop-confirmed trip end
- Power-saving geofence with classifier backlog replay on exit
- Typed event bus connecting providers, the engine and log collaborators
"""

__version__ = "1.0.0"
