"""
Providers for TripSense.

Providers stand in for the platform services the engine depends on: the
location provider and the motion classifier.
"""
