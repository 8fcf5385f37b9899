"""Power-saving geofence around a stationary position."""

from typing import Callable, Optional

import structlog

from tripsense.core.events import BaseEvent
from tripsense.engine.geo import CircularRegion
from tripsense.engine.state import EngineState
from tripsense.events.trips import GeofenceArmedEvent, GeofenceDisarmedEvent

REGION_IDENTIFIER = "tripsense.stationary"

class GeofenceController:
    """
    Swaps continuous location sampling for a single watch region while stopped.

    Both arm() and disarm() are idempotent. The location provider is any object
    with start_updating_location(), stop_updating_location(),
    start_monitoring(region) and stop_monitoring(region); with no provider the
    controller only tracks state and emits events.
    """

    def __init__(self,
                 state: EngineState,
                 emit: Callable[[BaseEvent], None],
                 location_provider=None,
                 radius_meters: float = 30.0):
        self.state = state
        self.emit = emit
        self.location_provider = location_provider
        self.radius_meters = radius_meters
        self.region: Optional[CircularRegion] = None
        self.logger = structlog.get_logger(component="geofence")

    def arm(self, now: float) -> bool:
        """
        Center a watch region on the current location and stop continuous updates.

        Returns:
            True if the geofence was armed by this call
        """
        if self.state.geofence_armed:
            return False

        location = self.state.current_location
        if location is None:
            self.logger.warning("Cannot arm geofence without a location fix")
            return False

        region = CircularRegion(
            identifier=REGION_IDENTIFIER,
            latitude=location.latitude,
            longitude=location.longitude,
            radius_meters=self.radius_meters,
        )
        if self.location_provider is not None:
            self.location_provider.stop_updating_location()
            self.location_provider.start_monitoring(region)

        self.region = region
        self.state.geofence_armed = True
        self.logger.info("Geofence armed", latitude=region.latitude,
                         longitude=region.longitude, radius=region.radius_meters)
        self.emit(GeofenceArmedEvent(
            region_id=region.identifier,
            latitude=region.latitude,
            longitude=region.longitude,
            radius_meters=region.radius_meters,
            timestamp=now,
        ))
        return True

    def disarm(self, now: float, reason: str = "region_exit") -> bool:
        """
        Stop monitoring the watch region and resume continuous updates.

        Returns:
            True if the geofence was disarmed by this call
        """
        if not self.state.geofence_armed:
            return False

        region = self.region
        if self.location_provider is not None:
            self.location_provider.stop_monitoring(region)
            self.location_provider.start_updating_location()

        self.region = None
        self.state.geofence_armed = False
        self.logger.info("Geofence disarmed", reason=reason)
        self.emit(GeofenceDisarmedEvent(
            region_id=region.identifier,
            reason=reason,
            timestamp=now,
        ))
        return True
