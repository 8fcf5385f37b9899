"""
Location provider interface and a simulated implementation.

The engine drives a provider through four synchronous calls: start and stop
continuous updates, start and stop monitoring a single region. Fixes and
region notifications flow back as events on the bus.
"""

from abc import abstractmethod
from typing import Optional

from tripsense.core.bus import EventBus
from tripsense.core.events import EventType
from tripsense.engine.geo import CircularRegion, haversine_meters
from tripsense.engine.state import LocationFix
from tripsense.events.inputs import LocationFixEvent, RegionEnteredEvent, RegionExitedEvent
from tripsense.providers.base import BaseProvider

class LocationProvider(BaseProvider):
    """Source of position fixes and single-region monitoring."""

    @abstractmethod
    def start_updating_location(self) -> None:
        """Resume continuous position updates."""

    @abstractmethod
    def stop_updating_location(self) -> None:
        """Pause continuous position updates."""

    @abstractmethod
    def start_monitoring(self, region: CircularRegion) -> None:
        """Begin watching region for entry and exit."""

    @abstractmethod
    def stop_monitoring(self, region: CircularRegion) -> None:
        """Stop watching region."""

    @property
    @abstractmethod
    def is_updating(self) -> bool:
        """Whether continuous updates are currently delivered."""

class SimulatedLocationProvider(LocationProvider):
    """
    Location provider fed from recorded fixes.

    While continuous updates are on, each fix farther than the distance filter
    from the last delivered one is published as a LocationFixEvent. While a
    region is monitored, fixes are withheld and only used to detect leaving the
    region; the fix that crosses the boundary is delivered after the exit
    notification has been handled.

    Args:
        event_bus: Bus to publish fixes and region notifications on
        distance_filter_meters: Minimum movement between delivered fixes
    """

    def __init__(self, event_bus: EventBus, distance_filter_meters: float = 5.0,
                 name: Optional[str] = None):
        super().__init__(name=name or "location_provider")
        self.event_bus = event_bus
        self.distance_filter_meters = distance_filter_meters
        self._updating = True
        self._region: Optional[CircularRegion] = None
        self._last_delivered: Optional[LocationFix] = None

        registry = event_bus.registry
        registry.register_event(EventType.LOCATION_FIX, LocationFixEvent, "A position fix was delivered")
        registry.register_event(EventType.REGION_EXITED, RegionExitedEvent, "The device left the monitored region")
        registry.register_event(EventType.REGION_ENTERED, RegionEnteredEvent, "The device entered the monitored region")
        for event_type in (EventType.LOCATION_FIX, EventType.REGION_EXITED, EventType.REGION_ENTERED):
            registry.register_producer(self.name, event_type)

    async def _initialize_impl(self) -> None:
        self._updating = True

    async def _shutdown_impl(self) -> None:
        self._updating = False
        self._region = None

    @property
    def is_updating(self) -> bool:
        return self._updating

    @property
    def monitored_region(self) -> Optional[CircularRegion]:
        return self._region

    def start_updating_location(self) -> None:
        self._updating = True
        # the first fix after resuming is always delivered
        self._last_delivered = None
        self.logger.debug("Continuous updates started")

    def stop_updating_location(self) -> None:
        self._updating = False
        self.logger.debug("Continuous updates stopped")

    def start_monitoring(self, region: CircularRegion) -> None:
        self._region = region
        self.logger.debug("Monitoring region", region_id=region.identifier, radius=region.radius_meters)

    def stop_monitoring(self, region: CircularRegion) -> None:
        if self._region is not None and self._region.identifier == region.identifier:
            self._region = None
            self.logger.debug("Stopped monitoring region", region_id=region.identifier)

    async def deliver(self, fix: LocationFix) -> None:
        """Feed one recorded fix through the provider."""
        region = self._region
        if region is not None and not region.contains(fix.latitude, fix.longitude):
            await self.event_bus.publish(
                RegionExitedEvent(region_id=region.identifier, timestamp=fix.timestamp),
                self.name
            )

        if not self._updating:
            return

        if self._last_delivered is not None:
            moved = haversine_meters(self._last_delivered.latitude, self._last_delivered.longitude,
                                     fix.latitude, fix.longitude)
            if moved < self.distance_filter_meters:
                return

        self._last_delivered = fix
        await self.event_bus.publish(
            LocationFixEvent(
                latitude=fix.latitude,
                longitude=fix.longitude,
                horizontal_accuracy=fix.horizontal_accuracy,
                timestamp=fix.timestamp,
            ),
            self.name
        )
