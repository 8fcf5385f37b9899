"""Positions, watch regions and great-circle distance."""

import math
from dataclasses import dataclass
from typing import Optional

EARTH_RADIUS_METERS = 6371000.0

@dataclass(frozen=True)
class Location:
    """A position fix as stored by the engine."""
    latitude: float
    longitude: float
    horizontal_accuracy: float = 0.0
    timestamp: Optional[float] = None

@dataclass(frozen=True)
class CircularRegion:
    """A circular watch region monitored by the location provider."""
    identifier: str
    latitude: float
    longitude: float
    radius_meters: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return haversine_meters(self.latitude, self.longitude, latitude, longitude) <= self.radius_meters

def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters using the Haversine formula."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c

def distance_meters(origin: Location, destination: Location) -> float:
    return haversine_meters(origin.latitude, origin.longitude,
                            destination.latitude, destination.longitude)
