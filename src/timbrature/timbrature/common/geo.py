from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..core.exceptions import ValidationError

EARTH_RADIUS_METERS = 6_371_000.0


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["GeoPoint"]:
        """Parse ``{"latitude": .., "longitude": ..}`` or a ``"lat,lon"`` string."""

        if payload in (None, ""):
            return None
        try:
            if isinstance(payload, dict):
                lat = float(payload["latitude"])
                lon = float(payload["longitude"])
            else:
                lat_s, lon_s = str(payload).split(",", 1)
                lat, lon = float(lat_s), float(lon_s)
        except (KeyError, TypeError, ValueError):
            raise ValidationError("Posizione non valida")
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            raise ValidationError("Posizione non valida")
        return cls(latitude=lat, longitude=lon)


GeofencePredicate = Callable[[GeoPoint, GeoPoint, float], bool]


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance (haversine)."""

    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    d_phi = phi2 - phi1
    d_lambda = math.radians(b.longitude - a.longitude)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(h))


def is_within_geofence(location: GeoPoint, merchant_location: GeoPoint, radius_meters: float) -> bool:
    return distance_meters(location, merchant_location) <= float(radius_meters)
