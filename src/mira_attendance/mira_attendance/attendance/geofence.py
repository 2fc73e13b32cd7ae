"""Geofence classification.

Pure functions only: no clock, no I/O. A missing position fails open, i.e.
presence is still recorded and only the location qualifier is downgraded.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..core.constants import CAMPUS_LAT, CAMPUS_LON, CAMPUS_RADIUS_KM, EARTH_RADIUS_KM
from ..core.enums import LocationStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class GeoCoordinate:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not (math.isfinite(self.latitude) and -90.0 <= self.latitude <= 90.0):
            raise ValidationError(f"latitude out of range: {self.latitude}")
        if not (math.isfinite(self.longitude) and -180.0 <= self.longitude <= 180.0):
            raise ValidationError(f"longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class Campus:
    center: GeoCoordinate
    radius_km: float

    @classmethod
    def default(cls) -> "Campus":
        return cls(center=GeoCoordinate(CAMPUS_LAT, CAMPUS_LON), radius_km=CAMPUS_RADIUS_KM)


@dataclass(frozen=True)
class GeofenceResult:
    status: LocationStatus
    distance_km: Optional[float] = None


def haversine_km(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """Great-circle distance on a spherical Earth (R = 6371 km)."""
    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    dphi = math.radians(b.latitude - a.latitude)
    dlambda = math.radians(b.longitude - a.longitude)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push h a hair past 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def classify(coord: Optional[GeoCoordinate], center: GeoCoordinate, radius_km: float) -> GeofenceResult:
    if coord is None:
        return GeofenceResult(status=LocationStatus.OFF_CAMPUS)

    distance = haversine_km(coord, center)
    if distance <= radius_km:
        return GeofenceResult(status=LocationStatus.ON_CAMPUS, distance_km=distance)
    return GeofenceResult(status=LocationStatus.OFF_CAMPUS, distance_km=distance)


def format_coordinates(coord: GeoCoordinate) -> str:
    return f"{coord.latitude:.4f}, {coord.longitude:.4f}"
