"""Spherical geodesy helpers shared by the route builders and day splitter.

Coordinates are ``(lon, lat)`` in decimal degrees, the order used by GeoJSON
and by OpenRouteService, so route geometries can be consumed without
reordering.
"""

import math
from typing import NamedTuple

# Mean Earth radius used for every distance and projection.
EARTH_RADIUS_KM: float = 6371.0
# Bearings are reduced to this many decimal places (about 0.1 mm at the
# Earth's surface) so that b and b + 360 project to the same point.
BEARING_DECIMALS: int = 9


class Coordinate(NamedTuple):
    """An immutable WGS84 position in ``(lon, lat)`` order."""

    lon: float
    lat: float


def great_circle_distance_km(a: Coordinate, b: Coordinate) -> float:
    """Returns the haversine distance in kilometres between two points."""
    lon1, lat1 = a
    lon2, lat2 = b
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = lat2_r - lat1_r
    dlng = math.radians(lon2 - lon1)
    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def normalize_bearing(bearing_deg: float) -> float:
    """Returns ``bearing_deg`` reduced into [0, 360)."""
    return round(bearing_deg % 360, BEARING_DECIMALS) % 360


def destination_point(
    origin: Coordinate, distance_km: float, bearing_deg: float
) -> Coordinate:
    """Projects ``origin`` along a great circle.

    Args:
        origin: Start position.
        distance_km: Distance to travel over the sphere.
        bearing_deg: Initial bearing, clockwise from true north. Any value is
            accepted and reduced modulo 360.

    Returns:
        The destination, with longitude normalised into [-180, 180).
    """
    lon, lat = origin
    angular = distance_km / EARTH_RADIUS_KM
    bearing = math.radians(normalize_bearing(bearing_deg))

    lat1 = math.radians(lat)
    lon1 = math.radians(lon)

    sin_lat2 = (
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(bearing)
    )
    # Guard against rounding pushing the sine just outside [-1, 1].
    lat2 = math.asin(max(-1.0, min(1.0, sin_lat2)))
    y = math.sin(bearing) * math.sin(angular) * math.cos(lat1)
    x = math.cos(angular) - math.sin(lat1) * sin_lat2
    lon2 = lon1 + math.atan2(y, x)

    lon_deg = (math.degrees(lon2) + 540) % 360 - 180
    return Coordinate(lon_deg, math.degrees(lat2))

