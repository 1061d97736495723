"""Forward geocoding of the trip start and place names along a route.

Both use the Google Maps Python client. Place-name lookups reverse-geocode a
handful of evenly spaced key points, pausing a fixed delay between calls.
"""

import asyncio
import logging
import os
from typing import Any, Sequence

import googlemaps
from googlemaps import exceptions as maps_exceptions

from geodesy import Coordinate
from key_points import KEY_POINT_COUNT, sample_key_points
from routing import LocationUnresolved

logger = logging.getLogger(__name__)

# Pause between consecutive reverse-geocode calls.
PLACE_LOOKUP_DELAY_S: float = 0.5
# Address component types tried in order when naming a place.
PLACE_COMPONENT_TYPES: tuple[str, ...] = (
    "locality",
    "postal_town",
    "sublocality",
    "administrative_area_level_3",
    "administrative_area_level_2",
)


def make_maps_client() -> googlemaps.Client:
    """Creates a Maps client from ``GOOGLE_MAPS_API_KEY``."""
    return googlemaps.Client(key=os.environ.get("GOOGLE_MAPS_API_KEY", ""))


async def geocode_location(
    maps_client: googlemaps.Client, location: str
) -> Coordinate:
    """Returns the coordinate for an address or a ``lat,lng`` string.

    If ``location`` is already in ``lat,lng`` format the values are parsed
    directly without a network call.

    Raises:
        ValueError: If ``location`` is empty.
        LocationUnresolved: If the geocoder finds nothing.
    """
    location = location.strip()
    if not location:
        raise ValueError("location must not be empty.")

    parts = location.split(",")
    if len(parts) == 2:
        try:
            lat, lng = float(parts[0].strip()), float(parts[1].strip())
        except ValueError:
            pass
        else:
            return Coordinate(lng, lat)

    result = maps_client.geocode(location)
    if not result:
        raise LocationUnresolved(f"Could not geocode location: {location!r}")
    loc = result[0]["geometry"]["location"]
    return Coordinate(float(loc["lng"]), float(loc["lat"]))


def place_name(results: list[dict[str, Any]]) -> str | None:
    """Picks a short settlement name out of reverse-geocode results."""
    if not results:
        return None
    first = results[0]
    components = first.get("address_components", [])
    for wanted in PLACE_COMPONENT_TYPES:
        for component in components:
            if wanted in component.get("types", []):
                return component.get("long_name")
    formatted = first.get("formatted_address", "")
    return formatted.split(",")[0].strip() or None


async def lookup_place_names(
    maps_client: googlemaps.Client,
    route: Sequence[Coordinate],
    count: int = KEY_POINT_COUNT,
    *,
    delay_s: float = PLACE_LOOKUP_DELAY_S,
) -> tuple[list[Coordinate], list[str]]:
    """Names the places a route passes near.

    Returns:
        The sampled key points and the distinct place names found for them,
        in route order. Points whose lookup fails are skipped.
    """
    key_points = sample_key_points(route, count)
    names: list[str] = []
    for i, point in enumerate(key_points):
        if i and delay_s > 0:
            await asyncio.sleep(delay_s)
        try:
            results = maps_client.reverse_geocode((point.lat, point.lon))
        except (
            maps_exceptions.ApiError,
            maps_exceptions.TransportError,
            maps_exceptions.Timeout,
        ) as exc:
            logger.warning("Reverse geocoding failed for %s: %s", point, exc)
            continue
        name = place_name(results)
        if name and name not in names:
            names.append(name)
    logger.info("Found %d place names from %d key points", len(names), len(key_points))
    return key_points, names
