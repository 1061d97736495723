"""Trip planning entry points.

``plan_trek_route`` and ``plan_bike_route`` build a route from an already
geocoded start and break it into day distances. ``plan_route`` picks one by
trip type. Every call works on its own locals; nothing is cached between
requests.
"""

import logging
import random
from typing import NamedTuple

from geodesy import Coordinate
from route_building import (
    START_SNAP_RADII,
    build_bike_route,
    build_trek_route,
    resolve_routable_point,
)
from routing import LocationUnresolved, NoRouteFound, RoutingBackend
from segmentation import split_into_days

logger = logging.getLogger(__name__)

# Daily distance caps (km) per trip type.
MAX_KM_PER_DAY: dict[str, int] = {"bike": 60, "trek": 10}
# ORS routing profile per trip type.
PROFILE: dict[str, str] = {"bike": "cycling-regular", "trek": "foot-hiking"}
# Trip length in days per trip type.
DAYS: dict[str, int] = {"bike": 2, "trek": 1}

TRIP_TYPES: tuple[str, ...] = ("bike", "trek")


class PlannedRoute(NamedTuple):
    """A built route and its per-day distances (km)."""

    route: list[Coordinate]
    day_distances: list[float]

    @property
    def total_km(self) -> float:
        return sum(self.day_distances)


def plan_trek_route(
    backend: RoutingBackend,
    origin: Coordinate | None,
    max_km_per_day: float = MAX_KM_PER_DAY["trek"],
    *,
    rng: random.Random | None = None,
) -> PlannedRoute:
    """Plans a one-day walking loop from ``origin``.

    The start is snapped onto the hiking network first; if that fails the raw
    coordinate is used.

    Raises:
        LocationUnresolved: If ``origin`` is None.
        RoutingError: If the loop request fails.
    """
    if origin is None:
        raise LocationUnresolved("A start coordinate is required.")
    profile = PROFILE["trek"]

    start = resolve_routable_point(backend, origin, profile, START_SNAP_RADII)
    if start is None:
        logger.warning("Could not snap trek start %s; using raw point", origin)
        start = origin

    route = build_trek_route(
        backend, start, max_km_per_day, profile=profile, rng=rng
    )
    _require_route(route)
    return PlannedRoute(
        route, split_into_days(route, DAYS["trek"], max_km_per_day)
    )


def plan_bike_route(
    backend: RoutingBackend,
    origin: Coordinate | None,
    *,
    rng: random.Random | None = None,
) -> PlannedRoute:
    """Plans a two-day ride capped at 60 km per day.

    Raises:
        LocationUnresolved: If ``origin`` is None.
        RoutingError: On a hard backend failure.
        NoRouteFound: If neither search nor fallback yields a route.
    """
    if origin is None:
        raise LocationUnresolved("A start coordinate is required.")

    route = build_bike_route(backend, origin, profile=PROFILE["bike"], rng=rng)
    _require_route(route)
    return PlannedRoute(
        route, split_into_days(route, DAYS["bike"], MAX_KM_PER_DAY["bike"])
    )


def plan_route(
    backend: RoutingBackend,
    origin: Coordinate | None,
    trip_type: str,
    *,
    rng: random.Random | None = None,
) -> PlannedRoute:
    """Dispatches to the planner for ``trip_type`` ("bike" or "trek").

    Raises:
        ValueError: If ``trip_type`` is unknown.
    """
    if trip_type not in TRIP_TYPES:
        raise ValueError(f"Unknown trip type: {trip_type!r}")

    logger.info("Planning %s trip from %s", trip_type, origin)
    if trip_type == "bike":
        planned = plan_bike_route(backend, origin, rng=rng)
    else:
        planned = plan_trek_route(backend, origin, rng=rng)
    logger.info(
        "Planned %s trip: %d points, %.1fkm",
        trip_type,
        len(planned.route),
        planned.total_km,
    )
    return planned


def _require_route(route: list[Coordinate]) -> None:
    if not route:
        raise NoRouteFound(
            "Could not generate a route from this location. Try another start."
        )
