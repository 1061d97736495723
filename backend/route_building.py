"""Route construction for trek loops and two-day bike rides.

Trek
  A single round-trip loop from the start, sized to the daily cap.

Bike
  1.  Snap the start onto the cycling network (raw start if that fails).
  2.  Direct search: walk a fan of bearings around a random base bearing,
      and for each bearing a fixed list of target distances. Project a
      destination, snap it, and ask for start -> destination directions.
      The first non-empty route wins.
  3.  Loop fallback: if every candidate is rejected, ask for a ~100km round
      trip, cut it near halfway, and route start -> cut point.

A hard backend error at any point aborts the whole build with
``RoutingError``; only "not routable" answers are retried.
"""

import logging
import random
from typing import Iterator, NamedTuple, Sequence

from geodesy import Coordinate, destination_point
from routing import (
    NoRouteFound,
    Routed,
    RoutingBackend,
    RoutingError,
    RoutingFailed,
)
from segmentation import cumulative_distances

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Route-building rules: all tuneable constants in one place.
# ---------------------------------------------------------------------------

# -- Snapping --------------------------------------------------------------
# Radius ladders (metres) for the ORS nearest-point query, tried in order.
START_SNAP_RADII: tuple[int, ...] = (500, 1000, 2000, 5000)
DESTINATION_SNAP_RADII: tuple[int, ...] = (500, 1000, 2000, 5000, 10000)

# -- Trek ------------------------------------------------------------------
# Upper bound on the length of any requested round trip.
MAX_LOOP_LENGTH_M: int = 100_000

# -- Bike direct search ----------------------------------------------------
# Offsets (degrees) applied to the random base bearing, in search order.
BEARING_OFFSETS: tuple[int, ...] = (0, 30, -30, 60, -60, 90, -90)
# Target straight-line distances (km) tried for every bearing, in order.
CANDIDATE_DISTANCES_KM: tuple[int, ...] = (100, 95, 90, 110, 85, 80, 70, 60)
# Seeds are drawn from [0, SEED_RANGE).
SEED_RANGE: int = 10_000

# -- Bike loop fallback ----------------------------------------------------
FALLBACK_LOOP_LENGTH_M: int = 100_000
# Window (fraction of loop length) the split point must fall into.
FALLBACK_SPLIT_MIN_FRACTION: float = 0.45
FALLBACK_SPLIT_MAX_FRACTION: float = 0.55
# Loops with fewer points than this cannot be split meaningfully.
FALLBACK_MIN_LOOP_POINTS: int = 3


class SearchCandidate(NamedTuple):
    """One (bearing, distance) pair tried during the bike direct search."""

    bearing_deg: int
    distance_km: float


# ---------------------------------------------------------------------------
# Point resolution
# ---------------------------------------------------------------------------


def resolve_routable_point(
    backend: RoutingBackend,
    point: Coordinate,
    profile: str,
    radii: Sequence[int] = DESTINATION_SNAP_RADII,
) -> Coordinate | None:
    """Snaps ``point`` to the nearest spot routable by ``profile``.

    Each radius is tried in turn; a failed or empty lookup just moves on to
    the next one. Returns None when the ladder is exhausted, leaving the
    caller to decide between the raw point and giving up.
    """
    for radius in radii:
        snapped = backend.nearest_point(profile, point, radius)
        if snapped is not None:
            logger.debug(
                "Snapped %s to %s within %dm", point, snapped, radius
            )
            return snapped
    logger.debug("Could not snap %s within %dm", point, radii[-1] if radii else 0)
    return None


# ---------------------------------------------------------------------------
# Trek
# ---------------------------------------------------------------------------


def build_trek_route(
    backend: RoutingBackend,
    origin: Coordinate,
    max_km_per_day: float,
    *,
    profile: str = "foot-hiking",
    rng: random.Random | None = None,
) -> list[Coordinate]:
    """Requests one round-trip loop of at most ``max_km_per_day``.

    Raises:
        RoutingError: If the backend fails or returns no geometry.
    """
    rng = rng or random.Random()
    length_m = min(max_km_per_day * 1000, MAX_LOOP_LENGTH_M)
    seed = rng.randrange(SEED_RANGE)
    logger.info("Requesting %.0fm trek loop (seed=%d)", length_m, seed)

    outcome = backend.round_trip(profile, origin, length_m, seed)
    if not isinstance(outcome, Routed):
        raise RoutingError("Routing error", detail=outcome.detail)
    return outcome.route


# ---------------------------------------------------------------------------
# Bike
# ---------------------------------------------------------------------------


def search_candidates(
    base_bearing: int,
    offsets: Sequence[int] = BEARING_OFFSETS,
    distances_km: Sequence[float] = CANDIDATE_DISTANCES_KM,
) -> Iterator[SearchCandidate]:
    """Yields direct-search candidates, bearings outer and distances inner."""
    for offset in offsets:
        bearing = (base_bearing + offset) % 360
        for distance in distances_km:
            yield SearchCandidate(bearing, distance)


def build_bike_route(
    backend: RoutingBackend,
    origin: Coordinate,
    *,
    profile: str = "cycling-regular",
    rng: random.Random | None = None,
) -> list[Coordinate]:
    """Builds a point-to-point ride of roughly two days from ``origin``.

    Args:
        backend: Routing backend used for snapping and directions.
        origin: Raw start coordinate.
        profile: ORS cycling profile.
        rng: Source of the base bearing and fallback seed. A fresh
            ``random.Random`` is used when omitted.

    Returns:
        The route geometry, starting at the (snapped) origin.

    Raises:
        RoutingError: On any backend error other than "not routable".
        NoRouteFound: If the fallback loop is too short to split.
    """
    rng = rng or random.Random()

    start = resolve_routable_point(backend, origin, profile, START_SNAP_RADII)
    if start is None:
        logger.warning("Could not snap bike start %s; using raw point", origin)
        start = origin

    seed = rng.randrange(SEED_RANGE)
    base_bearing = seed % 360
    logger.info("Bike direct search from %s, base bearing %d", start, base_bearing)

    route = _direct_search(backend, start, profile, search_candidates(base_bearing))
    if route is not None:
        return route

    logger.warning("Direct search exhausted; falling back to loop split")
    return _fallback_via_loop(backend, start, profile, rng)


def _direct_search(
    backend: RoutingBackend,
    start: Coordinate,
    profile: str,
    candidates: Iterator[SearchCandidate],
) -> list[Coordinate] | None:
    """Returns the first routable candidate's geometry, or None if none is."""
    for attempt, candidate in enumerate(candidates, start=1):
        goal = destination_point(start, candidate.distance_km, candidate.bearing_deg)
        destination = resolve_routable_point(
            backend, goal, profile, DESTINATION_SNAP_RADII
        )
        if destination is None:
            logger.debug("Candidate %d %s: destination unsnappable", attempt, candidate)
            continue

        outcome = backend.directions(profile, [start, destination])
        if isinstance(outcome, Routed):
            logger.info(
                "Candidate %d succeeded (bearing=%d, %skm)",
                attempt,
                candidate.bearing_deg,
                candidate.distance_km,
            )
            return outcome.route
        if isinstance(outcome, RoutingFailed):
            raise RoutingError("Routing error", detail=outcome.detail)
        logger.debug("Candidate %d %s: not routable", attempt, candidate)
    return None


def _fallback_via_loop(
    backend: RoutingBackend,
    start: Coordinate,
    profile: str,
    rng: random.Random,
) -> list[Coordinate]:
    """Routes from ``start`` to the point roughly halfway round a loop."""
    outcome = backend.round_trip(
        profile, start, FALLBACK_LOOP_LENGTH_M, rng.randrange(SEED_RANGE)
    )
    if not isinstance(outcome, Routed):
        raise RoutingError("Routing error", detail=outcome.detail)

    loop = outcome.route
    if len(loop) < FALLBACK_MIN_LOOP_POINTS:
        raise NoRouteFound("Fallback loop too short", detail={"points": len(loop)})

    split_idx = split_index(loop)
    split_point = loop[split_idx]
    destination = resolve_routable_point(
        backend, split_point, profile, DESTINATION_SNAP_RADII
    )
    if destination is None:
        destination = split_point
    logger.info("Loop fallback: split at index %d of %d", split_idx, len(loop))

    outcome = backend.directions(profile, [start, destination])
    if not isinstance(outcome, Routed):
        raise RoutingError("Routing error", detail=outcome.detail)
    return outcome.route


def split_index(loop: Sequence[Coordinate]) -> int:
    """Returns the index (>= 1) whose running distance is nearest halfway.

    The target is half the loop length, held inside the
    ``FALLBACK_SPLIT_MIN_FRACTION``..``FALLBACK_SPLIT_MAX_FRACTION`` window.
    Earlier indices win ties.
    """
    cum = cumulative_distances(loop)
    total = cum[-1]
    target = min(
        max(total * 0.5, total * FALLBACK_SPLIT_MIN_FRACTION),
        total * FALLBACK_SPLIT_MAX_FRACTION,
    )
    best = 1
    for i in range(1, len(cum)):
        if abs(cum[i] - target) < abs(cum[best] - target):
            best = i
    return best
