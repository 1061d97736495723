"""Pytest configuration for the TrailDay backend test suite."""

import math
import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on the path so tests can import
# modules directly (e.g. `import planner`) without a package prefix.
sys.path.insert(0, str(Path(__file__).parent.parent))

from geodesy import EARTH_RADIUS_KM, Coordinate  # noqa: E402
from routing import NotRoutable  # noqa: E402

# Kilometres per degree of longitude along the equator.
KM_PER_DEGREE = EARTH_RADIUS_KM * math.pi / 180


def _equator_route(segments_km, start_lon=0.0):
    """Builds a route along the equator with the given segment lengths."""
    route = [Coordinate(start_lon, 0.0)]
    for seg in segments_km:
        route.append(Coordinate(route[-1].lon + seg / KM_PER_DEGREE, 0.0))
    return route


class FakeRoutingBackend:
    """Scripted stand-in for ``routing.RoutingBackend``.

    Each capability is a callable with the same arguments as the protocol
    method. By default every point snaps to itself and every route request
    is not routable. All calls are recorded for assertions.
    """

    def __init__(self, *, nearest=None, directions=None, round_trip=None):
        self._nearest = nearest or (lambda profile, point, radius: point)
        self._directions = directions or (lambda profile, coords: NotRoutable())
        self._round_trip = round_trip or (
            lambda profile, origin, length_m, seed: NotRoutable()
        )
        self.nearest_calls = []
        self.directions_calls = []
        self.round_trip_calls = []

    def nearest_point(self, profile, point, radius_m):
        self.nearest_calls.append((profile, point, radius_m))
        return self._nearest(profile, point, radius_m)

    def directions(self, profile, coordinates):
        self.directions_calls.append((profile, list(coordinates)))
        return self._directions(profile, coordinates)

    def round_trip(self, profile, origin, length_m, seed):
        self.round_trip_calls.append((profile, origin, length_m, seed))
        return self._round_trip(profile, origin, length_m, seed)


@pytest.fixture
def equator_route():
    return _equator_route


@pytest.fixture
def make_backend():
    return FakeRoutingBackend
