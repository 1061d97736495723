"""Tests for the planning entry points in planner.py."""

import random
from unittest.mock import MagicMock

import pytest

import planner
from geodesy import Coordinate
from routing import (
    LocationUnresolved,
    NoRouteFound,
    NotRoutable,
    OrsRoutingBackend,
    Routed,
    RoutingError,
    RoutingFailed,
)

_ORIGIN = Coordinate(-3.1883, 55.9533)


# ---------------------------------------------------------------------------
# plan_bike_route
# ---------------------------------------------------------------------------


def test_bike_falls_back_to_loop_and_splits_days(make_backend, equator_route):
    """Every direct candidate is not routable; the loop fallback succeeds."""
    loop = equator_route([1.0] * 100)
    fallback_ride = equator_route([1.0] * 90)

    def directions(profile, coords):
        if coords[1] == loop[50]:
            return Routed(fallback_ride)
        return NotRoutable({"error": {"code": 2010}})

    backend = make_backend(
        directions=directions,
        round_trip=lambda *args: Routed(loop),
    )

    planned = planner.plan_bike_route(backend, _ORIGIN, rng=random.Random(5))

    assert planned.route == fallback_ride
    assert len(planned.day_distances) == 2
    assert sum(planned.day_distances) == pytest.approx(90, abs=1e-6)
    assert planned.day_distances[0] <= 60
    assert len(backend.round_trip_calls) == 1


def test_bike_first_candidate_error_aborts(make_backend):
    payload = {"error": {"code": 2099, "message": "Unknown internal error"}}
    backend = make_backend(directions=lambda profile, coords: RoutingFailed(payload))

    with pytest.raises(RoutingError) as excinfo:
        planner.plan_bike_route(backend, _ORIGIN, rng=random.Random(5))

    assert excinfo.value.detail == payload
    assert len(backend.directions_calls) == 1
    assert backend.round_trip_calls == []


def test_bike_direct_route_split(make_backend, equator_route):
    ride = equator_route([1.0] * 110)
    backend = make_backend(directions=lambda profile, coords: Routed(ride))

    planned = planner.plan_bike_route(backend, _ORIGIN)

    assert planned.route == ride
    assert 44 <= planned.day_distances[0] <= 60
    assert planned.total_km == pytest.approx(110, abs=1e-6)


def test_bike_empty_route_is_no_route_found(make_backend):
    backend = make_backend(directions=lambda profile, coords: Routed([]))
    with pytest.raises(NoRouteFound):
        planner.plan_bike_route(backend, _ORIGIN)


def test_bike_requires_origin(make_backend):
    with pytest.raises(LocationUnresolved):
        planner.plan_bike_route(make_backend(), None)


# ---------------------------------------------------------------------------
# plan_trek_route
# ---------------------------------------------------------------------------


def test_trek_snaps_start_and_returns_single_day(make_backend, equator_route):
    snapped = Coordinate(-3.19, 55.95)
    loop = equator_route([0.5] * 18)
    backend = make_backend(
        nearest=lambda profile, point, radius: snapped,
        round_trip=lambda *args: Routed(loop),
    )

    planned = planner.plan_trek_route(backend, _ORIGIN, rng=random.Random(1))

    assert planned.route == loop
    assert planned.day_distances == [pytest.approx(9.0, abs=1e-6)]
    profile, origin, length_m, _seed = backend.round_trip_calls[0]
    assert profile == "foot-hiking"
    assert origin == snapped
    assert length_m == 10000


def test_trek_uses_raw_start_when_unsnappable(make_backend, equator_route):
    backend = make_backend(
        nearest=lambda profile, point, radius: None,
        round_trip=lambda *args: Routed(equator_route([1.0] * 3)),
    )

    planner.plan_trek_route(backend, _ORIGIN)

    assert backend.round_trip_calls[0][1] == _ORIGIN


def test_trek_empty_geometry_response_raises():
    """An ORS success with no features must not become an empty route."""
    client = MagicMock()
    client.request.return_value = {"features": []}
    client.directions.return_value = {"type": "FeatureCollection", "features": []}
    backend = OrsRoutingBackend(client=client)

    with pytest.raises(RoutingError):
        planner.plan_trek_route(backend, _ORIGIN)


def test_trek_requires_origin(make_backend):
    with pytest.raises(LocationUnresolved):
        planner.plan_trek_route(make_backend(), None)


# ---------------------------------------------------------------------------
# plan_route
# ---------------------------------------------------------------------------


def test_plan_route_dispatches_trek(make_backend, equator_route):
    backend = make_backend(round_trip=lambda *args: Routed(equator_route([1.0] * 4)))

    planned = planner.plan_route(backend, _ORIGIN, "trek")

    assert len(planned.day_distances) == planner.DAYS["trek"]
    assert backend.round_trip_calls[0][0] == planner.PROFILE["trek"]
    assert backend.directions_calls == []


def test_plan_route_dispatches_bike(make_backend, equator_route):
    backend = make_backend(directions=lambda profile, coords: Routed(equator_route([1.0] * 4)))

    planned = planner.plan_route(backend, _ORIGIN, "bike")

    assert len(planned.day_distances) == planner.DAYS["bike"]
    assert backend.directions_calls[0][0] == planner.PROFILE["bike"]


def test_plan_route_rejects_unknown_type(make_backend):
    with pytest.raises(ValueError, match="Unknown trip type"):
        planner.plan_route(make_backend(), _ORIGIN, "kayak")


def test_repeated_planning_is_independent(make_backend, equator_route):
    ride = equator_route([1.0] * 20)
    backend = make_backend(directions=lambda profile, coords: Routed(ride))

    first = planner.plan_bike_route(backend, _ORIGIN, rng=random.Random(9))
    second = planner.plan_bike_route(backend, _ORIGIN, rng=random.Random(9))

    assert first == second
    assert backend.directions_calls[0] == backend.directions_calls[1]
