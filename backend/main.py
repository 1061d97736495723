"""TrailDay backend service.

Exposes endpoints for planning trek and bike trips, sampling key points
along a route, and naming the places a route passes.
"""

import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool

import googlemaps
import requests

import geocoding
import planner
import weather
from geodesy import Coordinate
from key_points import sample_key_points
from models import (
    KeyPointsRequest,
    KeyPointsResponse,
    PlaceNamesResponse,
    PlanRouteRequest,
    PlanRouteResponse,
    StartPoint,
)
from routing import (
    LocationUnresolved,
    NoRouteFound,
    OrsRoutingBackend,
    RoutingBackend,
    RoutingError,
)

logging.basicConfig(level=logging.INFO)

app = FastAPI(
    title="TrailDay Backend",
    description="Multi-day trek and bike trip route planning.",
    version="0.1.0",
)


def get_routing_backend() -> RoutingBackend:
    """Returns the routing backend; overridden in tests."""
    return OrsRoutingBackend()


def get_maps_client() -> googlemaps.Client:
    """Returns the geocoding client; overridden in tests."""
    return geocoding.make_maps_client()


def get_http_session() -> requests.Session:
    """Returns the HTTP session for the forecast API; overridden in tests."""
    return requests.Session()


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint used to verify the service is live."""
    return {"status": "ok"}


@app.post("/plan-route", response_model=PlanRouteResponse)
async def plan_route(
    request: PlanRouteRequest,
    backend: RoutingBackend = Depends(get_routing_backend),
    maps_client: googlemaps.Client = Depends(get_maps_client),
    session: requests.Session = Depends(get_http_session),
) -> PlanRouteResponse:
    """Plans a trek loop or a two-day bike ride from a named location.

    1. Geocodes the location.
    2. Builds the route (trek loop, or bike search with loop fallback).
    3. Splits the route into capped, balanced day distances.
    4. Fetches the forecast at the start of the route.

    Args:
        request: ``PlanRouteRequest`` with the start location and trip type.

    Returns:
        ``PlanRouteResponse`` with the geometry, day distances, start
        and forecast.

    Raises:
        HTTPException 400: If location is empty.
        HTTPException 404: If the location is unknown or no route exists.
        HTTPException 502: If the routing backend or the forecast fails.
    """
    if not request.location.strip():
        raise HTTPException(
            status_code=400,
            detail="location must not be empty.",
        )
    try:
        origin = await geocoding.geocode_location(maps_client, request.location)
        planned = await run_in_threadpool(
            planner.plan_route, backend, origin, request.type
        )
    except LocationUnresolved as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NoRouteFound as exc:
        raise HTTPException(
            status_code=404,
            detail={"message": exc.message, "error": exc.detail},
        ) from exc
    except RoutingError as exc:
        logging.error("Routing failed: %s", exc.detail)
        raise HTTPException(
            status_code=502,
            detail={"message": exc.message, "error": exc.detail},
        ) from exc
    except Exception as exc:  # noqa: BLE001
        logging.exception("planner.plan_route failed")
        raise HTTPException(
            status_code=502,
            detail="Failed to generate route. Please try again.",
        ) from exc

    start = planned.route[0]
    try:
        forecast = await run_in_threadpool(
            weather.fetch_forecast, start, session=session
        )
    except weather.WeatherError as exc:
        logging.error("Weather fetch failed: %s", exc)
        raise HTTPException(
            status_code=502,
            detail="Failed to fetch the weather forecast. Please try again.",
        ) from exc

    return PlanRouteResponse(
        type=request.type,
        coords=[tuple(c) for c in planned.route],
        day_distances=planned.day_distances,
        total_km=round(planned.total_km, 3),
        start=StartPoint(lat=start.lat, lon=start.lon),
        weather=forecast,
    )


@app.post("/key-points", response_model=KeyPointsResponse)
async def key_points(request: KeyPointsRequest) -> KeyPointsResponse:
    """Returns up to ``count`` evenly spaced points along a route."""
    route = [Coordinate(lon, lat) for lon, lat in request.coords]
    points = sample_key_points(route, request.count)
    return KeyPointsResponse(key_points=[tuple(p) for p in points])


@app.post("/place-names", response_model=PlaceNamesResponse)
async def place_names(
    request: KeyPointsRequest,
    maps_client: googlemaps.Client = Depends(get_maps_client),
) -> PlaceNamesResponse:
    """Names the places a route passes near.

    Reverse-geocodes evenly spaced key points, pausing between lookups.
    Points that fail to resolve are skipped.

    Raises:
        HTTPException 502: If the lookup fails unexpectedly.
    """
    route = [Coordinate(lon, lat) for lon, lat in request.coords]
    try:
        points, names = await geocoding.lookup_place_names(
            maps_client, route, request.count
        )
    except Exception as exc:  # noqa: BLE001
        logging.exception("geocoding.lookup_place_names failed")
        raise HTTPException(
            status_code=502,
            detail="Failed to look up place names. Please try again.",
        ) from exc
    return PlaceNamesResponse(
        key_points=[tuple(p) for p in points],
        place_names=names,
    )
