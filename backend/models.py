"""Pydantic request and response models for the TrailDay backend."""

from typing import Literal

from pydantic import BaseModel, Field

from key_points import KEY_POINT_COUNT

TripType = Literal["bike", "trek"]


class StartPoint(BaseModel):
    """The (snapped) start of a planned route."""

    lat: float
    lon: float


class DayForecast(BaseModel):
    """One day of the forecast at the trip start."""

    date: str
    """ISO date (YYYY-MM-DD) in the start point's local timezone."""

    temp_max: float | None = None
    temp_min: float | None = None

    weathercode: int | None = None
    """WMO weather interpretation code."""


# ---------------------------------------------------------------------------
# Route planning models
# ---------------------------------------------------------------------------


class PlanRouteRequest(BaseModel):
    """Request body for the /plan-route endpoint."""

    location: str
    """Free-text place name or a 'lat,lng' string."""

    type: TripType
    """'trek' for a one-day walking loop; 'bike' for a two-day ride."""


class PlanRouteResponse(BaseModel):
    """The planned route and its per-day breakdown."""

    type: TripType

    coords: list[tuple[float, float]]
    """Route geometry as [lon, lat] pairs, ready for GeoJSON."""

    day_distances: list[float]
    """Distance (km) ridden or walked on each day."""

    total_km: float
    """Sum of ``day_distances``."""

    start: StartPoint

    weather: list[DayForecast] = Field(default_factory=list)
    """Daily forecast at the start point, beginning tomorrow."""


# ---------------------------------------------------------------------------
# Key point models
# ---------------------------------------------------------------------------


class KeyPointsRequest(BaseModel):
    """Request body for the /key-points and /place-names endpoints."""

    coords: list[tuple[float, float]] = Field(min_length=1)
    """Route geometry as [lon, lat] pairs."""

    count: int = Field(default=KEY_POINT_COUNT, ge=1, le=50)


class KeyPointsResponse(BaseModel):
    """Evenly spaced points sampled from a route."""

    key_points: list[tuple[float, float]]


class PlaceNamesResponse(BaseModel):
    """Key points along a route and the places found near them."""

    key_points: list[tuple[float, float]]
    place_names: list[str]
