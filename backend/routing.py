"""Routing backend seam: tagged outcomes, errors and the OpenRouteService adapter.

Every directions or round-trip call resolves to exactly one of three outcomes:

  Routed        the backend produced a non-empty geometry.
  NotRoutable   the request was well-formed but no path exists for it
                (ORS error 2010, or an empty geometry). Search callers skip
                the candidate and try the next one.
  RoutingFailed anything else. Callers abort and raise ``RoutingError``.

Builders receive a ``RoutingBackend`` so tests can script outcomes without
touching the network.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Protocol, Sequence, Union

import openrouteservice
import requests
from openrouteservice import exceptions as ors_exceptions

from geodesy import Coordinate

logger = logging.getLogger(__name__)

# ORS error code for "could not find routable point within a radius".
ORS_NOT_ROUTABLE_CODE: int = 2010

# Seconds before an individual ORS request gives up.
ORS_TIMEOUT_S: int = 30

ORS_DEFAULT_BASE_URL = "https://api.openrouteservice.org"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class LocationUnresolved(ValueError):
    """The start location could not be turned into a coordinate."""


class RoutingError(RuntimeError):
    """The routing backend failed in a way that aborts the planning call.

    ``detail`` carries the backend's raw error payload so it can be surfaced
    to the client for diagnosis.
    """

    def __init__(self, message: str = "Routing error", detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class NoRouteFound(RoutingError):
    """The candidate search and its fallback produced nothing usable."""


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Routed:
    route: list[Coordinate]


@dataclass(frozen=True)
class NotRoutable:
    detail: Any = None


@dataclass(frozen=True)
class RoutingFailed:
    detail: Any = None


RoutingOutcome = Union[Routed, NotRoutable, RoutingFailed]


class RoutingBackend(Protocol):
    """The three routing capabilities the engine consumes."""

    def nearest_point(
        self, profile: str, point: Coordinate, radius_m: int
    ) -> Coordinate | None: ...

    def directions(
        self, profile: str, coordinates: Sequence[Coordinate]
    ) -> RoutingOutcome: ...

    def round_trip(
        self, profile: str, origin: Coordinate, length_m: float, seed: int
    ) -> RoutingOutcome: ...


# ---------------------------------------------------------------------------
# OpenRouteService adapter
# ---------------------------------------------------------------------------


class OrsRoutingBackend:
    """``RoutingBackend`` backed by the OpenRouteService v2 API."""

    def __init__(self, client: openrouteservice.Client | None = None):
        self._client = client or openrouteservice.Client(
            key=os.environ.get("ORS_API_KEY", ""),
            base_url=os.environ.get("ORS_BASE_URL", ORS_DEFAULT_BASE_URL),
            timeout=ORS_TIMEOUT_S,
        )

    def nearest_point(
        self, profile: str, point: Coordinate, radius_m: int
    ) -> Coordinate | None:
        """Returns the nearest routable point within ``radius_m``, or None.

        Errors are reported as None; the caller moves on to a wider radius.
        """
        try:
            body = self._client.request(
                f"/v2/nearest/{profile}",
                get_params={
                    "point": f"{point.lon},{point.lat}",
                    "number": 1,
                    "radius": radius_m,
                },
            )
        except (
            ors_exceptions.ApiError,
            ors_exceptions.HTTPError,
            ors_exceptions.Timeout,
            requests.RequestException,
            ValueError,
        ) as exc:
            logger.debug("ORS nearest failed at %dm: %s", radius_m, exc)
            return None

        features = (body or {}).get("features") or []
        if not features:
            return None
        lon, lat = features[0]["geometry"]["coordinates"][:2]
        return Coordinate(float(lon), float(lat))

    def directions(
        self, profile: str, coordinates: Sequence[Coordinate]
    ) -> RoutingOutcome:
        return self._request_route(
            profile, [[c.lon, c.lat] for c in coordinates]
        )

    def round_trip(
        self, profile: str, origin: Coordinate, length_m: float, seed: int
    ) -> RoutingOutcome:
        return self._request_route(
            profile,
            [[origin.lon, origin.lat]],
            options={"round_trip": {"length": length_m, "seed": seed}},
        )

    def _request_route(
        self,
        profile: str,
        coordinates: list[list[float]],
        options: dict[str, Any] | None = None,
    ) -> RoutingOutcome:
        kwargs: dict[str, Any] = {}
        if options:
            kwargs["options"] = options
        try:
            body = self._client.directions(
                coordinates,
                profile=profile,
                format="geojson",
                validate=False,
                **kwargs,
            )
        except ors_exceptions.ApiError as exc:
            if _error_code(exc.message) == ORS_NOT_ROUTABLE_CODE:
                return NotRoutable(exc.message)
            logger.error("ORS directions error (%s): %s", exc.status, exc.message)
            return RoutingFailed(exc.message)
        except (
            ors_exceptions.HTTPError,
            ors_exceptions.Timeout,
            requests.RequestException,
        ) as exc:
            logger.error("ORS directions request failed: %s", exc)
            return RoutingFailed({"message": str(exc)})
        return parse_route(body)


def parse_route(body: Any) -> RoutingOutcome:
    """Turns an ORS GeoJSON directions response into an outcome."""
    features = (body or {}).get("features") or []
    if not features:
        return NotRoutable(body)
    raw = features[0].get("geometry", {}).get("coordinates") or []
    if not raw:
        return NotRoutable(body)
    return Routed([Coordinate(float(p[0]), float(p[1])) for p in raw])


def _error_code(payload: Any) -> int | None:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        return error.get("code")
    return None
