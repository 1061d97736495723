"""Daily weather forecast for the start of a planned trip.

Uses the Open-Meteo forecast API (no key required). The trip starts
tomorrow, so today's entry is skipped and the following days are returned.
"""

import logging

import requests

from geodesy import Coordinate
from models import DayForecast

logger = logging.getLogger(__name__)

OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
# Number of days returned, starting tomorrow.
FORECAST_DAYS: int = 3
REQUEST_TIMEOUT_S: int = 10
_DAILY_FIELDS = "temperature_2m_max,temperature_2m_min,weathercode"


class WeatherError(RuntimeError):
    """The forecast could not be fetched or parsed."""


def fetch_forecast(
    start: Coordinate,
    *,
    session: requests.Session | None = None,
    days: int = FORECAST_DAYS,
) -> list[DayForecast]:
    """Returns up to ``days`` daily forecasts for ``start``, from tomorrow.

    Raises:
        WeatherError: On a transport error, a non-2xx status, or a response
            without the expected daily series.
    """
    http = session or requests.Session()
    try:
        response = http.get(
            OPEN_METEO_FORECAST_URL,
            params={
                "latitude": start.lat,
                "longitude": start.lon,
                "daily": _DAILY_FIELDS,
                "timezone": "auto",
            },
            timeout=REQUEST_TIMEOUT_S,
        )
        response.raise_for_status()
        daily = response.json()["daily"]
        forecasts = [
            DayForecast(
                date=daily["time"][i],
                temp_max=daily["temperature_2m_max"][i],
                temp_min=daily["temperature_2m_min"][i],
                weathercode=daily["weathercode"][i],
            )
            for i in range(1, min(days + 1, len(daily["time"])))
        ]
    except requests.RequestException as exc:
        raise WeatherError(f"Weather request failed: {exc}") from exc
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise WeatherError(f"Unexpected weather response: {exc!r}") from exc

    logger.info("Fetched %d-day forecast for %s", len(forecasts), start)
    return forecasts
