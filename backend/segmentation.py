"""Splits a route's length into per-day distances.

Day 1 of a two-day trip is held near the halfway mark (40–60% of the total,
never above the daily cap). Longer trips fill each day up to the cap and
spill into the next; the final day absorbs whatever is left, even if that
takes it over the cap.
"""

import logging
from typing import Sequence

from geodesy import Coordinate, great_circle_distance_km

logger = logging.getLogger(__name__)

# Window (fraction of total) day 1 of a two-day trip must fall into.
TWO_DAY_MIN_FRACTION: float = 0.4
TWO_DAY_MAX_FRACTION: float = 0.6


def cumulative_distances(route: Sequence[Coordinate]) -> list[float]:
    """Returns running great-circle distances (km), starting at 0."""
    cum = [0.0]
    for i in range(1, len(route)):
        cum.append(cum[-1] + great_circle_distance_km(route[i - 1], route[i]))
    return cum


def two_day_split_km(total_km: float, max_km_per_day: float) -> float:
    """Returns the day-1 threshold for a two-day trip.

    Starts from an even split and clamps it into
    ``[max(40% of total, min(half, cap)), min(60% of total, cap)]``. When that
    window is inverted (a cap below 40% of the total) the upper bound wins, so
    day 1 still respects the cap.
    """
    half = total_km / 2
    low = max(TWO_DAY_MIN_FRACTION * total_km, min(half, max_km_per_day))
    high = min(TWO_DAY_MAX_FRACTION * total_km, max_km_per_day)
    return min(max(half, low), high)


def split_into_days(
    route: Sequence[Coordinate], days: int, max_km_per_day: float
) -> list[float]:
    """Distributes the route's segments over ``days`` day buckets.

    Segments are never divided: each one lands wholly in a single day.

    Raises:
        ValueError: If ``days`` is less than 1.
    """
    if days < 1:
        raise ValueError("days must be at least 1.")

    cum = cumulative_distances(route)
    total = cum[-1]
    if days == 1:
        return [total]

    first_day_limit = (
        two_day_split_km(total, max_km_per_day) if days == 2 else max_km_per_day
    )

    day_distances = [0.0] * days
    current = 0
    for i in range(1, len(cum)):
        segment = cum[i] - cum[i - 1]
        candidate = day_distances[current] + segment
        limit = first_day_limit if current == 0 else max_km_per_day
        if candidate <= limit or current == days - 1:
            day_distances[current] = candidate
        else:
            current += 1
            day_distances[current] += segment

    logger.info(
        "Split %.1fkm into %s",
        total,
        ", ".join(f"{d:.1f}km" for d in day_distances),
    )
    return day_distances
