"""Evenly spaced key points along a route, used for place-name lookups."""

import math
from typing import Sequence

from geodesy import Coordinate

# Default number of key points sampled from a route.
KEY_POINT_COUNT: int = 10


def sample_key_points(route: Sequence[Coordinate], count: int) -> list[Coordinate]:
    """Returns up to ``count`` evenly spaced coordinates from ``route``.

    The first and last coordinates are always included when ``count >= 2``.
    Fractional positions round half up. Indices that round to the same
    position are kept once.
    """
    if count <= 0 or not route:
        return []
    if count == 1:
        return [route[0]]

    step = (len(route) - 1) / (count - 1)
    seen: set[int] = set()
    points: list[Coordinate] = []
    for i in range(count):
        idx = math.floor(i * step + 0.5)
        if idx in seen or not 0 <= idx < len(route):
            continue
        seen.add(idx)
        points.append(route[idx])
    return points
