"""Nearest-neighbour visit sequencing within a single work package.

Greedy ordering trades route quality for O(n^2) time and fully deterministic
output: the same cluster and start point always give the same sequence.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ...models.domain import Location
from ..geospatial import haversine_miles


def order_route(locations: Sequence[Location], start: tuple[float, float]) -> list[Location]:
    """Order locations by repeatedly visiting the nearest unvisited one.

    Args:
        locations: Members of one cluster.
        start: (lat, lon) the route begins from, normally the worker's position.

    Returns:
        A permutation of ``locations``. Ties go to the earliest remaining entry.
    """
    if len(locations) <= 1:
        return list(locations)

    unvisited = list(locations)
    route: list[Location] = []
    current_lat, current_lon = start

    while unvisited:
        nearest_index = 0
        nearest_distance = math.inf
        for index, candidate in enumerate(unvisited):
            distance = haversine_miles(current_lat, current_lon, candidate.latitude, candidate.longitude)
            if distance < nearest_distance:
                nearest_distance = distance
                nearest_index = index

        nearest = unvisited.pop(nearest_index)
        route.append(nearest)
        current_lat, current_lon = nearest.latitude, nearest.longitude

    return route


def total_route_distance(
    locations: Sequence[Location],
    start: Optional[tuple[float, float]] = None,
) -> float:
    """Sum of haversine legs between consecutive locations, in miles.

    When ``start`` is given the leg from it to the first location is included.
    """
    points = [(loc.latitude, loc.longitude) for loc in locations]
    if start is not None and points:
        points.insert(0, start)
    if len(points) < 2:
        return 0.0

    total = 0.0
    for (lat1, lon1), (lat2, lon2) in zip(points, points[1:]):
        total += haversine_miles(lat1, lon1, lat2, lon2)
    return total
