"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from shapely.geometry import MultiPoint

EARTH_RADIUS_MILES = 3959.0


def haversine_miles(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    *,
    radius: float = EARTH_RADIUS_MILES,
) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius * c


def haversine_miles_matrix(
    points: np.ndarray,
    centers: np.ndarray,
    *,
    radius: float = EARTH_RADIUS_MILES,
) -> np.ndarray:
    """Pairwise haversine distances.

    Args:
        points: array of shape (n, 2) holding (lat, lon) rows in degrees.
        centers: array of shape (k, 2) holding (lat, lon) rows in degrees.

    Returns:
        Array of shape (n, k) with distances in miles.
    """
    lat1 = np.radians(points[:, 0])[:, None]
    lon1 = np.radians(points[:, 1])[:, None]
    lat2 = np.radians(centers[:, 0])[None, :]
    lon2 = np.radians(centers[:, 1])[None, :]

    a = np.sin((lat2 - lat1) / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return radius * c


def centroid(points: Sequence[tuple[float, float]]) -> tuple[float, float]:
    """Arithmetic mean of (lat, lon) pairs."""
    if not points:
        raise ValueError("centroid of an empty point set is undefined")
    lat = sum(p[0] for p in points) / len(points)
    lon = sum(p[1] for p in points) / len(points)
    return (lat, lon)


def hull_outline(points: Sequence[tuple[float, float]], *, buffer_degrees: float = 0.002) -> list[list[float]]:
    """Closed (lat, lon) outline around the points, for map overlays.

    Fewer than three points (or collinear ones) still yield a polygon because
    the convex hull is buffered outward.
    """
    if not points:
        return []
    hull = MultiPoint([(lon, lat) for lat, lon in points]).convex_hull.buffer(buffer_degrees)
    if hull.is_empty or hull.geom_type != "Polygon":
        return []
    return [[lat, lon] for lon, lat in hull.exterior.coords]
