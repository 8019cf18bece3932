"""
Geometry helpers for circular geofences.

Thin wrappers around geopy so the rest of the package deals in
(latitude, longitude) tuples and metres.
"""

from typing import Tuple

from geopy.distance import geodesic

Point = Tuple[float, float]


def get_distance(point_a: Point, point_b: Point) -> float:
    """
    Geodesic distance between two points.

    Args:
        point_a: (latitude, longitude) in degrees
        point_b: (latitude, longitude) in degrees

    Returns:
        Distance in metres
    """
    return geodesic(point_a, point_b).meters


def is_point_in_circle(point: Point, center: Point, radius: float) -> bool:
    """Check whether a point lies strictly inside a circle of `radius` metres."""
    return get_distance(point, center) < radius
