"""
Zone dataclass and helpers.

A Zone is a named circular geofence: the single home zone or one of the
configured places.
"""

from dataclasses import dataclass
from typing import Any, Dict

from home_places.core.geo import Point, get_distance, is_point_in_circle


@dataclass(frozen=True)
class Zone:
    """
    A named circular geofence.

    Attributes:
        name: Human-readable label reported when a ping falls inside
        latitude: Center latitude in degrees
        longitude: Center longitude in degrees
        radius: Radius in metres
    """

    name: str
    latitude: float
    longitude: float
    radius: float

    @property
    def center(self) -> Point:
        return (self.latitude, self.longitude)

    def contains(self, point: Point) -> bool:
        """True if the point lies strictly inside this zone."""
        return is_point_in_circle(point, self.center, self.radius)

    def distance_to(self, point: Point) -> float:
        """Distance in metres from the zone center to a point."""
        return get_distance(point, self.center)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Zone":
        """
        Build a zone from a configuration entry.

        Raises:
            ValueError: If coordinates or radius are missing or not numeric
        """
        try:
            return cls(
                name=str(data.get("name") or ""),
                latitude=float(data["latitude"]),
                longitude=float(data["longitude"]),
                radius=float(data["radius"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid zone definition {data!r}: {e}") from e
