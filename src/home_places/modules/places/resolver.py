"""Zone resolution: which named zone does a coordinate fall in."""

import logging
from typing import Optional, Sequence, Tuple

from home_places.core.zone import Zone

from .models import Resolution

logger = logging.getLogger(__name__)


def resolve(
    point: Tuple[float, float],
    home: Optional[Zone],
    places: Sequence[Zone],
) -> Resolution:
    """
    Match a coordinate against home and the configured places.

    Home is checked first, then places in configured order; the first match
    wins. Without a home zone the ping is never at home and the distance is 0.

    Args:
        point: (latitude, longitude) in degrees
        home: Home zone or None
        places: Place zones in precedence order

    Returns:
        Resolution with at_home, distance to home (metres) and zone label
    """
    at_home = False
    home_distance = 0
    if home is not None:
        at_home = home.contains(point)
        home_distance = round(home.distance_to(point)) or 0

    if at_home:
        return Resolution(at_home=True, home_distance=home_distance, name=home.name)

    for place in places:
        logger.debug(f"Checking if position is at '{place.name}' (radius: {place.radius}m)")
        if place.contains(point):
            logger.debug("Place found, skipping other checks")
            return Resolution(at_home=False, home_distance=home_distance, name=place.name)

    return Resolution(at_home=False, home_distance=home_distance, name="")
