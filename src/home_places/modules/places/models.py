"""
Data models for the places module.

Defines the inbound ping, the enriched result and the immutable adapter
configuration.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
import logging

from home_places.core.host import DEFAULT_DATE_FORMAT
from home_places.core.zone import Zone

from .const import DEFAULT_HOME_NAME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationPing:
    """
    A validated location update for one user.

    Attributes:
        user: User name as sent by the caller
        latitude: Latitude in degrees
        longitude: Longitude in degrees
        timestamp: Milliseconds since the epoch (13-digit form)
    """

    user: str
    latitude: float
    longitude: float
    timestamp: int

    @property
    def point(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class Resolution:
    """Outcome of matching a coordinate against the configured zones."""

    at_home: bool
    home_distance: float
    name: str = ""


@dataclass(frozen=True)
class EnrichedLocation:
    """
    A ping plus everything derived from it.

    Serialized with to_dict() when replying to the sender.
    """

    user: str
    latitude: float
    longitude: float
    timestamp: int
    date: str
    at_home: bool
    home_distance: float
    name: str = ""

    def to_dict(self) -> dict:
        """Serialize to the wire form."""
        return {
            "user": self.user,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.timestamp,
            "date": self.date,
            "atHome": self.at_home,
            "homeDistance": self.home_distance,
            "name": self.name,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating an inbound message; `ping` is set when valid."""

    valid: bool
    reason: str = ""
    ping: Optional[LocationPing] = None
    reply_to: Optional[str] = None
    callback: Any = None


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a single host write."""

    key: str
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class PlacesConfig:
    """
    Adapter configuration, built once when the host is ready.

    Attributes:
        home: Home zone, None when the host coordinates are unavailable
        places: Place zones in precedence order
        date_format: strftime format for the `date` field
    """

    home: Optional[Zone] = None
    places: Tuple[Zone, ...] = field(default_factory=tuple)
    date_format: str = DEFAULT_DATE_FORMAT

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], system_config: Optional[Dict[str, Any]] = None
    ) -> "PlacesConfig":
        """
        Build the configuration.

        Args:
            data: Adapter config (radius, homeName, places, dateFormat)
            system_config: `common` section of the host system config holding
                the home latitude/longitude (None = not available)

        Returns:
            PlacesConfig; malformed place entries are skipped
        """
        home = None
        if system_config:
            try:
                home = Zone.from_dict(
                    {
                        "name": data.get("homeName") or DEFAULT_HOME_NAME,
                        "latitude": system_config.get("latitude"),
                        "longitude": system_config.get("longitude"),
                        "radius": data.get("radius"),
                    }
                )
            except ValueError as e:
                logger.warning(f"Home zone unavailable: {e}")

        places = []
        for entry in data.get("places") or []:
            try:
                places.append(Zone.from_dict(entry))
            except ValueError as e:
                logger.warning(f"Skipping place: {e}")

        return cls(
            home=home,
            places=tuple(places),
            date_format=data.get("dateFormat") or DEFAULT_DATE_FORMAT,
        )
