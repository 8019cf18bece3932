"""
Places module for home-places.

Resolves location pings to named zones and tracks WHO is home.

Features:
- Home zone from the host's system coordinates, ordered place zones from config
- Per-user records (place, timestamp, distance, latitude, longitude, date)
- Out-of-order pings never overwrite newer data
- Shared list of persons at home with derived counters

Events Consumed:
- adapter.ready, message.received, state.changed, adapter.unload
"""

from .module import PlacesModule
from .models import EnrichedLocation, LocationPing, PlacesConfig, Resolution
from .resolver import resolve
from .validation import normalize_timestamp, sanitize_user_id, validate_message

__all__ = [
    "PlacesModule",
    "EnrichedLocation",
    "LocationPing",
    "PlacesConfig",
    "Resolution",
    "resolve",
    "normalize_timestamp",
    "sanitize_user_id",
    "validate_message",
]
