"""
home-places: Location-to-place adapter for home-automation hosts.

This library receives geolocation pings for tracked users and provides:
- Zone resolution (home first, then named places in order)
- Per-user presence records with out-of-order protection
- A shared list of persons at home with derived counters
- An Event Bus and host interface to plug into the host platform
"""

from home_places.core.bus import Event, EventBus, EventFilter
from home_places.core.host import HostAdapter, MemoryHost, StateValue, StoreError
from home_places.core.zone import Zone

__version__ = "0.1.0-alpha"

__all__ = [
    "Event",
    "EventBus",
    "EventFilter",
    "HostAdapter",
    "MemoryHost",
    "StateValue",
    "StoreError",
    "Zone",
]
