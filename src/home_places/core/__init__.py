"""
Core components of the home-places adapter.

This package contains:
- bus: Event Bus carrying host callbacks to modules
- geo: Distance and point-in-circle helpers
- host: HostAdapter interface and in-memory host
- zone: Zone dataclass
"""

from home_places.core.bus import Event, EventBus, EventFilter
from home_places.core.host import HostAdapter, MemoryHost, StateValue, StoreError
from home_places.core.zone import Zone

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
