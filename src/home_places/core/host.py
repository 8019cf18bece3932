"""
Host platform interface.

The adapter runs inside a home-automation host that owns the object/state
database, the message box and the process lifecycle. The integration layer
provides a concrete HostAdapter; MemoryHost is an in-process implementation
used by tests and examples.

Design Principle:
    The interface is intentionally minimal. It mirrors the handful of host
    calls the adapter needs (objects, states, replies, subscriptions) and
    nothing else. Host callbacks reach the adapter as EventBus events.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from fnmatch import fnmatchcase
from typing import Any, Callable, Dict, List, Optional
import logging
import time

from home_places.core.bus import Event, EventBus

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class StoreError(Exception):
    """Raised by a host when an object or state operation fails."""


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class StateValue:
    """
    A stored state value.

    Attributes:
        val: The value itself
        ack: True for acknowledged (authoritative) writes, False for
            commands/writes from external actors still awaiting processing
        ts: Write time in milliseconds since the epoch
    """

    val: Any
    ack: bool = False
    ts: int = field(default_factory=_now_ms)


@dataclass
class Reply:
    """A message sent back through the host's message box."""

    target: str
    command: str
    message: Any
    callback: Any


class HostAdapter(ABC):
    """
    Abstract interface for host platform operations.

    IDs passed to object/state methods are relative to the adapter's
    namespace, except for get_foreign_object which takes a full ID.
    """

    @property
    @abstractmethod
    def namespace(self) -> str:
        """Instance namespace, e.g. "places.0"."""
        pass

    @abstractmethod
    def get_foreign_object(self, object_id: str) -> Optional[Dict[str, Any]]:
        """
        Read an object outside the adapter namespace.

        Raises:
            StoreError: If the object cannot be read
        """
        pass

    @abstractmethod
    def get_object(self, object_id: str) -> Optional[Dict[str, Any]]:
        """
        Read an object in the adapter namespace.

        Returns:
            The object, or None if it does not exist

        Raises:
            StoreError: If the read fails
        """
        pass

    @abstractmethod
    def set_object_not_exists(self, object_id: str, obj: Dict[str, Any]) -> None:
        """
        Create an object unless it already exists.

        Raises:
            StoreError: If the write fails
        """
        pass

    @abstractmethod
    def get_state(self, state_id: str) -> Optional[StateValue]:
        """
        Read a state in the adapter namespace.

        Returns:
            The stored value, or None if the state was never written

        Raises:
            StoreError: If the read fails
        """
        pass

    @abstractmethod
    def set_state(self, state_id: str, val: Any, ack: bool = False) -> None:
        """
        Write a state in the adapter namespace.

        Raises:
            StoreError: If the write fails
        """
        pass

    @abstractmethod
    def subscribe_states(self, pattern: str) -> None:
        """Ask the host to report changes of own states matching a glob pattern."""
        pass

    @abstractmethod
    def send_to(self, target: str, command: str, message: Any, callback: Any) -> None:
        """Reply to a message box request."""
        pass

    def format_date(self, timestamp_ms: int, fmt: str = DEFAULT_DATE_FORMAT) -> str:
        """
        Format a millisecond timestamp in the host's local time.

        Args:
            timestamp_ms: Milliseconds since the epoch
            fmt: strftime format

        Returns:
            Formatted date string
        """
        return datetime.fromtimestamp(timestamp_ms / 1000).strftime(fmt)


class MemoryHost(HostAdapter):
    """
    In-memory host for testing and examples.

    Stores objects and states in dicts, publishes "state.changed" events on
    the bus for subscribed states, and records replies.

    Helpers simulate the host side of the lifecycle:
        host.start()                       # publishes adapter.ready
        host.deliver_message({...})        # publishes message.received
        host.write_external("clearHome", True)
        host.stop(callback)                # publishes adapter.unload
    """

    def __init__(
        self,
        bus: EventBus,
        namespace: str = "places.0",
        system_config: Optional[Dict[str, Any]] = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._bus = bus
        self._namespace = namespace
        self._tz = tz
        self._objects: Dict[str, Dict[str, Any]] = {}
        self._foreign_objects: Dict[str, Dict[str, Any]] = {}
        self._states: Dict[str, StateValue] = {}
        self._subscriptions: List[str] = []
        self._replies: List[Reply] = []
        self._failing: set[str] = set()

        if system_config is not None:
            self._foreign_objects["system.config"] = {
                "type": "config",
                "common": dict(system_config),
            }

    @property
    def namespace(self) -> str:
        return self._namespace

    def _full_id(self, object_id: str) -> str:
        return f"{self._namespace}.{object_id}"

    def _check(self, full_id: str) -> None:
        if full_id in self._failing:
            raise StoreError(f"Simulated failure for '{full_id}'")

    # Test helpers

    def fail_on(self, object_id: str, foreign: bool = False) -> None:
        """Make every read/write of this ID raise StoreError."""
        self._failing.add(object_id if foreign else self._full_id(object_id))

    def get_replies(self) -> List[Reply]:
        """Get recorded replies."""
        return self._replies.copy()

    def get_value(self, state_id: str) -> Any:
        """Shortcut: stored value of a state, or None."""
        state = self._states.get(self._full_id(state_id))
        return state.val if state else None

    def all_objects(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._objects)

    def start(self) -> None:
        self._bus.publish(Event(type="adapter.ready", source="host"))

    def deliver_message(self, obj: Any) -> None:
        self._bus.publish(
            Event(type="message.received", source="host", payload={"message": obj})
        )

    def write_external(self, state_id: str, val: Any) -> None:
        """Simulate a write by a user or another adapter (unacknowledged)."""
        self.set_state(state_id, val, ack=False)

    def stop(self, callback: Callable[[], None]) -> None:
        self._bus.publish(
            Event(type="adapter.unload", source="host", payload={"callback": callback})
        )

    # HostAdapter implementation

    def get_foreign_object(self, object_id: str) -> Optional[Dict[str, Any]]:
        self._check(object_id)
        obj = self._foreign_objects.get(object_id)
        if obj is None:
            raise StoreError(f"Object '{object_id}' not found")
        return obj

    def get_object(self, object_id: str) -> Optional[Dict[str, Any]]:
        full_id = self._full_id(object_id)
        self._check(full_id)
        return self._objects.get(full_id)

    def set_object_not_exists(self, object_id: str, obj: Dict[str, Any]) -> None:
        full_id = self._full_id(object_id)
        self._check(full_id)
        if full_id not in self._objects:
            self._objects[full_id] = obj

    def get_state(self, state_id: str) -> Optional[StateValue]:
        full_id = self._full_id(state_id)
        self._check(full_id)
        return self._states.get(full_id)

    def set_state(self, state_id: str, val: Any, ack: bool = False) -> None:
        full_id = self._full_id(state_id)
        self._check(full_id)
        state = StateValue(val=val, ack=ack)
        self._states[full_id] = state

        if any(fnmatchcase(state_id, pattern) for pattern in self._subscriptions):
            self._bus.publish(
                Event(
                    type="state.changed",
                    source="host",
                    entity_id=full_id,
                    payload={"state": state},
                )
            )

    def subscribe_states(self, pattern: str) -> None:
        if pattern not in self._subscriptions:
            self._subscriptions.append(pattern)
            logger.debug(f"Subscribed to states '{pattern}' in {self._namespace}")

    def send_to(self, target: str, command: str, message: Any, callback: Any) -> None:
        self._replies.append(Reply(target, command, message, callback))

    def format_date(self, timestamp_ms: int, fmt: str = DEFAULT_DATE_FORMAT) -> str:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=self._tz).strftime(fmt)
