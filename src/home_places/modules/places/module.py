"""PlacesModule - Resolve location pings to places and track who is home."""

import logging
from typing import Any, Callable, Dict, Optional

from home_places.modules.base import AdapterModule
from home_places.core.bus import Event, EventBus, EventFilter
from home_places.core.host import DEFAULT_DATE_FORMAT, HostAdapter, StateValue, StoreError

from .const import (
    COMMAND_SEND,
    DEFAULT_USER,
    INSTANCE_OBJECTS,
    STATE_CLEAR_HOME,
    STATE_PERSONS_AT_HOME,
    SYSTEM_CONFIG_ID,
)
from .models import EnrichedLocation, LocationPing, PlacesConfig
from .resolver import resolve
from .roster import PresenceRoster
from .store import PresenceStore
from .validation import sanitize_user_id, validate_message

logger = logging.getLogger(__name__)


class PlacesModule(AdapterModule):
    """
    Places adapter module.

    Receives location pings through the host's message box, works out the
    zone each ping falls in and keeps per-user records plus the list of
    persons at home.

    Events Consumed:
    - adapter.ready: Read home coordinates, create instance objects
    - message.received: Location ping ({"command": "send", "message": {...}})
    - state.changed: External writes to clearHome / personsAtHome
    - adapter.unload: Shutdown; the callback is always invoked

    States Written (under the host namespace):
    - <user>.place, .timestamp, .distance, .latitude, .longitude, .date
    - personsAtHome, numberAtHome, anybodyAtHome
    """

    def __init__(self, config: Optional[Dict] = None) -> None:
        self._bus: Optional[EventBus] = None
        self._host: Optional[HostAdapter] = None
        self._store: Optional[PresenceStore] = None
        self._roster: Optional[PresenceRoster] = None

        raw = self.default_config()
        raw.update(self.migrate_config(dict(config or {})))
        self._raw_config = raw
        # Home zone is unknown until the host reports its coordinates
        self._config = PlacesConfig.from_dict(self._raw_config)

    @property
    def id(self) -> str:
        return "places"

    @property
    def CURRENT_CONFIG_VERSION(self) -> int:
        return 1

    @property
    def config(self) -> PlacesConfig:
        return self._config

    def attach(self, bus: EventBus, host: HostAdapter) -> None:
        """Attach to the host."""
        self._bus = bus
        self._host = host
        self._store = PresenceStore(host)
        self._roster = PresenceRoster(host)

        bus.subscribe(self._on_ready, EventFilter(event_type="adapter.ready"))
        bus.subscribe(self._on_message, EventFilter(event_type="message.received"))
        bus.subscribe(
            self._on_state_changed,
            EventFilter(event_type="state.changed", namespace=host.namespace),
        )
        bus.subscribe(self._on_unload, EventFilter(event_type="adapter.unload"))

        logger.info(f"PlacesModule attached to {host.namespace}")

    def default_config(self) -> Dict:
        """Return default adapter configuration."""
        return {
            "version": self.CURRENT_CONFIG_VERSION,
            "radius": 100,
            "homeName": "",
            "places": [],
            "dateFormat": DEFAULT_DATE_FORMAT,
        }

    def migrate_config(self, config: Dict) -> Dict:
        """Migrate configuration from older versions."""
        # homeName may be absent or null in saved configs
        if config.get("homeName") is None:
            config["homeName"] = ""

        version = config.get("version", 1)
        if version == self.CURRENT_CONFIG_VERSION:
            return config

        # No migrations yet (v1 is first version)
        config["version"] = self.CURRENT_CONFIG_VERSION
        return config

    def _require_host(self) -> HostAdapter:
        if not self._host:
            raise RuntimeError("PlacesModule not attached to a host")
        return self._host

    # =============================================================================
    # Lifecycle
    # =============================================================================

    def on_ready(self) -> None:
        """
        Finish startup once the host is connected.

        Reads the home coordinates from the host's system config. When they
        cannot be read the module keeps running without a home zone.
        """
        host = self._require_host()

        system_config = None
        try:
            obj = host.get_foreign_object(SYSTEM_CONFIG_ID)
            system_config = obj.get("common") if obj else None
        except StoreError as e:
            logger.debug(f"Reading {SYSTEM_CONFIG_ID} failed: {e}")

        if not system_config:
            logger.info("Adapter could not read latitude/longitude from system config!")

        self._config = PlacesConfig.from_dict(self._raw_config, system_config)
        if self._config.home is None:
            logger.warning("No home zone available, nobody will be detected at home")

        host.subscribe_states("*")
        self._ensure_instance_objects()

        logger.debug(f"Current configuration: {self._config}")

    def _ensure_instance_objects(self) -> None:
        host = self._require_host()
        for object_id, obj in INSTANCE_OBJECTS.items():
            try:
                host.set_object_not_exists(object_id, obj)
            except StoreError as e:
                logger.warning(f"Error while creating object '{object_id}' -> {e}")

    def on_unload(self, callback: Callable[[], Any]) -> None:
        """Shut down. The callback is invoked no matter what."""
        try:
            logger.info("PlacesModule stopping")
            if self._bus:
                for handler in (
                    self._on_ready,
                    self._on_message,
                    self._on_state_changed,
                    self._on_unload,
                ):
                    self._bus.unsubscribe(handler)
        except Exception as e:
            logger.warning(f"Error while stopping: {e}")
        finally:
            callback()

    # =============================================================================
    # Messages
    # =============================================================================

    def handle_message(self, obj: Any) -> Optional[EnrichedLocation]:
        """
        Handle a message box request carrying a location ping.

        Invalid or incomplete requests are logged and dropped without a reply.
        A valid ping is enriched and persisted, and the enriched location is
        sent back if the request carries a callback. A stale ping is not
        persisted but still answered.

        Args:
            obj: Raw request from the host message box

        Returns:
            The enriched location, or None if the request was rejected
        """
        host = self._require_host()

        result = validate_message(obj)
        if not result.valid:
            logger.warning(result.reason)
            return None

        logger.debug(f"Received message with location info: {result.ping}")
        loc = self.process(result.ping)

        if result.callback:
            response = loc.to_dict()
            logger.debug(f"Found callback, returning result: {response}")
            host.send_to(result.reply_to, COMMAND_SEND, response, result.callback)

        return loc

    def process(self, ping: LocationPing) -> EnrichedLocation:
        """Enrich a validated ping and persist it."""
        host = self._require_host()
        user = ping.user if ping.user.strip() else DEFAULT_USER

        resolution = resolve(ping.point, self._config.home, self._config.places)
        loc = EnrichedLocation(
            user=user,
            latitude=ping.latitude,
            longitude=ping.longitude,
            timestamp=ping.timestamp,
            date=host.format_date(ping.timestamp, self._config.date_format),
            at_home=resolution.at_home,
            home_distance=resolution.home_distance,
            name=resolution.name or "",
        )
        logger.debug(f"Analyzed place: {loc}")

        self.persist(loc)
        return loc

    def persist(self, loc: EnrichedLocation) -> bool:
        """
        Store an enriched location and update the roster.

        Returns:
            False if the update was stale and nothing was written
        """
        self._require_host()
        user_id = sanitize_user_id(loc.user)

        self._store.ensure_user(user_id)
        if not self._store.should_apply(user_id, loc.timestamp):
            return False

        self._store.write_record(user_id, loc)
        self._roster.reconcile(loc.user, loc.at_home)
        return True

    # =============================================================================
    # State changes
    # =============================================================================

    def handle_state_change(self, state_id: str, state: Optional[StateValue]) -> None:
        """
        React to writes on own states.

        Only unacknowledged writes are handled: clearHome empties the roster,
        a new personsAtHome value republishes the counters.
        """
        host = self._require_host()
        if not state_id or state is None or state.ack:
            return

        prefix = host.namespace + "."
        if not state_id.startswith(prefix):
            return

        local_id = state_id[len(prefix):]
        if local_id == STATE_CLEAR_HOME:
            self._roster.clear()
        elif local_id == STATE_PERSONS_AT_HOME:
            self._roster.on_roster_changed(state.val)

    # =============================================================================
    # Event Handling
    # =============================================================================

    def _on_ready(self, event: Event) -> None:
        self.on_ready()

    def _on_message(self, event: Event) -> None:
        self.handle_message(event.payload.get("message"))

    def _on_state_changed(self, event: Event) -> None:
        self.handle_state_change(event.entity_id, event.payload.get("state"))

    def _on_unload(self, event: Event) -> None:
        callback = event.payload.get("callback")
        self.on_unload(callback if callable(callback) else lambda: None)
