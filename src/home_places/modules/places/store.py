"""Per-user presence records stored through the host."""

import logging
from typing import Any, Dict, List

from home_places.core.host import HostAdapter, StoreError

from .const import USER_STATES
from .models import EnrichedLocation, WriteResult

logger = logging.getLogger(__name__)


def _device_object(user_id: str) -> Dict[str, Any]:
    return {
        "type": "device",
        "common": {"id": user_id, "name": user_id},
        "native": {"name": user_id, "device": user_id},
    }


def _state_object(name: str, role: str, value_type: str) -> Dict[str, Any]:
    return {
        "type": "state",
        "common": {
            "role": role,
            "name": name,
            "read": True,
            "write": False,
            "type": value_type,
        },
        "native": {},
    }


class PresenceStore:
    """
    Reads and writes per-user records under `<user_id>.<field>`.

    Every host call is independent: a failure is logged and reported in the
    returned WriteResult, never raised, and never stops sibling writes.
    """

    def __init__(self, host: HostAdapter) -> None:
        self._host = host

    def _create(self, object_id: str, obj: Dict[str, Any]) -> WriteResult:
        try:
            self._host.set_object_not_exists(object_id, obj)
        except StoreError as e:
            logger.warning(f"Error while creating object '{object_id}' -> {e}")
            return WriteResult(key=object_id, ok=False, error=str(e))
        return WriteResult(key=object_id, ok=True)

    def _write(self, state_id: str, value: Any) -> WriteResult:
        try:
            self._host.set_state(state_id, value, ack=True)
        except StoreError as e:
            logger.warning(f"Error while setting value '{value}' for '{state_id}' -> {e}")
            return WriteResult(key=state_id, ok=False, error=str(e))
        return WriteResult(key=state_id, ok=True)

    def ensure_user(self, user_id: str) -> List[WriteResult]:
        """
        Create the user's device and record states if the device is missing.

        Returns:
            Results of the create calls (empty if the device already exists)
        """
        try:
            if self._host.get_object(user_id):
                return []
        except StoreError as e:
            logger.debug(f"Could not read object '{user_id}' -> {e}")

        results = [self._create(user_id, _device_object(user_id))]
        for name, (role, value_type) in USER_STATES.items():
            results.append(self._create(f"{user_id}.{name}", _state_object(name, role, value_type)))

        logger.info(f"Created objects for user '{user_id}'")
        return results

    def last_timestamp(self, user_id: str) -> int:
        """Last stored timestamp for the user, 0 if none or unreadable."""
        try:
            state = self._host.get_state(f"{user_id}.timestamp")
        except StoreError as e:
            logger.debug(f"Could not read timestamp of '{user_id}' -> {e}")
            return 0

        if not state or not state.val:
            return 0
        try:
            return int(state.val)
        except (TypeError, ValueError):
            return 0

    def should_apply(self, user_id: str, timestamp: int) -> bool:
        """
        Stale-update guard.

        Returns:
            False if the stored timestamp is at least as new as `timestamp`
        """
        previous = self.last_timestamp(user_id)
        if previous and previous >= timestamp:
            logger.warning(
                f"Found a newer place for '{user_id}' ({previous} >= {timestamp}): skipping update"
            )
            return False
        return True

    def write_record(self, user_id: str, loc: EnrichedLocation) -> List[WriteResult]:
        """Write all six record fields as acknowledged values."""
        values = {
            "timestamp": loc.timestamp,
            "date": loc.date,
            "place": loc.name,
            "latitude": loc.latitude,
            "longitude": loc.longitude,
            "distance": loc.home_distance,
        }
        results = [self._write(f"{user_id}.{key}", value) for key, value in values.items()]

        failed = [r.key for r in results if not r.ok]
        if failed:
            logger.debug(f"{len(failed)} of {len(results)} writes failed for '{user_id}': {failed}")
        return results
