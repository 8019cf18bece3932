"""The shared list of persons at home and its derived counters."""

import json
import logging
from typing import Any, List

from home_places.core.host import HostAdapter, StoreError

from .const import STATE_ANYBODY_AT_HOME, STATE_NUMBER_AT_HOME, STATE_PERSONS_AT_HOME

logger = logging.getLogger(__name__)


def parse_roster(value: Any) -> List[str]:
    """Decode a stored roster value; unset or undecodable values give []."""
    if not value:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    try:
        persons = json.loads(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring undecodable {STATE_PERSONS_AT_HOME} value: {value!r}")
        return []
    if not isinstance(persons, list):
        logger.warning(f"Ignoring non-list {STATE_PERSONS_AT_HOME} value: {value!r}")
        return []
    return [str(p) for p in persons]


class PresenceRoster:
    """
    Keeps `personsAtHome` in step with the users' latest applied updates.

    The roster is read fresh before every change so edits made by other
    actors are kept. Reading and writing are separate host calls, so two
    updates interleaving between them can still lose one change; the host
    offers no compare-and-swap.

    The roster is written unacknowledged: the host reports the write back as
    a state change, and on_roster_changed() republishes the counters.
    """

    def __init__(self, host: HostAdapter) -> None:
        self._host = host

    def read(self) -> List[str]:
        """
        Current roster.

        Raises:
            StoreError: If the host cannot read the state
        """
        state = self._host.get_state(STATE_PERSONS_AT_HOME)
        return parse_roster(state.val if state else None)

    def _write(self, persons: List[str]) -> bool:
        try:
            self._host.set_state(STATE_PERSONS_AT_HOME, json.dumps(persons), ack=False)
        except StoreError as e:
            logger.warning(f"Error while setting '{STATE_PERSONS_AT_HOME}' -> {e}")
            return False
        return True

    def reconcile(self, user: str, at_home: bool) -> bool:
        """
        Add or remove a user according to their latest location.

        Args:
            user: User name
            at_home: Whether the latest applied update was inside home

        Returns:
            True if the roster was written
        """
        try:
            persons = self.read()
        except StoreError as e:
            logger.warning(f"Could not read '{STATE_PERSONS_AT_HOME}' -> {e}")
            return False

        present = user in persons
        if at_home and not present:
            persons.append(user)
        elif present and not at_home:
            persons.remove(user)
        else:
            return False

        logger.info(f"{user} {'arrived' if at_home else 'left'}: {persons}")
        return self._write(persons)

    def clear(self) -> bool:
        """Empty the roster."""
        logger.info(f"Clearing {STATE_PERSONS_AT_HOME}")
        return self._write([])

    def on_roster_changed(self, value: Any) -> None:
        """Republish numberAtHome and anybodyAtHome for a new roster value."""
        persons = parse_roster(value)
        for state_id, val in (
            (STATE_NUMBER_AT_HOME, len(persons)),
            (STATE_ANYBODY_AT_HOME, len(persons) > 0),
        ):
            try:
                self._host.set_state(state_id, val, ack=True)
            except StoreError as e:
                logger.warning(f"Error while setting value '{val}' for '{state_id}' -> {e}")
