"""Tests for PlacesModule."""

import json
import logging
from datetime import UTC

import pytest

from home_places import EventBus, MemoryHost, StateValue
from home_places.modules.places import LocationPing, PlacesModule

HOME_LAT, HOME_LON = 52.5200, 13.4050
OFFICE = {"name": "Office", "latitude": 52.5300, "longitude": 13.3800, "radius": 500}
NOWHERE = (48.1370, 11.5750)

CONFIG = {"radius": 100, "places": [OFFICE]}


def send(user, lat, lon, ts, callback=None):
    obj = {
        "command": "send",
        "message": {"user": user, "latitude": lat, "longitude": lon, "timestamp": ts},
        "from": "system.adapter.app.0",
    }
    if callback:
        obj["callback"] = callback
    return obj


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def host(bus):
    return MemoryHost(
        bus, system_config={"latitude": HOME_LAT, "longitude": HOME_LON}, tz=UTC
    )


@pytest.fixture
def module(bus, host):
    mod = PlacesModule(CONFIG)
    mod.attach(bus, host)
    host.start()
    return mod


def roster(host):
    return json.loads(host.get_value("personsAtHome") or "[]")


class TestPlacesModuleBasics:
    """Test basic PlacesModule functionality."""

    def test_module_properties(self):
        module = PlacesModule()

        assert module.id == "places"
        assert module.CURRENT_CONFIG_VERSION == 1

    def test_default_config(self):
        config = PlacesModule().default_config()

        assert config["version"] == 1
        assert config["radius"] == 100
        assert config["places"] == []

    def test_migrate_config_sets_version(self):
        module = PlacesModule()

        assert module.migrate_config({"version": 0})["version"] == 1

    @pytest.mark.parametrize("saved", [{"version": 1}, {"version": 1, "homeName": None}])
    def test_migrate_config_fills_home_name(self, saved):
        migrated = PlacesModule().migrate_config(dict(saved))

        assert migrated["homeName"] == ""

    def test_migrate_config_keeps_home_name(self):
        migrated = PlacesModule().migrate_config({"version": 1, "homeName": "Casa"})

        assert migrated["homeName"] == "Casa"

    def test_null_home_name_falls_back_to_home(self, bus, host):
        module = PlacesModule({"radius": 100, "homeName": None})
        module.attach(bus, host)
        host.start()

        assert module.config.home.name == "Home"

    def test_requires_host(self):
        with pytest.raises(RuntimeError, match="not attached"):
            PlacesModule().handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))


class TestReady:
    """Startup behaviour."""

    def test_home_zone_from_system_config(self, module):
        home = module.config.home

        assert home.name == "Home"
        assert home.center == (HOME_LAT, HOME_LON)
        assert home.radius == 100
        assert [p.name for p in module.config.places] == ["Office"]

    def test_custom_home_name(self, bus, host):
        module = PlacesModule({"radius": 100, "homeName": "Casa"})
        module.attach(bus, host)
        host.start()

        assert module.config.home.name == "Casa"

    def test_instance_objects_created(self, module, host):
        for object_id in ("personsAtHome", "numberAtHome", "anybodyAtHome", "clearHome"):
            assert host.get_object(object_id)["type"] == "state"

    def test_degraded_without_system_config(self, bus, caplog):
        caplog.set_level(logging.INFO)
        host = MemoryHost(bus, tz=UTC)
        module = PlacesModule(CONFIG)
        module.attach(bus, host)

        host.start()

        assert module.config.home is None
        assert "could not read latitude/longitude" in caplog.text

        loc = module.handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))
        assert loc.at_home is False
        assert loc.home_distance == 0
        assert roster(host) == []

    def test_skips_malformed_place(self, bus, host, caplog):
        module = PlacesModule({"radius": 100, "places": [{"name": "Broken"}, OFFICE]})
        module.attach(bus, host)
        host.start()

        assert [p.name for p in module.config.places] == ["Office"]
        assert "Skipping place" in caplog.text


class TestMessages:
    """Message handling end to end."""

    def test_arrive_home(self, module, host):
        host.deliver_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))

        assert host.get_value("Alice.place") == "Home"
        assert host.get_value("Alice.distance") == 0
        assert host.get_value("Alice.timestamp") == 1700000000000
        assert host.get_value("Alice.date") == "2023-11-14 22:13:20"
        assert roster(host) == ["Alice"]
        assert host.get_value("numberAtHome") == 1
        assert host.get_value("anybodyAtHome") is True

    def test_leave_home(self, module, host):
        host.deliver_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))
        host.deliver_message(send("Alice", *NOWHERE, 1700000600))

        assert host.get_value("Alice.place") == ""
        assert host.get_value("Alice.distance") > 400_000
        assert roster(host) == []
        assert host.get_value("numberAtHome") == 0
        assert host.get_value("anybodyAtHome") is False

    def test_place_name(self, module, host):
        loc = module.handle_message(send("Bob", 52.5301, 13.3801, 1700000000))

        assert loc.name == "Office"
        assert loc.at_home is False
        assert host.get_value("Bob.place") == "Office"
        assert roster(host) == []

    def test_user_id_sanitized(self, module, host):
        module.handle_message(send("Alice B. Smith", HOME_LAT, HOME_LON, 1700000000))

        assert host.get_object("Alice_B__Smith")["type"] == "device"
        assert host.get_value("Alice_B__Smith.place") == "Home"
        assert roster(host) == ["Alice B. Smith"]

    def test_blank_user_becomes_dummy(self, module, host):
        loc = module.handle_message(send("   ", HOME_LAT, HOME_LON, 1700000000))

        assert loc is None

        ping = LocationPing(user=" ", latitude=HOME_LAT, longitude=HOME_LON, timestamp=1700000000000)
        loc = module.process(ping)
        assert loc.user == "Dummy"
        assert host.get_value("Dummy.place") == "Home"

    def test_two_users(self, module, host):
        module.handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))
        module.handle_message(send("Bob", HOME_LAT, HOME_LON, 1700000000))
        module.handle_message(send("Alice", *NOWHERE, 1700000600))

        assert roster(host) == ["Bob"]
        assert host.get_value("numberAtHome") == 1


class TestReplies:
    """Replies to the sender."""

    def test_reply_with_callback(self, module, host):
        module.handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000000, callback="cb-1"))

        replies = host.get_replies()
        assert len(replies) == 1
        assert replies[0].target == "system.adapter.app.0"
        assert replies[0].command == "send"
        assert replies[0].callback == "cb-1"
        assert replies[0].message == {
            "user": "Alice",
            "latitude": HOME_LAT,
            "longitude": HOME_LON,
            "timestamp": 1700000000000,
            "date": "2023-11-14 22:13:20",
            "atHome": True,
            "homeDistance": 0,
            "name": "Home",
        }

    def test_no_reply_without_callback(self, module, host):
        module.handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))

        assert host.get_replies() == []

    def test_stale_update_still_replied(self, module, host):
        module.handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000600))
        module.handle_message(send("Alice", *NOWHERE, 1700000000, callback="cb-2"))

        assert len(host.get_replies()) == 1
        assert host.get_replies()[0].message["name"] == ""
        assert host.get_value("Alice.place") == "Home"


class TestInvalidMessages:
    """Rejected input leaves no trace."""

    @pytest.mark.parametrize(
        "obj",
        [
            "hello",
            {"command": "other", "message": {"user": "Alice"}},
            {"command": "send", "message": {"user": "Alice", "latitude": 1, "longitude": 2}},
            send("Alice", 95.0, HOME_LON, 1700000000),
            send("Alice", float("nan"), HOME_LON, 1700000000),
            send("Alice", HOME_LAT, HOME_LON, 0),
        ],
    )
    def test_rejected(self, module, host, caplog, obj):
        if isinstance(obj, dict):
            obj["callback"] = "cb"

        assert module.handle_message(obj) is None
        assert host.get_replies() == []
        assert host.get_value("personsAtHome") is None
        assert "Ignoring" in caplog.text


class TestStaleUpdates:
    """Per-user monotonic timestamps."""

    def test_replay_rejected(self, module, host, caplog):
        msg = send("Alice", HOME_LAT, HOME_LON, 1700000000)
        module.handle_message(msg)
        before = host.get_state("Alice.timestamp")

        module.handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))

        assert host.get_state("Alice.timestamp") is before
        assert roster(host) == ["Alice"]
        assert "skipping update" in caplog.text

    @pytest.mark.parametrize("order", [(0, 1), (1, 0)])
    def test_newer_wins_in_any_order(self, module, host, order):
        updates = [
            send("Alice", *NOWHERE, 1700000000),
            send("Alice", HOME_LAT, HOME_LON, 1700000600),
        ]
        for i in order:
            module.handle_message(updates[i])

        assert host.get_value("Alice.timestamp") == 1700000600000
        assert host.get_value("Alice.place") == "Home"
        assert roster(host) == ["Alice"]

    def test_seconds_and_milliseconds_compare(self, module, host):
        module.handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000600000))
        module.handle_message(send("Alice", *NOWHERE, 1700000000))

        assert host.get_value("Alice.place") == "Home"


class TestStateChanges:
    """External writes to own states."""

    def test_clear_home(self, module, host):
        module.handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))

        host.write_external("clearHome", True)

        assert roster(host) == []
        assert host.get_value("numberAtHome") == 0
        assert host.get_value("anybodyAtHome") is False

    def test_external_roster_replace(self, module, host):
        host.write_external("personsAtHome", json.dumps(["Alice", "Bob", "Carol"]))

        assert host.get_value("numberAtHome") == 3
        assert host.get_value("anybodyAtHome") is True

    def test_acknowledged_writes_ignored(self, module, host):
        host.set_state("personsAtHome", json.dumps(["Alice"]), ack=True)
        host.set_state("clearHome", True, ack=True)

        assert roster(host) == ["Alice"]
        assert host.get_value("numberAtHome") is None

    def test_foreign_ids_ignored(self, module, host):
        module.handle_state_change("other.0.clearHome", StateValue(val=True))
        module.handle_state_change(None, StateValue(val=True))

        assert host.get_value("personsAtHome") is None

    def test_write_failure_is_logged(self, module, host, caplog):
        host.fail_on("Alice.place")

        module.handle_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))

        assert "Error while setting value" in caplog.text
        assert host.get_value("Alice.timestamp") == 1700000000000
        assert roster(host) == ["Alice"]


class TestUnload:
    """Shutdown always completes."""

    def test_callback_called(self, module, host):
        calls = []

        host.stop(lambda: calls.append("done"))

        assert calls == ["done"]

    def test_no_events_after_unload(self, module, host):
        host.stop(lambda: None)

        host.deliver_message(send("Alice", HOME_LAT, HOME_LON, 1700000000))

        assert host.get_value("Alice.place") is None

    def test_callback_called_when_shutdown_fails(self, module, monkeypatch):
        calls = []

        def broken_unsubscribe(handler):
            raise RuntimeError("boom")

        monkeypatch.setattr(module._bus, "unsubscribe", broken_unsubscribe)

        module.on_unload(lambda: calls.append("done"))

        assert calls == ["done"]


class TestZeroTimestamp:
    """A zero timestamp never reaches the store."""

    def test_zero_timestamp_not_stored(self, module, host):
        module.handle_message(send("Alice", HOME_LAT, HOME_LON, 0))
        module.handle_message(send("Alice", HOME_LAT, HOME_LON, "0"))

        assert host.get_state("Alice.timestamp") is None
        assert host.get_object("Alice") is None
        assert roster(host) == []
