#!/usr/bin/env python3
"""
Quick example demonstrating home-places basic usage.

Run with: PYTHONPATH=src python3 example.py
"""

import json
import logging

from home_places import EventBus, MemoryHost
from home_places.modules.places import PlacesModule

logging.basicConfig(level=logging.INFO, format="%(name)s - %(levelname)s - %(message)s")

print("=" * 60)
print("home-places Example")
print("=" * 60)

# 1. Host components
print("\n1. Creating host components...")
bus = EventBus()
host = MemoryHost(bus, system_config={"latitude": 52.5200, "longitude": 13.4050})
print(f"   ✓ EventBus and MemoryHost ({host.namespace}) created")

# 2. Attach the Places module
print("\n2. Attaching Places module...")
places = PlacesModule(
    {
        "radius": 100,
        "homeName": "Home",
        "places": [
            {"name": "Office", "latitude": 52.5300, "longitude": 13.3800, "radius": 300},
            {"name": "Gym", "latitude": 52.5000, "longitude": 13.3000, "radius": 150},
        ],
    }
)
places.attach(bus, host)
host.start()
print(f"   ✓ Module '{places.id}' ready, home zone: {places.config.home}")

# 3. Send some pings
print("\n3. Sending location pings...")
pings = [
    ("Alice", 52.5200, 13.4050, 1700000000),
    ("Bob", 52.5301, 13.3801, 1700000000),
    ("Bob", 52.5201, 13.4051, 1700000600),
    ("Alice", 52.5001, 13.3001, 1700000900),
    ("Alice", 52.5200, 13.4050, 1700000300),  # stale, ignored
]
for user, lat, lon, ts in pings:
    host.deliver_message(
        {
            "command": "send",
            "message": {"user": user, "latitude": lat, "longitude": lon, "timestamp": ts},
            "from": "example",
            "callback": f"cb-{user}-{ts}",
        }
    )

for reply in host.get_replies():
    print(f"   → {reply.message['user']}: '{reply.message['name']}' ({reply.message['homeDistance']} m)")

# 4. Inspect state
print("\n4. Current state...")
print(f"   personsAtHome: {json.loads(host.get_value('personsAtHome'))}")
print(f"   numberAtHome:  {host.get_value('numberAtHome')}")
print(f"   anybodyAtHome: {host.get_value('anybodyAtHome')}")
for user in ("Alice", "Bob"):
    print(f"   {user}.place = '{host.get_value(user + '.place')}'")

# 5. Clear the roster from outside
print("\n5. Pressing clearHome...")
host.write_external("clearHome", True)
print(f"   numberAtHome:  {host.get_value('numberAtHome')}")

host.stop(lambda: print("\n✓ Adapter stopped"))
