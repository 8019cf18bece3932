"""Constants for the places module."""

COMMAND_SEND = "send"

DEFAULT_HOME_NAME = "Home"
DEFAULT_USER = "Dummy"

SYSTEM_CONFIG_ID = "system.config"

# Instance states (relative to the adapter namespace)
STATE_PERSONS_AT_HOME = "personsAtHome"
STATE_NUMBER_AT_HOME = "numberAtHome"
STATE_ANYBODY_AT_HOME = "anybodyAtHome"
STATE_CLEAR_HOME = "clearHome"

REQUIRED_FIELDS = ("user", "latitude", "longitude", "timestamp")

INSTANCE_OBJECTS = {
    STATE_PERSONS_AT_HOME: {
        "type": "state",
        "common": {
            "name": "List of persons at home",
            "role": "json",
            "type": "string",
            "read": True,
            "write": True,
            "def": "[]",
        },
        "native": {},
    },
    STATE_NUMBER_AT_HOME: {
        "type": "state",
        "common": {
            "name": "Number of persons at home",
            "role": "value",
            "type": "number",
            "read": True,
            "write": False,
            "def": 0,
        },
        "native": {},
    },
    STATE_ANYBODY_AT_HOME: {
        "type": "state",
        "common": {
            "name": "Anybody at home",
            "role": "indicator",
            "type": "boolean",
            "read": True,
            "write": False,
            "def": False,
        },
        "native": {},
    },
    STATE_CLEAR_HOME: {
        "type": "state",
        "common": {
            "name": "Clear list of persons at home",
            "role": "button",
            "type": "boolean",
            "read": False,
            "write": True,
        },
        "native": {},
    },
}

# Per-user record fields: name -> (role, type)
USER_STATES = {
    "place": ("text", "string"),
    "timestamp": ("value", "number"),
    "distance": ("value", "number"),
    "latitude": ("value.gps.latitude", "number"),
    "longitude": ("value.gps.longitude", "number"),
    "date": ("text", "string"),
}
