"""Validation and normalization of inbound location messages."""

import math
import re
from typing import Any

from .const import COMMAND_SEND, REQUIRED_FIELDS
from .models import LocationPing, ValidationResult

_USER_ID_RE = re.compile(r"[\s.]")


def normalize_timestamp(value: Any) -> int:
    """
    Normalize a timestamp to 13-digit millisecond-epoch form.

    Callers send seconds or milliseconds inconsistently, so the integer digits
    are padded with trailing zeros and truncated to 13 characters.

    Raises:
        ValueError: If the value is not a non-negative number
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp {value!r}")
    if isinstance(value, float):
        value = int(value)

    digits = str(value).strip().split(".", 1)[0]
    if not digits.isdigit():
        raise ValueError(f"Invalid timestamp {value!r}")

    return int((digits + "0" * 13)[:13])


def sanitize_user_id(user: str) -> str:
    """Replace whitespace and dots so the user name is a valid state ID segment."""
    return _USER_ID_RE.sub("_", user)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_coordinate(value: Any, limit: float) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid coordinate {value!r}")
    coordinate = float(value)
    if not math.isfinite(coordinate) or abs(coordinate) > limit:
        raise ValueError(f"Coordinate {value!r} outside [-{limit:g}, {limit:g}]")
    return coordinate


def validate_message(obj: Any) -> ValidationResult:
    """
    Validate a message box request.

    Expected shape:
        {"command": "send", "message": {user, latitude, longitude, timestamp},
         "from": ..., "callback": ...}

    Returns:
        ValidationResult; `ping` carries the normalized location when valid
    """
    if not isinstance(obj, dict) or obj.get("command") != COMMAND_SEND:
        return ValidationResult(valid=False, reason="Ignoring invalid message!")

    payload = obj.get("message")
    if not isinstance(payload, dict) or not payload:
        return ValidationResult(valid=False, reason="Ignoring invalid message!")

    if any(_is_empty(payload.get(key)) for key in REQUIRED_FIELDS):
        return ValidationResult(valid=False, reason="Ignoring incomplete message!")

    try:
        ping = LocationPing(
            user=str(payload["user"]),
            latitude=_to_coordinate(payload["latitude"], 90),
            longitude=_to_coordinate(payload["longitude"], 180),
            timestamp=normalize_timestamp(payload["timestamp"]),
        )
    except (TypeError, ValueError) as e:
        return ValidationResult(valid=False, reason=f"Ignoring malformed message: {e}")

    # A zero timestamp counts as missing
    if ping.timestamp == 0:
        return ValidationResult(valid=False, reason="Ignoring incomplete message!")

    return ValidationResult(
        valid=True,
        ping=ping,
        reply_to=obj.get("from"),
        callback=obj.get("callback"),
    )
