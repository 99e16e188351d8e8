"""Slot time normalization.

The backend serializes slot times either as "HH:MM:SS" strings or as
{hour, minute, second, nano} objects. Both collapse to a canonical "HH:MM"
string here; anything else becomes None instead of raising.
"""
import re
from enum import Enum
from typing import Any, Mapping, Optional

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?$")


class TimeEncoding(str, Enum):
    """How a raw slot time arrived from the backend."""
    STRING = "string"
    STRUCTURED = "structured"
    ABSENT = "absent"
    MALFORMED = "malformed"


def classify_time(value: Any) -> TimeEncoding:
    if value is None or value == "" or value == {}:
        return TimeEncoding.ABSENT
    if isinstance(value, str):
        return TimeEncoding.STRING
    if isinstance(value, Mapping) and "hour" in value and "minute" in value:
        return TimeEncoding.STRUCTURED
    return TimeEncoding.MALFORMED


def normalize_time(value: Any) -> Optional[str]:
    """
    Normalize a raw slot time to "HH:MM".

    Examples:
        >>> normalize_time("09:30:00")
        '09:30'
        >>> normalize_time({"hour": 9, "minute": 30})
        '09:30'
        >>> normalize_time("later") is None
        True
    """
    encoding = classify_time(value)

    if encoding == TimeEncoding.STRING:
        match = TIME_PATTERN.match(value.strip())
        if not match:
            return None
        return _format(match.group(1), match.group(2))

    if encoding == TimeEncoding.STRUCTURED:
        return _format(value["hour"], value["minute"])

    return None


def time_to_minutes(value: Optional[str]) -> Optional[int]:
    """Minutes since midnight for an "HH:MM" string, None if unusable."""
    if not value:
        return None
    match = TIME_PATTERN.match(value)
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def _format(hour: Any, minute: Any) -> Optional[str]:
    # bool is an int subclass; True/False are not clock values
    if isinstance(hour, bool) or isinstance(minute, bool):
        return None
    try:
        hour, minute = int(hour), int(minute)
    except (TypeError, ValueError):
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return f"{hour:02d}:{minute:02d}"
