"""Utility functions for project graph operations."""

import random
import re
import string
import time
from datetime import date, datetime, timezone

from .constants import ENTITY_TYPES, RELATION_TYPES, SESSION_ID_PREFIX
from .exceptions import InvalidTypeError, InvalidRelationTypeError

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_DATE_FORMATS = ("%Y/%m/%d", "%m/%d/%Y", "%B %d, %Y", "%b %d, %Y", "%d %B %Y")
_BASE36 = string.digits + string.ascii_lowercase


def relation_key(relation: dict) -> tuple[str, str, str]:
    """Identity triple of a relation."""
    return (relation["from"], relation["to"], relation["relationType"])


def validate_entity_type(entity_type: str):
    """Raises InvalidTypeError if entity_type is outside the closed set."""
    if entity_type not in ENTITY_TYPES:
        raise InvalidTypeError(entity_type, ENTITY_TYPES)


def validate_relation_type(relation_type: str):
    """Raises InvalidRelationTypeError if relation_type is outside the closed set."""
    if relation_type not in RELATION_TYPES:
        raise InvalidRelationTypeError(relation_type, RELATION_TYPES)


def observation_value(observations: list[str], key: str) -> str | None:
    """
    Value of the first "Key: value" observation for key.
    Returns None when no observation carries the prefix.
    """
    prefix = f"{key}:"
    for observation in observations:
        if observation.startswith(prefix):
            return observation[len(prefix):].strip()
    return None


def parse_date(value: str | None) -> date | None:
    """Parse a loosely formatted date. Returns None if unparseable."""
    if not value:
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_int_prefix(value: str | None) -> int | None:
    """Leading integer of a string ("5 units" -> 5), or None."""
    if not value:
        return None
    match = _INT_PREFIX.match(value)
    return int(match.group(1)) if match else None


def percent(part: int, whole: int) -> int:
    """Rounded percentage, 0 when whole is 0."""
    if whole <= 0:
        return 0
    return round(part / whole * 100)


def date_sort_key(value: date | None) -> tuple[int, date]:
    """Sort key placing missing dates last."""
    return (1, date.min) if value is None else (0, value)


def generate_session_id() -> str:
    """Generate a session id like proj_1700000000000_k3j9x0a1b2c."""
    millis = int(time.time() * 1000)
    suffix = "".join(random.choices(_BASE36, k=11))
    return f"{SESSION_ID_PREFIX}_{millis}_{suffix}"


def utc_timestamp() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()
