"""
Identifier and timestamp helpers shared across the service.
"""
import secrets
import string
import time
from datetime import date, datetime, time as dt_time, timezone
from typing import Optional

BASE36_ALPHABET = string.digits + string.ascii_lowercase


def epoch_millis() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def random_base36(length: int) -> str:
    """Random lowercase base36 string."""
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


# PUBLIC_INTERFACE
def generate_id(prefix: str) -> str:
    """
    Generate an opaque entity id such as ``project_1700000000000_k3j9x0a1b``.

    Args:
        prefix: Entity prefix (org, project, timesheet, code)

    Returns:
        str: New identifier
    """
    return f"{prefix}_{epoch_millis()}_{random_base36(9)}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def to_iso(value: datetime) -> str:
    """
    Format a datetime as an ISO-8601 UTC string with millisecond precision.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return to_iso(utc_now())


# PUBLIC_INTERFACE
def parse_timestamp(value: str, end_of_day: bool = False) -> datetime:
    """
    Parse an ISO-8601 date or datetime string into an aware UTC datetime.

    Args:
        value: ``2024-01-15`` or ``2024-01-15T09:00:00Z`` style string
        end_of_day: For date-only values, return the last instant of the day

    Returns:
        datetime: Aware datetime in UTC

    Raises:
        ValueError: If the string is not a valid date or datetime
    """
    text = value.strip()
    if len(text) == 10:
        day = date.fromisoformat(text)
        moment = dt_time.max if end_of_day else dt_time.min
        return datetime.combine(day, moment, tzinfo=timezone.utc)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def minutes_between(start: str, end: str) -> int:
    """Whole minutes from ``start`` to ``end``, rounded down."""
    delta = parse_timestamp(end) - parse_timestamp(start)
    return int(delta.total_seconds() // 60)


def parse_optional_timestamp(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    if not value:
        return None
    return parse_timestamp(value, end_of_day=end_of_day)
