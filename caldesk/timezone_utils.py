"""
Timezone utilities for caldesk.

Events store naive wall-clock datetimes; the timezone lives on the
calendar. These helpers look zones up through pytz and move a wall-clock
time from one zone to another while keeping the instant it denotes.
"""

from datetime import datetime, tzinfo
from typing import Union
import pytz

from .errors import InvalidTimezoneError


TimezoneLike = Union[str, tzinfo]

DEFAULT_TIMEZONE = "America/New_York"


def get_timezone(timezone: TimezoneLike) -> tzinfo:
    """
    Resolve a timezone name (or an existing pytz zone) to a pytz zone.

    Raises:
        InvalidTimezoneError: if the name is empty or unknown to pytz.
    """
    if isinstance(timezone, pytz.BaseTzInfo):
        return timezone
    if isinstance(timezone, str):
        name = timezone.strip()
        if not name:
            raise InvalidTimezoneError("Timezone cannot be empty")
        try:
            return pytz.timezone(name)
        except pytz.UnknownTimeZoneError:
            raise InvalidTimezoneError(f"Invalid timezone: {timezone}") from None
    # Non-pytz tzinfo (e.g. zoneinfo): go through its key so localize() is available
    key = getattr(timezone, "key", None) or getattr(timezone, "zone", None)
    if key:
        return get_timezone(key)
    raise InvalidTimezoneError(f"Unsupported timezone value: {timezone!r}")


def zone_name(timezone: tzinfo) -> str:
    """Get the IANA name of a pytz zone."""
    return getattr(timezone, "zone", None) or str(timezone)


def same_zone(first: tzinfo, second: tzinfo) -> bool:
    return zone_name(first) == zone_name(second)


def is_valid_timezone(name: str) -> bool:
    try:
        get_timezone(name)
    except InvalidTimezoneError:
        return False
    return True


def localize(dt: datetime, timezone: TimezoneLike) -> datetime:
    """Attach a zone to a naive wall-clock datetime."""
    tz = get_timezone(timezone)
    if dt.tzinfo is not None:
        return dt.astimezone(tz)
    return tz.localize(dt)


def convert_wall_time(dt: datetime, from_zone: TimezoneLike, to_zone: TimezoneLike) -> datetime:
    """
    Reinterpret a naive wall-clock time from one zone in another.

    The datetime is read as local time in ``from_zone`` and the naive
    local time in ``to_zone`` for the same instant is returned.

    Args:
        dt: A naive datetime.
        from_zone: Zone the wall-clock value belongs to.
        to_zone: Zone to express the same instant in.

    Returns:
        A naive datetime. Unchanged when both zones are the same.
    """
    source = get_timezone(from_zone)
    target = get_timezone(to_zone)
    if same_zone(source, target):
        return dt
    converted = localize(dt, source).astimezone(target)
    return converted.replace(tzinfo=None)


def to_utc(dt: datetime, timezone: TimezoneLike) -> datetime:
    """Convert a naive wall-clock time in ``timezone`` to an aware UTC datetime."""
    return localize(dt, timezone).astimezone(pytz.UTC)
