"""
Editable event properties and their values.

An edit names one property and carries a value whose type depends on
that property. PropertyEdit pairs the two and validates the pairing
when it is built, so code applying an edit never sees a string where a
datetime belongs.

Also hosts the string parsers front ends use to turn user input into
typed values (dates, datetimes, statuses).
"""

from dataclasses import dataclass
from datetime import datetime, date
from enum import Enum
from typing import Any, Union

from .errors import InvalidEventError, UnknownPropertyError
from .event import Event, Status


DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%dT%H:%M"


class EventProperty(Enum):
    """Properties an edit can target."""
    SUBJECT = "subject"
    START = "start"
    END = "end"
    DESCRIPTION = "description"
    LOCATION = "location"
    STATUS = "status"

    @property
    def is_time(self) -> bool:
        """True for start/end - the properties that move an event in time."""
        return self in (EventProperty.START, EventProperty.END)

    @classmethod
    def parse(cls, name: Union[str, 'EventProperty']) -> 'EventProperty':
        """
        Look a property up by name, case-insensitively.

        ``startdatetime`` and ``enddatetime`` are accepted as aliases.

        Raises:
            UnknownPropertyError: if the name is not a known property.
        """
        if isinstance(name, EventProperty):
            return name
        if not isinstance(name, str) or not name.strip():
            raise UnknownPropertyError("Property cannot be empty")
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise UnknownPropertyError(f"Unknown property: {name}") from None


_ALIASES = {
    "startdatetime": "start",
    "enddatetime": "end",
}


@dataclass(frozen=True)
class PropertyEdit:
    """A property together with a value of the matching type."""
    prop: EventProperty
    value: Any

    def __post_init__(self):
        prop = EventProperty.parse(self.prop)
        object.__setattr__(self, 'prop', prop)
        object.__setattr__(self, 'value', _check_value(prop, self.value))

    @property
    def moves_event(self) -> bool:
        return self.prop.is_time

    def apply_to(self, event: Event, time_only: bool = False) -> Event:
        """
        Build a copy of ``event`` with this edit applied.

        A new start keeps the event's duration (the end moves with it).
        With ``time_only`` set, only the time-of-day of a start/end value
        is used and the event keeps its own date; series edits work this
        way. The series id is left as is - scoping decides that.

        Raises:
            InvalidEventError: if the edited event would be invalid.
        """
        prop = self.prop
        if prop is EventProperty.SUBJECT:
            return event.with_changes(subject=self.value)
        if prop is EventProperty.DESCRIPTION:
            return event.with_changes(description=self.value)
        if prop is EventProperty.LOCATION:
            return event.with_changes(location=self.value)
        if prop is EventProperty.STATUS:
            return event.with_changes(status=self.value)
        if prop is EventProperty.START:
            new_start = self.value
            if time_only:
                new_start = datetime.combine(event.start.date(), self.value.time())
            return event.with_changes(start=new_start, end=new_start + event.duration)
        # EventProperty.END
        new_end = self.value
        if time_only:
            new_end = datetime.combine(event.end.date(), self.value.time())
        return event.with_changes(end=new_end)


def _check_value(prop: EventProperty, value: Any) -> Any:
    if prop is EventProperty.STATUS:
        return Status.parse(value)
    if prop.is_time:
        if not isinstance(value, datetime):
            raise InvalidEventError(f"Value for {prop.value} must be a datetime, got {value!r}")
        if value.tzinfo is not None:
            raise InvalidEventError(f"Value for {prop.value} must be a naive datetime")
        return value
    if not isinstance(value, str):
        raise InvalidEventError(f"Value for {prop.value} must be a string, got {value!r}")
    if prop is EventProperty.SUBJECT and not value:
        raise InvalidEventError("Subject cannot be empty")
    return value


# ==================== String Parsers ====================

def parse_date(text: str) -> date:
    """Parse a YYYY-MM-DD date."""
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date()
    except (ValueError, AttributeError):
        raise InvalidEventError(f"Invalid date format: {text}. Expected YYYY-MM-DD") from None


def parse_datetime(text: str) -> datetime:
    """Parse a YYYY-MM-DDTHH:MM datetime."""
    try:
        return datetime.strptime(text.strip(), DATETIME_FORMAT)
    except (ValueError, AttributeError):
        raise InvalidEventError(
            f"Invalid date/time format: {text}. Expected YYYY-MM-DDTHH:mm"
        ) from None


def parse_property_value(prop: Union[str, EventProperty], text: str) -> PropertyEdit:
    """
    Turn a property name and its textual value into a PropertyEdit.

    Example:
        >>> parse_property_value("start", "2024-03-04T14:00").value
        datetime.datetime(2024, 3, 4, 14, 0)
    """
    prop = EventProperty.parse(prop)
    if prop.is_time:
        return PropertyEdit(prop, parse_datetime(text))
    if prop is EventProperty.STATUS:
        return PropertyEdit(prop, Status.parse(text))
    return PropertyEdit(prop, text)
