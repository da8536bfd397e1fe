"""
Exceptions raised by the caldesk core.

Every error derives from CalendarError. Errors describing a bad value
also derive from ValueError so callers that only catch ValueError keep
working.
"""


class CalendarError(Exception):
    """Base class for all caldesk errors."""


class DuplicateEventError(CalendarError, ValueError):
    """An event with the same subject, start and end already exists."""


class EventNotFoundError(CalendarError, LookupError):
    """No event matches the lookup."""


class AmbiguousEventError(CalendarError, LookupError):
    """More than one event matches a lookup that needs a single event."""


class InvalidEventError(CalendarError, ValueError):
    """Event fields (or an edit value) are invalid."""


class InvalidRecurrenceError(CalendarError, ValueError):
    """A recurrence rule is malformed."""


class InvalidRangeError(CalendarError, ValueError):
    """A date or datetime interval is missing a bound or is reversed."""


class UnknownPropertyError(CalendarError, ValueError):
    """An edit names a property that does not exist."""


class NoActiveCalendarError(CalendarError, RuntimeError):
    """An event operation was attempted with no calendar in use."""


class CalendarNotFoundError(CalendarError, LookupError):
    """No calendar is registered under the given name."""


class DuplicateCalendarError(CalendarError, ValueError):
    """A calendar with the given name already exists."""


class InvalidTimezoneError(CalendarError, ValueError):
    """The timezone name is not known to pytz."""


class ExportError(CalendarError, ValueError):
    """The requested export format is not supported."""
