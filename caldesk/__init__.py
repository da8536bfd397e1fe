"""
caldesk - calendar event model with weekly recurrence, scoped edits,
cross-calendar copying and analytics.

Modules:
- Event value type (event.py)
- Weekly recurrence engine (event_series.py)
- Editable properties and input parsers (properties.py)
- Calendar event store with scoped edits (event_store.py)
- Calendar registry and cross-calendar copy (calendar_manager.py)
- Date-interval analytics (analytics.py)
- CSV / iCalendar export (exporters.py)
- TOML configuration (config.py)
"""

from .errors import (
    CalendarError,
    DuplicateEventError,
    EventNotFoundError,
    AmbiguousEventError,
    InvalidEventError,
    InvalidRecurrenceError,
    InvalidRangeError,
    UnknownPropertyError,
    NoActiveCalendarError,
    CalendarNotFoundError,
    DuplicateCalendarError,
    InvalidTimezoneError,
    ExportError,
)
from .event import Event, Status, create_event
from .event_series import EventSeries, Weekday, create_series, parse_weekdays
from .properties import EventProperty, PropertyEdit, parse_property_value
from .event_store import Calendar, EditScope
from .calendar_manager import CalendarManager
from .analytics import AnalyticsSummary, YearMonth, generate_analytics
from .config import Config
from .debug import set_debug

__all__ = [
    'Event',
    'Status',
    'create_event',
    'EventSeries',
    'Weekday',
    'create_series',
    'parse_weekdays',
    'EventProperty',
    'PropertyEdit',
    'parse_property_value',
    'Calendar',
    'EditScope',
    'CalendarManager',
    'AnalyticsSummary',
    'YearMonth',
    'generate_analytics',
    'Config',
    'set_debug',
    # Errors
    'CalendarError',
    'DuplicateEventError',
    'EventNotFoundError',
    'AmbiguousEventError',
    'InvalidEventError',
    'InvalidRecurrenceError',
    'InvalidRangeError',
    'UnknownPropertyError',
    'NoActiveCalendarError',
    'CalendarNotFoundError',
    'DuplicateCalendarError',
    'InvalidTimezoneError',
    'ExportError',
]
