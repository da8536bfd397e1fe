"""
Calendar manager.

Keeps the registry of named calendars, tracks which one is in use, and
copies events between calendars. When source and target calendars are
in different zones, copied times are read as wall-clock times in the
source zone and rewritten in the target zone, so the copy happens at
the same instant rather than at the same clock reading.
"""

from datetime import datetime, date, time, timedelta
from typing import Callable, MutableMapping, Optional, TYPE_CHECKING, Union

from .analytics import AnalyticsSummary
from .debug import debug_print
from .errors import (
    AmbiguousEventError, CalendarError, CalendarNotFoundError, DuplicateCalendarError,
    DuplicateEventError, EventNotFoundError, InvalidRangeError, NoActiveCalendarError,
    UnknownPropertyError,
)
from .event import Event
from .event_series import EventSeries
from .event_store import Calendar
from .properties import EventProperty
from .timezone_utils import TimezoneLike, get_timezone, same_zone

if TYPE_CHECKING:
    from .config import Config


def _debug_print(msg: str) -> None:
    debug_print("MANAGER", msg)


CalendarFactory = Callable[[str, TimezoneLike], Calendar]


class CalendarManager:
    """
    Registry of calendars plus the "current calendar" in use.

    Event operations (add, remove, edit, query) act on the current
    calendar and raise NoActiveCalendarError when none has been selected.

    Args:
        calendars: Mapping to keep calendars in. A fresh dict by default.
        factory: Callable building a Calendar from a name and a timezone.
    """

    def __init__(
        self,
        calendars: Optional[MutableMapping[str, Calendar]] = None,
        factory: CalendarFactory = Calendar,
    ):
        self._calendars: MutableMapping[str, Calendar] = calendars if calendars is not None else {}
        self._factory = factory
        self._current: Optional[Calendar] = None

    @classmethod
    def from_config(cls, config: 'Config') -> 'CalendarManager':
        """Create the calendars listed in the config and use the default one."""
        manager = cls()
        for calendar_config in config.calendars:
            manager.create_calendar(calendar_config.name, calendar_config.timezone)
        if config.default_calendar:
            manager.use_calendar(config.default_calendar)
        elif config.calendars:
            manager.use_calendar(config.calendars[0].name)
        return manager

    # ==================== Calendar Registry ====================

    def create_calendar(self, name: str, timezone: TimezoneLike) -> Calendar:
        """
        Create and register a calendar.

        Raises:
            CalendarError: if the name is blank.
            DuplicateCalendarError: if the name is taken.
            InvalidTimezoneError: if the timezone is unknown.
        """
        if not name or not name.strip():
            raise CalendarError("Calendar name cannot be empty")
        if timezone is None:
            raise CalendarError("Timezone cannot be empty")
        if name in self._calendars:
            raise DuplicateCalendarError(f"Calendar with name '{name}' already exists")
        calendar = self._factory(name, get_timezone(timezone))
        self._calendars[name] = calendar
        _debug_print(f"created calendar {name!r} ({calendar.timezone_name})")
        return calendar

    def edit_calendar(self, name: str, prop: str, value) -> Calendar:
        """
        Rename a calendar or move it to another timezone.

        ``prop`` is "name" or "timezone". A timezone change rewrites every
        event so it keeps its instant.

        Raises:
            CalendarNotFoundError, DuplicateCalendarError, InvalidTimezoneError,
            UnknownPropertyError.
        """
        calendar = self.get_calendar(name)
        if not prop or not prop.strip():
            raise UnknownPropertyError("Property cannot be empty")

        key = prop.strip().lower()
        if key == "name":
            if not isinstance(value, str) or not value.strip():
                raise CalendarError("Calendar name cannot be empty")
            if value != name and value in self._calendars:
                raise DuplicateCalendarError(f"Calendar with name '{value}' already exists")
            del self._calendars[name]
            calendar.name = value
            self._calendars[value] = calendar
            _debug_print(f"renamed calendar {name!r} -> {value!r}")
        elif key == "timezone":
            calendar.change_timezone(value)
        else:
            raise UnknownPropertyError(
                f"Unknown property: {prop}. Valid properties are: name, timezone"
            )
        return calendar

    def delete_calendar(self, name: str) -> None:
        """Remove a calendar; stops using it if it was the current one."""
        calendar = self.get_calendar(name)
        del self._calendars[name]
        if self._current is calendar:
            self._current = None
        _debug_print(f"deleted calendar {name!r}")

    def use_calendar(self, name: str) -> Calendar:
        self._current = self.get_calendar(name)
        return self._current

    def get_current_calendar(self) -> Optional[Calendar]:
        return self._current

    def get_calendar(self, name: str) -> Calendar:
        """
        Raises:
            CalendarNotFoundError: if no calendar has this name.
        """
        try:
            return self._calendars[name]
        except KeyError:
            raise CalendarNotFoundError(f"Calendar '{name}' does not exist") from None

    def has_calendar(self, name: str) -> bool:
        return name in self._calendars

    def list_calendar_names(self) -> list[str]:
        return list(self._calendars.keys())

    def _require_current(self) -> Calendar:
        if self._current is None:
            raise NoActiveCalendarError("No calendar is currently in use")
        return self._current

    # ==================== Copying ====================

    def copy_event(self, subject: str, start: datetime,
                   target_calendar_name: str, target_start: datetime) -> Event:
        """
        Copy one event from the current calendar to ``target_start`` in another.

        The source event must be the only one with this subject and start.
        ``target_start`` is a wall-clock time in the source calendar's zone;
        it is converted to the target zone and the duration is kept.

        Raises:
            NoActiveCalendarError, CalendarNotFoundError, EventNotFoundError,
            AmbiguousEventError, DuplicateEventError.
        """
        source = self._require_current()
        target = self.get_calendar(target_calendar_name)
        original = self._find_unique(source, subject, start)

        new_start = target_start
        if not same_zone(source.timezone, target.timezone):
            new_start = source.convert_to_timezone(target_start, target.timezone)
        copy = original.with_changes(start=new_start, end=new_start + original.duration)
        target.add_event(copy)
        _debug_print(f"copied {original!r} to {target.name!r} at {new_start}")
        return copy

    def copy_events_on_date(self, source_date: date, target_calendar_name: str,
                            target_date: date) -> int:
        """
        Copy every event on ``source_date`` to ``target_date`` in another calendar.

        Events already present in the target are skipped.

        Returns:
            The number of events copied.
        """
        source = self._require_current()
        target = self.get_calendar(target_calendar_name)
        events = source.get_events_on(source_date)
        return self._copy_shifted(source, target, events, target_date - source_date)

    def copy_events_between(self, start_date: date, end_date: date,
                            target_calendar_name: str, target_start_date: date) -> int:
        """
        Copy the events overlapping ``[start_date, end_date]`` to another
        calendar, with ``start_date`` landing on ``target_start_date``.

        Events already present in the target are skipped.

        Returns:
            The number of events copied.

        Raises:
            InvalidRangeError: if end_date is before start_date.
        """
        source = self._require_current()
        target = self.get_calendar(target_calendar_name)
        if start_date is None or end_date is None:
            raise InvalidRangeError("Start date and end date must not be null")
        if end_date < start_date:
            raise InvalidRangeError("End date must not be before start date")
        events = source.get_events_in_range(
            datetime.combine(start_date, time.min),
            datetime.combine(end_date + timedelta(days=1), time.min),
        )
        return self._copy_shifted(source, target, events, target_start_date - start_date)

    def _copy_shifted(self, source: Calendar, target: Calendar,
                      events: list[Event], offset: timedelta) -> int:
        convert = not same_zone(source.timezone, target.timezone)
        copied = 0
        for event in events:
            new_start = event.start + offset
            new_end = event.end + offset
            if convert:
                new_start = source.convert_to_timezone(new_start, target.timezone)
                new_end = source.convert_to_timezone(new_end, target.timezone)
            try:
                target.add_event(event.with_changes(start=new_start, end=new_end))
            except DuplicateEventError:
                _debug_print(f"skipped duplicate {event!r} in {target.name!r}")
                continue
            copied += 1
        _debug_print(f"copied {copied}/{len(events)} events from {source.name!r} to {target.name!r}")
        return copied

    @staticmethod
    def _find_unique(calendar: Calendar, subject: str, start: datetime) -> Event:
        matches = [
            e for e in calendar.get_all_events()
            if e.subject == subject and e.start == start
        ]
        if not matches:
            raise EventNotFoundError(f"Event not found: {subject} at {start}")
        if len(matches) > 1:
            raise AmbiguousEventError("Multiple events found with same subject and start time")
        return matches[0]

    # ==================== Current Calendar Operations ====================

    def add_event(self, event: Event) -> None:
        self._require_current().add_event(event)

    def add_event_series(self, series: EventSeries) -> list[Event]:
        return self._require_current().add_event_series(series)

    def remove_event(self, event: Event) -> None:
        self._require_current().remove_event(event)

    def remove_event_from_series(self, event: Event) -> None:
        self._require_current().remove_event_from_series(event)

    def remove_all_events_in_series(self, event: Event) -> None:
        self._require_current().remove_all_events_in_series(event)

    def edit_event(self, subject: str, start: datetime, end: datetime,
                   prop: Union[str, EventProperty], value) -> Event:
        return self._require_current().edit_event(subject, start, end, prop, value)

    def edit_events_from(self, subject: str, start: datetime, end: Optional[datetime],
                         prop: Union[str, EventProperty], value) -> list[Event]:
        return self._require_current().edit_events_from(subject, start, end, prop, value)

    def edit_all_events_in_series(self, subject: str, start: datetime, end: Optional[datetime],
                                  prop: Union[str, EventProperty], value) -> list[Event]:
        return self._require_current().edit_all_events_in_series(subject, start, end, prop, value)

    def get_events_on(self, day: date) -> list[Event]:
        return self._require_current().get_events_on(day)

    def get_events_in_range(self, start: datetime, end: datetime) -> list[Event]:
        return self._require_current().get_events_in_range(start, end)

    def is_busy(self, instant: datetime) -> bool:
        return self._require_current().is_busy(instant)

    def generate_analytics(self, start_date: date, end_date: date) -> AnalyticsSummary:
        return self._require_current().generate_analytics(start_date, end_date)
