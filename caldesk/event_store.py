"""
Calendar event store.

A Calendar is a named, timezone-tagged set of Events keyed by their
identity triple (subject, start, end). It owns every mutation of that
set: adding single events and expanded series, removing by scope,
editing by scope, and the timezone rewrite used when the calendar moves
to another zone.

Multi-event changes (series adds, "from" and "all" edits, timezone
rewrites) are staged first and committed only once the whole batch is
known to be collision-free, so a failure leaves the store untouched.
"""

from datetime import datetime, date, time, timedelta, tzinfo
from enum import Enum
from typing import Iterable, Iterator, Optional, Union
import uuid

from .analytics import AnalyticsSummary, generate_analytics
from .debug import debug_print
from .errors import (
    AmbiguousEventError, DuplicateEventError, EventNotFoundError, InvalidRangeError,
)
from .event import Event
from .event_series import EventSeries
from .properties import EventProperty, PropertyEdit
from .timezone_utils import TimezoneLike, convert_wall_time, get_timezone, same_zone, zone_name


EventKey = tuple[str, datetime, datetime]


def _debug_print(msg: str) -> None:
    debug_print("STORE", msg)


class EditScope(Enum):
    """How far an edit reaches into a series."""
    SINGLE = "single"   # just the matched event
    FROM = "from"       # the matched occurrence and every later one in its series
    ALL = "all"         # every occurrence in the series


class Calendar:
    """
    A named calendar holding a set of events in one timezone.

    Event times are naive wall-clock values in ``timezone``.
    """

    def __init__(self, name: str, timezone: TimezoneLike):
        self.name = name
        self._timezone = get_timezone(timezone)
        self._events: dict[EventKey, Event] = {}

    # ==================== Properties ====================

    @property
    def timezone(self) -> tzinfo:
        return self._timezone

    @property
    def timezone_name(self) -> str:
        return zone_name(self._timezone)

    def change_timezone(self, timezone: TimezoneLike) -> None:
        """
        Move the calendar to another zone, keeping every event's instant.

        Each stored wall-clock time is read in the old zone and rewritten
        as the wall-clock time of the same instant in the new zone. Nothing
        changes when the zone is the same.
        """
        new_zone = get_timezone(timezone)
        if same_zone(self._timezone, new_zone):
            return

        old_zone = self._timezone
        converted = [
            event.with_changes(
                start=convert_wall_time(event.start, old_zone, new_zone),
                end=convert_wall_time(event.end, old_zone, new_zone),
            )
            for event in self._events.values()
        ]
        self._commit(list(self._events.values()), converted)
        self._timezone = new_zone
        _debug_print(
            f"{self.name}: timezone {zone_name(old_zone)} -> {zone_name(new_zone)}, "
            f"rewrote {len(converted)} events"
        )

    def convert_to_timezone(self, dt: datetime, timezone: TimezoneLike) -> datetime:
        """Express a wall-clock time of this calendar in another zone."""
        return convert_wall_time(dt, self._timezone, timezone)

    def convert_from_timezone(self, dt: datetime, timezone: TimezoneLike) -> datetime:
        """Express a wall-clock time of another zone in this calendar's zone."""
        return convert_wall_time(dt, timezone, self._timezone)

    # ==================== Adding ====================

    def add_event(self, event: Event) -> None:
        """
        Add a single event.

        Raises:
            DuplicateEventError: if an event with the same subject, start
                and end is already stored.
        """
        if event.key in self._events:
            raise DuplicateEventError(
                "Event with same subject, start and end already exists: "
                f"{event.subject!r} {event.start} - {event.end}"
            )
        self._events[event.key] = event
        _debug_print(f"{self.name}: added {event!r}")

    def add_event_series(self, series: EventSeries) -> list[Event]:
        """
        Expand a series and add all of its occurrences.

        Either every occurrence is added or none is.

        Returns:
            The added occurrences in chronological order.

        Raises:
            DuplicateEventError: if any occurrence collides with a stored event.
        """
        occurrences = series.generate_events()
        self._commit([], occurrences)
        _debug_print(f"{self.name}: added series {series.series_id} ({len(occurrences)} events)")
        return occurrences

    # ==================== Removing ====================

    def remove_event(self, event: Event) -> None:
        """Remove an event if present."""
        if self._events.pop(event.key, None) is not None:
            _debug_print(f"{self.name}: removed {event!r}")

    def remove_event_from_series(self, event: Event) -> None:
        """Remove this occurrence and every later occurrence of its series."""
        if not event.series_id:
            self.remove_event(event)
            return
        for member in self._series_members(event.series_id, from_start=event.start):
            self.remove_event(member)

    def remove_all_events_in_series(self, event: Event) -> None:
        """Remove every occurrence of the event's series."""
        if not event.series_id:
            self.remove_event(event)
            return
        for member in self._series_members(event.series_id):
            self.remove_event(member)

    # ==================== Lookup ====================

    def find_event(self, subject: str, start: datetime, end: datetime) -> Event:
        """
        Find an event by its exact identity.

        Raises:
            EventNotFoundError: if no event matches.
        """
        event = self._events.get((subject, start, end))
        if event is None:
            raise EventNotFoundError(
                f"Event not found: {subject!r} from {start} to {end}"
            )
        return event

    def find_series_event(self, subject: str, start: datetime, end: Optional[datetime] = None) -> Event:
        """
        Find the single event with this subject and start (and end, if given).

        Raises:
            EventNotFoundError: if nothing matches.
            AmbiguousEventError: if more than one event matches.
        """
        matches = [
            e for e in self._events.values()
            if e.subject == subject and e.start == start and (end is None or e.end == end)
        ]
        if not matches:
            raise EventNotFoundError(f"Event not found: {subject!r} at {start}")
        if len(matches) > 1:
            raise AmbiguousEventError(
                f"Multiple events found with subject {subject!r} starting at {start}"
            )
        return matches[0]

    def _series_members(self, series_id: str, from_start: Optional[datetime] = None) -> list[Event]:
        return [
            e for e in self._events.values()
            if e.series_id == series_id and (from_start is None or e.start >= from_start)
        ]

    def get_series_events(self, series_id: str) -> list[Event]:
        """All stored occurrences of a series, sorted by start."""
        return sorted(self._series_members(series_id), key=_sort_key)

    # ==================== Editing ====================

    def edit_event(self, subject: str, start: datetime, end: datetime,
                   prop: Union[str, EventProperty], value) -> Event:
        """
        Edit one event, found by exact identity.

        Changing the start or end of a series occurrence detaches it from
        the series.

        Returns:
            The edited event.

        Raises:
            EventNotFoundError, UnknownPropertyError, InvalidEventError,
            DuplicateEventError (the original event stays in place).
        """
        edit = PropertyEdit(prop, value)
        target = self.find_event(subject, start, end)
        return self._edit_single(target, edit)

    def edit_events_from(self, subject: str, start: datetime, end: Optional[datetime],
                         prop: Union[str, EventProperty], value) -> list[Event]:
        """
        Edit an occurrence and every later occurrence of its series.

        A start/end change splits the series: the edited occurrences move
        to a new series id while earlier ones keep the old id. Only the
        time of day of a start/end value is applied. A standalone event
        is edited on its own.

        Returns:
            The edited events, sorted by start.
        """
        return self._edit_scoped(EditScope.FROM, subject, start, end, PropertyEdit(prop, value))

    def edit_all_events_in_series(self, subject: str, start: datetime, end: Optional[datetime],
                                  prop: Union[str, EventProperty], value) -> list[Event]:
        """
        Edit every occurrence of the matched event's series.

        The series id is kept even for start/end changes. Only the time of
        day of a start/end value is applied.

        Returns:
            The edited events, sorted by start.
        """
        return self._edit_scoped(EditScope.ALL, subject, start, end, PropertyEdit(prop, value))

    def edit(self, scope: EditScope, subject: str, start: datetime, end: Optional[datetime],
             prop: Union[str, EventProperty], value) -> list[Event]:
        """Dispatch an edit by scope."""
        if scope is EditScope.SINGLE:
            return [self.edit_event(subject, start, end, prop, value)]
        return self._edit_scoped(scope, subject, start, end, PropertyEdit(prop, value))

    def _edit_single(self, target: Event, edit: PropertyEdit) -> Event:
        updated = edit.apply_to(target)
        if target.series_id and edit.moves_event:
            updated = updated.with_changes(series_id=None)
        self._commit([target], [updated])
        _debug_print(f"{self.name}: edited {edit.prop.value} of {target!r}")
        return updated

    def _edit_scoped(self, scope: EditScope, subject: str, start: datetime,
                     end: Optional[datetime], edit: PropertyEdit) -> list[Event]:
        target = self.find_series_event(subject, start, end)
        if not target.series_id:
            return [self._edit_single(target, edit)]

        if scope is EditScope.FROM:
            selected = self._series_members(target.series_id, from_start=target.start)
            series_id = str(uuid.uuid4()) if edit.moves_event else target.series_id
        else:
            selected = self._series_members(target.series_id)
            series_id = target.series_id

        updated = [
            edit.apply_to(event, time_only=True).with_changes(series_id=series_id)
            for event in selected
        ]
        self._commit(selected, updated)
        _debug_print(
            f"{self.name}: edited {edit.prop.value} of {len(updated)} events "
            f"in series {target.series_id} (scope={scope.value})"
        )
        return sorted(updated, key=_sort_key)

    def _commit(self, removed: Iterable[Event], added: Iterable[Event]) -> None:
        """
        Replace ``removed`` with ``added`` as one unit.

        Raises:
            DuplicateEventError: if two added events share an identity or an
                added event collides with one that stays. The store is left
                unchanged.
        """
        removed_keys = {e.key for e in removed}
        staged: dict[EventKey, Event] = {}
        for event in added:
            if event.key in staged or (event.key in self._events and event.key not in removed_keys):
                raise DuplicateEventError(
                    "Change causes duplicate event: "
                    f"{event.subject!r} {event.start} - {event.end}"
                )
            staged[event.key] = event
        for key in removed_keys:
            self._events.pop(key, None)
        self._events.update(staged)

    # ==================== Queries ====================

    def get_all_events(self) -> list[Event]:
        """All events sorted by start."""
        return sorted(self._events.values(), key=_sort_key)

    def get_events_on(self, day: date) -> list[Event]:
        """Events overlapping the given day, sorted by start."""
        if isinstance(day, datetime):
            day = day.date()
        day_start = datetime.combine(day, time.min)
        day_end = day_start + timedelta(days=1)
        return self.get_events_in_range(day_start, day_end)

    def get_events_in_range(self, start: datetime, end: datetime) -> list[Event]:
        """
        Events overlapping ``[start, end)``, sorted by start.

        Raises:
            InvalidRangeError: if a bound is missing or end is before start.
        """
        if start is None or end is None:
            raise InvalidRangeError("Range start and end must not be null")
        if end < start:
            raise InvalidRangeError("Range end must not be before range start")
        events = [e for e in self._events.values() if e.overlaps(start, end)]
        events.sort(key=_sort_key)
        return events

    def is_busy(self, instant: datetime) -> bool:
        """Check if an event is in progress at ``instant``."""
        return any(e.contains(instant) for e in self._events.values())

    def generate_analytics(self, start_date: date, end_date: date) -> AnalyticsSummary:
        """Analytics for the events overlapping the inclusive date interval."""
        return generate_analytics(self._events.values(), start_date, end_date)

    # ==================== Container Protocol ====================

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event: object) -> bool:
        return isinstance(event, Event) and event.key in self._events

    def __iter__(self) -> Iterator[Event]:
        return iter(self.get_all_events())

    def __repr__(self):
        return f"Calendar(name={self.name!r}, timezone={self.timezone_name!r}, events={len(self)})"


def _sort_key(event: Event):
    return (event.start, event.end, event.subject)
