"""
Weekly recurrence engine.

An EventSeries describes a weekly rule - a set of weekdays, anchor
times, and either an occurrence count or a last date - and expands it
into flat Event objects sharing one series id. The series itself is
never stored; a calendar keeps only the generated occurrences.
"""

from dataclasses import dataclass, field
from datetime import datetime, date, timedelta
from enum import IntEnum
from typing import Iterable, Iterator, Optional
import uuid

from .debug import debug_print
from .errors import InvalidEventError, InvalidRecurrenceError
from .event import ALL_DAY_START, ALL_DAY_END, Event, Status


def _debug_print(msg: str) -> None:
    debug_print("SERIES", msg)


class Weekday(IntEnum):
    """Days of the week, numbered like date.weekday() (Monday = 0)."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, day: date) -> 'Weekday':
        return cls(day.weekday())


# Single-letter codes: R is Thursday, U is Sunday
WEEKDAY_LETTERS = {
    'M': Weekday.MONDAY,
    'T': Weekday.TUESDAY,
    'W': Weekday.WEDNESDAY,
    'R': Weekday.THURSDAY,
    'F': Weekday.FRIDAY,
    'S': Weekday.SATURDAY,
    'U': Weekday.SUNDAY,
}


def parse_weekdays(letters: str) -> frozenset[Weekday]:
    """
    Parse weekday letters such as "MWF" into a set of Weekday values.

    Raises:
        InvalidRecurrenceError: on an unknown letter or an empty string.
    """
    days = set()
    for letter in letters:
        try:
            days.add(WEEKDAY_LETTERS[letter])
        except KeyError:
            raise InvalidRecurrenceError(f"Invalid day character: {letter}") from None
    if not days:
        raise InvalidRecurrenceError("Need to specify the weekdays the event should repeat")
    return frozenset(days)


def week_start_of(day: date) -> date:
    """The Monday on or before ``day``."""
    return day - timedelta(days=day.weekday())


@dataclass(frozen=True)
class EventSeries:
    """
    A weekly recurrence rule.

    Exactly one of ``repeat_count`` and ``repeat_until`` must be given.
    ``start`` and ``end`` must fall on the same date; their times of day
    are reused for every occurrence. Without ``end`` the series is
    all-day (08:00-17:00).
    """
    subject: str
    start: datetime
    weekdays: frozenset
    end: Optional[datetime] = None
    repeat_count: Optional[int] = None
    repeat_until: Optional[date] = None
    description: str = ""
    location: str = ""
    status: Status = Status.PUBLIC
    series_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if not isinstance(self.subject, str) or not self.subject:
            raise InvalidEventError("Subject cannot be empty")
        if not isinstance(self.start, datetime):
            raise InvalidEventError("Start time cannot be empty")
        if self.end is None:
            object.__setattr__(self, 'start', datetime.combine(self.start.date(), ALL_DAY_START))
            object.__setattr__(self, 'end', datetime.combine(self.start.date(), ALL_DAY_END))
        if self.end <= self.start:
            raise InvalidEventError("End time must be after start time")
        if self.start.date() != self.end.date():
            raise InvalidRecurrenceError(
                "Start and end must be on the same date for a recurring event"
            )

        try:
            weekdays = frozenset(Weekday(day) for day in (self.weekdays or ()))
        except ValueError:
            raise InvalidRecurrenceError(f"Invalid weekdays: {self.weekdays!r}") from None
        if not weekdays:
            raise InvalidRecurrenceError("Need to specify the weekdays the event should repeat")
        object.__setattr__(self, 'weekdays', weekdays)

        if (self.repeat_count is None) == (self.repeat_until is None):
            raise InvalidRecurrenceError("Specify exactly one of repeat count or repeat until")
        if self.repeat_count is not None and self.repeat_count < 1:
            raise InvalidRecurrenceError("Repeat count must be positive")
        if self.repeat_until is not None:
            if isinstance(self.repeat_until, datetime):
                object.__setattr__(self, 'repeat_until', self.repeat_until.date())
            if self.repeat_until <= self.end.date():
                raise InvalidRecurrenceError("Repeat until must be after the event's end date")

        object.__setattr__(self, 'status', Status.parse(self.status))

    @property
    def anchor_date(self) -> date:
        return self.start.date()

    @property
    def ordered_weekdays(self) -> list[Weekday]:
        return sorted(self.weekdays)

    # ==================== Expansion ====================

    def _candidate_dates(self) -> Iterator[date]:
        """Dates on the selected weekdays, week by week from the anchor's Monday."""
        anchor = self.anchor_date
        week_start = week_start_of(anchor)
        while self.repeat_until is None or week_start <= self.repeat_until:
            for weekday in self.ordered_weekdays:
                day = week_start + timedelta(days=int(weekday))
                if day < anchor:
                    continue
                if self.repeat_until is not None and day > self.repeat_until:
                    continue
                yield day
            week_start += timedelta(weeks=1)

    def _occurrence(self, day: date) -> Event:
        return Event(
            subject=self.subject,
            start=datetime.combine(day, self.start.time()),
            end=datetime.combine(day, self.end.time()),
            description=self.description,
            location=self.location,
            status=self.status,
            series_id=self.series_id,
        )

    def generate_events(self) -> list[Event]:
        """
        Expand the rule into its occurrences, in chronological order.

        Count mode stops after ``repeat_count`` occurrences (possibly in
        the middle of a week); until mode stops after the last selected
        date on or before ``repeat_until``.
        """
        events = []
        for day in self._candidate_dates():
            if self.repeat_count is not None and len(events) >= self.repeat_count:
                break
            events.append(self._occurrence(day))
        _debug_print(f"expanded series {self.series_id} ({self.subject!r}): {len(events)} occurrences")
        return events

    def events_from(self, event: Event) -> list[Event]:
        """Occurrences whose start is not before ``event.start``."""
        return [e for e in self.generate_events() if e.start >= event.start]

    def __iter__(self) -> Iterator[Event]:
        return iter(self.generate_events())


def create_series(
    subject: str,
    start: datetime,
    weekdays: Iterable,
    end: Optional[datetime] = None,
    repeat_count: Optional[int] = None,
    repeat_until: Optional[date] = None,
    description: str = "",
    location: str = "",
    status: Status = Status.PUBLIC,
) -> EventSeries:
    """
    Create an EventSeries; ``weekdays`` may be Weekday values or a letter string.

    Raises:
        InvalidRecurrenceError: if the rule is malformed.
        InvalidEventError: if the anchor event is invalid.
    """
    if isinstance(weekdays, str):
        weekdays = parse_weekdays(weekdays)
    return EventSeries(
        subject=subject,
        start=start,
        end=end,
        weekdays=frozenset(weekdays),
        repeat_count=repeat_count,
        repeat_until=repeat_until,
        description=description,
        location=location,
        status=status,
    )
