"""
Event value type.

An Event is one concrete occurrence on a calendar. Its identity is the
triple (subject, start, end); description, location, status and series
membership are payload and play no part in equality or hashing. Events
are immutable - edits build a new Event through with_changes().
"""

from dataclasses import dataclass, replace
from datetime import datetime, date, time, timedelta
from enum import Enum
from typing import Optional

from .errors import InvalidEventError


ALL_DAY_START = time(8, 0)
ALL_DAY_END = time(17, 0)


class Status(Enum):
    """Visibility of an event."""
    PUBLIC = "public"
    PRIVATE = "private"

    @classmethod
    def parse(cls, value) -> 'Status':
        """Accept a Status or its name in any case ("private", "PUBLIC")."""
        if isinstance(value, Status):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise InvalidEventError(f"Invalid status: {value!r}. Expected public or private")


@dataclass(frozen=True, eq=False)
class Event:
    """
    A single calendar event.

    Times are naive wall-clock datetimes; the owning calendar decides
    which zone they belong to.
    """
    subject: str
    start: datetime
    end: datetime
    description: str = ""
    location: str = ""
    status: Status = Status.PUBLIC
    series_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.subject, str) or not self.subject:
            raise InvalidEventError("Subject cannot be empty")
        for label, value in (("start", self.start), ("end", self.end)):
            if not isinstance(value, datetime):
                raise InvalidEventError(f"Event {label} must be a datetime, got {value!r}")
            if value.tzinfo is not None:
                raise InvalidEventError(f"Event {label} must be a naive wall-clock datetime")
        if self.end <= self.start:
            raise InvalidEventError("End time must be after start time")
        if self.description is None:
            object.__setattr__(self, 'description', "")
        if self.location is None:
            object.__setattr__(self, 'location', "")
        object.__setattr__(self, 'status', Status.parse(self.status))

    # ==================== Identity ====================

    @property
    def key(self) -> tuple[str, datetime, datetime]:
        """The identity triple (subject, start, end)."""
        return (self.subject, self.start, self.end)

    def __eq__(self, other):
        if isinstance(other, Event):
            return self.key == other.key
        return NotImplemented

    def __hash__(self):
        return hash(self.key)

    # ==================== Derived Properties ====================

    @property
    def is_all_day(self) -> bool:
        """True for events running exactly 08:00-17:00 on one date."""
        return (
            self.start.time() == ALL_DAY_START
            and self.end.time() == ALL_DAY_END
            and self.start.date() == self.end.date()
        )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def is_recurring(self) -> bool:
        """Check if this event belongs to a series."""
        return bool(self.series_id)

    @property
    def is_private(self) -> bool:
        return self.status is Status.PRIVATE

    def is_online(self) -> bool:
        """Location is "online", ignoring case and surrounding whitespace."""
        return bool(self.location) and self.location.strip().lower() == "online"

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Check if [self.start, self.end) intersects [start, end)."""
        return self.start < end and self.end > start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    # ==================== Copies ====================

    def with_changes(self, **changes) -> 'Event':
        """Build a validated copy with some fields replaced."""
        return replace(self, **changes)

    def shifted(self, delta: timedelta) -> 'Event':
        return self.with_changes(start=self.start + delta, end=self.end + delta)

    def __repr__(self):
        return f"Event(subject={self.subject!r}, start={self.start}, end={self.end})"


def create_event(
    subject: str,
    start: datetime,
    end: Optional[datetime] = None,
    description: str = "",
    location: str = "",
    status: Status = Status.PUBLIC,
    series_id: Optional[str] = None,
) -> Event:
    """
    Create an Event, defaulting to an all-day event when no end is given.

    All-day events run from 08:00 to 17:00 on the start date.

    Raises:
        InvalidEventError: if the fields do not form a valid event.
    """
    if end is None:
        if not isinstance(start, date):
            raise InvalidEventError("Start time cannot be empty")
        # date or datetime: only the calendar date is kept
        day = start.date() if isinstance(start, datetime) else start
        start = datetime.combine(day, ALL_DAY_START)
        end = datetime.combine(day, ALL_DAY_END)
    return Event(
        subject=subject,
        start=start,
        end=end,
        description=description,
        location=location,
        status=status,
        series_id=series_id,
    )
