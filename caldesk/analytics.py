"""
Calendar analytics.

generate_analytics() counts the events overlapping an inclusive date
interval and returns an AnalyticsSummary: totals grouped by subject,
weekday, week of the interval and month, the busiest and least busy
days, the average per day, and how many events were held online.
"""

from dataclasses import dataclass, field
from datetime import datetime, date, time, timedelta
from types import MappingProxyType
from typing import Iterable, Mapping, NamedTuple, Optional

from .errors import InvalidRangeError
from .event import Event
from .event_series import Weekday


NO_SUBJECT = "(no subject)"


class YearMonth(NamedTuple):
    year: int
    month: int

    @classmethod
    def of(cls, day: date) -> 'YearMonth':
        return cls(day.year, day.month)

    def __str__(self):
        return f"{self.year:04d}-{self.month:02d}"


def _frozen(mapping: Optional[Mapping]) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class AnalyticsSummary:
    """
    Immutable snapshot of calendar metrics for a date interval.

    The mappings are read-only copies taken at construction; later
    changes to the calendar (or to the dicts passed in) do not show up
    here.
    """
    start_date: date
    end_date: date
    total_events: int = 0
    events_by_subject: Mapping[str, int] = field(default_factory=dict)
    events_by_weekday: Mapping[Weekday, int] = field(default_factory=dict)
    events_by_week_index: Mapping[int, int] = field(default_factory=dict)
    events_by_month: Mapping[YearMonth, int] = field(default_factory=dict)
    events_per_day: Mapping[date, int] = field(default_factory=dict)
    average_events_per_day: float = 0.0
    busiest_day: Optional[date] = None
    least_busy_day: Optional[date] = None
    online_events_count: int = 0
    offline_events_count: int = 0

    def __post_init__(self):
        for name in ('events_by_subject', 'events_by_weekday', 'events_by_week_index',
                     'events_by_month', 'events_per_day'):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    @property
    def days_counted(self) -> int:
        """Number of days in the inclusive interval."""
        return (self.end_date - self.start_date).days + 1

    @property
    def busiest_day_count(self) -> int:
        if self.busiest_day is None:
            return 0
        return self.events_per_day[self.busiest_day]

    @property
    def least_busy_day_count(self) -> int:
        if self.least_busy_day is None:
            return 0
        return self.events_per_day[self.least_busy_day]

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_events": self.total_events,
            "events_by_subject": dict(self.events_by_subject),
            "events_by_weekday": {day.name: count for day, count in sorted(self.events_by_weekday.items())},
            "events_by_week_index": dict(sorted(self.events_by_week_index.items())),
            "events_by_month": {str(month): count for month, count in sorted(self.events_by_month.items())},
            "average_events_per_day": self.average_events_per_day,
            "busiest_day": self.busiest_day.isoformat() if self.busiest_day else None,
            "least_busy_day": self.least_busy_day.isoformat() if self.least_busy_day else None,
            "online_events_count": self.online_events_count,
            "offline_events_count": self.offline_events_count,
        }


def _week_index(start_date: date, day: date) -> int:
    # Whole weeks truncate toward zero, so days just before start_date stay in week 1
    days = (day - start_date).days
    weeks = abs(days) // 7
    return (weeks if days >= 0 else -weeks) + 1


def _increment(counts: dict, key) -> None:
    counts[key] = counts.get(key, 0) + 1


def generate_analytics(events: Iterable[Event], start_date: date, end_date: date) -> AnalyticsSummary:
    """
    Compute analytics for the events overlapping ``[start_date, end_date]``.

    The dates are turned into the half-open window
    ``[start_date 00:00, end_date + 1 day 00:00)``; every event
    overlapping it is counted once, under the date it starts on.
    Ties for busiest / least busy day go to the earliest date.

    Raises:
        InvalidRangeError: if a date is missing or end_date is before start_date.
    """
    if start_date is None or end_date is None:
        raise InvalidRangeError("Start date and end date must not be null")
    if isinstance(start_date, datetime):
        start_date = start_date.date()
    if isinstance(end_date, datetime):
        end_date = end_date.date()
    if end_date < start_date:
        raise InvalidRangeError("End date must not be before start date")

    window_start = datetime.combine(start_date, time.min)
    window_end = datetime.combine(end_date + timedelta(days=1), time.min)
    selected = [e for e in events if e.overlaps(window_start, window_end)]

    by_subject: dict[str, int] = {}
    by_weekday: dict[Weekday, int] = {}
    by_week_index: dict[int, int] = {}
    by_month: dict[YearMonth, int] = {}
    per_day: dict[date, int] = {}
    online = 0

    for event in selected:
        day = event.start.date()
        subject = event.subject if event.subject and event.subject.strip() else NO_SUBJECT
        _increment(by_subject, subject)
        _increment(by_weekday, Weekday.of(day))
        _increment(by_week_index, _week_index(start_date, day))
        _increment(by_month, YearMonth.of(day))
        _increment(per_day, day)
        if event.is_online():
            online += 1

    busiest = least_busy = None
    for day in sorted(per_day):
        if busiest is None or per_day[day] > per_day[busiest]:
            busiest = day
        if least_busy is None or per_day[day] < per_day[least_busy]:
            least_busy = day

    day_count = (end_date - start_date).days + 1
    return AnalyticsSummary(
        start_date=start_date,
        end_date=end_date,
        total_events=len(selected),
        events_by_subject=by_subject,
        events_by_weekday=by_weekday,
        events_by_week_index=by_week_index,
        events_by_month=by_month,
        events_per_day=per_day,
        average_events_per_day=len(selected) / day_count,
        busiest_day=busiest,
        least_busy_day=least_busy,
        online_events_count=online,
        offline_events_count=len(selected) - online,
    )
