"""
CSV and iCalendar export.

Exporters only read events; they never touch the store. CSV output
follows the Google Calendar import columns. iCalendar output is built
with the icalendar library, with times tagged in the calendar's zone.
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union
import uuid

import pytz
from icalendar import Calendar as ICalCalendar, Event as ICalEvent

from .debug import debug_print
from .errors import ExportError
from .event import Event
from .event_store import Calendar
from .timezone_utils import TimezoneLike, localize


CSV_HEADER = [
    "Subject", "Start Date", "Start Time", "End Date", "End Time",
    "All Day Event", "Description", "Location", "Private",
]
CSV_DATE_FORMAT = "%m/%d/%Y"
CSV_TIME_FORMAT = "%I:%M %p"
DEFAULT_PRODID = "-//caldesk//Calendar Application//EN"

# Stable namespace so re-exporting an event yields the same UID
_UID_NAMESPACE = uuid.UUID("6b0f9a52-5a8e-4e8e-9a3c-2f3d8f1c7e21")


def _debug_print(msg: str) -> None:
    debug_print("EXPORT", msg)


def _sorted(events: Iterable[Event]) -> list[Event]:
    return sorted(events, key=lambda e: (e.start, e.end, e.subject))


# ==================== CSV ====================

def event_to_csv_row(event: Event) -> list[str]:
    return [
        event.subject,
        event.start.strftime(CSV_DATE_FORMAT),
        event.start.strftime(CSV_TIME_FORMAT),
        event.end.strftime(CSV_DATE_FORMAT),
        event.end.strftime(CSV_TIME_FORMAT),
        "True" if event.is_all_day else "False",
        event.description or "",
        event.location or "",
        "True" if event.is_private else "False",
    ]


def export_to_csv(events: Iterable[Event], path: Union[str, Path]) -> Path:
    """
    Write events to a CSV file, sorted by start.

    Returns:
        The absolute path of the written file.
    """
    path = Path(path).absolute()
    rows = [event_to_csv_row(e) for e in _sorted(events)]
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        writer.writerows(rows)
    _debug_print(f"wrote {len(rows)} events to {path}")
    return path


# ==================== iCalendar ====================

def event_uid(event: Event) -> str:
    """Deterministic UID derived from the event's identity."""
    name = f"{event.subject}|{event.start.isoformat()}|{event.end.isoformat()}"
    return f"{uuid.uuid5(_UID_NAMESPACE, name)}@caldesk"


def event_to_ical(event: Event, timezone: TimezoneLike,
                  dtstamp: Optional[datetime] = None) -> ICalEvent:
    """Build an icalendar VEVENT for one event."""
    vevent = ICalEvent()
    vevent.add('uid', event_uid(event))
    vevent.add('dtstamp', dtstamp or datetime.now(pytz.UTC))
    vevent.add('summary', event.subject)
    vevent.add('dtstart', localize(event.start, timezone))
    vevent.add('dtend', localize(event.end, timezone))
    if event.description:
        vevent.add('description', event.description)
    if event.location:
        vevent.add('location', event.location)
    vevent.add('class', event.status.name)
    return vevent


def build_ical(events: Iterable[Event], timezone: TimezoneLike,
               prodid: str = DEFAULT_PRODID) -> ICalCalendar:
    """Build a VCALENDAR holding the events, sorted by start."""
    vcal = ICalCalendar()
    vcal.add('prodid', prodid)
    vcal.add('version', '2.0')
    vcal.add('calscale', 'GREGORIAN')
    vcal.add('method', 'PUBLISH')
    dtstamp = datetime.now(pytz.UTC)
    for event in _sorted(events):
        vcal.add_component(event_to_ical(event, timezone, dtstamp))
    return vcal


def export_to_ical(events: Iterable[Event], timezone: TimezoneLike,
                   path: Union[str, Path], prodid: str = DEFAULT_PRODID) -> Path:
    """
    Write events to an iCalendar (.ics) file.

    Returns:
        The absolute path of the written file.
    """
    path = Path(path).absolute()
    vcal = build_ical(events, timezone, prodid)
    path.write_bytes(vcal.to_ical())
    _debug_print(f"wrote {len(vcal.subcomponents)} events to {path}")
    return path


# ==================== Dispatch ====================

def export_calendar(calendar: Calendar, file_name: str,
                    export_dir: Union[str, Path] = "exports",
                    prodid: str = DEFAULT_PRODID) -> Path:
    """
    Export a calendar, picking the format from the file extension.

    ``.csv`` writes CSV; ``.ics`` and ``.ical`` write iCalendar. The
    export directory is created if needed.

    Raises:
        ExportError: for any other extension.
    """
    suffix = Path(file_name).suffix.lower()
    if suffix not in ('.csv', '.ics', '.ical'):
        raise ExportError(f"Unsupported export format: {file_name}. Use .csv, .ics or .ical")

    directory = Path(export_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / file_name
    events = calendar.get_all_events()
    if suffix == '.csv':
        return export_to_csv(events, path)
    return export_to_ical(events, calendar.timezone, path, prodid)
