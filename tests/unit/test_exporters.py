"""
Unit tests for CSV and iCalendar export.
"""

import csv
import pytest
from datetime import datetime

from icalendar import Calendar as ICalCalendar

from caldesk.errors import ExportError
from caldesk.event import Event
from caldesk.exporters import (
    CSV_HEADER, event_to_csv_row, event_uid, export_calendar, export_to_csv, export_to_ical,
)


class TestCsvExport:

    def test_row_format(self, meeting):
        row = event_to_csv_row(meeting)

        assert row == [
            "Team Meeting", "01/10/2024", "09:00 AM", "01/10/2024", "10:00 AM",
            "False", "Weekly sync", "Room A", "False",
        ]

    def test_all_day_and_private_flags(self, private_event):
        all_day = Event("Offsite", datetime(2024, 1, 12, 8, 0), datetime(2024, 1, 12, 17, 0))

        assert event_to_csv_row(all_day)[5] == "True"
        assert event_to_csv_row(private_event)[8] == "True"
        assert event_to_csv_row(private_event)[4] == "04:00 PM"

    def test_file_sorted_with_header(self, tmp_path, meeting, private_event):
        path = export_to_csv([private_event, meeting], tmp_path / "out.csv")

        with open(path, newline='', encoding='utf-8') as f:
            rows = list(csv.reader(f))

        assert path.is_absolute()
        assert rows[0] == CSV_HEADER
        assert [r[0] for r in rows[1:]] == ["Team Meeting", "Doctor"]

    def test_quotes_commas(self, tmp_path):
        event = Event("Lunch, maybe", datetime(2024, 1, 5, 12, 0), datetime(2024, 1, 5, 13, 0),
                      description='Say "hi"')

        path = export_to_csv([event], tmp_path / "out.csv")

        with open(path, newline='', encoding='utf-8') as f:
            rows = list(csv.reader(f))
        assert rows[1][0] == "Lunch, maybe"
        assert rows[1][6] == 'Say "hi"'


class TestIcalExport:

    def test_events_parsed_back(self, tmp_path, meeting, private_event):
        path = export_to_ical([meeting, private_event], "America/New_York", tmp_path / "out.ics")

        parsed = ICalCalendar.from_ical(path.read_bytes())
        vevents = list(parsed.walk('VEVENT'))

        assert str(parsed['VERSION']) == "2.0"
        assert [str(v['SUMMARY']) for v in vevents] == ["Team Meeting", "Doctor"]
        assert str(vevents[0]['LOCATION']) == "Room A"
        assert str(vevents[1]['CLASS']) == "PRIVATE"
        assert 'LOCATION' not in vevents[1]

    def test_times_carry_zone(self, tmp_path, meeting):
        path = export_to_ical([meeting], "Europe/London", tmp_path / "out.ics")

        vevent = next(iter(ICalCalendar.from_ical(path.read_bytes()).walk('VEVENT')))
        dtstart = vevent['DTSTART']

        assert dtstart.params['TZID'] == "Europe/London"
        assert dtstart.dt.replace(tzinfo=None) == meeting.start

    def test_uid_stable(self, meeting):
        assert event_uid(meeting) == event_uid(meeting.with_changes(location="elsewhere"))
        assert event_uid(meeting) != event_uid(meeting.with_changes(subject="Other"))


class TestExportCalendar:

    def test_dispatch_by_extension(self, tmp_path, calendar, meeting):
        calendar.add_event(meeting)

        csv_path = export_calendar(calendar, "work.csv", tmp_path / "exports")
        ics_path = export_calendar(calendar, "work.ICAL", tmp_path / "exports")

        assert csv_path.read_text(encoding='utf-8').startswith("Subject,")
        assert ics_path.read_bytes().startswith(b"BEGIN:VCALENDAR")

    def test_unsupported_extension(self, tmp_path, calendar):
        with pytest.raises(ExportError, match="Unsupported export format"):
            export_calendar(calendar, "work.txt", tmp_path)

    def test_empty_calendar(self, tmp_path, calendar):
        path = export_calendar(calendar, "empty.csv", tmp_path)

        assert path.read_text(encoding='utf-8').strip() == ",".join(CSV_HEADER)
