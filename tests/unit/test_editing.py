"""
Unit tests for scoped edits: single event, from an occurrence onward,
and the whole series.
"""

import pytest
from datetime import datetime, date

from caldesk.errors import (
    AmbiguousEventError, DuplicateEventError, EventNotFoundError,
    InvalidEventError, UnknownPropertyError,
)
from caldesk.event import Event, Status
from caldesk.event_store import EditScope


JAN5_START = datetime(2024, 1, 5, 10, 0)
JAN5_END = datetime(2024, 1, 5, 11, 0)


class TestEditSingle:

    def test_edit_location(self, calendar, meeting):
        calendar.add_event(meeting)

        edited = calendar.edit_event("Team Meeting", meeting.start, meeting.end, "location", "Online")

        assert edited.location == "Online"
        assert calendar.get_all_events()[0].location == "Online"

    def test_edit_start_keeps_duration(self, calendar, meeting):
        calendar.add_event(meeting)

        edited = calendar.edit_event("Team Meeting", meeting.start, meeting.end,
                                     "start", datetime(2024, 1, 11, 13, 0))

        assert (edited.start, edited.end) == (datetime(2024, 1, 11, 13, 0), datetime(2024, 1, 11, 14, 0))
        assert calendar.get_all_events() == [edited]

    def test_edit_subject_rekeys(self, calendar, meeting):
        calendar.add_event(meeting)

        calendar.edit_event("Team Meeting", meeting.start, meeting.end, "subject", "Standup")

        assert calendar.find_event("Standup", meeting.start, meeting.end).location == "Room A"
        with pytest.raises(EventNotFoundError):
            calendar.find_event("Team Meeting", meeting.start, meeting.end)

    def test_status_as_string(self, calendar, meeting):
        calendar.add_event(meeting)

        edited = calendar.edit_event("Team Meeting", meeting.start, meeting.end, "status", "private")

        assert edited.status is Status.PRIVATE

    def test_unknown_property(self, calendar, meeting):
        calendar.add_event(meeting)

        with pytest.raises(UnknownPropertyError):
            calendar.edit_event("Team Meeting", meeting.start, meeting.end, "priority", "high")

    def test_invalid_end_leaves_event(self, calendar, meeting):
        calendar.add_event(meeting)

        with pytest.raises(InvalidEventError):
            calendar.edit_event("Team Meeting", meeting.start, meeting.end,
                                "end", datetime(2024, 1, 10, 8, 0))

        assert calendar.get_all_events()[0].end == meeting.end

    def test_duplicate_restores_original(self, calendar, meeting):
        """An edit producing an existing identity is rejected and nothing moves."""
        calendar.add_event(meeting)
        other = Event("Standup", meeting.start, meeting.end)
        calendar.add_event(other)

        with pytest.raises(DuplicateEventError):
            calendar.edit_event("Team Meeting", meeting.start, meeting.end, "subject", "Standup")

        assert len(calendar) == 2
        assert meeting in calendar
        assert calendar.find_event("Standup", meeting.start, meeting.end).location == ""

    def test_moving_occurrence_detaches_it(self, calendar_with_yoga, yoga_series):
        edited = calendar_with_yoga.edit_event("Yoga", JAN5_START, JAN5_END,
                                               "start", datetime(2024, 1, 5, 12, 0))

        assert edited.series_id is None
        assert len(calendar_with_yoga.get_series_events(yoga_series.series_id)) == 4

    def test_non_time_edit_keeps_membership(self, calendar_with_yoga, yoga_series):
        edited = calendar_with_yoga.edit_event("Yoga", JAN5_START, JAN5_END, "location", "Park")

        assert edited.series_id == yoga_series.series_id


class TestEditFrom:
    """Edits reaching from one occurrence to the end of its series."""

    def test_start_edit_splits_series(self, calendar_with_yoga, yoga_series):
        edited = calendar_with_yoga.edit_events_from("Yoga", JAN5_START, None,
                                                     "start", datetime(2024, 1, 5, 14, 0))

        assert [e.start for e in edited] == [
            datetime(2024, 1, 5, 14, 0), datetime(2024, 1, 8, 14, 0), datetime(2024, 1, 10, 14, 0),
        ]
        assert all(e.end.hour == 15 for e in edited)

        new_ids = {e.series_id for e in edited}
        assert len(new_ids) == 1
        assert new_ids != {yoga_series.series_id}

        earlier = calendar_with_yoga.get_series_events(yoga_series.series_id)
        assert [e.start.date() for e in earlier] == [date(2024, 1, 1), date(2024, 1, 3)]
        assert all(e.start.hour == 10 for e in earlier)

    def test_only_time_of_day_applied(self, calendar_with_yoga):
        edited = calendar_with_yoga.edit_events_from("Yoga", JAN5_START, JAN5_END,
                                                     "start", datetime(2030, 12, 25, 7, 30))

        assert [e.start.date() for e in edited] == [date(2024, 1, 5), date(2024, 1, 8), date(2024, 1, 10)]
        assert all(e.start.time().hour == 7 and e.start.minute == 30 for e in edited)

    def test_non_time_edit_keeps_series_id(self, calendar_with_yoga, yoga_series):
        edited = calendar_with_yoga.edit_events_from("Yoga", JAN5_START, None, "location", "Park")

        assert {e.series_id for e in edited} == {yoga_series.series_id}
        locations = [e.location for e in calendar_with_yoga.get_all_events()]
        assert locations == ["Gym", "Gym", "Park", "Park", "Park"]

    def test_standalone_event_edited_alone(self, calendar, meeting):
        calendar.add_event(meeting)

        edited = calendar.edit_events_from("Team Meeting", meeting.start, None, "location", "Online")

        assert edited == [meeting]
        assert edited[0].location == "Online"

    def test_collision_leaves_store_unchanged(self, calendar_with_yoga):
        blocker = Event("Yoga", datetime(2024, 1, 8, 14, 0), datetime(2024, 1, 8, 15, 0))
        calendar_with_yoga.add_event(blocker)
        before = [(e.key, e.series_id) for e in calendar_with_yoga.get_all_events()]

        with pytest.raises(DuplicateEventError):
            calendar_with_yoga.edit_events_from("Yoga", JAN5_START, None,
                                                "start", datetime(2024, 1, 5, 14, 0))

        after = [(e.key, e.series_id) for e in calendar_with_yoga.get_all_events()]
        assert after == before

    def test_ambiguous_target(self, calendar_with_yoga):
        calendar_with_yoga.add_event(Event("Yoga", JAN5_START, datetime(2024, 1, 5, 12, 0)))

        with pytest.raises(AmbiguousEventError):
            calendar_with_yoga.edit_events_from("Yoga", JAN5_START, None, "location", "Park")

    def test_missing_target(self, calendar_with_yoga):
        with pytest.raises(EventNotFoundError):
            calendar_with_yoga.edit_events_from("Yoga", datetime(2024, 1, 6, 10, 0), None,
                                                "location", "Park")


class TestEditAll:
    """Edits applied to every occurrence of a series."""

    def test_start_edit_keeps_series_id(self, calendar_with_yoga, yoga_series):
        edited = calendar_with_yoga.edit_all_events_in_series("Yoga", JAN5_START, None,
                                                              "start", datetime(2024, 1, 5, 14, 0))

        assert len(edited) == 5
        assert {e.series_id for e in edited} == {yoga_series.series_id}
        assert all(e.start.hour == 14 and e.end.hour == 15 for e in edited)
        assert edited[0].start == datetime(2024, 1, 1, 14, 0)

    def test_subject_edit(self, calendar_with_yoga):
        calendar_with_yoga.edit_all_events_in_series("Yoga", JAN5_START, JAN5_END, "subject", "Pilates")

        assert {e.subject for e in calendar_with_yoga.get_all_events()} == {"Pilates"}

    def test_edit_dispatch(self, calendar_with_yoga):
        edited = calendar_with_yoga.edit(EditScope.ALL, "Yoga", JAN5_START, None, "description", "Stretch")

        assert len(edited) == 5
        assert all(e.description == "Stretch" for e in calendar_with_yoga.get_all_events())

    def test_single_dispatch(self, calendar_with_yoga):
        edited = calendar_with_yoga.edit(EditScope.SINGLE, "Yoga", JAN5_START, JAN5_END,
                                         "description", "Stretch")

        assert len(edited) == 1
        assert sum(e.description == "Stretch" for e in calendar_with_yoga.get_all_events()) == 1
