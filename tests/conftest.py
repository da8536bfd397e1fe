"""
Pytest configuration and shared fixtures.
Provides reusable calendars, events and series for all tests.
"""

import pytest
from datetime import datetime
from pathlib import Path
import sys

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from caldesk.calendar_manager import CalendarManager
from caldesk.debug import set_debug
from caldesk.event import Event, Status
from caldesk.event_series import EventSeries, Weekday
from caldesk.event_store import Calendar


@pytest.fixture(autouse=True)
def quiet_debug():
    """Keep debug output off between tests (config loading may enable it)."""
    set_debug(False)
    yield
    set_debug(False)


# ==================== Calendar Fixtures ====================

@pytest.fixture
def calendar():
    """Empty calendar in New York time."""
    return Calendar("Work", "America/New_York")


@pytest.fixture
def manager():
    """Manager with a New York and a London calendar, New York in use."""
    manager = CalendarManager()
    manager.create_calendar("Work", "America/New_York")
    manager.create_calendar("London", "Europe/London")
    manager.use_calendar("Work")
    return manager


# ==================== Event Fixtures ====================

@pytest.fixture
def meeting():
    """One-hour standalone meeting on Wednesday 2024-01-10."""
    return Event(
        subject="Team Meeting",
        start=datetime(2024, 1, 10, 9, 0),
        end=datetime(2024, 1, 10, 10, 0),
        description="Weekly sync",
        location="Room A",
    )


@pytest.fixture
def private_event():
    return Event(
        subject="Doctor",
        start=datetime(2024, 1, 11, 15, 0),
        end=datetime(2024, 1, 11, 16, 0),
        status=Status.PRIVATE,
    )


# ==================== Series Fixtures ====================

@pytest.fixture
def yoga_series():
    """
    Five Yoga sessions, 10:00-11:00 on Mon/Wed/Fri starting Monday 2024-01-01.

    Occurrences: Jan 1, 3, 5, 8, 10.
    """
    return EventSeries(
        subject="Yoga",
        start=datetime(2024, 1, 1, 10, 0),
        end=datetime(2024, 1, 1, 11, 0),
        weekdays=frozenset({Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.FRIDAY}),
        repeat_count=5,
        location="Gym",
    )


@pytest.fixture
def calendar_with_yoga(calendar, yoga_series):
    calendar.add_event_series(yoga_series)
    return calendar


@pytest.fixture
def sample_config_toml():
    return """
[General]
default_timezone = "America/New_York"
default_calendar = "Work"

[Export]
directory = "out"

[Calendars.Work]
timezone = "America/Chicago"

[Calendars.Home]
"""
