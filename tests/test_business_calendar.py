"""
Tests for the business calendar and holiday handling.
"""

from dataclasses import replace
from datetime import date
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from app.models.settings import default_working_hours
from app.services.business_calendar import CLOSED, is_open, timeslots_for_day
from app.services.policy import BookingPolicy, WorkingDay, parse_holiday_date

MONDAY = date(2026, 10, 26)
TUESDAY = date(2026, 10, 27)
WEDNESDAY = date(2026, 10, 28)


def _settings_row(**overrides):
    values = dict(
        timeslot_duration=30,
        max_advance_booking_days=30,
        max_karts_per_timeslot=5,
        max_minutes_per_session=60,
        working_hours=default_working_hours(),
        holidays=[],
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestIsOpen:

    def test_open_day_returns_hours(self, policy):
        schedule = is_open(policy, MONDAY)
        assert schedule.open
        assert (schedule.open_time, schedule.close_time) == ("09:00", "18:00")

    def test_closed_weekday(self, policy):
        assert is_open(policy, TUESDAY) == CLOSED
        assert timeslots_for_day(policy, TUESDAY) == []

    def test_missing_weekday_entry_is_closed(self, policy):
        assert not is_open(policy, WEDNESDAY).open

    def test_holiday_overrides_weekly_schedule(self, policy):
        holiday_policy = replace(policy, holidays=frozenset({MONDAY}))
        assert not is_open(holiday_policy, MONDAY).open
        assert timeslots_for_day(holiday_policy, MONDAY) == []
        # the following Monday is unaffected
        assert is_open(holiday_policy, date(2026, 11, 2)).open

    def test_malformed_hours_are_closed(self, policy):
        broken = replace(policy, working_hours=(WorkingDay("monday", True, "9am", "18:00"),))
        assert not is_open(broken, MONDAY).open

    def test_timeslots_for_open_day(self, policy):
        slots = timeslots_for_day(policy, MONDAY)
        assert str(slots[0]) == "09:00-09:30"
        assert str(slots[-1]) == "17:30-18:00"


class TestPolicyFromSettings:

    def test_default_week(self):
        policy = BookingPolicy.from_settings(_settings_row(), "Europe/Tallinn")
        assert is_open(policy, date(2026, 10, 31)).open_time == "10:00"  # Saturday
        assert not is_open(policy, date(2026, 11, 1)).open  # Sunday

    def test_plain_date_holiday(self):
        row = _settings_row(holidays=[{"date": "2026-10-26", "description": "Maintenance"}])
        policy = BookingPolicy.from_settings(row, "Europe/Tallinn")
        assert policy.holidays == frozenset({MONDAY})
        assert timeslots_for_day(policy, MONDAY) == []

    def test_utc_instant_holiday_lands_on_local_date(self):
        """Midnight in Tallinn stored as the previous evening in UTC."""
        row = _settings_row(holidays=[{"date": "2026-12-23T22:00:00.000Z", "description": "Christmas Eve"}])
        policy = BookingPolicy.from_settings(row, "Europe/Tallinn")
        assert policy.holidays == frozenset({date(2026, 12, 24)})

    def test_unreadable_holiday_is_ignored(self):
        row = _settings_row(holidays=[{"date": "someday"}, {"description": "no date"}, "2026-10-26"])
        policy = BookingPolicy.from_settings(row, "Europe/Tallinn")
        assert policy.holidays == frozenset()


def test_parse_holiday_date_forms():
    tz = ZoneInfo("Europe/Tallinn")
    assert parse_holiday_date("2026-05-01", tz) == date(2026, 5, 1)
    assert parse_holiday_date("2026-05-01T10:00:00", tz) == date(2026, 5, 1)
    assert parse_holiday_date("2026-04-30T21:30:00+00:00", tz) == date(2026, 5, 1)
    assert parse_holiday_date(date(2026, 5, 1), tz) == date(2026, 5, 1)
    assert parse_holiday_date("", tz) is None
    assert parse_holiday_date(None, tz) is None
