"""
Tests for canonical calendar-day conversion and calendar arithmetic.
"""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from gantt.errors import InvalidDateError
from gantt.time_utils import (
    add_months,
    add_years,
    canonical_zone,
    days_between,
    end_of_week,
    is_weekend,
    parse_calendar_day,
    start_of_week,
    to_calendar_day,
    today_local,
)


class _Timestamp:
    """Stand-in for a store timestamp wrapper exposing to_datetime()."""

    def __init__(self, value: datetime):
        self._value = value

    def to_datetime(self) -> datetime:
        return self._value


class TestParseCalendarDay:
    def test_date_only_string_is_that_day(self):
        assert parse_calendar_day("2024-01-10") == date(2024, 1, 10)

    def test_date_passes_through(self):
        assert parse_calendar_day(date(2024, 2, 29)) == date(2024, 2, 29)

    def test_utc_instant_after_tokyo_midnight_is_next_day(self):
        # 15:30 UTC == 00:30 next day in Tokyo
        assert parse_calendar_day("2024-01-10T15:30:00Z") == date(2024, 1, 11)

    def test_utc_instant_before_tokyo_midnight_is_same_day(self):
        assert parse_calendar_day("2024-01-10T14:59:00Z") == date(2024, 1, 10)

    def test_aware_datetime_converted(self):
        value = datetime(2024, 1, 10, 23, 0, tzinfo=timezone(timedelta(hours=-5)))
        # 04:00 UTC Jan 11 == 13:00 Tokyo Jan 11
        assert parse_calendar_day(value) == date(2024, 1, 11)

    def test_naive_datetime_read_as_utc(self):
        assert parse_calendar_day(datetime(2024, 1, 10, 16, 0)) == date(2024, 1, 11)

    def test_timestamp_wrapper(self):
        value = _Timestamp(datetime(2024, 1, 10, 20, 0, tzinfo=UTC))
        assert parse_calendar_day(value) == date(2024, 1, 11)

    def test_other_timezone_override(self):
        assert parse_calendar_day("2024-01-10T15:30:00Z", tz="UTC") == date(2024, 1, 10)

    @pytest.mark.parametrize("raw", ["", "   ", "not-a-date", "2024-13-01", 42, object()])
    def test_malformed_raises(self, raw):
        with pytest.raises(InvalidDateError):
            parse_calendar_day(raw)

    def test_invalid_date_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_calendar_day("garbage")


class TestToCalendarDay:
    def test_none_and_empty_are_none(self):
        assert to_calendar_day(None) is None
        assert to_calendar_day("") is None

    def test_malformed_is_none(self, caplog):
        assert to_calendar_day("31/01/2024") is None
        assert "malformed" in caplog.text.lower()

    def test_valid_value(self):
        assert to_calendar_day("2024-06-01") == date(2024, 6, 1)


class TestToday:
    def test_today_uses_canonical_zone(self):
        # 20:00 UTC is already the next day in Tokyo
        clock = lambda: datetime(2024, 1, 10, 20, 0, tzinfo=UTC)  # noqa: E731
        assert today_local(clock=clock) == date(2024, 1, 11)

    def test_today_with_fixed_clock(self, fixed_clock):
        assert today_local(clock=fixed_clock) == date(2024, 1, 10)

    def test_invalid_zone(self):
        with pytest.raises(ValueError):
            canonical_zone("Mars/Olympus_Mons")


class TestArithmetic:
    def test_week_bounds(self):
        # 2024-01-10 is a Wednesday
        assert start_of_week(date(2024, 1, 10)) == date(2024, 1, 8)
        assert end_of_week(date(2024, 1, 10)) == date(2024, 1, 14)

    def test_week_bounds_on_edges(self):
        assert start_of_week(date(2024, 1, 8)) == date(2024, 1, 8)
        assert end_of_week(date(2024, 1, 14)) == date(2024, 1, 14)

    def test_days_between_is_signed(self):
        assert days_between(date(2024, 1, 12), date(2024, 1, 10)) == 2
        assert days_between(date(2024, 1, 10), date(2024, 1, 12)) == -2

    def test_days_between_across_dst_free_year_boundary(self):
        assert days_between(date(2025, 1, 1), date(2024, 1, 1)) == 366

    def test_add_years_leap_day(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 3, 1)
        assert add_years(date(2024, 2, 29), 4) == date(2028, 2, 29)

    def test_add_months_clamps_day(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_add_months_across_years(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
        assert add_months(date(2024, 1, 15), -13) == date(2022, 12, 15)

    def test_is_weekend(self):
        assert is_weekend(date(2024, 1, 13)) is True  # Saturday
        assert is_weekend(date(2024, 1, 14)) is True  # Sunday
        assert is_weekend(date(2024, 1, 12)) is False  # Friday
