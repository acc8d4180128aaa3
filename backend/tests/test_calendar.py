"""Tests for working-day normalization and booking date validation."""

from datetime import date
from types import SimpleNamespace

import pytest

from marketplace.exceptions import (
    ConfigurationMissing,
    InvalidDate,
    PastDate,
    StoreClosedOnDate,
)
from marketplace.services.slots.calendar import (
    CalendarReason,
    Weekday,
    format_working_days,
    normalize_working_days,
    validate_booking_date,
)

TODAY = date(2026, 10, 9)  # Friday


def store_with(working_days):
    return SimpleNamespace(working_days=working_days)


class TestNormalizeWorkingDays:

    @pytest.mark.parametrize("raw", [
        ["Monday", "Tuesday"],
        '["monday", "tuesday"]',
        "monday, tuesday",
        " MONDAY ,Tuesday ",
        ("monday", "tuesday"),
    ])
    def test_accepted_shapes(self, raw):
        assert normalize_working_days(raw) == {Weekday.MONDAY, Weekday.TUESDAY}

    @pytest.mark.parametrize("raw", [None, "", [], "[]", "{}", "42", "null"])
    def test_empty_or_unparseable(self, raw):
        assert normalize_working_days(raw) == frozenset()

    def test_unknown_names_are_ignored(self):
        assert normalize_working_days(["monday", "funday", 3]) == {Weekday.MONDAY}

    def test_format_in_weekday_order(self):
        days = normalize_working_days("sunday,monday,friday")
        assert format_working_days(days) == ["Monday", "Friday", "Sunday"]


class TestValidateBookingDate:

    def test_open_day(self):
        check = validate_booking_date("2026-10-12", store_with("monday"), today=TODAY)
        assert check.valid
        assert check.weekday == Weekday.MONDAY
        assert check.target_date == date(2026, 10, 12)
        assert check.working_days == {Weekday.MONDAY}
        check.raise_for_status()

    def test_today_is_not_past(self):
        check = validate_booking_date("2026-10-09", store_with("friday"), today=TODAY)
        assert check.valid

    def test_invalid_date(self):
        check = validate_booking_date("2026-02-30", store_with("monday"), today=TODAY)
        assert not check.valid
        assert check.reason == CalendarReason.INVALID_DATE
        with pytest.raises(InvalidDate):
            check.raise_for_status()

    @pytest.mark.parametrize("value", ["next monday", "20261012", "2026-W42-1", "2026-10-12T10:00"])
    def test_only_year_month_day_is_accepted(self, value):
        check = validate_booking_date(value, store_with("monday"), today=TODAY)
        assert check.reason == CalendarReason.INVALID_DATE

    def test_past_date(self):
        check = validate_booking_date("2026-10-08", store_with("thursday"), today=TODAY)
        assert check.reason == CalendarReason.PAST_DATE
        with pytest.raises(PastDate):
            check.raise_for_status()

    def test_missing_working_days_fails_closed(self):
        check = validate_booking_date("2026-10-12", store_with(None), today=TODAY)
        assert check.reason == CalendarReason.CONFIG_MISSING
        with pytest.raises(ConfigurationMissing):
            check.raise_for_status()

    def test_closed_day_lists_open_days(self):
        store = store_with('["saturday", "monday", "tuesday"]')
        check = validate_booking_date("2026-10-11", store, today=TODAY)

        assert check.reason == CalendarReason.CLOSED_ON_DAY
        assert check.message == "Store is closed on Sunday. Open days: Monday, Tuesday, Saturday"
        with pytest.raises(StoreClosedOnDate) as exc_info:
            check.raise_for_status()
        assert exc_info.value.business_rule_violation

    def test_accepts_date_objects(self):
        check = validate_booking_date(date(2026, 10, 13), store_with("tuesday"), today=TODAY)
        assert check.valid
        assert check.weekday == Weekday.TUESDAY
