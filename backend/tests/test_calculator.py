"""Tests for slot grid generation."""

from types import SimpleNamespace

import pytest

from marketplace.services.slots.calculator import find_slot, generate_slots
from marketplace.services.slots.config import (
    format_display_time,
    parse_requested_time,
    time_str_to_minutes,
)


def service(duration=60, buffer_time=0, max_concurrent_bookings=1):
    return SimpleNamespace(
        duration=duration,
        buffer_time=buffer_time,
        max_concurrent_bookings=max_concurrent_bookings,
    )


def store(opening_time="09:00", closing_time="17:00"):
    return SimpleNamespace(opening_time=opening_time, closing_time=closing_time)


def test_hourly_grid_fills_the_day():
    slots = generate_slots(service(), store())

    assert [s.start_time for s in slots] == [
        "09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00",
    ]
    assert slots[-1].end_time == "17:00"


def test_buffer_extends_step_not_slot():
    slots = generate_slots(service(duration=45, buffer_time=15), store("09:00", "12:00"))

    assert [(s.start_time, s.end_time) for s in slots] == [
        ("09:00", "09:45"),
        ("10:00", "10:45"),
        ("11:00", "11:45"),
    ]


def test_last_slot_never_runs_past_closing():
    slots = generate_slots(service(duration=90), store("09:00", "17:00"))

    assert [s.start_time for s in slots] == ["09:00", "10:30", "12:00", "13:30", "15:00"]
    assert all(s.end_min <= time_str_to_minutes("17:00") for s in slots)


def test_slot_ending_exactly_at_closing_is_kept():
    slots = generate_slots(service(duration=30, buffer_time=10), store("09:00", "10:50"))
    assert [s.start_time for s in slots] == ["09:00", "09:40", "10:20"]


def test_seconds_in_store_hours_are_accepted():
    slots = generate_slots(service(), store("09:00:00", "11:00:00"))
    assert [s.start_time for s in slots] == ["09:00", "10:00"]


@pytest.mark.parametrize("opening,closing", [
    (None, "17:00"),
    ("09:00", None),
    ("nine", "17:00"),
    ("09:00", "25:00"),
])
def test_missing_or_bad_hours_yield_no_slots(opening, closing):
    assert generate_slots(service(), store(opening, closing)) == []


def test_closing_before_opening_yields_no_slots():
    assert generate_slots(service(), store("17:00", "09:00")) == []


def test_missing_duration_falls_back_to_default():
    slots = generate_slots(service(duration=None), store("09:00", "11:00"))
    assert [s.start_time for s in slots] == ["09:00", "10:00"]


def test_grid_is_deterministic():
    args = (service(duration=50, buffer_time=5), store("08:30", "18:15"))
    assert generate_slots(*args) == generate_slots(*args)


def test_find_slot():
    slots = generate_slots(service(), store())
    assert find_slot(slots, 10 * 60).start_time == "10:00"
    assert find_slot(slots, 10 * 60 + 30) is None


class TestTimeFormats:

    @pytest.mark.parametrize("value,minutes", [
        ("9:00 AM", 540),
        ("12:00 PM", 720),
        ("12:30 AM", 30),
        ("4:00 PM", 960),
        ("4:00pm", 960),
        ("16:00", 960),
        ("09:05", 545),
    ])
    def test_parse_requested_time(self, value, minutes):
        assert parse_requested_time(value) == minutes

    @pytest.mark.parametrize("value", ["13:00 PM", "0:00 AM", "24:00", "noon", "9"])
    def test_parse_requested_time_rejects(self, value):
        with pytest.raises(ValueError):
            parse_requested_time(value)

    @pytest.mark.parametrize("minutes,expected", [
        (0, "12:00 AM"),
        (540, "9:00 AM"),
        (720, "12:00 PM"),
        (965, "4:05 PM"),
    ])
    def test_format_display_time(self, minutes, expected):
        assert format_display_time(minutes) == expected
