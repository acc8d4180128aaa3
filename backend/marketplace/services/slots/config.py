# backend/marketplace/services/slots/config.py
"""
Booking configuration and time helpers for slots calculation.
"""

import re
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class BookingConfig:
    """
    Defaults applied when a service row leaves a booking setting empty.

    Attributes:
        default_duration: Service duration in minutes
        default_buffer_time: Idle minutes after each slot
        default_capacity: Store-wide bookings allowed per slot
        default_min_advance: Minimum minutes between now and slot start
        default_max_advance: Maximum minutes between now and slot start (7 days)
        staff_capacity: Bookings one staff member can serve at once
    """
    default_duration: int = 60
    default_buffer_time: int = 0
    default_capacity: int = 1
    default_min_advance: int = 30
    default_max_advance: int = 10080
    staff_capacity: int = 1
    inactive_statuses: tuple[str, ...] = ("cancelled", "no_show")
    cancellable_statuses: tuple[str, ...] = ("pending", "confirmed")

    def __post_init__(self):
        """Validate configuration."""
        if self.default_duration <= 0:
            raise ValueError(f"default_duration must be positive, got {self.default_duration}")
        if self.default_capacity < 1:
            raise ValueError(f"default_capacity must be at least 1, got {self.default_capacity}")

    def duration_for(self, service) -> int:
        duration = service.duration or 0
        return duration if duration > 0 else self.default_duration

    def buffer_for(self, service) -> int:
        value = service.buffer_time
        return self.default_buffer_time if value is None else max(value, 0)

    def capacity_for(self, service) -> int:
        return service.max_concurrent_bookings or self.default_capacity

    def min_advance_for(self, service) -> int:
        value = service.min_advance_booking
        return self.default_min_advance if value is None else value

    def max_advance_for(self, service) -> int:
        return service.max_advance_booking or self.default_max_advance


@lru_cache
def get_booking_config() -> BookingConfig:
    """
    Get booking configuration (singleton).

    In the future, this can read from environment or database.
    """
    return BookingConfig()


# ── Time helpers ─────────────────────────────────────────────────────────

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_DISPLAY_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp][Mm])$")


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" or "HH:MM:SS" to minutes since midnight."""
    match = _CLOCK_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time: {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return hour * 60 + minute


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_time_of_day(value) -> int | None:
    """
    Parse a stored opening/closing time.

    Returns minutes since midnight, or None when missing or unparseable.
    """
    if value is None:
        return None
    if hasattr(value, "hour") and hasattr(value, "minute"):
        return value.hour * 60 + value.minute
    try:
        return time_str_to_minutes(str(value))
    except ValueError:
        return None


def parse_requested_time(value: str) -> int:
    """
    Parse a client-supplied slot time: "9:00 AM" or "09:00".

    Raises ValueError when the string matches neither form.
    """
    value = value.strip()
    match = _DISPLAY_RE.match(value)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if not 1 <= hour <= 12 or minute > 59:
            raise ValueError(f"Invalid time: {value!r}")
        hour = hour % 12
        if match.group(3).upper() == "PM":
            hour += 12
        return hour * 60 + minute
    return time_str_to_minutes(value)


def format_display_time(minutes: int) -> str:
    """Convert minutes since midnight to "h:mm AM"."""
    hour, minute = divmod(minutes % (24 * 60), 60)
    suffix = "AM" if hour < 12 else "PM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{minute:02d} {suffix}"
