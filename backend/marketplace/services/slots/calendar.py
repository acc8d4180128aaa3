# backend/marketplace/services/slots/calendar.py
"""
Working calendar: is the store open for booking on a given date?

working_days arrives in several shapes depending on who wrote the row:
  ["Monday", "Tuesday"]            native list
  '["monday", "tuesday"]'          JSON string
  'monday, tuesday'                comma separated string
It is normalized once, here, into a set of Weekday members.
"""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from ...exceptions import (
    CalendarRejection,
    ConfigurationMissing,
    InvalidDate,
    PastDate,
    StoreClosedOnDate,
)


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, target_date: date) -> "Weekday":
        return _WEEKDAY_ORDER[target_date.weekday()]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


_WEEKDAY_ORDER = list(Weekday)


class CalendarReason(str, Enum):
    INVALID_DATE = "INVALID_DATE"
    PAST_DATE = "PAST_DATE"
    CONFIG_MISSING = "CONFIG_MISSING"
    CLOSED_ON_DAY = "CLOSED_ON_DAY"


_REASON_ERRORS: dict[CalendarReason, type[CalendarRejection]] = {
    CalendarReason.INVALID_DATE: InvalidDate,
    CalendarReason.PAST_DATE: PastDate,
    CalendarReason.CONFIG_MISSING: ConfigurationMissing,
    CalendarReason.CLOSED_ON_DAY: StoreClosedOnDate,
}


@dataclass(frozen=True)
class CalendarCheck:
    valid: bool
    reason: CalendarReason | None = None
    message: str | None = None
    target_date: date | None = None
    weekday: Weekday | None = None
    working_days: frozenset[Weekday] = field(default_factory=frozenset)

    def raise_for_status(self) -> None:
        """Raise the matching CalendarRejection when the check failed."""
        if not self.valid:
            raise _REASON_ERRORS[self.reason](self.message)


def normalize_working_days(raw) -> frozenset[Weekday]:
    """
    Normalize stored working days into a set of Weekday.

    Unknown names are ignored. Anything unparseable yields an empty set.
    """
    if not raw:
        return frozenset()

    names: list = []
    if isinstance(raw, (list, tuple, set, frozenset)):
        names = list(raw)
    elif isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            names = parsed
        elif isinstance(parsed, str):
            names = parsed.split(",")
        elif parsed is None:
            names = raw.split(",")

    days = set()
    for name in names:
        if not isinstance(name, str):
            continue
        try:
            days.add(Weekday(name.strip().lower()))
        except ValueError:
            continue
    return frozenset(days)


def format_working_days(days: frozenset[Weekday]) -> list[str]:
    """Working days in weekday order, title case."""
    return [day.display_name for day in _WEEKDAY_ORDER if day in days]


def validate_booking_date(
    date_value: str | date,
    store,
    today: date | None = None,
) -> CalendarCheck:
    """
    Validate that a store takes bookings on date_value.

    Checks, in order: date parses, not in the past, working days configured,
    store open on that weekday.
    """
    today = today or date.today()

    if isinstance(date_value, datetime):
        target_date = date_value.date()
    elif isinstance(date_value, date):
        target_date = date_value
    else:
        try:
            target_date = datetime.strptime(str(date_value).strip(), "%Y-%m-%d").date()
        except ValueError:
            return CalendarCheck(
                valid=False,
                reason=CalendarReason.INVALID_DATE,
                message="Invalid date format",
            )

    if target_date < today:
        return CalendarCheck(
            valid=False,
            reason=CalendarReason.PAST_DATE,
            message="Cannot book slots for past dates",
            target_date=target_date,
        )

    working_days = normalize_working_days(store.working_days)
    if not working_days:
        return CalendarCheck(
            valid=False,
            reason=CalendarReason.CONFIG_MISSING,
            message="Store working days not configured",
            target_date=target_date,
        )

    weekday = Weekday.of(target_date)
    if weekday not in working_days:
        open_days = ", ".join(format_working_days(working_days))
        return CalendarCheck(
            valid=False,
            reason=CalendarReason.CLOSED_ON_DAY,
            message=f"Store is closed on {weekday.display_name}. Open days: {open_days}",
            target_date=target_date,
            weekday=weekday,
            working_days=working_days,
        )

    return CalendarCheck(
        valid=True,
        target_date=target_date,
        weekday=weekday,
        working_days=working_days,
    )
