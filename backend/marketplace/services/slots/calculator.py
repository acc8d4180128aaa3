# backend/marketplace/services/slots/calculator.py
"""
Slot grid: candidate booking windows for one day of a store.

  step  = duration + buffer_time
  start = opening_time, opening_time + step, ...
  slot kept while start + duration <= closing_time

Contains:
✓ store opening/closing time
✓ service duration and buffer time

Does NOT contain:
✗ Bookings (see ledger + availability)
✗ Working days (see calendar)
"""

from dataclasses import dataclass

from .config import BookingConfig, get_booking_config, minutes_to_time_str, parse_time_of_day


@dataclass(frozen=True)
class Slot:
    """A candidate window, minutes since midnight, half-open [start, end)."""
    start_min: int
    end_min: int

    @property
    def start_time(self) -> str:
        return minutes_to_time_str(self.start_min)

    @property
    def end_time(self) -> str:
        return minutes_to_time_str(self.end_min)


def generate_slots(
    service,
    store,
    config: BookingConfig | None = None,
) -> list[Slot]:
    """
    Generate the day's slot grid for a service at a store.

    Returns:
        Ordered list of Slot. Empty list = store hours missing or unusable.
    """
    config = config or get_booking_config()

    opening = parse_time_of_day(store.opening_time)
    closing = parse_time_of_day(store.closing_time)
    if opening is None or closing is None:
        return []

    duration = config.duration_for(service)
    step = duration + config.buffer_for(service)

    slots: list[Slot] = []
    t = opening
    while t + duration <= closing:
        slots.append(Slot(t, t + duration))
        t += step

    return slots


def find_slot(slots: list[Slot], start_min: int) -> Slot | None:
    """Return the grid slot starting at start_min, if any."""
    for slot in slots:
        if slot.start_min == start_min:
            return slot
    return None
