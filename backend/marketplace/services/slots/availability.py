# backend/marketplace/services/slots/availability.py
"""
Slot availability for a service or offer on a specific day.

  calendar  → is the store open that day?
  grid      → candidate slots from store hours + service duration/buffer
  ledger    → existing bookings in scope (store-wide or one staff member)
  compute   → remaining capacity per slot

Reads only. The answer is a hint for the UI; reservations re-check under a
lock (see services/reservations.py).
"""

from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy.orm import Session

from ...exceptions import BookingError, InvalidSlotTime
from .calculator import Slot, find_slot, generate_slots
from .calendar import format_working_days, normalize_working_days, validate_booking_date
from .config import (
    BookingConfig,
    format_display_time,
    get_booking_config,
    parse_requested_time,
    parse_time_of_day,
)
from .entities import BookingTarget, list_service_staff, resolve_staff, resolve_target
from .ledger import BookingRecord, PerStaff, fetch_bookings, resolve_store_scope


@dataclass(frozen=True)
class SlotAvailability:
    slot: Slot
    total: int
    booked: int
    available: int

    @property
    def is_available(self) -> bool:
        return self.available > 0


# ── Pure calculation ─────────────────────────────────────────────────────


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap: touching endpoints do not overlap."""
    return start_a < end_b and end_a > start_b


def compute_availability(
    slots: list[Slot],
    bookings: list[tuple[int, int]],
    capacity: int,
) -> list[SlotAvailability]:
    """
    Annotate each slot with booked/available counts.

    Args:
        slots: Slot grid for the day
        bookings: Booking intervals as (start_min, end_min) on the same day
        capacity: Bookings allowed at once in this scope
    """
    result = []
    for slot in slots:
        booked = sum(
            1 for start, end in bookings
            if overlaps(start, end, slot.start_min, slot.end_min)
        )
        result.append(SlotAvailability(
            slot=slot,
            total=capacity,
            booked=booked,
            available=max(0, capacity - booked),
        ))
    return result


def cap_by_store(
    staff_slots: list[SlotAvailability],
    store_slots: list[SlotAvailability],
) -> list[SlotAvailability]:
    """A staff slot is only as free as the store-wide counter allows."""
    return [
        SlotAvailability(
            slot=staff.slot,
            total=staff.total,
            booked=staff.booked,
            available=min(staff.available, store.available),
        )
        for staff, store in zip(staff_slots, store_slots)
    ]


def booking_intervals(records: list[BookingRecord], target_date: date) -> list[tuple[int, int]]:
    return [record.minutes_on(target_date) for record in records]


# ── DB-backed evaluation ─────────────────────────────────────────────────


def evaluate_slots(
    db: Session,
    target: BookingTarget,
    target_date: date,
    slots: list[Slot],
    staff_id: int | None = None,
    config: BookingConfig | None = None,
) -> list[SlotAvailability]:
    """
    Run ledger + calculator for the given slots.

    Store-wide scope uses the service's max_concurrent_bookings; staff scope
    uses capacity 1, further limited by the store-wide counter.
    """
    config = config or get_booking_config()

    store_scope = resolve_store_scope(db, target.store.id)
    store_bookings = fetch_bookings(db, store_scope, target_date, config)
    store_slots = compute_availability(
        slots,
        booking_intervals(store_bookings, target_date),
        config.capacity_for(target.service),
    )
    if staff_id is None:
        return store_slots

    staff_bookings = fetch_bookings(db, PerStaff(staff_id), target_date, config)
    staff_slots = compute_availability(
        slots,
        booking_intervals(staff_bookings, target_date),
        config.staff_capacity,
    )
    return cap_by_store(staff_slots, store_slots)


def get_available_slots(
    db: Session,
    entity_id: int,
    entity_type: str,
    date_value: str | date,
    staff_id: int | None = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Calculate available time slots for an offer or service.

    Returns:
        Dict for SlotsDayResponse. Calendar rejections come back as
        success=False with businessRuleViolation=True; missing entities raise.
    """
    config = config or get_booking_config()
    now = now or datetime.now()

    target = resolve_target(db, entity_id, entity_type)
    if staff_id is not None:
        resolve_staff(db, target, staff_id)

    store_info = format_store_info(target.store)

    check = validate_booking_date(date_value, target.store, today=now.date())
    if not check.valid:
        return {
            "success": False,
            "businessRuleViolation": True,
            "code": check.reason.value,
            "message": check.message,
            "availableSlots": [],
            "storeInfo": store_info,
        }

    slots = generate_slots(target.service, target.store, config)
    evaluated = evaluate_slots(db, target, check.target_date, slots, staff_id, config)

    detailed = [_format_slot(item) for item in evaluated]

    return {
        "success": True,
        "date": check.target_date.isoformat(),
        "entityType": target.entity_type,
        "entityId": target.entity_id,
        "serviceId": target.service.id,
        "staffId": staff_id,
        "availableSlots": [item["time"] for item in detailed if item["isAvailable"]],
        "detailedSlots": detailed,
        "storeInfo": store_info,
        "bookingRules": format_booking_rules(target.service, config),
    }


def is_slot_available(
    db: Session,
    entity_id: int,
    entity_type: str,
    date_value: str | date,
    time_value: str,
    staff_id: int | None = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Unlocked availability check of one slot (UI hint, not authoritative).

    Returns:
        {"available": True, "remainingSlots", "totalSlots"} or
        {"available": False, "reason"}
    """
    config = config or get_booking_config()
    now = now or datetime.now()

    try:
        target = resolve_target(db, entity_id, entity_type)
        if staff_id is not None:
            resolve_staff(db, target, staff_id)

        check = validate_booking_date(date_value, target.store, today=now.date())
        check.raise_for_status()

        slot = requested_slot(target, time_value, config)
    except BookingError as e:
        return {"available": False, "reason": e.message}

    item = evaluate_slots(db, target, check.target_date, [slot], staff_id, config)[0]
    if not item.is_available:
        return {"available": False, "reason": "Time slot is fully booked"}

    return {
        "available": True,
        "remainingSlots": item.available,
        "totalSlots": item.total,
    }


def list_staff_for_entity(db: Session, entity_id: int, entity_type: str) -> list:
    """Active staff who can serve the offer/service."""
    target = resolve_target(db, entity_id, entity_type)
    return [
        staff for staff in list_service_staff(db, target.service.id)
        if staff.store_id == target.store.id
    ]


# ── Helpers ──────────────────────────────────────────────────────────────


def requested_slot(
    target: BookingTarget,
    time_value: str,
    config: BookingConfig,
) -> Slot:
    """Map a client time ("10:00 AM" / "10:00") onto the service's grid."""
    try:
        start_min = parse_requested_time(time_value)
    except ValueError:
        raise InvalidSlotTime(f"Invalid time format: {time_value}")

    slot = find_slot(generate_slots(target.service, target.store, config), start_min)
    if slot is None:
        raise InvalidSlotTime()
    return slot


def format_store_info(store) -> dict:
    opening = parse_time_of_day(store.opening_time)
    closing = parse_time_of_day(store.closing_time)
    return {
        "name": store.name,
        "location": store.location,
        "openingTime": format_display_time(opening) if opening is not None else None,
        "closingTime": format_display_time(closing) if closing is not None else None,
        "workingDays": format_working_days(normalize_working_days(store.working_days)),
    }


def format_booking_rules(service, config: BookingConfig) -> dict:
    return {
        "maxConcurrentBookings": config.capacity_for(service),
        "serviceDuration": config.duration_for(service),
        "bufferTime": config.buffer_for(service),
        "minAdvanceBooking": config.min_advance_for(service),
        "maxAdvanceBooking": config.max_advance_for(service),
    }


def _format_slot(item: SlotAvailability) -> dict:
    return {
        "time": format_display_time(item.slot.start_min),
        "startTime": item.slot.start_time,
        "endTime": item.slot.end_time,
        "available": item.available,
        "total": item.total,
        "booked": item.booked,
        "isAvailable": item.is_available,
    }
