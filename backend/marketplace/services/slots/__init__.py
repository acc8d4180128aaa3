# backend/marketplace/services/slots/__init__.py
"""
Slots calculation module.

Calendar: is the store open on the date
Grid: candidate slots from store hours and service duration
Ledger: existing bookings in store-wide or staff scope
Availability: remaining capacity per slot
"""

from .config import BookingConfig, get_booking_config
from .calendar import Weekday, normalize_working_days, validate_booking_date
from .calculator import Slot, generate_slots
from .ledger import PerStaff, StoreWide, fetch_bookings, resolve_store_scope
from .availability import (
    compute_availability,
    get_available_slots,
    is_slot_available,
    list_staff_for_entity,
)

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "Weekday",
    "normalize_working_days",
    "validate_booking_date",
    "Slot",
    "generate_slots",
    "PerStaff",
    "StoreWide",
    "fetch_bookings",
    "resolve_store_scope",
    "compute_availability",
    "get_available_slots",
    "is_slot_available",
    "list_staff_for_entity",
]
