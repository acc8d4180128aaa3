# backend/marketplace/exceptions.py
"""
Booking error taxonomy.

Every error carries the HTTP status it maps to and a stable code, so the
API layer can render it with a single exception handler.
"""


class BookingError(Exception):
    status_code = 400
    code = "BOOKING_ERROR"
    default_message = "Booking request rejected"
    business_rule_violation = False

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {
            "success": False,
            "code": self.code,
            "message": self.message,
        }
        if self.business_rule_violation:
            payload["businessRuleViolation"] = True
        return payload


# ── Calendar rejections (400) ────────────────────────────────────────────


class CalendarRejection(BookingError):
    business_rule_violation = True


class InvalidDate(CalendarRejection):
    code = "INVALID_DATE"
    default_message = "Invalid date format"


class PastDate(CalendarRejection):
    code = "PAST_DATE"
    default_message = "Cannot book slots for past dates"


class ConfigurationMissing(CalendarRejection):
    code = "CONFIG_MISSING"
    default_message = "Store working days not configured"


class StoreClosedOnDate(CalendarRejection):
    code = "CLOSED_ON_DAY"
    default_message = "Store is closed on this day"


# ── Request rejections (400) ─────────────────────────────────────────────


class InvalidEntityType(BookingError):
    code = "INVALID_ENTITY_TYPE"
    default_message = "Valid booking type (offer or service) is required"


class EntityUnavailable(BookingError):
    code = "ENTITY_UNAVAILABLE"
    default_message = "This item is not available for booking"


class StaffNotAssigned(BookingError):
    code = "STAFF_NOT_ASSIGNED"
    default_message = "Staff member is not assigned to this service"


class InvalidSlotTime(BookingError):
    code = "INVALID_SLOT_TIME"
    default_message = "Requested time slot is not available"


class OutOfBookingWindow(BookingError):
    code = "OUT_OF_BOOKING_WINDOW"
    default_message = "Booking is outside the allowed advance booking window"


# ── Lookups (404) ────────────────────────────────────────────────────────


class EntityNotFound(BookingError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class StoreNotFound(EntityNotFound):
    code = "STORE_NOT_FOUND"
    default_message = "Store not found"


class BranchNotFound(EntityNotFound):
    code = "BRANCH_NOT_FOUND"
    default_message = "Branch not found"


class ServiceNotFound(EntityNotFound):
    code = "SERVICE_NOT_FOUND"
    default_message = "Service not found"


class OfferNotFound(EntityNotFound):
    code = "OFFER_NOT_FOUND"
    default_message = "Offer not found"


class StaffNotFound(EntityNotFound):
    code = "STAFF_NOT_FOUND"
    default_message = "Staff member not found or not available at this location"


class UserNotFound(EntityNotFound):
    code = "USER_NOT_FOUND"
    default_message = "User not found"


class BookingNotFound(EntityNotFound):
    code = "BOOKING_NOT_FOUND"
    default_message = "Booking not found"


# ── Conflicts (409) ──────────────────────────────────────────────────────


class SlotUnavailable(BookingError):
    status_code = 409
    code = "SLOT_UNAVAILABLE"
    default_message = "Selected time slot is no longer available"


class InvalidStatusTransition(BookingError):
    status_code = 409
    code = "INVALID_STATUS_TRANSITION"
    default_message = "Booking status does not allow this change"
