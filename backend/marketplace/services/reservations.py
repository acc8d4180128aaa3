# backend/marketplace/services/reservations.py
"""
Reservation write path.

Steps:
1. Resolve offer/service, store, user, branch, staff (404s)
2. Offer/service bookable, calendar open, time on the grid, inside the
   advance-booking window (400s)
3. Lock the scope, re-check availability, insert, commit (409 on conflict)

Steps 1-2 only read. Step 3 is the only authoritative availability check
and runs in its own write transaction (database.begin_write). The lock
anchor is the store row (and the staff row in staff mode): SELECT ... FOR
UPDATE on PostgreSQL/MySQL, BEGIN IMMEDIATE on SQLite.
A second writer for the same store blocks until the first commits or rolls
back and then sees its booking.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from math import ceil

from sqlalchemy.orm import Session

from ..database import begin_write
from ..exceptions import (
    BookingNotFound,
    BranchNotFound,
    InvalidStatusTransition,
    OutOfBookingWindow,
    SlotUnavailable,
    UserNotFound,
)
from ..models.generated import Bookings, Branches, Staff, Stores, Users
from .events import EventEmitter
from .slots.availability import evaluate_slots, requested_slot
from .slots.calendar import validate_booking_date
from .slots.config import BookingConfig, format_display_time, get_booking_config
from .slots.entities import BookingTarget, ensure_bookable, resolve_staff, resolve_target
from .slots.ledger import format_db_datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReservationResult:
    booking: Bookings
    remaining_slots: int
    total_slots: int


def reserve_slot(
    db: Session,
    entity_id: int,
    entity_type: str,
    date_value: str,
    time_value: str,
    user_id: int,
    staff_id: int | None = None,
    branch_id: int | None = None,
    notes: str | None = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
    events: EventEmitter | None = None,
) -> ReservationResult:
    """
    Book a slot for an offer or service.

    Raises:
        EntityNotFound subclasses, calendar rejections, EntityUnavailable,
        StaffNotAssigned, InvalidSlotTime, OutOfBookingWindow before the lock;
        SlotUnavailable from the locked re-check.
    """
    config = config or get_booking_config()
    now = now or datetime.now()

    # Step 1: Lookups
    target = resolve_target(db, entity_id, entity_type)
    ensure_bookable(target, now)

    user = db.get(Users, user_id)
    if not user:
        raise UserNotFound()

    if branch_id is not None:
        branch = db.get(Branches, branch_id)
        if not branch or not branch.is_active or branch.store_id != target.store.id:
            raise BranchNotFound()

    if staff_id is not None:
        resolve_staff(db, target, staff_id, branch_id)

    # Step 2: Cheap rejections
    check = validate_booking_date(date_value, target.store, today=now.date())
    check.raise_for_status()

    slot = requested_slot(target, time_value, config)
    start = datetime.combine(check.target_date, datetime.min.time()) + timedelta(minutes=slot.start_min)
    _check_booking_window(target, start, now, config)

    end = start + timedelta(minutes=config.duration_for(target.service))

    # Step 3: Locked check-then-insert
    try:
        begin_write(db)
        _lock_scope(db, target, staff_id)

        item = evaluate_slots(db, target, check.target_date, [slot], staff_id, config)[0]
        if not item.is_available:
            logger.info(
                f"Slot rejected under lock: {entity_type}={entity_id}, "
                f"store_id={target.store.id}, staff_id={staff_id}, "
                f"time={check.target_date} {slot.start_time}"
            )
            raise SlotUnavailable()

        booking = Bookings(
            user_id=user.id,
            store_id=target.store.id,
            branch_id=branch_id,
            service_id=target.service.id,
            offer_id=target.offer.id if target.offer is not None else None,
            staff_id=staff_id,
            booking_type=target.entity_type,
            start_time=format_db_datetime(start),
            end_time=format_db_datetime(end),
            status=_initial_status(target),
            notes=notes or "",
            created_at=format_db_datetime(now),
            updated_at=format_db_datetime(now),
        )
        db.add(booking)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Booking created: booking_id={booking.id}, user_id={user.id}, "
        f"{entity_type}={entity_id}, store_id={target.store.id}, "
        f"staff_id={staff_id}, time={check.target_date} {slot.start_time}, "
        f"status={booking.status}"
    )

    if events is not None:
        events.emit("booking_created", {
            "booking_id": booking.id,
            "store_id": target.store.id,
            "staff_id": staff_id,
            "initiated_by": {
                "user_id": user.id,
                "role": "client",
            },
        })

    return ReservationResult(
        booking=booking,
        remaining_slots=item.available - 1,
        total_slots=item.total,
    )


def cancel_booking(
    db: Session,
    booking_id: int,
    reason: str | None = None,
    config: BookingConfig | None = None,
    now: datetime | None = None,
    events: EventEmitter | None = None,
) -> Bookings:
    """
    Cancel a pending/confirmed booking. Capacity is freed on commit.

    Raises:
        BookingNotFound, InvalidStatusTransition
    """
    config = config or get_booking_config()
    now = now or datetime.now()

    try:
        begin_write(db)
        booking = db.get(Bookings, booking_id)
        if not booking:
            raise BookingNotFound()

        if booking.status not in config.cancellable_statuses:
            raise InvalidStatusTransition(
                f"Cannot cancel a booking with status '{booking.status}'"
            )

        booking.status = "cancelled"
        booking.cancel_reason = reason
        booking.updated_at = format_db_datetime(now)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Booking cancelled: booking_id={booking.id}, reason={reason!r}")

    if events is not None:
        events.emit("booking_cancelled", {
            "booking_id": booking.id,
            "store_id": booking.store_id,
            "staff_id": booking.staff_id,
        })

    return booking


def get_booking(db: Session, booking_id: int) -> Bookings:
    booking = db.get(Bookings, booking_id)
    if not booking:
        raise BookingNotFound()
    return booking


# ── Helpers ──────────────────────────────────────────────────────────────


def _check_booking_window(
    target: BookingTarget,
    start: datetime,
    now: datetime,
    config: BookingConfig,
) -> None:
    """Lead time between now and slot start must lie in [min, max] minutes."""
    min_advance = config.min_advance_for(target.service)
    max_advance = config.max_advance_for(target.service)
    advance_minutes = int((start - now).total_seconds() // 60)

    if min_advance <= advance_minutes <= max_advance:
        return

    min_hours = ceil(min_advance / 60)
    max_days = ceil(max_advance / (60 * 24))
    raise OutOfBookingWindow(
        f"Booking must be made between {min_hours} hours and {max_days} days in advance "
        f"(requested {format_display_time(start.hour * 60 + start.minute)} "
        f"on {start.date().isoformat()})"
    )


def _lock_scope(db: Session, target: BookingTarget, staff_id: int | None) -> None:
    """
    Row-lock the calendar owner(s). Always the store first, then the staff
    member, so concurrent staff and store-wide reservations lock in the same
    order.
    """
    db.query(Stores.id).filter(Stores.id == target.store.id).with_for_update().one()
    if staff_id is not None:
        db.query(Staff.id).filter(Staff.id == staff_id).with_for_update().one()


def _initial_status(target: BookingTarget) -> str:
    if target.entity_type == "offer":
        # Offer bookings wait for the access-fee payment
        return "pending"
    return "confirmed" if target.service.auto_confirm_bookings else "pending"
