# backend/marketplace/services/slots/ledger.py
"""
Booking ledger: existing reservations that compete for a slot.

Two scopes:
  StoreWide  all bookings against any service of a store, directly or
             through any offer wrapping those services
  PerStaff   all bookings of one staff member, whatever the service

Cancelled and no-show bookings never count.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models.generated import Bookings, Offers, Services
from .config import BookingConfig, get_booking_config

DB_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class StoreWide:
    store_id: int
    service_ids: frozenset[int]
    offer_ids: frozenset[int]


@dataclass(frozen=True)
class PerStaff:
    staff_id: int


BookingScope = StoreWide | PerStaff


@dataclass(frozen=True)
class BookingRecord:
    """Minimal projection of a booking row, enough for overlap checks."""
    id: int
    start: datetime
    end: datetime
    service_id: int | None
    offer_id: int | None
    staff_id: int | None
    status: str

    def minutes_on(self, target_date: date) -> tuple[int, int]:
        """Interval as minutes since midnight of target_date."""
        midnight = datetime.combine(target_date, datetime.min.time())
        start_min = int((self.start - midnight).total_seconds() // 60)
        end_min = int((self.end - midnight).total_seconds() // 60)
        return start_min, end_min


def format_db_datetime(value: datetime) -> str:
    return value.strftime(DB_DATETIME_FORMAT)


def parse_db_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "").replace("T", " "))


def resolve_store_scope(db: Session, store_id: int) -> StoreWide:
    """Collect every service and offer id that shares the store's calendar."""
    service_ids = frozenset(
        row.id for row in db.query(Services.id).filter(Services.store_id == store_id)
    )
    offer_ids: frozenset[int] = frozenset()
    if service_ids:
        offer_ids = frozenset(
            row.id
            for row in db.query(Offers.id).filter(Offers.service_id.in_(service_ids))
        )
    return StoreWide(store_id=store_id, service_ids=service_ids, offer_ids=offer_ids)


def fetch_bookings(
    db: Session,
    scope: BookingScope,
    target_date: date,
    config: BookingConfig | None = None,
) -> list[BookingRecord]:
    """
    Get active bookings starting on target_date within scope.

    Returns:
        BookingRecord list ordered by start time.
    """
    config = config or get_booking_config()

    day_start = datetime.combine(target_date, datetime.min.time())
    day_end = day_start + timedelta(days=1) - timedelta(seconds=1)

    query = db.query(
        Bookings.id,
        Bookings.start_time,
        Bookings.end_time,
        Bookings.service_id,
        Bookings.offer_id,
        Bookings.staff_id,
        Bookings.status,
    ).filter(
        Bookings.start_time >= format_db_datetime(day_start),
        Bookings.start_time <= format_db_datetime(day_end),
        Bookings.status.notin_(config.inactive_statuses),
    )

    if isinstance(scope, StoreWide):
        if not scope.service_ids:
            return []
        conditions = [Bookings.service_id.in_(scope.service_ids)]
        if scope.offer_ids:
            conditions.append(Bookings.offer_id.in_(scope.offer_ids))
        query = query.filter(or_(*conditions))
    elif isinstance(scope, PerStaff):
        query = query.filter(Bookings.staff_id == scope.staff_id)
    else:
        raise TypeError(f"Unknown booking scope: {scope!r}")

    rows = query.order_by(Bookings.start_time.asc()).all()

    return [
        BookingRecord(
            id=row.id,
            start=parse_db_datetime(row.start_time),
            end=parse_db_datetime(row.end_time),
            service_id=row.service_id,
            offer_id=row.offer_id,
            staff_id=row.staff_id,
            status=row.status,
        )
        for row in rows
    ]
