# backend/marketplace/services/slots/entities.py
"""
Resolution of the bookable entity behind a request.

An offer is a discount wrapper around exactly one service; slots, capacity
and booking rules always come from the underlying service and its store.
"""

from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...exceptions import (
    EntityUnavailable,
    InvalidEntityType,
    OfferNotFound,
    ServiceNotFound,
    StaffNotAssigned,
    StaffNotFound,
    StoreNotFound,
)
from ...models.generated import Offers, Services, Staff, Stores, t_staff_services

ENTITY_TYPES = ("offer", "service")


@dataclass(frozen=True)
class BookingTarget:
    entity_type: str
    service: Services
    store: Stores
    offer: Offers | None = None

    @property
    def entity_id(self) -> int:
        return self.offer.id if self.offer is not None else self.service.id


def resolve_target(db: Session, entity_id: int, entity_type: str) -> BookingTarget:
    """
    Load offer/service and store for a booking request.

    Raises:
        InvalidEntityType, OfferNotFound, ServiceNotFound, StoreNotFound
    """
    if entity_type not in ENTITY_TYPES:
        raise InvalidEntityType()

    offer = None
    if entity_type == "offer":
        offer = db.get(Offers, entity_id)
        if not offer:
            raise OfferNotFound()
        service = db.get(Services, offer.service_id)
        if not service:
            raise ServiceNotFound("Associated service not found")
    else:
        service = db.get(Services, entity_id)
        if not service:
            raise ServiceNotFound()

    store = db.get(Stores, service.store_id)
    if not store:
        raise StoreNotFound()

    return BookingTarget(entity_type=entity_type, service=service, store=store, offer=offer)


def ensure_bookable(target: BookingTarget, now: datetime) -> None:
    """
    Offer must be active and unexpired; service must be active with online
    booking enabled.
    """
    offer = target.offer
    if offer is not None:
        if offer.status != "active":
            raise EntityUnavailable("This offer is no longer active")
        if offer.expiration_date and _expires_before(offer.expiration_date, now):
            raise EntityUnavailable("This offer has expired")

    service = target.service
    if service.status != "active":
        raise EntityUnavailable("This service is not active")
    if not service.booking_enabled:
        raise EntityUnavailable("Online booking is not enabled for this service")


def resolve_staff(
    db: Session,
    target: BookingTarget,
    staff_id: int,
    branch_id: int | None = None,
) -> Staff:
    """
    Load an active staff member working at the target store (and branch)
    who is actively assigned to the target service.
    """
    staff = db.get(Staff, staff_id)
    if (
        not staff
        or staff.status != "active"
        or staff.store_id != target.store.id
        or (branch_id is not None and staff.branch_id not in (None, branch_id))
    ):
        raise StaffNotFound()

    assignment = db.execute(
        select(t_staff_services.c.staff_id).where(
            t_staff_services.c.staff_id == staff_id,
            t_staff_services.c.service_id == target.service.id,
            t_staff_services.c.is_active == 1,
        )
    ).first()
    if assignment is None:
        raise StaffNotAssigned(
            f'Staff member "{staff.name}" is not assigned to this service. '
            "Please select a different staff member or contact the merchant."
        )

    return staff


def list_service_staff(db: Session, service_id: int) -> list[Staff]:
    """Get active staff actively assigned to a service."""
    return (
        db.query(Staff)
        .join(t_staff_services, Staff.id == t_staff_services.c.staff_id)
        .filter(
            t_staff_services.c.service_id == service_id,
            t_staff_services.c.is_active == 1,
            Staff.status == "active",
        )
        .order_by(Staff.name)
        .all()
    )


def _expires_before(expiration_date, now: datetime) -> bool:
    if isinstance(expiration_date, datetime):
        return expiration_date < now
    if isinstance(expiration_date, date):
        return expiration_date < now.date()

    value = str(expiration_date).strip()
    try:
        if len(value) == 10:
            # Date only: the offer stays valid through that whole day
            return date.fromisoformat(value) < now.date()
        return datetime.fromisoformat(value.replace("Z", "")) < now
    except ValueError:
        return False
