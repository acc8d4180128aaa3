# backend/marketplace/routers/bookings.py
# PATCH = 405, DELETE = 405: status changes go through /cancel

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.bookings import (
    BookingCancel,
    BookingCreate,
    BookingCreated,
    BookingRead,
)
from ..services.events import EventEmitter, get_event_emitter
from ..services.reservations import cancel_booking, get_booking, reserve_slot
from ..services.slots import get_booking_config

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    events: EventEmitter = Depends(get_event_emitter),
):
    result = reserve_slot(
        db=db,
        entity_id=data.entity_id,
        entity_type=data.entity_type,
        date_value=data.date,
        time_value=data.time,
        user_id=data.user_id,
        staff_id=data.staff_id,
        branch_id=data.branch_id,
        notes=data.notes,
        config=get_booking_config(),
        events=events,
    )

    kind = "Offer" if data.entity_type == "offer" else "Service"
    return BookingCreated(
        booking=BookingRead.model_validate(result.booking),
        availability={
            "remainingSlots": result.remaining_slots,
            "totalSlots": result.total_slots,
        },
        message=(
            f"{kind} booking created successfully. "
            f"{result.remaining_slots} slots remaining for this time."
        ),
    )


@router.get("/{id}", response_model=BookingRead)
def read_booking(id: int, db: Session = Depends(get_db)):
    return get_booking(db, id)


@router.post("/{id}/cancel", response_model=BookingRead)
def cancel(
    id: int,
    data: BookingCancel | None = None,
    db: Session = Depends(get_db),
    events: EventEmitter = Depends(get_event_emitter),
):
    return cancel_booking(
        db,
        id,
        reason=data.reason if data else None,
        config=get_booking_config(),
        events=events,
    )


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
