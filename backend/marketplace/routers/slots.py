# backend/marketplace/routers/slots.py
"""
Slots API endpoints.

GET /slots/day   - Slots of an offer/service for a day (optionally per staff)
GET /slots/check - Quick check of one slot (informational, not a reservation)
GET /slots/staff - Staff who can serve the offer/service
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import SlotCheckResponse, SlotsDayResponse, StaffRead
from ..services.slots import (
    get_available_slots,
    get_booking_config,
    is_slot_available,
    list_staff_for_entity,
)

router = APIRouter(prefix="/slots", tags=["slots"])

EntityType = Literal["offer", "service"]


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    entity_id: int,
    entity_type: EntityType = "offer",
    target_date: str = Query(..., alias="date"),
    staff_id: int | None = None,
    db: Session = Depends(get_db),
):
    """Get time slots with remaining capacity for a specific day."""
    result = get_available_slots(
        db=db,
        entity_id=entity_id,
        entity_type=entity_type,
        date_value=target_date,
        staff_id=staff_id,
        config=get_booking_config(),
    )

    if not result["success"]:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result)

    return result


@router.get("/check", response_model=SlotCheckResponse, response_model_exclude_none=True)
def check_slot(
    entity_id: int,
    time: str,
    entity_type: EntityType = "offer",
    target_date: str = Query(..., alias="date"),
    staff_id: int | None = None,
    db: Session = Depends(get_db),
):
    """Check whether one slot still has capacity."""
    return is_slot_available(
        db=db,
        entity_id=entity_id,
        entity_type=entity_type,
        date_value=target_date,
        time_value=time,
        staff_id=staff_id,
        config=get_booking_config(),
    )


@router.get("/staff", response_model=list[StaffRead])
def get_slots_staff(
    entity_id: int,
    entity_type: EntityType = "offer",
    db: Session = Depends(get_db),
):
    """Get active staff assigned to the offer's/service's underlying service."""
    return list_staff_for_entity(db, entity_id, entity_type)
