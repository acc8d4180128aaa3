# backend/marketplace/schemas/bookings.py

import re
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator


class BookingCreate(BaseModel):
    entity_id: int
    entity_type: Literal["offer", "service"] = "service"
    date: str = Field(description="Date in YYYY-MM-DD format")
    time: str = Field(description='Time as "10:00 AM" or "10:00"')
    user_id: int
    staff_id: Optional[int] = None
    branch_id: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        """Validate date format."""
        try:
            datetime.strptime(v, "%Y-%m-%d")
        except ValueError:
            raise ValueError("Date must be in YYYY-MM-DD format")
        return v

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate time format."""
        if not re.match(r"^\d{1,2}:\d{2}(\s*[AaPp][Mm])?$", v.strip()):
            raise ValueError('Time must be in "h:mm AM" or "HH:MM" format')
        return v.strip()


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingRead(BaseModel):
    id: int

    user_id: int
    store_id: int
    branch_id: Optional[int] = None
    service_id: int
    offer_id: Optional[int] = None
    staff_id: Optional[int] = None
    booking_type: str

    start_time: datetime
    end_time: datetime

    status: str
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AvailabilityAfterBooking(BaseModel):
    remainingSlots: int
    totalSlots: int


class BookingCreated(BaseModel):
    success: bool = True
    booking: BookingRead
    availability: AvailabilityAfterBooking
    message: str
