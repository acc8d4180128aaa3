# backend/marketplace/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field


class SlotDetail(BaseModel):
    """One grid slot with its remaining capacity."""
    time: str = Field(description='Display time, e.g. "9:00 AM"')
    startTime: str = Field(description='"HH:MM"')
    endTime: str
    available: int
    total: int
    booked: int
    isAvailable: bool


class StoreInfo(BaseModel):
    name: str
    location: Optional[str] = None
    openingTime: Optional[str] = None
    closingTime: Optional[str] = None
    workingDays: list[str] = []


class BookingRules(BaseModel):
    maxConcurrentBookings: int
    serviceDuration: int
    bufferTime: int
    minAdvanceBooking: int = Field(description="Minutes")
    maxAdvanceBooking: int = Field(description="Minutes")


class SlotsDayResponse(BaseModel):
    """Available slots for an offer/service on a day."""
    success: bool = True
    date: str
    entityType: Literal["offer", "service"]
    entityId: int
    serviceId: int
    staffId: Optional[int] = None
    availableSlots: list[str]
    detailedSlots: list[SlotDetail]
    storeInfo: StoreInfo
    bookingRules: BookingRules


class SlotCheckResponse(BaseModel):
    """Unlocked availability check of a single slot."""
    available: bool
    remainingSlots: Optional[int] = None
    totalSlots: Optional[int] = None
    reason: Optional[str] = None


class StaffRead(BaseModel):
    id: int
    name: str
    store_id: int
    branch_id: Optional[int] = None

    model_config = {"from_attributes": True}
