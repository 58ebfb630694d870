"""
Pydantic schemas for booking requests and responses.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
import datetime as dt
from realty.models.booking import BookingType, BookingStatus, TimeSlot
from realty.schemas.property import PropertyResponse
import uuid


class BookingCreate(BaseModel):
    """
    Booking request.

    Date and time slot are optional here so that an incomplete request is
    rejected by the booking workflow with its own message.
    """

    property_id: uuid.UUID = Field(..., description="Property to book")

    agent_id: Optional[uuid.UUID] = Field(
        None,
        description="Agent handling the booking; must be the property's agent when given"
    )

    booking_type: BookingType = Field(
        BookingType.VIEWING,
        description="Kind of booking",
        examples=["viewing"]
    )

    date: Optional[dt.date] = Field(None, description="Requested day", examples=["2030-05-14"])

    time_slot: Optional[TimeSlot] = Field(
        None,
        description="Requested hour-long window",
        examples=["10:00-11:00"]
    )

    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator('notes')
    @classmethod
    def strip_notes(cls, v):
        if v is None:
            return v
        return v.strip() or None


class BookingStatusUpdate(BaseModel):
    status: BookingStatus = Field(..., examples=["confirmed"])


class BookingResponse(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    user_id: uuid.UUID
    agent_id: uuid.UUID
    booking_type: BookingType
    status: BookingStatus
    date: dt.date
    time_slot: TimeSlot
    notes: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class BookingWithPropertyResponse(BookingResponse):
    """Booking with its property attached; property is None once deleted."""

    property: Optional[PropertyResponse] = None


class SlotAvailabilityResponse(BaseModel):
    property_id: uuid.UUID
    date: dt.date
    time_slot: TimeSlot
    available: bool


class DayAvailabilityResponse(BaseModel):
    """Free and taken slots of one property on one day."""

    property_id: uuid.UUID
    date: dt.date
    available_slots: List[TimeSlot]
    booked_slots: List[TimeSlot]
