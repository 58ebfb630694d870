"""
Booking API endpoints: availability, submission and lifecycle.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional, List
from uuid import UUID
import datetime as dt

from realty.models.user import User
from realty.models.booking import BookingStatus, TimeSlot
from realty.services.booking import BookingService, BookingWithProperty
from realty.schemas.booking import (
    BookingCreate,
    BookingStatusUpdate,
    BookingResponse,
    BookingWithPropertyResponse,
    SlotAvailabilityResponse,
    DayAvailabilityResponse
)
from realty.schemas.property import PropertyResponse
from realty.utils.dependencies import (
    get_current_active_user,
    get_current_agent_user,
    get_booking_service
)


router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _with_property(item: BookingWithProperty) -> BookingWithPropertyResponse:
    booking = BookingResponse.model_validate(item.booking)
    return BookingWithPropertyResponse(
        **booking.model_dump(),
        property=PropertyResponse.model_validate(item.property) if item.property else None
    )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
    description="Book a time slot at a property. The booking starts as pending."
)
async def create_booking(
    booking_data: BookingCreate,
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingResponse:
    """
    Submit a booking request.

    Raises:
        BookingIncompleteError: If date or time slot is missing
        BookingDateInPastError: If the date is in the past
        TimeSlotUnavailableError: If the slot is already taken
        PropertyNotBookableError: If the property is Rented, Sold or Under-Contract
    """
    booking = await booking_service.create_booking(booking_data, current_user)
    return BookingResponse.model_validate(booking)


@router.get(
    "",
    response_model=List[BookingWithPropertyResponse],
    summary="My bookings"
)
async def list_my_bookings(
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> List[BookingWithPropertyResponse]:
    bookings = await booking_service.get_user_bookings(current_user, booking_status)
    return [_with_property(item) for item in bookings]


@router.get(
    "/agent",
    response_model=List[BookingWithPropertyResponse],
    summary="Bookings assigned to me",
    description="Bookings handled by the current agent"
)
async def list_agent_bookings(
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_agent_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> List[BookingWithPropertyResponse]:
    bookings = await booking_service.get_agent_bookings(current_user, booking_status)
    return [_with_property(item) for item in bookings]


@router.get(
    "/availability",
    response_model=SlotAvailabilityResponse,
    summary="Check one slot"
)
async def check_slot_availability(
    property_id: UUID = Query(...),
    date: dt.date = Query(...),
    time_slot: TimeSlot = Query(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> SlotAvailabilityResponse:
    available = await booking_service.check_availability(property_id, date, time_slot)
    return SlotAvailabilityResponse(
        property_id=property_id,
        date=date,
        time_slot=time_slot,
        available=available
    )


@router.get(
    "/availability/{property_id}",
    response_model=DayAvailabilityResponse,
    summary="Slots of a day",
    description="Free and booked time slots of a property on one day"
)
async def get_day_availability(
    property_id: UUID = Path(...),
    date: dt.date = Query(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> DayAvailabilityResponse:
    available_slots, booked_slots = await booking_service.get_day_availability(property_id, date)
    return DayAvailabilityResponse(
        property_id=property_id,
        date=date,
        available_slots=available_slots,
        booked_slots=booked_slots
    )


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get booking"
)
async def get_booking(
    booking_id: UUID = Path(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingResponse:
    booking = await booking_service.get_booking(booking_id, current_user)
    return BookingResponse.model_validate(booking)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel booking",
    description="Cancel a pending booking"
)
async def cancel_booking(
    booking_id: UUID = Path(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingResponse:
    booking = await booking_service.cancel_booking(booking_id, current_user)
    return BookingResponse.model_validate(booking)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change booking status",
    description="Confirm, complete or cancel a booking. Only its agent or an admin may do this."
)
async def update_booking_status(
    status_data: BookingStatusUpdate,
    booking_id: UUID = Path(...),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingResponse:
    booking = await booking_service.update_booking_status(booking_id, status_data.status, current_user)
    return BookingResponse.model_validate(booking)
