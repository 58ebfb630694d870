"""
Booking service: slot availability, the booking submission workflow and
the booking lifecycle.

The workflow checks availability before it writes. The partial unique index
on bookings (property, date, slot) for non-cancelled rows is what actually
keeps two concurrent submissions from both succeeding; the loser's insert
fails and is reported as an unavailable slot.
"""

from typing import Callable, List, NamedTuple, Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from realty.repositories.booking import BookingRepository
from realty.repositories.property import PropertyRepository
from realty.models.booking import Booking, BookingStatus, TimeSlot
from realty.models.property import Property
from realty.models.user import User, UserRole
from realty.schemas.booking import BookingCreate
from realty.utils.exceptions import (
    AvailabilityCheckError,
    BookingDateInPastError,
    BookingFailedError,
    BookingIncompleteError,
    BookingNotFoundError,
    InsufficientPermissionsError,
    InvalidBookingTransitionError,
    OperationFailedError,
    PropertyNotBookableError,
    PropertyNotFoundError,
    TimeSlotUnavailableError,
    ValidationError
)
import datetime as dt
import uuid
import logging

logger = logging.getLogger(__name__)


class BookingWithProperty(NamedTuple):
    booking: Booking
    property: Optional[Property]


def _today() -> dt.date:
    return dt.date.today()


class BookingService:
    """
    Booking workflows for renters/buyers and agents.

    ``clock`` returns the current calendar day; tests pass a fixed one.
    """

    def __init__(self, db_session: AsyncSession, clock: Callable[[], dt.date] = _today):
        self.db = db_session
        self.booking_repo = BookingRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.clock = clock

    async def check_availability(
        self,
        property_id: uuid.UUID,
        booking_date: dt.date,
        time_slot: TimeSlot
    ) -> bool:
        """
        True iff no non-cancelled booking holds the (property, date, slot).

        Raises:
            AvailabilityCheckError: If the bookings could not be queried
        """
        try:
            active_count = await self.booking_repo.count_active_for_slot(property_id, booking_date, time_slot)
        except Exception as e:
            logger.error(f"Availability check failed for {property_id} on {booking_date} {time_slot.value}: {e}")
            raise AvailabilityCheckError()

        return active_count == 0

    async def get_day_availability(
        self,
        property_id: uuid.UUID,
        booking_date: dt.date
    ) -> Tuple[List[TimeSlot], List[TimeSlot]]:
        """
        Split the day's slots into (available, booked), in slot order.

        Raises:
            AvailabilityCheckError: If the bookings could not be queried
        """
        try:
            booked = await self.booking_repo.get_booked_slots(property_id, booking_date)
        except Exception as e:
            logger.error(f"Availability check failed for {property_id} on {booking_date}: {e}")
            raise AvailabilityCheckError()

        available_slots = [slot for slot in TimeSlot if slot not in booked]
        booked_slots = [slot for slot in TimeSlot if slot in booked]
        return available_slots, booked_slots

    async def create_booking(self, booking_data: BookingCreate, current_user: User) -> Booking:
        """
        Submit a booking request on behalf of ``current_user``.

        Raises:
            BookingIncompleteError: If date or time slot is missing
            BookingDateInPastError: If the date is before today
            TimeSlotUnavailableError: If a live booking already holds the slot
            PropertyNotFoundError: If the property does not exist
            PropertyNotBookableError: If the property is Rented, Sold or Under-Contract
            ValidationError: If the request names an agent other than the property's
            BookingFailedError: If the store failed while checking or writing
        """
        if booking_data.date is None or booking_data.time_slot is None:
            raise BookingIncompleteError()

        if booking_data.date < self.clock():
            raise BookingDateInPastError()

        property_id = booking_data.property_id
        slot_label = f"{property_id} on {booking_data.date} {booking_data.time_slot.value}"

        try:
            available = await self.check_availability(property_id, booking_data.date, booking_data.time_slot)
        except AvailabilityCheckError:
            raise BookingFailedError()

        if not available:
            logger.warning(f"Booking rejected, slot taken: {slot_label}")
            raise TimeSlotUnavailableError()

        try:
            property_obj = await self.property_repo.get_by_id(property_id)
        except Exception as e:
            logger.error(f"Failed to load property {property_id} for booking: {e}")
            raise BookingFailedError()

        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))

        if not property_obj.is_bookable:
            logger.warning(f"Booking rejected, property {property_id} is {property_obj.status.value}")
            raise PropertyNotBookableError(property_obj.status.value)

        if booking_data.agent_id is not None and booking_data.agent_id != property_obj.agent_id:
            logger.warning(f"Booking rejected, agent {booking_data.agent_id} does not handle property {property_id}")
            raise ValidationError(
                "The selected agent does not handle this property",
                error_code="BOOKING_AGENT_MISMATCH"
            )

        create_data = {
            "property_id": property_id,
            "user_id": current_user.id,
            "agent_id": property_obj.agent_id,
            "booking_type": booking_data.booking_type,
            "status": BookingStatus.PENDING,
            "date": booking_data.date,
            "time_slot": booking_data.time_slot,
            "notes": booking_data.notes,
        }

        try:
            booking = await self.booking_repo.create(create_data)
        except IntegrityError as e:
            # Only a live booking now holding the slot means the race was lost
            try:
                available = await self.check_availability(property_id, booking_data.date, booking_data.time_slot)
            except AvailabilityCheckError:
                raise BookingFailedError()
            if not available:
                logger.warning(f"Booking lost the race for {slot_label}: {e}")
                raise TimeSlotUnavailableError()
            logger.error(f"Failed to create booking for {slot_label}: {e}")
            raise BookingFailedError()
        except Exception as e:
            logger.error(f"Failed to create booking for {slot_label}: {e}")
            raise BookingFailedError()

        logger.info(f"Booking {booking.id} created by {current_user.email} for {slot_label}")
        return booking

    async def get_booking(self, booking_id: uuid.UUID, current_user: User) -> Booking:
        """
        Get a booking visible to the requester, its agent or an admin.

        Raises:
            BookingNotFoundError: If the booking does not exist
            InsufficientPermissionsError: If the user is not a party to it
        """
        booking = await self._load_booking(booking_id)

        if not self._is_party(booking, current_user):
            raise InsufficientPermissionsError("view this booking")

        return booking

    async def cancel_booking(self, booking_id: uuid.UUID, current_user: User) -> Booking:
        """
        Cancel a pending booking. Either party (or an admin) may cancel.

        Raises:
            InvalidBookingTransitionError: If the booking is not pending
        """
        booking = await self.get_booking(booking_id, current_user)

        if booking.status != BookingStatus.PENDING:
            raise InvalidBookingTransitionError(booking.status.value, BookingStatus.CANCELLED.value)

        cancelled = await self._set_status(booking, BookingStatus.CANCELLED)
        logger.info(f"Booking {booking_id} cancelled by {current_user.email}")
        return cancelled

    async def update_booking_status(
        self,
        booking_id: uuid.UUID,
        new_status: BookingStatus,
        current_user: User
    ) -> Booking:
        """
        Move a booking along its lifecycle. Only its agent or an admin may do this.

        Raises:
            InsufficientPermissionsError: If the user is neither the agent nor an admin
            InvalidBookingTransitionError: If the transition is not allowed
        """
        booking = await self._load_booking(booking_id)

        if not (current_user.is_admin or booking.agent_id == current_user.id):
            raise InsufficientPermissionsError("update this booking")

        if not booking.status.can_transition_to(new_status):
            raise InvalidBookingTransitionError(booking.status.value, new_status.value)

        updated = await self._set_status(booking, new_status)
        logger.info(f"Booking {booking_id} moved to {new_status.value} by {current_user.email}")
        return updated

    async def get_user_bookings(
        self,
        current_user: User,
        status: Optional[BookingStatus] = None
    ) -> List[BookingWithProperty]:
        """
        The user's bookings, newest date first, each paired with its property.
        The property is None when it has since been deleted.
        """
        try:
            bookings = await self.booking_repo.list_for_user(current_user.id, status)
            return await self._attach_properties(bookings)
        except Exception as e:
            logger.error(f"Failed to load bookings of user {current_user.id}: {e}")
            raise OperationFailedError("load your bookings")

    async def get_agent_bookings(
        self,
        current_user: User,
        status: Optional[BookingStatus] = None
    ) -> List[BookingWithProperty]:
        """Bookings assigned to the current agent."""
        if current_user.role not in (UserRole.AGENT, UserRole.ADMIN):
            raise InsufficientPermissionsError("view agent bookings")

        try:
            bookings = await self.booking_repo.list_for_agent(current_user.id, status)
            return await self._attach_properties(bookings)
        except Exception as e:
            logger.error(f"Failed to load bookings of agent {current_user.id}: {e}")
            raise OperationFailedError("load agent bookings")

    async def _attach_properties(self, bookings: List[Booking]) -> List[BookingWithProperty]:
        properties = await self.property_repo.get_by_ids({booking.property_id for booking in bookings})
        return [BookingWithProperty(booking, properties.get(booking.property_id)) for booking in bookings]

    async def _load_booking(self, booking_id: uuid.UUID) -> Booking:
        try:
            booking = await self.booking_repo.get_by_id(booking_id)
        except Exception as e:
            logger.error(f"Failed to load booking {booking_id}: {e}")
            raise OperationFailedError("load booking")

        if booking is None:
            raise BookingNotFoundError(str(booking_id))
        return booking

    async def _set_status(self, booking: Booking, new_status: BookingStatus) -> Booking:
        try:
            updated = await self.booking_repo.update(booking.id, {"status": new_status})
        except Exception as e:
            logger.error(f"Failed to set booking {booking.id} to {new_status.value}: {e}")
            raise OperationFailedError("update booking")

        if updated is None:
            raise BookingNotFoundError(str(booking.id))
        return updated

    @staticmethod
    def _is_party(booking: Booking, user: User) -> bool:
        return user.is_admin or user.id in (booking.user_id, booking.agent_id)
