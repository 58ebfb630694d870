"""
Tests for BookingService: availability, the submission workflow and the
booking lifecycle.
"""

import uuid
import datetime as dt
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError

from realty.models.booking import BookingStatus, BookingType, TimeSlot
from realty.models.property import PropertyStatus
from realty.schemas.booking import BookingCreate
from realty.services.booking import BookingService
from realty.utils.exceptions import (
    AvailabilityCheckError,
    BookingDateInPastError,
    BookingFailedError,
    BookingIncompleteError,
    BookingNotFoundError,
    InsufficientPermissionsError,
    InvalidBookingTransitionError,
    PropertyNotBookableError,
    PropertyNotFoundError,
    TimeSlotUnavailableError,
    ValidationError
)
from tests.conftest import TODAY, BookingFactory, PropertyFactory

TOMORROW = TODAY + dt.timedelta(days=1)


def booking_request(property_id, date=TOMORROW, time_slot=TimeSlot.SLOT_10_11, **extra) -> BookingCreate:
    return BookingCreate(property_id=property_id, date=date, time_slot=time_slot, **extra)


class TestAvailability:

    @pytest.mark.asyncio
    async def test_free_slot_is_available(self, booking_service: BookingService, test_property):
        assert await booking_service.check_availability(test_property.id, TOMORROW, TimeSlot.SLOT_09_10)

    @pytest.mark.asyncio
    async def test_taken_slot_is_unavailable(
        self, booking_service: BookingService, booking_repository, test_property, test_user
    ):
        await BookingFactory.create_booking(booking_repository, test_property, test_user.id, date=TOMORROW)

        assert not await booking_service.check_availability(test_property.id, TOMORROW, TimeSlot.SLOT_10_11)
        assert await booking_service.check_availability(test_property.id, TOMORROW, TimeSlot.SLOT_11_12)
        assert await booking_service.check_availability(
            test_property.id, TOMORROW + dt.timedelta(days=1), TimeSlot.SLOT_10_11
        )

    @pytest.mark.asyncio
    async def test_cancelled_booking_frees_the_slot(
        self, booking_service: BookingService, booking_repository, test_property, test_user
    ):
        await BookingFactory.create_booking(booking_repository, test_property, test_user.id, date=TOMORROW,
                                            status=BookingStatus.CANCELLED)

        assert await booking_service.check_availability(test_property.id, TOMORROW, TimeSlot.SLOT_10_11)

    @pytest.mark.asyncio
    async def test_query_failure_raises(self, booking_service: BookingService):
        booking_service.booking_repo.count_active_for_slot = AsyncMock(side_effect=RuntimeError("db down"))

        with pytest.raises(AvailabilityCheckError):
            await booking_service.check_availability(uuid.uuid4(), TOMORROW, TimeSlot.SLOT_10_11)

    @pytest.mark.asyncio
    async def test_day_availability(
        self, booking_service: BookingService, booking_repository, test_property, test_user
    ):
        await BookingFactory.create_booking(booking_repository, test_property, test_user.id, date=TOMORROW,
                                            time_slot=TimeSlot.SLOT_15_16)
        await BookingFactory.create_booking(booking_repository, test_property, test_user.id, date=TOMORROW,
                                            time_slot=TimeSlot.SLOT_09_10)

        available, booked = await booking_service.get_day_availability(test_property.id, TOMORROW)

        assert booked == [TimeSlot.SLOT_09_10, TimeSlot.SLOT_15_16]
        assert len(available) == len(TimeSlot) - 2
        assert TimeSlot.SLOT_09_10 not in available


class TestCreateBooking:

    @pytest.mark.asyncio
    async def test_pending_booking_created(self, booking_service: BookingService, test_property, test_user):
        booking = await booking_service.create_booking(
            booking_request(test_property.id, notes="  Is parking included?  "), test_user
        )

        assert booking.status == BookingStatus.PENDING
        assert booking.user_id == test_user.id
        assert booking.agent_id == test_property.agent_id
        assert booking.booking_type == BookingType.VIEWING
        assert booking.notes == "Is parking included?"

    @pytest.mark.asyncio
    async def test_booking_today_is_allowed(self, booking_service: BookingService, test_property, test_user):
        booking = await booking_service.create_booking(booking_request(test_property.id, date=TODAY), test_user)
        assert booking.date == TODAY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["date", "time_slot"])
    async def test_incomplete_request(self, booking_service: BookingService, test_property, test_user, missing):
        request = booking_request(test_property.id).model_copy(update={missing: None})

        with pytest.raises(BookingIncompleteError) as exc_info:
            await booking_service.create_booking(request, test_user)
        assert exc_info.value.detail == "Please select both date and time"

    @pytest.mark.asyncio
    async def test_past_date_rejected_before_checking_availability(
        self, booking_service: BookingService, test_property, test_user
    ):
        booking_service.booking_repo.count_active_for_slot = AsyncMock(return_value=0)

        with pytest.raises(BookingDateInPastError) as exc_info:
            await booking_service.create_booking(
                booking_request(test_property.id, date=TODAY - dt.timedelta(days=1)), test_user
            )

        assert exc_info.value.detail == "Please select a future date"
        booking_service.booking_repo.count_active_for_slot.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_taken_slot_rejected(
        self, booking_service: BookingService, test_property, test_user, other_user
    ):
        await booking_service.create_booking(booking_request(test_property.id), test_user)

        with pytest.raises(TimeSlotUnavailableError) as exc_info:
            await booking_service.create_booking(booking_request(test_property.id), other_user)
        assert exc_info.value.detail == "This time slot is no longer available"

        other_slot = await booking_service.create_booking(
            booking_request(test_property.id, time_slot=TimeSlot.SLOT_13_14), other_user
        )
        assert other_slot.status == BookingStatus.PENDING

    @pytest.mark.asyncio
    @pytest.mark.parametrize("property_status", [
        PropertyStatus.RENTED,
        PropertyStatus.SOLD,
        PropertyStatus.UNDER_CONTRACT,
    ])
    async def test_unavailable_property_rejected(
        self, booking_service: BookingService, property_repository, test_agent, test_user, property_status
    ):
        property_obj = await PropertyFactory.create_property(property_repository, test_agent.id,
                                                             status=property_status)

        with pytest.raises(PropertyNotBookableError) as exc_info:
            await booking_service.create_booking(booking_request(property_obj.id), test_user)
        assert property_status.value in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_unknown_property(self, booking_service: BookingService, test_user):
        with pytest.raises(PropertyNotFoundError):
            await booking_service.create_booking(booking_request(uuid.uuid4()), test_user)

    @pytest.mark.asyncio
    async def test_availability_failure_fails_the_booking(
        self, booking_service: BookingService, test_property, test_user
    ):
        booking_service.booking_repo.count_active_for_slot = AsyncMock(side_effect=RuntimeError("db down"))

        with pytest.raises(BookingFailedError):
            await booking_service.create_booking(booking_request(test_property.id), test_user)

    @pytest.mark.asyncio
    async def test_concurrent_submission_loses_race(
        self, booking_service: BookingService, booking_repository, test_property, test_user, other_user
    ):
        property_id = test_property.id
        await BookingFactory.create_booking(booking_repository, test_property, test_user.id, date=TOMORROW)
        request = booking_request(property_id)

        # The other request checked availability before this booking was written
        real_check = booking_service.check_availability
        booking_service.check_availability = AsyncMock(side_effect=[True, await real_check(
            property_id, TOMORROW, TimeSlot.SLOT_10_11
        )])

        with pytest.raises(TimeSlotUnavailableError):
            await booking_service.create_booking(request, other_user)

        assert booking_service.check_availability.await_count == 2
        assert await booking_repository.count_active_for_slot(property_id, TOMORROW, TimeSlot.SLOT_10_11) == 1

    @pytest.mark.asyncio
    async def test_other_integrity_failure_fails_the_booking(
        self, booking_service: BookingService, test_property, test_user
    ):
        request = booking_request(test_property.id)
        booking_service.booking_repo.create = AsyncMock(
            side_effect=IntegrityError("INSERT INTO bookings", {}, Exception("FOREIGN KEY constraint failed"))
        )

        with pytest.raises(BookingFailedError):
            await booking_service.create_booking(request, test_user)

    @pytest.mark.asyncio
    async def test_property_agent_is_assigned(
        self, booking_service: BookingService, test_property, test_user, test_agent
    ):
        booking = await booking_service.create_booking(
            booking_request(test_property.id, agent_id=test_agent.id, booking_type=BookingType.RENTAL),
            test_user
        )
        assert booking.agent_id == test_agent.id
        assert booking.booking_type == BookingType.RENTAL

    @pytest.mark.asyncio
    @pytest.mark.parametrize("self_appointed", [True, False])
    async def test_foreign_agent_rejected(
        self, booking_service: BookingService, booking_repository, test_property, test_user, other_agent,
        self_appointed
    ):
        property_id = test_property.id
        agent_id = test_user.id if self_appointed else other_agent.id

        with pytest.raises(ValidationError) as exc_info:
            await booking_service.create_booking(booking_request(property_id, agent_id=agent_id), test_user)

        assert exc_info.value.error_code == "BOOKING_AGENT_MISMATCH"
        assert await booking_repository.count_active_for_slot(property_id, TOMORROW, TimeSlot.SLOT_10_11) == 0


class TestBookingLifecycle:

    @pytest.fixture
    async def pending_booking(self, booking_service: BookingService, test_property, test_user):
        return await booking_service.create_booking(booking_request(test_property.id), test_user)

    @pytest.mark.asyncio
    async def test_agent_confirms_then_completes(self, booking_service: BookingService, pending_booking, test_agent):
        confirmed = await booking_service.update_booking_status(pending_booking.id, BookingStatus.CONFIRMED, test_agent)
        assert confirmed.status == BookingStatus.CONFIRMED

        completed = await booking_service.update_booking_status(pending_booking.id, BookingStatus.COMPLETED, test_agent)
        assert completed.status == BookingStatus.COMPLETED

        with pytest.raises(InvalidBookingTransitionError):
            await booking_service.update_booking_status(pending_booking.id, BookingStatus.CANCELLED, test_agent)

    @pytest.mark.asyncio
    async def test_pending_cannot_jump_to_completed(
        self, booking_service: BookingService, pending_booking, test_agent
    ):
        with pytest.raises(InvalidBookingTransitionError):
            await booking_service.update_booking_status(pending_booking.id, BookingStatus.COMPLETED, test_agent)

    @pytest.mark.asyncio
    async def test_requester_cannot_confirm(self, booking_service: BookingService, pending_booking, test_user):
        with pytest.raises(InsufficientPermissionsError):
            await booking_service.update_booking_status(pending_booking.id, BookingStatus.CONFIRMED, test_user)

    @pytest.mark.asyncio
    async def test_admin_can_confirm(self, booking_service: BookingService, pending_booking, test_admin):
        confirmed = await booking_service.update_booking_status(pending_booking.id, BookingStatus.CONFIRMED, test_admin)
        assert confirmed.status == BookingStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_requester_cancels_pending(
        self, booking_service: BookingService, pending_booking, test_user, test_property
    ):
        cancelled = await booking_service.cancel_booking(pending_booking.id, test_user)
        assert cancelled.status == BookingStatus.CANCELLED

        assert await booking_service.check_availability(test_property.id, TOMORROW, TimeSlot.SLOT_10_11)

    @pytest.mark.asyncio
    async def test_confirmed_booking_cannot_be_cancelled_by_requester(
        self, booking_service: BookingService, pending_booking, test_user, test_agent
    ):
        await booking_service.update_booking_status(pending_booking.id, BookingStatus.CONFIRMED, test_agent)

        with pytest.raises(InvalidBookingTransitionError):
            await booking_service.cancel_booking(pending_booking.id, test_user)

    @pytest.mark.asyncio
    async def test_outsider_cannot_view_or_cancel(self, booking_service: BookingService, pending_booking, other_user):
        with pytest.raises(InsufficientPermissionsError):
            await booking_service.get_booking(pending_booking.id, other_user)
        with pytest.raises(InsufficientPermissionsError):
            await booking_service.cancel_booking(pending_booking.id, other_user)

    @pytest.mark.asyncio
    async def test_unknown_booking(self, booking_service: BookingService, test_user):
        with pytest.raises(BookingNotFoundError):
            await booking_service.get_booking(uuid.uuid4(), test_user)

    @pytest.mark.asyncio
    async def test_listings_attach_properties(
        self, booking_service: BookingService, pending_booking, test_user, test_agent, test_property
    ):
        mine = await booking_service.get_user_bookings(test_user)
        assert [item.booking.id for item in mine] == [pending_booking.id]
        assert mine[0].property.id == test_property.id

        assigned = await booking_service.get_agent_bookings(test_agent, BookingStatus.PENDING)
        assert [item.booking.id for item in assigned] == [pending_booking.id]

        assert await booking_service.get_agent_bookings(test_agent, BookingStatus.CONFIRMED) == []

    @pytest.mark.asyncio
    async def test_regular_user_has_no_agent_bookings(self, booking_service: BookingService, test_user):
        with pytest.raises(InsufficientPermissionsError):
            await booking_service.get_agent_bookings(test_user)
