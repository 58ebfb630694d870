"""
Booking repository: slot occupancy queries and per-user/per-agent listings.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc
from realty.repositories.base import BaseRepository
from realty.models.booking import Booking, BookingStatus, TimeSlot
from typing import Optional, List, Set
import datetime as dt
import uuid
import logging

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for property bookings."""

    def __init__(self, db: AsyncSession):
        super().__init__(Booking, db)

    async def count_active_for_slot(
        self,
        property_id: uuid.UUID,
        date: dt.date,
        time_slot: TimeSlot
    ) -> int:
        """Count non-cancelled bookings holding a (property, date, slot)."""
        try:
            query = select(func.count(Booking.id)).where(
                Booking.property_id == property_id,
                Booking.date == date,
                Booking.time_slot == time_slot,
                Booking.status != BookingStatus.CANCELLED,
            )
            result = await self.db.execute(query)
            return result.scalar() or 0
        except Exception as e:
            logger.error(
                f"Failed to count bookings for property {property_id} on {date} {time_slot}: {e}"
            )
            raise

    async def get_booked_slots(self, property_id: uuid.UUID, date: dt.date) -> Set[TimeSlot]:
        """Slots on ``date`` already held by a non-cancelled booking."""
        try:
            query = select(Booking.time_slot).where(
                Booking.property_id == property_id,
                Booking.date == date,
                Booking.status != BookingStatus.CANCELLED,
            )
            result = await self.db.execute(query)
            return set(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get booked slots for property {property_id} on {date}: {e}")
            raise

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        return await self._list_by(Booking.user_id, user_id, status)

    async def list_for_agent(
        self,
        agent_id: uuid.UUID,
        status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        return await self._list_by(Booking.agent_id, agent_id, status)

    async def _list_by(self, column, value: uuid.UUID, status: Optional[BookingStatus]) -> List[Booking]:
        try:
            query = select(Booking).where(column == value)
            if status is not None:
                query = query.where(Booking.status == status)
            query = query.order_by(desc(Booking.date), Booking.time_slot)

            result = await self.db.execute(query)
            bookings = list(result.scalars().all())
            logger.debug(f"Retrieved {len(bookings)} bookings for {column.key}={value}")
            return bookings
        except Exception as e:
            logger.error(f"Failed to list bookings for {column.key}={value}: {e}")
            raise
