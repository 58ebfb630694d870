"""
Booking model for viewing, rental and purchase requests.
Holds the booking lifecycle and the fixed set of bookable time slots.
"""

from sqlalchemy import Text, Date, Enum as SQLEnum, Index, ForeignKey, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column
from realty.database import Base
import datetime as dt
import enum
import uuid
from typing import Optional


class BookingType(str, enum.Enum):
    VIEWING = "viewing"
    RENTAL = "rental"
    PURCHASE = "purchase"


class BookingStatus(str, enum.Enum):
    """Booking lifecycle state."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return not BOOKING_TRANSITIONS[self]

    def can_transition_to(self, new_status: "BookingStatus") -> bool:
        return new_status in BOOKING_TRANSITIONS[self]


# Every status must appear here; tests assert the table is exhaustive.
BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


class TimeSlot(str, enum.Enum):
    """Hour-long booking windows within a single day."""
    SLOT_09_10 = "09:00-10:00"
    SLOT_10_11 = "10:00-11:00"
    SLOT_11_12 = "11:00-12:00"
    SLOT_13_14 = "13:00-14:00"
    SLOT_14_15 = "14:00-15:00"
    SLOT_15_16 = "15:00-16:00"
    SLOT_16_17 = "16:00-17:00"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Booking(Base):
    """
    Booking request made by a user against a property.
    At most one non-cancelled booking may hold a (property, date, time slot).
    """

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="User who requested the booking"
    )

    agent_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Agent handling the booking"
    )

    booking_type: Mapped[BookingType] = mapped_column(
        SQLEnum(BookingType, values_callable=_enum_values, name="booking_type"),
        nullable=False,
        default=BookingType.VIEWING
    )

    status: Mapped[BookingStatus] = mapped_column(
        SQLEnum(BookingStatus, values_callable=_enum_values, name="booking_status"),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True
    )

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    time_slot: Mapped[TimeSlot] = mapped_column(
        SQLEnum(TimeSlot, values_callable=_enum_values, name="time_slot"),
        nullable=False
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, "
            f"date={self.date}, time_slot={self.time_slot}, status={self.status})>"
        )


# Store-level guard for the check-then-create race: only one live booking per slot
active_slot_unique_index = Index(
    'uq_bookings_active_slot',
    Booking.property_id,
    Booking.date,
    Booking.time_slot,
    unique=True,
    postgresql_where=text("status <> 'cancelled'"),
    sqlite_where=text("status <> 'cancelled'")
)

user_date_index = Index(
    'idx_bookings_user_date',
    Booking.user_id,
    Booking.date.desc()
)
