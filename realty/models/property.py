"""
Property model for real-estate listings.
Handles listing data with status, facilities, images and location.
"""

from sqlalchemy import String, Text, Integer, Numeric, JSON, Enum as SQLEnum, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from realty.database import Base
from decimal import Decimal
import enum
import uuid
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from realty.models.user import User


class PropertyType(str, enum.Enum):
    """Kind of dwelling being listed."""
    HOUSE = "House"
    TOWNHOUSE = "Townhouse"
    CONDO = "Condo"
    DUPLEX = "Duplex"
    STUDIO = "Studio"
    VILLA = "Villa"
    APARTMENT = "Apartment"
    OTHER = "Other"


class PropertyStatus(str, enum.Enum):
    """Market status of a listing."""
    AVAILABLE = "Available"
    RENTED = "Rented"
    SOLD = "Sold"
    UNDER_CONTRACT = "Under-Contract"

    @property
    def is_bookable(self) -> bool:
        """Whether new bookings may be requested against this status."""
        return BOOKABLE_STATUSES[self]


# Every status must appear here; tests assert the table is exhaustive.
BOOKABLE_STATUSES = {
    PropertyStatus.AVAILABLE: True,
    PropertyStatus.RENTED: False,
    PropertyStatus.SOLD: False,
    PropertyStatus.UNDER_CONTRACT: False,
}

FACILITY_TYPES = [
    "Wifi",
    "Gym",
    "Car Parking",
    "Swimming pool",
    "Laundry",
    "Pet Center",
    "Sports Center",
    "Cutlery",
]


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Property(Base):
    """
    Property model for managing real-estate listings.
    Owned by an agent; bookable while its status is Available.
    """

    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property listing name"
    )

    type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType, values_callable=_enum_values, name="property_type"),
        nullable=False,
        index=True,
        comment="Kind of dwelling"
    )

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus, values_callable=_enum_values, name="property_status"),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True,
        comment="Market status of the listing"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed property description"
    )

    address: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property street address"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Property price in local currency"
    )

    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    area: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Property area in square feet"
    )

    facilities: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Facility tags such as Wifi or Gym"
    )

    images: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Image view URLs"
    )

    latitude: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=8),
        nullable=True
    )

    longitude: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=11, scale=8),
        nullable=True
    )

    agent_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the agent who owns this property"
    )

    agent: Mapped["User"] = relationship(
        "User",
        back_populates="properties",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name[:30]}, status={self.status})>"

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        """(latitude, longitude) in degrees, or None when not geocoded."""
        if self.latitude is None or self.longitude is None:
            return None
        return float(self.latitude), float(self.longitude)

    @property
    def is_bookable(self) -> bool:
        return self.status.is_bookable

    def validate_price(self) -> None:
        if self.price is None or self.price < 0:
            raise ValueError("Property price cannot be negative")

        if self.price > Decimal('999999999.99'):
            raise ValueError("Property price exceeds maximum allowed value")

    def validate_rooms(self) -> None:
        if (self.bedrooms or 0) < 0 or (self.bathrooms or 0) < 0:
            raise ValueError("Number of rooms cannot be negative")

    def validate_coordinates(self) -> None:
        """
        Validate latitude and longitude coordinates.

        Raises:
            ValueError: If coordinates are invalid
        """
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Both latitude and longitude must be provided together")

        if self.latitude is not None and not (-90 <= self.latitude <= 90):
            raise ValueError("Latitude must be between -90 and 90 degrees")

        if self.longitude is not None and not (-180 <= self.longitude <= 180):
            raise ValueError("Longitude must be between -180 and 180 degrees")

    def validate_all(self) -> None:
        """
        Run all validation checks on the property.

        Raises:
            ValueError: If any validation fails
        """
        self.validate_price()
        self.validate_rooms()
        self.validate_coordinates()


# Composite index for the listing feed (type filter, newest first)
type_status_index = Index(
    'idx_properties_type_status',
    Property.type,
    Property.status,
    Property.created_at.desc()
)

# Composite index for agent's properties
agent_updated_index = Index(
    'idx_properties_agent_updated',
    Property.agent_id,
    Property.updated_at.desc()
)
