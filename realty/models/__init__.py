"""
Database models for the Realty Booking API.
Includes User, Property, Booking and Favorite models.
"""

from realty.models.user import User, UserRole
from realty.models.property import Property, PropertyType, PropertyStatus, FACILITY_TYPES
from realty.models.booking import Booking, BookingType, BookingStatus, TimeSlot
from realty.models.favorite import Favorite

# Export all models for easy importing
__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyType",
    "PropertyStatus",
    "FACILITY_TYPES",
    "Booking",
    "BookingType",
    "BookingStatus",
    "TimeSlot",
    "Favorite",
]
