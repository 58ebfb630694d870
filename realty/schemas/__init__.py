"""
Pydantic schemas for request/response validation.
"""

from .auth import (
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    AccessTokenResponse
)

from .user import (
    UserBase,
    UserCreate,
    UserResponse
)

from .property import (
    PropertyBase,
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertySearchParams
)

from .booking import (
    BookingCreate,
    BookingStatusUpdate,
    BookingResponse,
    BookingWithPropertyResponse,
    SlotAvailabilityResponse,
    DayAvailabilityResponse
)

from .favorite import (
    FavoriteToggleResponse,
    FavoriteStatusResponse
)

from .file import StoredFileResponse, ImageUploadResponse

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "RefreshTokenRequest",
    "AccessTokenResponse",
    "UserBase",
    "UserCreate",
    "UserResponse",
    "PropertyBase",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyListResponse",
    "PropertySearchParams",
    "BookingCreate",
    "BookingStatusUpdate",
    "BookingResponse",
    "BookingWithPropertyResponse",
    "SlotAvailabilityResponse",
    "DayAvailabilityResponse",
    "FavoriteToggleResponse",
    "FavoriteStatusResponse",
    "StoredFileResponse",
    "ImageUploadResponse",
]
