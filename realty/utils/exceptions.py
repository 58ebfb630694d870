"""
Custom exception classes for the Realty Booking API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

    def __str__(self) -> str:
        return self.detail


class ValidationError(APIException):
    """Validation error exception."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, str]]] = None,
        error_code: str = "VALIDATION_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code
        )
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class ConflictError(APIException):
    """Resource conflict exception."""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )


class BadRequestError(APIException):
    """Bad request exception."""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )


class ServiceUnavailableError(APIException):
    """Service unavailable exception."""

    def __init__(self, detail: str = "Service temporarily unavailable", error_code: str = "SERVICE_UNAVAILABLE"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code=error_code
        )


# Authentication specific exceptions
class InvalidCredentialsError(UnauthorizedError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    """JWT token expired exception."""

    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    """Invalid JWT token exception."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class InactiveUserError(ForbiddenError):
    """Inactive user account exception."""

    def __init__(self, detail: str = "User account is inactive"):
        super().__init__(detail)


class InsufficientPermissionsError(ForbiddenError):
    """Insufficient permissions exception."""

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


class DuplicateResourceError(ConflictError):
    """Duplicate resource exception."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' already exists")


# Property specific exceptions
class PropertyNotFoundError(NotFoundError):
    """Property not found exception."""

    def __init__(self, property_id: str):
        super().__init__("Property", property_id)


class BookingNotFoundError(NotFoundError):
    """Booking not found exception."""

    def __init__(self, booking_id: str):
        super().__init__("Booking", booking_id)


# Booking rejections. Each carries its own error_code so callers can tell them apart.
class BookingIncompleteError(ValidationError):
    """Date or time slot missing from a booking request."""

    def __init__(self, detail: str = "Please select both date and time"):
        super().__init__(detail, error_code="BOOKING_INCOMPLETE")


class BookingDateInPastError(ValidationError):
    """Requested booking date is before today."""

    def __init__(self, detail: str = "Please select a future date"):
        super().__init__(detail, error_code="BOOKING_DATE_IN_PAST")


class TimeSlotUnavailableError(ConflictError):
    """A live booking already holds the requested slot."""

    def __init__(self, detail: str = "This time slot is no longer available"):
        super().__init__(detail, error_code="TIME_SLOT_UNAVAILABLE")


class PropertyNotBookableError(ConflictError):
    """Property status does not accept new bookings."""

    def __init__(self, property_status: str):
        super().__init__(
            f"The property cannot be booked as it is currently {property_status}.",
            error_code="PROPERTY_NOT_BOOKABLE"
        )
        self.property_status = property_status


class InvalidBookingTransitionError(ConflictError):
    """Booking status change not allowed from the current state."""

    def __init__(self, current_status: str, new_status: str):
        super().__init__(
            f"Cannot change booking status from {current_status} to {new_status}",
            error_code="INVALID_BOOKING_TRANSITION"
        )


class AvailabilityCheckError(ServiceUnavailableError):
    """Availability of a slot could not be determined."""

    def __init__(self, detail: str = "Could not check time slot availability. Please try again."):
        super().__init__(detail, error_code="AVAILABILITY_CHECK_FAILED")


class BookingFailedError(ServiceUnavailableError):
    """Unexpected failure while submitting a booking."""

    def __init__(self, detail: str = "Failed to create booking. Please try again."):
        super().__init__(detail, error_code="BOOKING_FAILED")


class OperationFailedError(ServiceUnavailableError):
    """Unexpected collaborator failure outside the booking workflow."""

    def __init__(self, action: str):
        super().__init__(f"Failed to {action}. Please try again.", error_code="OPERATION_FAILED")


# File upload exceptions
class UnsupportedFileTypeError(BadRequestError):
    """Unsupported file type exception."""

    def __init__(self, file_type: str, supported_types: List[str]):
        supported = ", ".join(supported_types)
        super().__init__(f"Unsupported file type '{file_type}'. Supported types: {supported}")


class FileSizeExceededError(BadRequestError):
    """File size exceeded exception."""

    def __init__(self, size: int, max_size: int):
        super().__init__(f"File size {size} bytes exceeds maximum allowed size {max_size} bytes")
