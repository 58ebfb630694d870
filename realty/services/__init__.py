"""
Service layer for business logic implementation.
"""

from .auth import AuthService
from .booking import BookingService
from .error_handler import ErrorHandlerService
from .favorite import FavoriteService, FavoriteToggleResult
from .property import PropertyService
from .storage import FileStorageService

__all__ = [
    "AuthService",
    "BookingService",
    "ErrorHandlerService",
    "FavoriteService",
    "FavoriteToggleResult",
    "FileStorageService",
    "PropertyService"
]
