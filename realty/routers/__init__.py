"""
API route handlers for the Realty Booking API.
"""

from .auth import router as auth_router
from .bookings import router as bookings_router
from .favorites import router as favorites_router
from .files import router as files_router
from .properties import router as properties_router

__all__ = [
    "auth_router",
    "bookings_router",
    "favorites_router",
    "files_router",
    "properties_router"
]
