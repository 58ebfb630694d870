"""
Repository layer for data access operations.
"""

from realty.repositories.base import BaseRepository
from realty.repositories.booking import BookingRepository
from realty.repositories.favorite import FavoriteRepository
from realty.repositories.property import PropertyRepository
from realty.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "FavoriteRepository",
    "PropertyRepository",
    "UserRepository"
]
