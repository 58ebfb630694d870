"""
FastAPI dependency injection utilities for authentication and services.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from realty.database import get_db
from realty.models.user import User, UserRole
from realty.services.auth import AuthService
from realty.services.booking import BookingService
from realty.services.favorite import FavoriteService
from realty.services.property import PropertyService
from realty.services.storage import FileStorageService
from realty.utils.exceptions import (
    UnauthorizedError,
    InactiveUserError,
    InsufficientPermissionsError
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_file_storage_service() -> FileStorageService:
    return FileStorageService()


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage_service)
) -> PropertyService:
    return PropertyService(db, storage)


async def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    return BookingService(db)


async def get_favorite_service(db: AsyncSession = Depends(get_db)) -> FavoriteService:
    return FavoriteService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        raise InactiveUserError()

    return current_user


async def get_current_agent_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    """
    Get current user with agent role (or admin).

    Raises:
        InsufficientPermissionsError: If user is not an agent or admin
    """
    if current_user.role not in [UserRole.AGENT, UserRole.ADMIN]:
        raise InsufficientPermissionsError("access agent resources")

    return current_user
