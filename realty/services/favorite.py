"""
Favorite service for saving and un-saving properties.
"""

from typing import List, NamedTuple, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from realty.repositories.favorite import FavoriteRepository
from realty.repositories.property import PropertyRepository
from realty.models.favorite import Favorite
from realty.models.property import Property
from realty.models.user import User
from realty.utils.exceptions import (
    APIException,
    NotFoundError,
    PropertyNotFoundError,
    InsufficientPermissionsError,
    OperationFailedError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class FavoriteToggleResult(NamedTuple):
    is_favorite: bool
    favorite_id: Optional[uuid.UUID]
    property_id: uuid.UUID


class FavoriteService:
    """Service layer for favorites operations."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.favorite_repo = FavoriteRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def toggle_favorite(self, property_id: uuid.UUID, current_user: User) -> FavoriteToggleResult:
        """
        Remove the favorite if it exists, otherwise create it.

        Raises:
            PropertyNotFoundError: If favoriting a property that does not exist
            OperationFailedError: If the store failed
        """
        # A failed insert rolls back the session, which expires current_user
        user_id, user_email = current_user.id, current_user.email

        try:
            existing = await self.favorite_repo.get_by_user_and_property(user_id, property_id)

            if existing:
                await self.favorite_repo.delete(existing.id)
                logger.info(f"User {user_email} un-favorited property {property_id}")
                return FavoriteToggleResult(False, None, property_id)

            if not await self.property_repo.exists(property_id):
                raise PropertyNotFoundError(str(property_id))

            try:
                favorite = await self.favorite_repo.create({
                    "user_id": user_id,
                    "property_id": property_id,
                })
            except IntegrityError:
                # A concurrent toggle created it first; the end state is still "favorited"
                favorite = await self.favorite_repo.get_by_user_and_property(user_id, property_id)
                if favorite is None:
                    raise

            logger.info(f"User {user_email} favorited property {property_id}")
            return FavoriteToggleResult(True, favorite.id, property_id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to toggle favorite {property_id} for user {user_id}: {e}")
            raise OperationFailedError("update favorites")

    async def is_favorite(self, property_id: uuid.UUID, current_user: User) -> Optional[Favorite]:
        """The user's favorite record for the property, or None."""
        try:
            return await self.favorite_repo.get_by_user_and_property(current_user.id, property_id)
        except Exception as e:
            logger.error(f"Failed to check favorite {property_id} for user {current_user.id}: {e}")
            raise OperationFailedError("check favorite")

    async def get_favorite_properties(self, current_user: User) -> List[Property]:
        """
        Properties the user has favorited, most recently saved first.
        Favorites whose property was deleted are skipped.
        """
        try:
            favorites = await self.favorite_repo.list_for_user(current_user.id)
            properties = await self.property_repo.get_by_ids(f.property_id for f in favorites)
        except Exception as e:
            logger.error(f"Failed to load favorites for user {current_user.id}: {e}")
            raise OperationFailedError("load favorites")

        return [properties[f.property_id] for f in favorites if f.property_id in properties]

    async def remove_favorite(self, favorite_id: uuid.UUID, current_user: User) -> bool:
        """
        Delete one of the user's favorites by id.

        Raises:
            NotFoundError: If no such favorite exists
            InsufficientPermissionsError: If it belongs to another user
        """
        try:
            favorite = await self.favorite_repo.get_by_id(favorite_id)
        except Exception as e:
            logger.error(f"Failed to load favorite {favorite_id}: {e}")
            raise OperationFailedError("remove favorite")

        if favorite is None:
            raise NotFoundError("Favorite", str(favorite_id))

        if favorite.user_id != current_user.id and not current_user.is_admin:
            raise InsufficientPermissionsError("remove this favorite")

        try:
            await self.favorite_repo.delete(favorite_id)
        except Exception as e:
            logger.error(f"Failed to delete favorite {favorite_id}: {e}")
            raise OperationFailedError("remove favorite")

        logger.info(f"Favorite {favorite_id} removed by {current_user.email}")
        return True
