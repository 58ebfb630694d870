"""
Favorite repository for a user's saved properties.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from realty.repositories.base import BaseRepository
from realty.models.favorite import Favorite
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class FavoriteRepository(BaseRepository[Favorite]):
    """Repository for favorites. At most one row exists per (user, property)."""

    def __init__(self, db: AsyncSession):
        super().__init__(Favorite, db)

    async def get_by_user_and_property(
        self,
        user_id: uuid.UUID,
        property_id: uuid.UUID
    ) -> Optional[Favorite]:
        try:
            query = select(Favorite).where(
                Favorite.user_id == user_id,
                Favorite.property_id == property_id,
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get favorite for user {user_id} and property {property_id}: {e}")
            raise

    async def list_for_user(self, user_id: uuid.UUID) -> List[Favorite]:
        """User's favorites, most recently saved first."""
        try:
            query = (
                select(Favorite)
                .where(Favorite.user_id == user_id)
                .order_by(desc(Favorite.created_at))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list favorites for user {user_id}: {e}")
            raise
