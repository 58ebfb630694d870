"""
Property repository for listing storage and search.
SQL-expressible criteria are pushed into the query; facility and radius
criteria are applied in Python by realty.utils.search.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc
from realty.repositories.base import BaseRepository
from realty.models.property import Property, PropertyType
from realty.utils.search import PropertySearchFilters, filter_properties
from typing import Optional, List, Dict, Any, Tuple, Iterable
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyRepository(BaseRepository[Property]):
    """Repository for property listings."""

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Create a new property after model-level validation.

        Raises:
            ValueError: If validation fails
        """
        Property(**property_data).validate_all()

        created_property = await self.create(property_data)
        logger.info(f"Created property: {created_property.name} (ID: {created_property.id})")
        return created_property

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Search properties, newest first.

        Args:
            filters: PropertySearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return

        Returns:
            Tuple of (properties page, total matching count)
        """
        try:
            conditions = self._build_filter_conditions(filters)
            query = select(Property).order_by(desc(Property.created_at), Property.id)
            count_query = select(func.count(Property.id))
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            if filters.needs_client_side_filtering:
                result = await self.db.execute(query)
                matches = filter_properties(result.scalars().all(), filters)
                total_count = len(matches)
                properties = matches[skip:skip + limit]
            else:
                total_count = (await self.db.execute(count_query)).scalar() or 0
                result = await self.db.execute(query.offset(skip).limit(limit))
                properties = list(result.scalars().all())

            logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
            return properties, total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        conditions = []

        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.property_type is not None:
            conditions.append(Property.type == PropertyType(filters.property_type))

        if filters.status is not None:
            conditions.append(Property.status == filters.status)

        if filters.agent_id is not None:
            conditions.append(Property.agent_id == filters.agent_id)

        if filters.min_bedrooms is not None:
            conditions.append(Property.bedrooms >= filters.min_bedrooms)

        query = (filters.query or "").strip()
        if query:
            # Wildcards in the query are matched literally
            text_matches = [
                Property.name.icontains(query, autoescape=True),
                Property.address.icontains(query, autoescape=True),
            ]
            # The type column stores enum values, so match them here rather than in SQL
            matching_types = [t for t in PropertyType if query.lower() in t.value.lower()]
            if matching_types:
                text_matches.append(Property.type.in_(matching_types))
            conditions.append(or_(*text_matches))

        return conditions

    async def get_latest_properties(self, limit: int = 5) -> List[Property]:
        try:
            query = select(Property).order_by(desc(Property.created_at), Property.id).limit(limit)
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get latest properties: {e}")
            raise

    async def get_properties_by_agent(
        self,
        agent_id: uuid.UUID,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Property], int]:
        """Get properties owned by a specific agent, most recently updated first."""
        try:
            total_count = await self.count({"agent_id": agent_id})
            query = (
                select(Property)
                .where(Property.agent_id == agent_id)
                .order_by(desc(Property.updated_at))
                .offset(skip)
                .limit(limit)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all()), total_count
        except Exception as e:
            logger.error(f"Failed to get properties by agent {agent_id}: {e}")
            raise

    async def get_by_ids(self, property_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Property]:
        """Load several properties at once, keyed by id. Missing ids are absent."""
        ids = list(property_ids)
        if not ids:
            return {}

        try:
            result = await self.db.execute(select(Property).where(Property.id.in_(ids)))
            return {property_obj.id: property_obj for property_obj in result.scalars().all()}
        except Exception as e:
            logger.error(f"Failed to load properties {ids}: {e}")
            raise

    async def add_images(self, property_id: uuid.UUID, image_urls: List[str]) -> Optional[Property]:
        """Append image view URLs to a property's image list."""
        property_obj = await self.get_by_id(property_id)
        if property_obj is None:
            return None

        # Assign a new list so the JSON column is flagged dirty
        return await self.update(property_id, {"images": list(property_obj.images or []) + image_urls})
