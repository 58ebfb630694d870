"""
Property service for managing property listings.
Handles CRUD operations, ownership validation, search and image attachment.
"""

from typing import Optional, List, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from realty.repositories.property import PropertyRepository
from realty.models.property import Property
from realty.models.user import User, UserRole
from realty.schemas.property import PropertyCreate, PropertyUpdate, PropertySearchParams
from realty.services.storage import FileStorageService
from realty.utils.exceptions import (
    APIException,
    ValidationError,
    PropertyNotFoundError,
    InsufficientPermissionsError,
    OperationFailedError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property service for managing property listings.
    Agents manage their own listings; admins manage all of them.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorageService] = None):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.storage = storage or FileStorageService()

    async def create_property(self, property_data: PropertyCreate, current_user: User) -> Property:
        """
        Create a new property listing owned by the current agent.

        Raises:
            InsufficientPermissionsError: If the user is not an agent or admin
            ValidationError: If property data is invalid
        """
        if current_user.role not in (UserRole.AGENT, UserRole.ADMIN):
            raise InsufficientPermissionsError("create properties")

        create_data = property_data.model_dump()
        create_data["agent_id"] = current_user.id
        create_data["images"] = []

        try:
            property_obj = await self.property_repo.create_property(create_data)
        except ValueError as e:
            raise ValidationError(str(e))
        except Exception as e:
            logger.error(f"Failed to create property for user {current_user.id}: {e}")
            raise OperationFailedError("create property")

        logger.info(f"Property created by {current_user.email}: {property_obj.name} (ID: {property_obj.id})")
        return property_obj

    async def get_property(self, property_id: uuid.UUID) -> Property:
        """
        Get property by ID.

        Raises:
            PropertyNotFoundError: If property doesn't exist
        """
        try:
            property_obj = await self.property_repo.get_by_id(property_id)
        except Exception as e:
            logger.error(f"Failed to get property {property_id}: {e}")
            raise OperationFailedError("load property")

        if not property_obj:
            raise PropertyNotFoundError(str(property_id))

        return property_obj

    async def update_property(
        self,
        property_id: uuid.UUID,
        property_data: PropertyUpdate,
        current_user: User
    ) -> Property:
        """
        Partially update a property. Any status may be set.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            InsufficientPermissionsError: If the user does not manage the property
            ValidationError: If no fields are provided
        """
        existing_property = await self._get_managed_property(property_id, current_user, "update this property")

        update_data = property_data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            raise ValidationError("No valid fields provided for update")

        try:
            updated_property = await self.property_repo.update(existing_property.id, update_data)
        except Exception as e:
            logger.error(f"Failed to update property {property_id}: {e}")
            raise OperationFailedError("update property")

        if not updated_property:
            raise PropertyNotFoundError(str(property_id))

        logger.info(f"Property updated by {current_user.email}: {property_id} ({', '.join(update_data)})")
        return updated_property

    async def delete_property(self, property_id: uuid.UUID, current_user: User) -> bool:
        """
        Delete a property and its stored image files.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            InsufficientPermissionsError: If the user does not manage the property
        """
        existing_property = await self._get_managed_property(property_id, current_user, "delete this property")
        image_urls = list(existing_property.images or [])

        try:
            deleted = await self.property_repo.delete(property_id)
        except Exception as e:
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise OperationFailedError("delete property")

        if not deleted:
            raise PropertyNotFoundError(str(property_id))

        for url in image_urls:
            file_id = self.storage.file_id_from_url(url)
            try:
                self.storage.delete_file(file_id)
            except OSError as e:
                # The listing is gone; a leftover file only wastes disk
                logger.error(f"Failed to delete image {file_id} of property {property_id}: {e}")

        logger.info(f"Property deleted by {current_user.email}: {property_id}")
        return True

    async def search_properties(self, search_params: PropertySearchParams) -> Tuple[List[Property], int]:
        """
        Search properties with filters and pagination.

        Returns:
            Tuple of (properties page, total matching count)

        Raises:
            ValidationError: If min_price is greater than max_price
        """
        if (
            search_params.min_price is not None
            and search_params.max_price is not None
            and search_params.min_price > search_params.max_price
        ):
            raise ValidationError("Minimum price cannot be greater than maximum price")

        filters = search_params.to_filters()
        skip = (search_params.page - 1) * search_params.page_size

        try:
            properties, total_count = await self.property_repo.search_properties(
                filters, skip=skip, limit=search_params.page_size
            )
        except Exception as e:
            logger.error(f"Failed to search properties with {filters}: {e}")
            raise OperationFailedError("search properties")

        logger.debug(f"Search {filters} matched {total_count} properties")
        return properties, total_count

    async def get_latest_properties(self, limit: int = 5) -> List[Property]:
        try:
            return await self.property_repo.get_latest_properties(limit)
        except Exception as e:
            logger.error(f"Failed to load latest properties: {e}")
            raise OperationFailedError("load latest properties")

    async def get_agent_properties(
        self,
        current_user: User,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Property], int]:
        """Listings owned by the current agent."""
        try:
            return await self.property_repo.get_properties_by_agent(
                current_user.id, skip=(page - 1) * page_size, limit=page_size
            )
        except Exception as e:
            logger.error(f"Failed to load properties of agent {current_user.id}: {e}")
            raise OperationFailedError("load your properties")

    async def add_property_images(
        self,
        property_id: uuid.UUID,
        files: List[UploadFile],
        current_user: User
    ) -> Tuple[Property, List[str]]:
        """
        Store uploaded images and append their view URLs to the property.

        Returns:
            Tuple of (updated property, new file ids)

        Raises:
            PropertyNotFoundError: If property doesn't exist
            InsufficientPermissionsError: If the user does not manage the property
            ValidationError: If no files are given or a file is rejected
        """
        if not files:
            raise ValidationError("At least one image file is required")

        await self._get_managed_property(property_id, current_user, "add images to this property")

        file_ids: List[str] = []
        try:
            for upload in files:
                file_ids.append(await self.storage.create_file(upload))

            image_urls = [self.storage.get_file_view(file_id) for file_id in file_ids]
            updated_property = await self.property_repo.add_images(property_id, image_urls)
            if not updated_property:
                raise PropertyNotFoundError(str(property_id))
        except Exception as e:
            for file_id in file_ids:
                try:
                    self.storage.delete_file(file_id)
                except OSError as cleanup_error:
                    logger.error(f"Failed to discard image {file_id} of property {property_id}: {cleanup_error}")
            if isinstance(e, APIException):
                raise
            logger.error(f"Failed to add images to property {property_id}: {e}")
            raise OperationFailedError("upload images")

        logger.info(f"Added {len(file_ids)} images to property {property_id}")
        return updated_property, file_ids

    async def _get_managed_property(self, property_id: uuid.UUID, current_user: User, action: str) -> Property:
        property_obj = await self.get_property(property_id)

        if not (current_user.is_agent or current_user.is_admin) or not current_user.can_manage_property(property_obj.agent_id):
            logger.warning(f"User {current_user.email} denied: {action} ({property_id})")
            raise InsufficientPermissionsError(action)

        return property_obj
