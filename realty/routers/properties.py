"""
Property management API endpoints for CRUD operations, search, and images.
"""

from fastapi import APIRouter, Depends, status, Query, Path, UploadFile, File
from fastapi.responses import Response
from typing import Optional, List
from uuid import UUID
import math

from realty.config import settings
from realty.models.user import User
from realty.models.property import PropertyType, PropertyStatus, FACILITY_TYPES
from realty.services.property import PropertyService
from realty.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertySearchParams
)
from realty.schemas.file import ImageUploadResponse, StoredFileResponse
from realty.utils.dependencies import (
    get_current_active_user,
    get_current_agent_user,
    get_property_service
)


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a new property listing. Requires agent or admin role."
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.create_property(property_data, current_user)
    return PropertyResponse.model_validate(property_obj)


@router.get(
    "",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search properties",
    description="Paginated property search. Every given criterion must match."
)
async def list_properties(
    query: Optional[str] = Query(None, max_length=255, description="Text matched against name, address and type"),
    min_price: Optional[float] = Query(None, ge=0, description="Minimum price filter"),
    max_price: Optional[float] = Query(None, ge=0, description="Maximum price filter"),
    property_type: Optional[PropertyType] = Query(None, description="Property type"),
    property_status: Optional[PropertyStatus] = Query(None, alias="status", description="Property status"),
    facilities: Optional[List[str]] = Query(None, description="Required facilities (all must be present)"),
    latitude: Optional[float] = Query(None, ge=-90, le=90, description="Search centre latitude"),
    longitude: Optional[float] = Query(None, ge=-180, le=180, description="Search centre longitude"),
    radius_km: Optional[float] = Query(None, gt=0, le=20000, description="Search radius in kilometers"),
    min_bedrooms: Optional[int] = Query(None, ge=0, le=50, description="Minimum number of bedrooms"),
    agent_id: Optional[UUID] = Query(None, description="Only listings of this agent"),
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Search properties.

    Location filtering applies only when latitude, longitude and radius_km are
    all given; listings without coordinates never match it.
    """
    search_params = PropertySearchParams(
        query=query,
        min_price=min_price,
        max_price=max_price,
        property_type=property_type,
        status=property_status,
        facilities=facilities,
        latitude=latitude,
        longitude=longitude,
        radius_km=radius_km,
        min_bedrooms=min_bedrooms,
        agent_id=agent_id,
        page=page,
        page_size=page_size
    )

    properties, total_count = await property_service.search_properties(search_params)

    total_pages = math.ceil(total_count / page_size) if total_count > 0 else 1

    return PropertyListResponse(
        properties=[PropertyResponse.model_validate(p) for p in properties],
        total=total_count,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1
    )


@router.get(
    "/latest",
    response_model=List[PropertyResponse],
    summary="Latest properties",
    description="Most recently listed properties"
)
async def get_latest_properties(
    limit: int = Query(settings.latest_properties_limit, ge=1, le=50),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_latest_properties(limit)
    return [PropertyResponse.model_validate(p) for p in properties]


@router.get(
    "/facilities",
    response_model=List[str],
    summary="Known facilities",
    description="Facility tags offered when listing a property"
)
async def list_facilities() -> List[str]:
    return list(FACILITY_TYPES)


@router.get(
    "/mine",
    response_model=PropertyListResponse,
    summary="My listings",
    description="Listings owned by the current agent"
)
async def get_my_properties(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: User = Depends(get_current_agent_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    properties, total_count = await property_service.get_agent_properties(current_user, page, page_size)
    total_pages = math.ceil(total_count / page_size) if total_count > 0 else 1

    return PropertyListResponse(
        properties=[PropertyResponse.model_validate(p) for p in properties],
        total=total_count,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property details"
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.get_property(property_id)
    return PropertyResponse.model_validate(property_obj)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description="Update property details, including status. Only the owning agent or an admin can update."
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    updated_property = await property_service.update_property(property_id, property_data, current_user)
    return PropertyResponse.model_validate(updated_property)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Delete property listing and its images. Only the owning agent or an admin can delete."
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> Response:
    await property_service.delete_property(property_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{property_id}/images",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload property images",
    description="Upload one or more JPEG, PNG or WebP images and attach them to the property"
)
async def upload_property_images(
    property_id: UUID = Path(..., description="Property ID"),
    files: List[UploadFile] = File(..., description="Image files"),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> ImageUploadResponse:
    updated_property, file_ids = await property_service.add_property_images(property_id, files, current_user)
    storage = property_service.storage

    return ImageUploadResponse(
        property_id=str(updated_property.id),
        uploaded=[
            StoredFileResponse(file_id=file_id, url=storage.get_file_view(file_id))
            for file_id in file_ids
        ],
        images=list(updated_property.images)
    )
