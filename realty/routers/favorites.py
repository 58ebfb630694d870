"""
Favorite API endpoints.
"""

from fastapi import APIRouter, Depends, status, Path
from fastapi.responses import Response
from typing import List
from uuid import UUID

from realty.models.user import User
from realty.services.favorite import FavoriteService
from realty.schemas.favorite import FavoriteToggleResponse, FavoriteStatusResponse
from realty.schemas.property import PropertyResponse
from realty.utils.dependencies import get_current_active_user, get_favorite_service


router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.get(
    "",
    response_model=List[PropertyResponse],
    summary="My favorite properties",
    description="Properties the current user saved, most recent first"
)
async def list_favorites(
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> List[PropertyResponse]:
    properties = await favorite_service.get_favorite_properties(current_user)
    return [PropertyResponse.model_validate(p) for p in properties]


@router.post(
    "/{property_id}/toggle",
    response_model=FavoriteToggleResponse,
    summary="Toggle favorite",
    description="Save the property if it is not a favorite yet, otherwise remove it"
)
async def toggle_favorite(
    property_id: UUID = Path(...),
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteToggleResponse:
    result = await favorite_service.toggle_favorite(property_id, current_user)
    return FavoriteToggleResponse(
        property_id=result.property_id,
        is_favorite=result.is_favorite,
        favorite_id=result.favorite_id
    )


@router.get(
    "/{property_id}/status",
    response_model=FavoriteStatusResponse,
    summary="Favorite status"
)
async def get_favorite_status(
    property_id: UUID = Path(...),
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteStatusResponse:
    favorite = await favorite_service.is_favorite(property_id, current_user)
    return FavoriteStatusResponse(
        property_id=property_id,
        is_favorite=favorite is not None,
        favorite_id=favorite.id if favorite else None
    )


@router.delete(
    "/{favorite_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove favorite"
)
async def remove_favorite(
    favorite_id: UUID = Path(...),
    current_user: User = Depends(get_current_active_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> Response:
    await favorite_service.remove_favorite(favorite_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
