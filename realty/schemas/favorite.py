"""
Pydantic schemas for favorites.
"""

from pydantic import BaseModel
from typing import Optional
import uuid


class FavoriteToggleResponse(BaseModel):
    """Outcome of a toggle: favorite_id is set only when the property is now a favorite."""

    property_id: uuid.UUID
    is_favorite: bool
    favorite_id: Optional[uuid.UUID] = None


class FavoriteStatusResponse(BaseModel):
    property_id: uuid.UUID
    is_favorite: bool
    favorite_id: Optional[uuid.UUID] = None
