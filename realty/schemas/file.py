"""
Pydantic schemas for stored files.
"""

from pydantic import BaseModel, Field
from typing import List


class StoredFileResponse(BaseModel):
    file_id: str = Field(..., description="Identifier of the stored file")
    url: str = Field(..., description="View URL of the stored file")


class ImageUploadResponse(BaseModel):
    """Result of attaching uploaded images to a property."""

    property_id: str
    uploaded: List[StoredFileResponse]
    images: List[str] = Field(..., description="All image URLs of the property after the upload")
