"""
Serves stored files by id.
"""

from fastapi import APIRouter, Depends, Path
from fastapi.responses import FileResponse

from realty.services.storage import FileStorageService
from realty.utils.dependencies import get_file_storage_service


router = APIRouter(prefix="/files", tags=["Files"])

MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}


@router.get("/{file_id}", summary="Get file", response_class=FileResponse)
async def get_file(
    file_id: str = Path(..., description="Stored file id"),
    storage: FileStorageService = Depends(get_file_storage_service)
) -> FileResponse:
    file_path = storage.get_file_path(file_id)
    return FileResponse(file_path, media_type=MEDIA_TYPES.get(file_path.suffix))
