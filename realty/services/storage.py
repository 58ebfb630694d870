"""
File storage service for uploaded property images.
Files live on local disk under settings.upload_dir and are addressed by a
file id that doubles as their stored filename.
"""

import io
import re
import uuid
import logging
from pathlib import Path
from typing import Optional
from PIL import Image, UnidentifiedImageError
import aiofiles
from fastapi import UploadFile

from realty.config import get_settings
from realty.utils.exceptions import (
    ValidationError,
    NotFoundError,
    UnsupportedFileTypeError,
    FileSizeExceededError
)

logger = logging.getLogger(__name__)

# Pillow format names accepted for each declared content type
EXPECTED_FORMATS = {
    'image/jpeg': {'jpeg'},
    'image/png': {'png'},
    'image/webp': {'webp'},
}

ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp'}

FILE_ID_PATTERN = re.compile(r"^[0-9a-f]{32}\.(jpg|jpeg|png|webp)$")


class FileStorageService:
    """Stores, resolves and deletes uploaded image files."""

    def __init__(self, upload_dir: Optional[str] = None):
        settings = get_settings()
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.max_file_size = settings.max_file_size
        self.allowed_types = settings.allowed_file_types
        self.files_base_url = settings.files_base_url.rstrip("/")

        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def validate_image_file(self, file: UploadFile) -> bytes:
        """
        Validate an uploaded image and return its content.

        Raises:
            FileSizeExceededError: If the file is larger than max_file_size
            UnsupportedFileTypeError: If the content type or extension is not allowed
            ValidationError: If the bytes are not an image of the declared type
        """
        if file.content_type not in self.allowed_types:
            raise UnsupportedFileTypeError(file.content_type or "unknown", self.allowed_types)

        if not file.filename:
            raise ValidationError("Filename is required")

        file_ext = Path(file.filename).suffix.lower()
        if file_ext not in ALLOWED_EXTENSIONS:
            raise UnsupportedFileTypeError(file_ext or file.filename, sorted(ALLOWED_EXTENSIONS))

        await file.seek(0)
        content = await file.read()
        if len(content) > self.max_file_size:
            raise FileSizeExceededError(len(content), self.max_file_size)

        try:
            with Image.open(io.BytesIO(content)) as img:
                pil_format = (img.format or "").lower()
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError(f"Invalid image file: {e}")

        if pil_format not in EXPECTED_FORMATS.get(file.content_type, {pil_format}):
            raise ValidationError(f"File content doesn't match declared type {file.content_type}")

        return content

    async def create_file(self, file: UploadFile) -> str:
        """
        Validate and store an upload.

        Returns:
            The new file id
        """
        content = await self.validate_image_file(file)

        file_id = f"{uuid.uuid4().hex}{Path(file.filename).suffix.lower()}"
        file_path = self.upload_dir / file_id

        try:
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            if file_path.exists():
                file_path.unlink()
            logger.error(f"Failed to save uploaded file {file.filename}: {e}")
            raise

        logger.info(f"Stored file {file_id} ({len(content)} bytes) from {file.filename}")
        return file_id

    def get_file_view(self, file_id: str) -> str:
        """Public URL the file is served from."""
        return f"{self.files_base_url}/{file_id}"

    def get_file_path(self, file_id: str) -> Path:
        """
        Resolve a file id to its path on disk.

        Raises:
            NotFoundError: If the id is malformed or no such file exists
        """
        if not FILE_ID_PATTERN.match(file_id or ""):
            raise NotFoundError("File", file_id)

        file_path = self.upload_dir / file_id
        if not file_path.is_file():
            raise NotFoundError("File", file_id)
        return file_path

    def delete_file(self, file_id: str) -> bool:
        """Delete a stored file. Returns False when there was nothing to delete."""
        try:
            file_path = self.get_file_path(file_id)
        except NotFoundError:
            logger.debug(f"File {file_id} not found for deletion")
            return False

        file_path.unlink()
        logger.info(f"Deleted file {file_id}")
        return True

    @staticmethod
    def file_id_from_url(url: str) -> str:
        """The file id is the last path segment of a view URL."""
        return url.rstrip("/").split("/")[-1].split("?")[0]
