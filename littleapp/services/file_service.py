"""
Little Application: Photo Upload Service
============================================

What:  Validates and stores post photos uploaded as multipart files.
How:   Checks that a file was sent, that its declared content type is an
       image, and that it fits MAX_FILE_UPLOAD; then writes it as
       `photo_<post id><ext>` under FILE_UPLOAD_PATH with async file I/O.
Who:   PostService.upload_photo().

Naming:
    The stored name is derived only from the post id and the lowercased
    extension of the client filename, so a later upload for the same post
    replaces the previous file and no user-supplied path segment reaches
    the file system.
"""

import logging
import re
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from littleapp.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

_SAFE_EXTENSION = re.compile(r"^\.[a-z0-9]{1,10}$")


class FileService:
    """
    Manages photo validation and storage.

    Directory Structure:
        <FILE_UPLOAD_PATH>/
        ├── photo_5d713995-....jpg
        └── photo_5d713a66-....png
    """

    def __init__(self, upload_root: str, max_size: int):
        self.upload_root = Path(upload_root).resolve()
        self.max_size = max_size

    def validate_upload(self, content_type: Optional[str], content: bytes) -> None:
        """
        Raises:
            ValidationError: no file, not an image, or larger than max_size
        """
        if not content:
            raise ValidationError(message="Please upload a file", field="file")

        if not (content_type or "").startswith("image"):
            raise ValidationError(
                message="Please upload an image file",
                field="file",
                context={"content_type": content_type},
            )

        if len(content) > self.max_size:
            raise ValidationError(
                message=f"Please upload an image less than {self.max_size} bytes",
                field="file",
                context={"max_size": self.max_size, "actual_size": len(content)},
            )

    def photo_name(self, post_id: uuid.UUID, filename: Optional[str]) -> str:
        """photo_<post id><ext>; unknown or odd extensions become '.jpg'."""
        ext = Path(filename or "").suffix.lower()
        if not _SAFE_EXTENSION.match(ext):
            ext = ".jpg"
        return f"photo_{post_id}{ext}"

    async def store(self, name: str, content: bytes) -> Path:
        """
        Write content to upload_root/name.

        Raises:
            FileStorageError if directory creation or file write fails.
        """
        path = self.upload_root / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", path, str(e))
            raise FileStorageError(
                message="Problem with file upload",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", name, len(content))
        return path

    async def save_photo(
        self,
        post_id: uuid.UUID,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes,
    ) -> str:
        """Validate, store, and return the stored filename."""
        self.validate_upload(content_type, content)
        name = self.photo_name(post_id, filename)
        await self.store(name, content)
        return name
