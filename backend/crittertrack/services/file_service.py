"""
CritterTrack Backend — Image Upload Storage
===========================================

What:  Validates uploaded images (profile pictures, animal photos) and
       stores them on local disk; resolves stored paths for download.
How:   Extension, size and MIME (python-magic) checks run before anything
       touches the disk. Files land in date directories under a UUID name:
           <storage_root>/YYYY/MM/DD/<uuid>.<ext>
       The relative path is what clients get back, wrapped in a
       /api/files/... URL.
Who:   Called by routes/files.py.

Security:
    - No client-supplied text ever reaches a stored filename.
    - `resolve()` refuses any path that escapes storage_root after
      normalization, so "../" segments cannot reach other files.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from crittertrack.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class FileService:
    """
    Directory layout:
        storage/
        └── 2025/
            └── 03/
                └── 14/
                    ├── 0b5e2c1a-....jpg
                    └── 9f3d77e0-....png
    """

    def __init__(self, storage_root: str, max_file_size: int):
        self.storage_root = Path(storage_root).resolve()
        self.max_file_size = max_file_size

    def ensure_storage_root(self) -> None:
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("Upload storage at %s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Returns the lower-cased extension; raises ValidationError if not an image type."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Checks the declared Content-Length first, then the bytes actually
        received, since clients can send a wrong header.
        """
        max_mb = self.max_file_size / (1024 * 1024)

        if content_length and content_length > self.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )
        if actual_size > self.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )
        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="file")

    def validate_mime_type(self, file_content: bytes) -> str:
        """
        Detect the real content type from the file's magic bytes.

        Raises:
            ValidationError:  content is not one of ALLOWED_MIME_TYPES
            FileStorageError: libmagic is missing or detection failed
        """
        try:
            import magic

            mime_type = magic.from_buffer(file_content, mime=True)
        except ImportError as e:
            logger.error("python-magic / libmagic is not installed; uploads are disabled")
            raise FileStorageError(
                message="Could not verify file type. Please try again later.",
                context={"error": str(e)},
            ) from e
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            ) from e

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=f"File content type '{mime_type}' is not a supported image.",
                field="file",
                context={"detected_mime": mime_type},
            )
        return mime_type

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> str:
        """Write `content` under a fresh name and return its path relative to storage_root."""
        absolute_path, relative_path = self._generate_storage_path(extension)
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": relative_path, "os_error": str(e)},
            ) from e

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return relative_path

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        # Cheapest checks first; nothing is written unless all pass
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        mime_type = self.validate_mime_type(content)
        if ext == ".jpeg":
            ext = ".jpg"
        if ALLOWED_MIME_TYPES[mime_type] != ext:
            raise ValidationError(
                message="File extension does not match its content.",
                field="file",
                context={"extension": ext, "detected_mime": mime_type},
            )
        return await self.store_file(content, ext)

    def resolve(self, relative_path: str) -> Path:
        """
        Map a stored relative path back to an existing file.

        Raises:
            ValidationError: the path escapes storage_root
            NotFoundError:   no such file
        """
        candidate = (self.storage_root / relative_path).resolve()
        if not candidate.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path.", field="path")
        if not candidate.is_file():
            raise NotFoundError(resource="file")
        return candidate
