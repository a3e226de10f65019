"""
Photoshare Backend - Blob Store
================================

What:  Validates uploaded images, writes them under generated names, and maps
       public `/uploads/<name>` paths back to files on disk.
How:   Async writes with aiofiles into a single flat STORAGE_ROOT directory.
Who:   The POST /photos route (store, cleanup) and GET /uploads (resolve).

Naming:
    image-<unix ms>-<12 random hex chars><ext>

    Nothing from the client's filename except its extension reaches disk, so a
    crafted filename cannot escape STORAGE_ROOT or collide with another upload.

Checks, cheapest first:
    1. content present and non-empty
    2. extension in ALLOWED_EXTENSIONS
    3. size (Content-Length hint, then actual byte count)
"""

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from photoshare.config import settings
from photoshare.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}

# Name prefix mirrors the multipart field the upload arrives in
FILE_PREFIX = "image"


class FileService:
    """
    Flat-directory blob store for photo uploads.

    Args:
        storage_root: Override settings.storage_root (tests pass a tmp dir).
        url_prefix:   Override settings.uploads_url_prefix.
    """

    def __init__(self, storage_root: Optional[str] = None, url_prefix: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.url_prefix = (url_prefix or settings.uploads_url_prefix).rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: Optional[str]) -> str:
        """Return the lowercased extension, or raise ValidationError."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or 'unknown'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject files larger than settings.max_file_size.

        content_length is the client's claim and may be absent or wrong, so the
        actual byte count is always checked too.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"actual_size": actual_size},
            )

    def generate_name(self, extension: str) -> str:
        millis = int(time.time() * 1000)
        return f"{FILE_PREFIX}-{millis}-{uuid.uuid4().hex[:12]}{extension}"

    def public_url(self, name: str) -> str:
        return f"{self.url_prefix}/{name}"

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write `content` under a fresh name.

        Returns:
            (absolute_path, public_url)

        Raises:
            FileStorageError: the write failed (disk full, permissions)
        """
        name = self.generate_name(extension)
        absolute_path = self.storage_root / name

        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", name, len(content))
        return str(absolute_path), self.public_url(name)

    async def validate_and_store(
        self,
        filename: Optional[str],
        content: Optional[bytes],
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Validate an upload and store it.

        Returns:
            (absolute_path, public_url). The URL is what the photo row stores.

        Raises:
            ValidationError: no file, unsupported type, or too large
            FileStorageError: the write failed
        """
        if not content:
            raise ValidationError(message="image file is required", field="image")

        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))

        return await self.store_file(content, ext)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Best-effort delete of a stored blob.

        Used when the photo row cannot be saved after the file was written.
        Failures are logged, never raised: the request already failed for
        another reason.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    def resolve(self, name: str) -> Path:
        """
        Map a name from GET /uploads/{name} to a file inside storage_root.

        Raises:
            ValidationError: the name resolves outside storage_root
            NotFoundError: no such file
        """
        target = (self.storage_root / name).resolve()

        if not target.is_relative_to(self.storage_root):
            logger.warning("Path traversal attempt: %s", name)
            raise ValidationError(message="Invalid file path", field="name")

        if not target.is_file():
            raise NotFoundError(resource="file", resource_id=name)

        return target


file_service = FileService()
