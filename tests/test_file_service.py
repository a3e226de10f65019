"""
Photoshare Backend - Blob Store Unit Tests
===========================================

Extension and size checks, generated names, async writes into a temporary
storage root, cleanup, and the path-traversal guard used by GET /uploads.
"""

import re
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from photoshare.exceptions import FileStorageError, NotFoundError, ValidationError
from photoshare.services.file_service import FileService

NAME_PATTERN = re.compile(r"^image-\d{13}-[0-9a-f]{12}\.(jpg|jpeg|png|gif|webp)$")


class TestFileValidation:

    def setup_method(self):
        self.service = FileService()

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["a.jpg", "a.jpeg", "a.png", "a.gif", "a.webp"])
    def test_allowed_extensions(self, filename):
        assert self.service.validate_extension(filename) == Path(filename).suffix

    def test_extension_check_is_case_insensitive(self):
        assert self.service.validate_extension("photo.JPG") == ".jpg"
        assert self.service.validate_extension("photo.WebP") == ".webp"

    @pytest.mark.parametrize("filename", ["document.pdf", "malware.exe", "noextension", "", None])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(None, 1000)

    def test_size_at_limit(self):
        with patch("photoshare.services.file_service.settings") as mock_settings:
            mock_settings.max_file_size = 2048
            self.service.validate_size(2048, 2048)

    def test_size_over_limit(self):
        with patch("photoshare.services.file_service.settings") as mock_settings:
            mock_settings.max_file_size = 2048
            with pytest.raises(ValidationError, match="exceeds maximum"):
                self.service.validate_size(None, 2049)

    def test_reported_size_over_limit_rejected_before_counting(self):
        with patch("photoshare.services.file_service.settings") as mock_settings:
            mock_settings.max_file_size = 2048
            with pytest.raises(ValidationError, match="exceeds maximum"):
                self.service.validate_size(4096, 10)


class TestFileStorage:

    @pytest.mark.asyncio
    async def test_validate_and_store_writes_file(self, temp_storage, sample_image_bytes):
        service = FileService(storage_root=temp_storage)

        abs_path, url = await service.validate_and_store(
            filename="holiday.JPG",
            content=sample_image_bytes,
            content_length=len(sample_image_bytes),
        )

        stored = Path(abs_path)
        assert stored.parent == Path(temp_storage).resolve()
        assert stored.read_bytes() == sample_image_bytes
        assert NAME_PATTERN.match(stored.name)
        assert url == f"/uploads/{stored.name}"

    @pytest.mark.asyncio
    async def test_client_filename_never_reaches_disk(self, temp_storage, sample_image_bytes):
        service = FileService(storage_root=temp_storage)

        abs_path, _ = await service.validate_and_store("../../etc/evil.png", sample_image_bytes)

        assert "evil" not in abs_path
        assert Path(abs_path).parent == Path(temp_storage).resolve()

    @pytest.mark.asyncio
    async def test_names_are_unique(self, temp_storage, sample_image_bytes):
        service = FileService(storage_root=temp_storage)

        first, _ = await service.validate_and_store("a.png", sample_image_bytes)
        second, _ = await service.validate_and_store("a.png", sample_image_bytes)

        assert first != second

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, b""])
    async def test_missing_content_rejected(self, temp_storage, content):
        service = FileService(storage_root=temp_storage)

        with pytest.raises(ValidationError, match="image file is required"):
            await service.validate_and_store("a.jpg", content)

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self, temp_storage, sample_image_bytes):
        service = FileService(storage_root=temp_storage)

        with patch("aiofiles.open", new_callable=MagicMock) as mock_open:
            mock_open.side_effect = OSError("disk full")
            with pytest.raises(FileStorageError):
                await service.validate_and_store("a.jpg", sample_image_bytes)

    @pytest.mark.asyncio
    async def test_custom_url_prefix(self, temp_storage, sample_image_bytes):
        service = FileService(storage_root=temp_storage, url_prefix="/media/")

        _, url = await service.validate_and_store("a.gif", sample_image_bytes)

        assert url.startswith("/media/image-")


class TestCleanupAndResolve:

    @pytest.mark.asyncio
    async def test_cleanup_removes_file(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        target = Path(temp_storage) / "image-1-abc.jpg"
        target.write_bytes(b"data")

        await service.cleanup_file(str(target))

        assert not target.exists()

    @pytest.mark.asyncio
    async def test_cleanup_missing_file_is_silent(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        await service.cleanup_file(str(Path(temp_storage) / "never-existed.jpg"))

    def test_resolve_existing_file(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        (Path(temp_storage) / "image-1-abc.png").write_bytes(b"png")

        resolved = service.resolve("image-1-abc.png")

        assert resolved == (Path(temp_storage) / "image-1-abc.png").resolve()

    def test_resolve_missing_file(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        with pytest.raises(NotFoundError):
            service.resolve("image-0-000000000000.png")

    def test_resolve_rejects_traversal(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        with pytest.raises(ValidationError, match="Invalid file path"):
            service.resolve("../outside.txt")
