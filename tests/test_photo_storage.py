"""Tests for local photo storage."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from app.domain.errors import PhotoStorageError
from app.infrastructure.photo_storage import LocalPhotoStorage, sanitize_filename


class TestSave:
    """Tests for saving photos."""

    @pytest.mark.asyncio
    async def test_creates_upload_dir_and_writes_bytes(self, photo_storage, upload_dir):
        """Test that the upload root is created and the bytes land on disk."""
        assert not upload_dir.exists()

        stored = await photo_storage.save("jane.png", b"\x89PNG data")

        assert upload_dir.is_dir()
        assert Path(stored.path).parent == upload_dir
        assert Path(stored.path).read_bytes() == b"\x89PNG data"

    @pytest.mark.asyncio
    async def test_name_is_unique_prefix_plus_original(self, photo_storage):
        """Test that stored names are <random>_<original> and never collide."""
        first = await photo_storage.save("jane.png", b"a")
        second = await photo_storage.save("jane.png", b"b")

        assert first.name.endswith("_jane.png")
        assert second.name.endswith("_jane.png")
        assert first.name != second.name
        assert Path(first.path).name == first.name

    @pytest.mark.asyncio
    async def test_leaves_no_temp_files(self, photo_storage, upload_dir):
        """Test that only the final file remains after a save."""
        stored = await photo_storage.save("jane.png", b"data")

        assert os.listdir(upload_dir) == [stored.name]

    @pytest.mark.asyncio
    async def test_strips_directory_components(self, photo_storage, upload_dir):
        """Test that a path-like filename cannot escape the upload root."""
        stored = await photo_storage.save("../../etc/passwd", b"data")

        assert Path(stored.path).parent == upload_dir
        assert stored.name.endswith("_passwd")

    @pytest.mark.asyncio
    async def test_long_filename_is_shortened(self, photo_storage):
        """Test that a long original name still saves and keeps its extension."""
        stored = await photo_storage.save("p" * 240 + ".jpg", b"img")

        assert len(stored.name.encode("utf-8")) <= 255
        assert stored.name.endswith("pp.jpg")
        assert Path(stored.path).read_bytes() == b"img"

    @pytest.mark.asyncio
    async def test_io_failure_raises_storage_error(self, photo_storage):
        """Test that a write failure surfaces as PhotoStorageError."""
        with patch("app.infrastructure.photo_storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PhotoStorageError, match="disk full"):
                await photo_storage.save("jane.png", b"data")

    @pytest.mark.asyncio
    async def test_unwritable_root_raises_storage_error(self, tmp_path):
        """Test that an upload root blocked by a regular file fails cleanly."""
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory")
        storage = LocalPhotoStorage(blocker / "photos")

        with pytest.raises(PhotoStorageError):
            await storage.save("jane.png", b"data")


class TestDeleteAndExists:
    """Tests for deleting and checking photos."""

    @pytest.mark.asyncio
    async def test_delete_removes_file(self, photo_storage):
        """Test that delete removes a stored photo."""
        stored = await photo_storage.save("jane.png", b"data")
        assert await photo_storage.exists(stored.path) is True

        await photo_storage.delete(stored.path)

        assert await photo_storage.exists(stored.path) is False

    @pytest.mark.asyncio
    async def test_delete_missing_file_is_noop(self, photo_storage, upload_dir):
        """Test that deleting a nonexistent photo succeeds."""
        await photo_storage.delete(str(upload_dir / "missing.png"))

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, photo_storage):
        """Test that deleting twice is not an error."""
        stored = await photo_storage.save("jane.png", b"data")

        await photo_storage.delete(stored.path)
        await photo_storage.delete(stored.path)

    @pytest.mark.asyncio
    async def test_delete_io_failure_raises_storage_error(self, photo_storage):
        """Test that failures other than not-found surface as PhotoStorageError."""
        stored = await photo_storage.save("jane.png", b"data")

        with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            with pytest.raises(PhotoStorageError, match="denied"):
                await photo_storage.delete(stored.path)


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("jane.png", "jane.png"),
        ("C:\\Users\\jane\\me.jpg", "me.jpg"),
        ("a/b/c.gif", "c.gif"),
        ("", "photo"),
        (None, "photo"),
        ("..", "photo"),
    ],
)
def test_sanitize_filename(filename, expected):
    """Test that filenames are reduced to their base name."""
    assert sanitize_filename(filename) == expected


@pytest.mark.parametrize(
    "filename,suffix",
    [
        ("p" * 240 + ".jpg", ".jpg"),
        ("é" * 200 + ".png", ".png"),
        ("x" * 300, "x"),
        ("a." + "b" * 300, "b"),
    ],
)
def test_sanitize_filename_limits_length(filename, suffix):
    """Test that long names fit beside the unique prefix without splitting characters."""
    name = sanitize_filename(filename)

    assert len(name.encode("utf-8")) <= 255 - 37
    assert name.endswith(suffix)
    assert "�" not in name
