"""Contact photo storage on the local filesystem."""

import asyncio
import logging
import os
import tempfile
import uuid
from pathlib import Path

from app.domain.errors import PhotoStorageError
from app.domain.models.contact import StoredPhoto
from app.domain.services.directory_service import PhotoStore

logger = logging.getLogger(__name__)

DEFAULT_PHOTO_NAME = "photo"

# Most filesystems cap a single name at 255 bytes; "<uuid>_" takes 37 of them
MAX_NAME_BYTES = 255 - 37
MAX_SUFFIX_BYTES = 16


def _truncate_utf8(text: str, max_bytes: int) -> str:
    return text.encode("utf-8")[:max_bytes].decode("utf-8", errors="ignore")


def sanitize_filename(filename: str | None) -> str:
    """Reduce a client-supplied filename to a bare, safe file name.

    Directory components are dropped so a stored photo always lands
    directly in the upload root. Over-long names are shortened from the
    stem so the extension survives.
    """
    if not filename:
        return DEFAULT_PHOTO_NAME
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    name = name.replace("\x00", "")
    if name in ("", ".", ".."):
        return DEFAULT_PHOTO_NAME
    if len(name.encode("utf-8")) <= MAX_NAME_BYTES:
        return name

    stem, dot, suffix = name.rpartition(".")
    if not dot or not stem or len(suffix.encode("utf-8")) > MAX_SUFFIX_BYTES:
        return _truncate_utf8(name, MAX_NAME_BYTES)
    suffix = dot + suffix
    return _truncate_utf8(stem, MAX_NAME_BYTES - len(suffix.encode("utf-8"))) + suffix


class LocalPhotoStorage(PhotoStore):
    """Stores contact photos as files under a single upload root.

    Files are named ``<uuid>_<original filename>``. The root is created on
    first use.
    """

    def __init__(self, upload_dir: str | os.PathLike[str]):
        """Initialize storage.

        Args:
            upload_dir: Directory that holds every stored photo
        """
        self.upload_dir = Path(upload_dir)

    def _write(self, stored_name: str, data: bytes) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        target = self.upload_dir / stored_name
        # Write to a temp file in the same directory, then rename into place
        fd, tmp_path = tempfile.mkstemp(dir=self.upload_dir, prefix=".upload-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, target)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        return target

    async def save(self, filename: str | None, data: bytes) -> StoredPhoto:
        """Persist photo bytes under a fresh unique name.

        Args:
            filename: Original client file name
            data: Photo bytes

        Returns:
            StoredPhoto with the stored name and path

        Raises:
            PhotoStorageError: If the file cannot be written
        """
        stored_name = f"{uuid.uuid4()}_{sanitize_filename(filename)}"
        try:
            target = await asyncio.to_thread(self._write, stored_name, data)
        except OSError as e:
            logger.error(f"Photo save failed: name={stored_name}, error={e}")
            raise PhotoStorageError(f"Failed to save photo: {e}", operation="save_photo") from e

        logger.info(f"Saved photo: name={stored_name}, size={len(data)}")
        return StoredPhoto(name=stored_name, path=str(target))

    async def delete(self, path: str) -> None:
        """Delete a stored photo. Missing files are not an error.

        Raises:
            PhotoStorageError: On any I/O failure other than not-found
        """
        try:
            await asyncio.to_thread(Path(path).unlink, missing_ok=True)
        except OSError as e:
            logger.error(f"Photo delete failed: path={path}, error={e}")
            raise PhotoStorageError(f"Failed to delete photo: {e}", operation="delete_photo") from e
        logger.info(f"Deleted photo: path={path}")

    async def exists(self, path: str) -> bool:
        """Check whether a stored photo exists."""
        return await asyncio.to_thread(Path(path).is_file)
