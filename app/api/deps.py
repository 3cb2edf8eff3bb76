"""FastAPI dependencies for the contact directory."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.services.directory_service import DirectoryService, PhotoStore
from app.infrastructure.photo_storage import LocalPhotoStorage
from app.persistence.database import get_db
from app.persistence.repositories.contact_repository import ContactRepository
from app.settings import settings


def get_photo_store() -> PhotoStore:
    """Get the photo store rooted at the configured upload directory."""
    return LocalPhotoStorage(settings.upload_dir)


async def get_directory_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    photos: Annotated[PhotoStore, Depends(get_photo_store)],
) -> DirectoryService:
    """Get a directory service bound to the request's database session.

    Args:
        db: Database session
        photos: Photo store

    Returns:
        DirectoryService
    """
    return DirectoryService(ContactRepository(db), photos)
