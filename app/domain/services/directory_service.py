"""Directory service: contact lifecycle, photo coordination and search."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from app.domain.errors import (
    ContactNotFoundError,
    ContactValidationError,
    FieldError,
    PhotoStorageError,
)
from app.domain.models.contact import ContactInput, ContactPage, ContactRecord, PhotoUpload, StoredPhoto
from app.domain.services.contact_merge import merge_contact

logger = logging.getLogger(__name__)


class ContactStore(ABC):
    """Durable keyed storage of contact records."""

    @abstractmethod
    async def get(self, contact_id: int) -> ContactRecord | None:
        """Get a contact by ID, or None if absent."""
        pass

    @abstractmethod
    async def insert(self, record: ContactRecord) -> ContactRecord:
        """Insert a new contact and return it with its assigned ID."""
        pass

    @abstractmethod
    async def update(self, contact_id: int, record: ContactRecord) -> ContactRecord | None:
        """Replace a stored contact. Returns None if it no longer exists."""
        pass

    @abstractmethod
    async def delete(self, contact_id: int) -> bool:
        """Delete a contact. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def list_ordered(self, page: int, size: int) -> ContactPage:
        """List contacts ordered by first name, last name, then ID."""
        pass

    @abstractmethod
    async def search_substring(self, term: str, page: int, size: int) -> ContactPage:
        """Case-insensitive substring search over full name, email, phone and company."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> ContactRecord | None:
        """Get the oldest contact with the given email."""
        pass


class PhotoStore(ABC):
    """Storage for contact photo files."""

    @abstractmethod
    async def save(self, filename: str | None, data: bytes) -> StoredPhoto:
        """Save photo bytes under a fresh unique name."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete a stored photo; a missing file is not an error."""
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether a stored photo exists."""
        pass


class DirectoryService:
    """Service for managing contacts and their photos.

    The contact store is the system of record. A photo file is written
    before the record that references it and removed only after the
    record stops referencing it, so a stored record never points at a
    missing file.
    """

    def __init__(self, store: ContactStore, photos: PhotoStore) -> None:
        """Initialize directory service.

        Args:
            store: Contact store
            photos: Photo store
        """
        self.store = store
        self.photos = photos

    async def create_contact(
        self,
        contact: ContactInput | Mapping[str, Any],
        photo: PhotoUpload | None = None,
    ) -> ContactRecord:
        """Create a contact, optionally with a photo.

        Args:
            contact: Contact fields
            photo: Optional photo upload; empty uploads are ignored

        Returns:
            The stored contact with its assigned ID and timestamps

        Raises:
            ContactValidationError: If the input is malformed
            PhotoStorageError: If the photo cannot be saved (nothing is stored)
            ContactStoreError: If the store write fails
        """
        contact_input = self._validate(contact, "create_contact")
        saved = await self._save_photo(photo, "create_contact")

        record = merge_contact(None, contact_input, saved)
        try:
            created = await self.store.insert(record)
        except Exception:
            await self._discard_photo(saved)
            raise

        logger.info(
            f"Contact created: id={created.id}, has_photo={created.has_photo}"
        )
        return created

    async def get_contact(self, contact_id: int) -> ContactRecord:
        """Get a contact by ID.

        Raises:
            ContactNotFoundError: If the contact does not exist
        """
        contact = await self.store.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id, operation="get_contact")
        return contact

    async def update_contact(
        self,
        contact_id: int,
        contact: ContactInput | Mapping[str, Any],
        photo: PhotoUpload | None = None,
    ) -> ContactRecord:
        """Update a contact, optionally replacing its photo.

        Only fields set on the input are changed. Without a new photo the
        current photo is kept. With one, the new file is saved first and
        the old file is removed once the record references the new one;
        failure to remove the old file is logged and does not undo the
        update.

        Args:
            contact_id: Contact ID
            contact: Fields to change
            photo: Optional replacement photo

        Returns:
            The updated contact

        Raises:
            ContactValidationError: If the input is malformed
            ContactNotFoundError: If the contact does not exist
            PhotoStorageError: If the new photo cannot be saved
            ContactStoreError: If the store write fails
        """
        contact_input = self._validate(contact, "update_contact", contact_id)

        existing = await self.store.get(contact_id)
        if existing is None:
            raise ContactNotFoundError(contact_id, operation="update_contact")

        saved = await self._save_photo(photo, "update_contact", contact_id)

        merged = merge_contact(existing, contact_input, saved)
        try:
            updated = await self.store.update(contact_id, merged)
        except Exception:
            await self._discard_photo(saved)
            raise

        if updated is None:
            # Deleted concurrently between the read and the write
            await self._discard_photo(saved)
            raise ContactNotFoundError(contact_id, operation="update_contact")

        if saved is not None and existing.photo_path and existing.photo_path != saved.path:
            try:
                await self.photos.delete(existing.photo_path)
            except PhotoStorageError:
                logger.error(
                    f"Old photo cleanup failed after update: id={contact_id}, "
                    f"path={existing.photo_path}",
                    exc_info=True,
                )

        logger.info(
            f"Contact updated: id={contact_id}, photo_replaced={saved is not None}"
        )
        return updated

    async def delete_contact(self, contact_id: int) -> None:
        """Delete a contact and its photo file.

        The record is removed first; the photo file is removed after. If
        the file cannot be removed the record stays deleted and the
        failure is raised to the caller.

        Raises:
            ContactNotFoundError: If the contact does not exist
            PhotoStorageError: If the record was deleted but its photo was not
            ContactStoreError: If the store delete fails
        """
        existing = await self.store.get(contact_id)
        if existing is None:
            raise ContactNotFoundError(contact_id, operation="delete_contact")

        deleted = await self.store.delete(contact_id)
        if not deleted:
            raise ContactNotFoundError(contact_id, operation="delete_contact")

        logger.info(f"Contact deleted: id={contact_id}")

        if existing.photo_path:
            try:
                await self.photos.delete(existing.photo_path)
            except PhotoStorageError as e:
                logger.error(
                    f"Photo cleanup failed after delete: id={contact_id}, "
                    f"path={existing.photo_path}",
                    exc_info=True,
                )
                raise PhotoStorageError(
                    f"Contact {contact_id} deleted but its photo could not be removed: {e.message}",
                    operation="delete_contact",
                    contact_id=contact_id,
                ) from e

    async def list_contacts(self, page: int = 0, size: int = 10) -> ContactPage:
        """List contacts ordered by name.

        Pages past the end are empty rather than an error.

        Raises:
            ContactValidationError: If page is negative or size is not positive
        """
        self._check_paging(page, size, "list_contacts")
        return await self.store.list_ordered(page, size)

    async def search_contacts(
        self, term: str | None, page: int = 0, size: int = 10
    ) -> ContactPage:
        """Search contacts by name, email, phone or company.

        A blank term lists every contact. Results use the same name
        ordering as list_contacts.
        """
        if term is None or not term.strip():
            return await self.list_contacts(page, size)
        self._check_paging(page, size, "search_contacts")
        return await self.store.search_substring(term.strip(), page, size)

    async def find_contact_by_email(self, email: str) -> ContactRecord | None:
        """Look up a contact by email. Emails are not unique; the oldest wins."""
        return await self.store.get_by_email(email)

    def _validate(
        self,
        contact: ContactInput | Mapping[str, Any],
        operation: str,
        contact_id: int | None = None,
    ) -> ContactInput:
        if isinstance(contact, ContactInput):
            data = contact.model_dump(exclude_unset=True)
        else:
            data = dict(contact)
        try:
            return ContactInput.model_validate(data)
        except ValidationError as e:
            errors = [
                FieldError(
                    field=".".join(str(part) for part in err["loc"]) or "contact",
                    message=err["msg"],
                )
                for err in e.errors()
            ]
            raise ContactValidationError(errors, operation=operation, contact_id=contact_id) from e

    def _check_paging(self, page: int, size: int, operation: str) -> None:
        errors = []
        if page < 0:
            errors.append(FieldError(field="page", message="Page must be zero or greater"))
        if size < 1:
            errors.append(FieldError(field="size", message="Size must be at least 1"))
        if errors:
            raise ContactValidationError(errors, operation=operation)

    async def _save_photo(
        self,
        photo: PhotoUpload | None,
        operation: str,
        contact_id: int | None = None,
    ) -> StoredPhoto | None:
        if photo is None or not photo.data:
            return None
        try:
            return await self.photos.save(photo.filename, photo.data)
        except PhotoStorageError as e:
            e.operation = operation
            e.contact_id = contact_id
            raise

    async def _discard_photo(self, saved: StoredPhoto | None) -> None:
        """Remove a photo saved for a write that did not happen."""
        if saved is None:
            return
        try:
            await self.photos.delete(saved.path)
        except PhotoStorageError:
            logger.warning(f"Could not remove unreferenced photo: path={saved.path}", exc_info=True)
