"""Contact repository."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.errors import ContactStoreError
from app.domain.models.contact import ContactPage, ContactRecord
from app.domain.services.directory_service import ContactStore
from app.persistence.models.contact import Contact
from app.persistence.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

NAME_ORDER = (Contact.first_name.asc(), Contact.last_name.asc(), Contact.id.asc())

# Upper bound of the Integer primary key column; larger IDs can never exist
MAX_ID = 2**31 - 1


def _storable_id(contact_id: int) -> bool:
    return 0 < contact_id <= MAX_ID


class ContactRepository(BaseRepository[Contact], ContactStore):
    """SQLAlchemy-backed contact store."""

    def __init__(self, session: AsyncSession):
        """Initialize contact repository."""
        super().__init__(Contact, session)

    @asynccontextmanager
    async def _store_errors(self, operation: str, contact_id: int | None = None) -> AsyncIterator[None]:
        """Roll back and translate database failures into ContactStoreError."""
        try:
            yield
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Contact store failure: operation={operation}, id={contact_id}, error={e}")
            raise ContactStoreError(
                f"Contact store failed during {operation}: {e}",
                operation=operation,
                contact_id=contact_id,
            ) from e

    async def get(self, contact_id: int) -> ContactRecord | None:
        """Get a contact by ID.

        Args:
            contact_id: Contact ID

        Returns:
            ContactRecord or None if not found
        """
        if not _storable_id(contact_id):
            return None
        async with self._store_errors("get", contact_id):
            contact = await self.get_by_id(contact_id)
        return ContactRecord.model_validate(contact) if contact else None

    async def insert(self, record: ContactRecord) -> ContactRecord:
        """Insert a new contact.

        The store assigns the ID; timestamps default to now when the
        record does not carry them.
        """
        data = record.model_dump(exclude={"id"})
        for key in ("created_at", "updated_at"):
            if data[key] is None:
                del data[key]
        async with self._store_errors("insert"):
            contact = await self.create(**data)
        return ContactRecord.model_validate(contact)

    async def update(self, contact_id: int, record: ContactRecord) -> ContactRecord | None:
        """Replace every mutable field of a stored contact.

        ``id`` and ``created_at`` are never written.

        Returns:
            Updated contact or None if not found
        """
        if not _storable_id(contact_id):
            return None
        data = record.model_dump(exclude={"id", "created_at"})
        if data["updated_at"] is None:
            del data["updated_at"]
        async with self._store_errors("update", contact_id):
            contact = await self.update_by_id(contact_id, **data)
        return ContactRecord.model_validate(contact) if contact else None

    async def delete(self, contact_id: int) -> bool:
        """Permanently delete a contact.

        Returns:
            True if deleted, False if not found
        """
        if not _storable_id(contact_id):
            return False
        async with self._store_errors("delete", contact_id):
            return await self.delete_by_id(contact_id)

    async def list_ordered(self, page: int, size: int) -> ContactPage:
        """List contacts ordered by first name, last name, then ID.

        Args:
            page: Zero-based page number
            size: Page length

        Returns:
            ContactPage, empty when page is past the end
        """
        return await self._page("list_ordered", [], page, size)

    async def search_substring(self, term: str, page: int, size: int) -> ContactPage:
        """Search contacts by case-insensitive substring.

        A contact matches when the term occurs in "first last", email,
        phone or company. Results keep the name ordering.

        Args:
            term: Search term
            page: Zero-based page number
            size: Page length

        Returns:
            ContactPage of matches
        """
        needle = term.lower()
        full_name = func.lower(Contact.first_name + " " + Contact.last_name)
        condition = or_(
            full_name.contains(needle, autoescape=True),
            func.lower(Contact.email).contains(needle, autoescape=True),
            func.lower(Contact.phone).contains(needle, autoescape=True),
            func.lower(Contact.company).contains(needle, autoescape=True),
        )
        return await self._page("search_substring", [condition], page, size)

    async def get_by_email(self, email: str) -> ContactRecord | None:
        """Get the oldest contact with this exact email.

        Email is not unique; lookup only.
        """
        stmt = select(Contact).where(Contact.email == email).order_by(Contact.id.asc()).limit(1)
        async with self._store_errors("get_by_email"):
            result = await self.session.execute(stmt)
            contact = result.scalar_one_or_none()
        return ContactRecord.model_validate(contact) if contact else None

    async def find_by_name(self, fragment: str) -> list[ContactRecord]:
        """Find contacts whose first or last name contains the fragment (case-insensitive)."""
        needle = fragment.lower()
        stmt = (
            select(Contact)
            .where(
                or_(
                    func.lower(Contact.first_name).contains(needle, autoescape=True),
                    func.lower(Contact.last_name).contains(needle, autoescape=True),
                )
            )
            .order_by(*NAME_ORDER)
        )
        async with self._store_errors("find_by_name"):
            result = await self.session.execute(stmt)
            contacts = result.scalars().all()
        return [ContactRecord.model_validate(c) for c in contacts]

    async def _page(self, operation: str, conditions: list, page: int, size: int) -> ContactPage:
        offset = page * size
        contacts = []
        async with self._store_errors(operation):
            total = await self.count(*conditions)
            # Past-the-end pages skip the query; offset/limit stay within total
            if offset < total:
                stmt = (
                    select(Contact)
                    .where(*conditions)
                    .order_by(*NAME_ORDER)
                    .offset(offset)
                    .limit(min(size, total - offset))
                )
                result = await self.session.execute(stmt)
                contacts = result.scalars().all()
        return ContactPage(
            items=[ContactRecord.model_validate(c) for c in contacts],
            total_elements=total,
            page=page,
            size=size,
        )
