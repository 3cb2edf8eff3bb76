"""Domain services."""

from app.domain.services.contact_merge import merge_contact
from app.domain.services.directory_service import ContactStore, DirectoryService, PhotoStore

__all__ = ["DirectoryService", "ContactStore", "PhotoStore", "merge_contact"]
