"""Domain value types."""

from app.domain.models.contact import ContactInput, ContactPage, ContactRecord, PhotoUpload, StoredPhoto

__all__ = [
    "ContactInput",
    "ContactRecord",
    "ContactPage",
    "StoredPhoto",
    "PhotoUpload",
]
