"""Errors raised by the contact directory."""

from dataclasses import dataclass


@dataclass
class FieldError:
    """A single rejected input field."""

    field: str
    message: str


class DirectoryError(Exception):
    """Base class for contact directory errors.

    Carries the operation name and, where one applies, the contact ID so
    callers can log the failure meaningfully.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        contact_id: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.contact_id = contact_id


class ContactValidationError(DirectoryError):
    """Malformed input reached the directory service."""

    def __init__(
        self,
        errors: list[FieldError],
        operation: str | None = None,
        contact_id: int | None = None,
    ):
        summary = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"Invalid contact input: {summary}", operation, contact_id)
        self.errors = errors


class ContactNotFoundError(DirectoryError):
    """The referenced contact does not exist."""

    def __init__(self, contact_id: int, operation: str | None = None):
        super().__init__(f"Contact not found with id: {contact_id}", operation, contact_id)


class PhotoStorageError(DirectoryError):
    """Photo file I/O failed."""


class ContactStoreError(DirectoryError):
    """The underlying contact store failed."""
