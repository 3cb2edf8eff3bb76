"""Contact merge: compute the record to persist from an update."""

from datetime import datetime

from app.domain.models.contact import ContactInput, ContactRecord, StoredPhoto


def merge_contact(
    existing: ContactRecord | None,
    incoming: ContactInput,
    new_photo: StoredPhoto | None = None,
    now: datetime | None = None,
) -> ContactRecord:
    """Merge an incoming contact input into an existing record.

    Pure function: performs no I/O and never mutates its arguments.

    Args:
        existing: The stored record, or None when creating
        incoming: Caller-supplied fields; only fields that were explicitly
            set overwrite the existing record
        new_photo: Newly saved photo replacing any current one
        now: Timestamp to stamp the write with (defaults to utcnow)

    Returns:
        The record to persist. ``id`` and ``created_at`` are carried from
        ``existing``; photo fields are replaced only when ``new_photo`` is
        given.
    """
    now = now or datetime.utcnow()

    if existing is None:
        data = incoming.model_dump()
        data.update(
            id=None,
            photo_file_name=None,
            photo_path=None,
            created_at=now,
            updated_at=now,
        )
    else:
        data = existing.model_dump()
        data.update(incoming.model_dump(exclude_unset=True))
        data.update(
            id=existing.id,
            created_at=existing.created_at,
            # Keep created_at <= updated_at even if the clock went backwards
            updated_at=max(now, existing.created_at) if existing.created_at else now,
        )

    if new_photo is not None:
        data["photo_file_name"] = new_photo.name
        data["photo_path"] = new_photo.path

    return ContactRecord(**data)
