"""Contacts API endpoints."""

import json
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.api.deps import get_directory_service
from app.domain.models.contact import ContactPage, ContactRecord, PhotoUpload
from app.domain.services.directory_service import DirectoryService
from app.settings import settings

router = APIRouter()


# ============== Response Models ==============

class ContactResponse(BaseModel):
    """Contact response model - camelCase to match the frontend."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    notes: str | None = None
    photo_file_name: str | None = None
    photo_path: str | None = None
    created_at: datetime
    updated_at: datetime


class ContactPageResponse(BaseModel):
    """Paginated contacts response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[ContactResponse]
    total_elements: int
    total_pages: int
    number_of_elements: int
    page: int
    size: int
    first: bool
    last: bool


# ============== Helper Functions ==============

def _contact_to_response(contact: ContactRecord) -> ContactResponse:
    """Convert a contact record to response."""
    return ContactResponse(
        **contact.model_dump(),
        full_name=contact.full_name,
    )


def _page_to_response(page: ContactPage) -> ContactPageResponse:
    """Convert a contact page to response."""
    return ContactPageResponse(
        items=[_contact_to_response(c) for c in page.items],
        total_elements=page.total_elements,
        total_pages=page.total_pages,
        number_of_elements=page.number_of_elements,
        page=page.page,
        size=page.size,
        first=page.first,
        last=page.last,
    )


def _parse_contact_part(contact: str) -> dict[str, Any]:
    """Decode the JSON ``contact`` part of a multipart request."""
    try:
        data = json.loads(contact)
    except json.JSONDecodeError as e:
        raise HTTPException(
            status_code=422,
            detail=f"Contact part is not valid JSON: {e.msg}",
        )
    if not isinstance(data, dict):
        raise HTTPException(
            status_code=422,
            detail="Contact part must be a JSON object",
        )
    return data


async def _read_photo(photo: UploadFile | None) -> PhotoUpload | None:
    """Read an uploaded photo, enforcing the size limit."""
    if photo is None:
        return None
    data = await photo.read()
    if len(data) > settings.max_photo_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Photo exceeds maximum size of {settings.max_photo_size_bytes} bytes",
        )
    return PhotoUpload(filename=photo.filename, data=data)


PageParam = Annotated[int, Query(ge=0)]
SizeParam = Annotated[int, Query(ge=1, le=settings.max_page_size)]


# ============== Contact Endpoints ==============

@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def create_contact(
    contact: Annotated[str, Form()],
    service: Annotated[DirectoryService, Depends(get_directory_service)],
    photo: Annotated[UploadFile | None, File()] = None,
) -> ContactResponse:
    """Create a contact from a JSON ``contact`` part and an optional ``photo`` file."""
    created = await service.create_contact(
        _parse_contact_part(contact), await _read_photo(photo)
    )
    return _contact_to_response(created)


@router.get("", response_model=ContactPageResponse)
async def list_contacts(
    service: Annotated[DirectoryService, Depends(get_directory_service)],
    page: PageParam = 0,
    size: SizeParam = settings.default_page_size,
    search: str | None = None,
) -> ContactPageResponse:
    """List contacts by name, or search them when ``search`` is given."""
    if search:
        result = await service.search_contacts(search, page, size)
    else:
        result = await service.list_contacts(page, size)
    return _page_to_response(result)


@router.get("/search", response_model=ContactPageResponse)
async def search_contacts(
    service: Annotated[DirectoryService, Depends(get_directory_service)],
    search_term: Annotated[str, Query(alias="searchTerm")] = "",
    page: PageParam = 0,
    size: SizeParam = settings.default_page_size,
) -> ContactPageResponse:
    """Search contacts by name, email, phone or company."""
    result = await service.search_contacts(search_term, page, size)
    return _page_to_response(result)


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(
    contact_id: int,
    service: Annotated[DirectoryService, Depends(get_directory_service)],
) -> ContactResponse:
    """Get a specific contact by ID."""
    contact = await service.get_contact(contact_id)
    return _contact_to_response(contact)


@router.put("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: int,
    contact: Annotated[str, Form()],
    service: Annotated[DirectoryService, Depends(get_directory_service)],
    photo: Annotated[UploadFile | None, File()] = None,
) -> ContactResponse:
    """Update a contact; a new ``photo`` replaces the current one."""
    updated = await service.update_contact(
        contact_id, _parse_contact_part(contact), await _read_photo(photo)
    )
    return _contact_to_response(updated)


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(
    contact_id: int,
    service: Annotated[DirectoryService, Depends(get_directory_service)],
) -> None:
    """Permanently delete a contact and its photo."""
    await service.delete_contact(contact_id)
