"""Contact value types shared by the directory service, store and API."""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, StringConstraints, field_validator, model_validator
from pydantic.alias_generators import to_camel

PHONE_PATTERN = re.compile(r"^\+?[0-9]{10,15}$")

RequiredName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ContactInput(BaseModel):
    """Caller-supplied contact fields.

    Identity, audit and photo fields are not part of the input, so an
    update can never overwrite them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    first_name: RequiredName
    last_name: RequiredName
    email: EmailStr
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    notes: str | None = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        """Accept an empty phone or 10-15 digits with an optional leading +."""
        if value is None or value == "":
            return value
        if not PHONE_PATTERN.match(value):
            raise ValueError("Phone number should be valid (10-15 digits)")
        return value


class ContactRecord(BaseModel):
    """A persisted (or about to be persisted) contact."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    first_name: str
    last_name: str
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
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def check_photo_fields(self) -> "ContactRecord":
        # photo name and path travel together
        if (self.photo_file_name is None) != (self.photo_path is None):
            raise ValueError("photo_file_name and photo_path must both be set or both be empty")
        return self

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def has_photo(self) -> bool:
        return self.photo_path is not None


@dataclass(frozen=True)
class StoredPhoto:
    """Result of saving a photo file."""

    name: str
    path: str


class ContactPage(BaseModel):
    """A bounded, ordered slice of contacts plus the total match count."""

    items: list[ContactRecord]
    total_elements: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)

    @property
    def number_of_elements(self) -> int:
        return len(self.items)

    @property
    def first(self) -> bool:
        return self.page == 0

    @property
    def last(self) -> bool:
        return self.page + 1 >= self.total_pages


@dataclass(frozen=True)
class PhotoUpload:
    """Photo bytes accompanying a create or update request."""

    filename: str | None
    data: bytes
