"""Contact schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import ConfigDict, Field, StringConstraints

from contactbook.models.enums import ContactCategory
from contactbook.schemas.base import CamelModel

# Identifying fields are trimmed; address and notes are stored as sent.
ContactName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
]
ContactEmail = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
]
ContactPhone = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)
]


class ContactCreate(CamelModel):
    """Create a new contact."""

    name: ContactName
    email: ContactEmail
    phone: ContactPhone
    address: str | None = Field(None, max_length=500)
    category: ContactCategory = ContactCategory.OTHER
    is_favorite: bool = False
    notes: str | None = Field(None, max_length=5000)
    last_contacted: datetime | None = None


class ContactUpdate(CamelModel):
    """Update a contact.

    Only these fields can change; ``id`` and ``ownerId`` in a payload are ignored.
    """

    name: ContactName | None = None
    email: ContactEmail | None = None
    phone: ContactPhone | None = None
    address: str | None = Field(None, max_length=500)
    category: ContactCategory | None = None
    is_favorite: bool | None = None
    notes: str | None = Field(None, max_length=5000)
    last_contacted: datetime | None = None


class ContactResponse(CamelModel):
    """Contact response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    email: str
    phone: str
    address: str | None
    category: ContactCategory
    is_favorite: bool
    notes: str | None
    last_contacted: datetime
    created_at: datetime
    updated_at: datetime


class ContactListResponse(CamelModel):
    """One page of contacts."""

    contacts: list[ContactResponse]
    total: int
    page: int
    limit: int
