"""Contact service: owner-scoped storage, search, sort and pagination."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import pydantic
from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from contactbook.errors import NotFoundError, ValidationError
from contactbook.models.contact import Contact
from contactbook.schemas.contact import ContactCreate, ContactUpdate

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT_FIELD = "name"

# Accepts both the camelCase names clients see and the model attribute names.
SORTABLE_COLUMNS = {
    "name": Contact.name,
    "email": Contact.email,
    "phone": Contact.phone,
    "category": Contact.category,
    "isFavorite": Contact.is_favorite,
    "is_favorite": Contact.is_favorite,
    "lastContacted": Contact.last_contacted,
    "last_contacted": Contact.last_contacted,
    "createdAt": Contact.created_at,
    "created_at": Contact.created_at,
}

# Fields an update may write. owner_id and id are never in here.
UPDATABLE_FIELDS = frozenset(
    {"name", "email", "phone", "address", "category", "is_favorite", "notes", "last_contacted"}
)
NON_NULLABLE_FIELDS = frozenset(
    {"name", "email", "phone", "category", "is_favorite", "last_contacted"}
)


@dataclass
class ContactPage:
    items: list[Contact]
    total: int


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _validation_message(error: pydantic.ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


class ContactService:
    """Every query here filters by owner_id in SQL, not after fetching."""

    def __init__(self, db: Session):
        self.db = db

    def _owned(self, owner_id: int) -> Query:
        return self.db.query(Contact).filter(Contact.owner_id == owner_id)

    def list_contacts(
        self,
        owner_id: int,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
        sort_by: str = DEFAULT_SORT_FIELD,
        sort_order: str = "asc",
        search: str = "",
    ) -> ContactPage:
        """Get one page of the owner's contacts.

        Args:
            owner_id: ID of the user whose contacts to return
            page: 1-based page number
            limit: page size
            sort_by: field to sort by; unknown fields fall back to insertion order
            sort_order: "asc" or "desc"
            search: case-insensitive substring matched against name, email or phone

        Returns:
            ContactPage with the items on this page and the total match count.
            Pages past the end have no items but still report the total.
        """
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        query = self._owned(owner_id)
        if search:
            pattern = f"%{_escape_like(search)}%"
            query = query.filter(
                or_(
                    Contact.name.ilike(pattern, escape="\\"),
                    Contact.email.ilike(pattern, escape="\\"),
                    Contact.phone.ilike(pattern, escape="\\"),
                )
            )

        total = query.count()
        offset = (page - 1) * limit
        if offset >= total:
            # Past the last page; the offset may not even fit a SQL integer.
            return ContactPage(items=[], total=total)

        column = SORTABLE_COLUMNS.get(sort_by)
        if column is None:
            query = query.order_by(Contact.id.asc())
        elif sort_order == "desc":
            query = query.order_by(column.desc(), Contact.id.desc())
        else:
            query = query.order_by(column.asc(), Contact.id.asc())

        items = query.offset(offset).limit(limit).all()
        return ContactPage(items=items, total=total)

    def all_contacts(self, owner_id: int) -> list[Contact]:
        """All of the owner's contacts, unpaginated, in insertion order."""
        return self._owned(owner_id).order_by(Contact.id.asc()).all()

    def get_contact(self, contact_id: int, owner_id: int) -> Contact:
        """Get a contact the owner has.

        Raises NotFoundError for missing contacts and for other users' contacts alike.
        """
        contact = self._owned(owner_id).filter(Contact.id == contact_id).first()
        if contact is None:
            raise NotFoundError("Contact not found")
        return contact

    def create_contact(
        self, owner_id: int, data: ContactCreate | Mapping[str, Any]
    ) -> Contact:
        """Create a contact owned by ``owner_id``."""
        if not isinstance(data, ContactCreate):
            try:
                data = ContactCreate.model_validate(data)
            except pydantic.ValidationError as e:
                raise ValidationError(_validation_message(e)) from e

        values = data.model_dump(exclude_none=True)
        contact = Contact(owner_id=owner_id, **values)
        self.db.add(contact)
        self.db.commit()
        self.db.refresh(contact)
        logger.info(f"Created contact {contact.id} for user {owner_id}")
        return contact

    def update_contact(
        self, contact_id: int, owner_id: int, data: ContactUpdate | Mapping[str, Any]
    ) -> Contact:
        """Merge the supplied fields into an owned contact."""
        if not isinstance(data, ContactUpdate):
            try:
                data = ContactUpdate.model_validate(data)
            except pydantic.ValidationError as e:
                raise ValidationError(_validation_message(e)) from e

        values = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if key in UPDATABLE_FIELDS
        }
        cleared = sorted(key for key, value in values.items() if value is None)
        if any(key in NON_NULLABLE_FIELDS for key in cleared):
            raise ValidationError(
                f"Fields cannot be empty: {', '.join(k for k in cleared if k in NON_NULLABLE_FIELDS)}"
            )

        if values:
            updated = (
                self._owned(owner_id)
                .filter(Contact.id == contact_id)
                .update(values, synchronize_session="fetch")
            )
            if not updated:
                self.db.rollback()
                raise NotFoundError("Contact not found")
            self.db.commit()

        return self.get_contact(contact_id, owner_id)

    def delete_contact(self, contact_id: int, owner_id: int) -> None:
        """Delete an owned contact."""
        deleted = (
            self._owned(owner_id)
            .filter(Contact.id == contact_id)
            .delete(synchronize_session="fetch")
        )
        if not deleted:
            self.db.rollback()
            raise NotFoundError("Contact not found")
        self.db.commit()
        logger.info(f"Deleted contact {contact_id} for user {owner_id}")
