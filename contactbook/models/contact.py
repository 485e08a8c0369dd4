"""Contact model."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

from contactbook.database import Base
from contactbook.models.enums import ContactCategory
from contactbook.models.mixins import TimestampMixin


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Contact(Base, TimestampMixin):
    """An address book entry owned by exactly one user."""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    address = Column(String(500), nullable=True)
    category = Column(
        SAEnum(
            ContactCategory,
            name="contact_category",
            values_callable=lambda enum: [member.value for member in enum],
            validate_strings=True,
        ),
        nullable=False,
        default=ContactCategory.OTHER,
    )
    is_favorite = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    last_contacted = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    owner = relationship("User", back_populates="contacts")
