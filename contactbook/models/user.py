"""User model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from contactbook.database import Base
from contactbook.models.enums import LoginMethod
from contactbook.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and contact ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    login_method = Column(String(20), nullable=False, default=LoginMethod.LOCAL.value)
    picture = Column(String(500), nullable=True)  # avatar path under UPLOAD_DIR

    contacts = relationship("Contact", back_populates="owner")
