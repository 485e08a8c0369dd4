"""User service: credential storage and profile updates."""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contactbook.errors import DuplicateEmailError, NotFoundError, ValidationError
from contactbook.models.user import User
from contactbook.services.auth import get_password_hash, verify_password

logger = logging.getLogger(__name__)

# Fields a profile update may change. Password has its own path.
PROFILE_FIELDS = frozenset({"name", "picture"})


class UserService:
    """Owns user records and is the only writer of password hashes."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_email(self, email: str) -> User | None:
        """Get a user by email."""
        return self.db.query(User).filter(User.email == email).first()

    def create_user(self, email: str, password: str, name: str | None = None) -> User:
        """Create a new user with a hashed password.

        Raises:
            DuplicateEmailError: if the email is already registered
        """
        if self.get_user_by_email(email):
            raise DuplicateEmailError()

        user = User(email=email, password_hash=get_password_hash(password), name=name)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent signup for the same email
            self.db.rollback()
            raise DuplicateEmailError() from e
        self.db.refresh(user)
        logger.info(f"Created user {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate a user by email and password.

        Unknown email and wrong password both return None.
        """
        user = self.get_user_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def update_password(self, user_id: int, new_password: str) -> User:
        """Re-hash and store a new password."""
        user = self._require_user(user_id)
        user.password_hash = get_password_hash(new_password)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Password updated for user {user_id}")
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str) -> User:
        """Change a password after checking the current one."""
        user = self._require_user(user_id)
        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        return self.update_password(user_id, new_password)

    def update_profile(self, user_id: int, fields: Mapping[str, Any]) -> User:
        """Merge profile fields. Keys outside PROFILE_FIELDS are ignored."""
        user = self._require_user(user_id)
        for key, value in fields.items():
            if key in PROFILE_FIELDS:
                setattr(user, key, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def _require_user(self, user_id: int) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
