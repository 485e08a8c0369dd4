"""FastAPI dependencies for authentication and services."""

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from contactbook.database import get_db
from contactbook.errors import TokenError, UnauthenticatedError
from contactbook.models.user import User
from contactbook.services.auth import TokenPurpose, TokenService, get_token_service
from contactbook.services.contact_service import ContactService
from contactbook.services.export_service import ContactExporter
from contactbook.services.user_service import UserService

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through UnauthenticatedError like every other failure
security = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> int:
    """Resolve the bearer token to the caller's user ID."""
    if credentials is None:
        raise UnauthenticatedError()

    try:
        claims = token_service.verify(credentials.credentials, TokenPurpose.SESSION)
    except TokenError as e:
        logger.debug(f"Rejected session token: {type(e).__name__}: {e}")
        raise UnauthenticatedError() from e

    return claims.subject


def get_user_service(
    db: Annotated[Session, Depends(get_db)],
) -> UserService:
    """Get user service with dependencies."""
    return UserService(db)


def get_contact_service(
    db: Annotated[Session, Depends(get_db)],
) -> ContactService:
    """Get contact service with dependencies."""
    return ContactService(db)


def get_contact_exporter(
    contact_service: Annotated[ContactService, Depends(get_contact_service)],
) -> ContactExporter:
    return ContactExporter(contact_service)


def get_current_user(
    user_id: Annotated[int, Depends(get_current_user_id)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> User:
    """Get the current authenticated user from the session token."""
    user = user_service.get_user(user_id)
    if user is None:
        raise UnauthenticatedError()
    return user
