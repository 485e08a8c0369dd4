"""User and authentication API endpoints."""

import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from contactbook.api.dependencies import get_current_user, get_user_service
from contactbook.config import Settings, get_settings
from contactbook.errors import (
    NotFoundError,
    TokenError,
    UpstreamFailure,
    ValidationError,
)
from contactbook.models.user import User
from contactbook.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    ResetPasswordRequest,
    SignupResponse,
    UserLogin,
    UserResponse,
    UserSignup,
)
from contactbook.services.auth import TokenPurpose, TokenService, get_token_service
from contactbook.services.user_service import UserService
from contactbook.tasks.password_reset import send_password_reset_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["users"])

INVALID_CREDENTIALS = "Invalid email or password"
AVATAR_CHUNK_SIZE = 64 * 1024


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    user_data: UserSignup,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Register a new user."""
    user = user_service.create_user(user_data.email, user_data.password, user_data.name)
    return SignupResponse(id=user.id, email=user.email)


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: UserLogin,
    user_service: Annotated[UserService, Depends(get_user_service)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
):
    """Login with email and password."""
    user = user_service.authenticate(credentials.email, credentials.password)

    if not user:
        logger.info("Failed login attempt")
        raise ValidationError(INVALID_CREDENTIALS)

    return LoginResponse(
        token=token_service.issue(user.id, TokenPurpose.SESSION),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user


def _safe_filename(filename: str | None) -> str:
    name = Path(filename or "avatar").name
    return re.sub(r"[^A-Za-z0-9._-]", "_", name) or "avatar"


async def read_avatar(file: UploadFile, max_bytes: int) -> bytes:
    """Read an uploaded avatar, rejecting non-images and oversized files.

    Reads in chunks and stops as soon as the limit is passed, so an oversized
    upload is never held in memory in full.
    """
    if not (file.content_type or "").startswith("image/"):
        raise ValidationError("Only image files are allowed")

    too_large = f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
    if file.size is not None and file.size > max_bytes:
        raise ValidationError(too_large)

    chunks = []
    size = 0
    while chunk := await file.read(AVATAR_CHUNK_SIZE):
        size += len(chunk)
        if size > max_bytes:
            raise ValidationError(too_large)
        chunks.append(chunk)
    return b"".join(chunks)


def store_avatar(data: bytes, filename: str | None, upload_dir: str) -> str:
    """Write avatar bytes under upload_dir and return the stored path."""
    directory = Path(upload_dir)
    stamp = int(datetime.now(UTC).timestamp() * 1000)
    path = directory / f"{stamp}-{_safe_filename(filename)}"
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        logger.exception(f"Failed to store avatar at {path}")
        raise UpstreamFailure("Failed to update profile.") from e
    return path.as_posix()


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    current_user: Annotated[User, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    name: Annotated[str | None, Form(max_length=255)] = None,
    avatar: Annotated[UploadFile | None, File(description="Avatar image, 2MB max")] = None,
):
    """Update name and/or avatar.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    fields: dict[str, str] = {}
    if name is not None:
        fields["name"] = name.strip()
    if avatar is not None:
        data = await read_avatar(avatar, settings.max_avatar_bytes)
        fields["picture"] = store_avatar(data, avatar.filename, settings.upload_dir)

    user = user_service.update_profile(current_user.id, fields)
    return ProfileResponse(
        message="Profile updated successfully.",
        user=UserResponse.model_validate(user),
    )


@router.put("/password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Change the password of the logged-in user."""
    user_service.change_password(current_user.id, payload.current_password, payload.new_password)
    return MessageResponse(message="Password updated successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
):
    """Queue a password reset email.

    The token only travels by email; it is never part of this response.
    """
    user = user_service.get_user_by_email(payload.email)
    if not user:
        raise NotFoundError("User not found")

    token = token_service.issue_reset_token(user.id)
    send_password_reset_email.delay(user.email, token)
    logger.info(f"Queued password reset email for user {user.id}")

    return MessageResponse(message="Password reset email sent")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
):
    """Set a new password using a reset token."""
    try:
        claims = token_service.verify(payload.token, TokenPurpose.PASSWORD_RESET)
    except TokenError as e:
        logger.info(f"Rejected reset token: {type(e).__name__}")
        raise ValidationError("Invalid or expired token") from e

    try:
        user_service.update_password(claims.subject, payload.new_password)
    except NotFoundError as e:
        raise ValidationError("Invalid or expired token") from e

    return MessageResponse(message="Password reset successful")
