"""Pydantic schemas for API requests and responses."""

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
from contactbook.schemas.contact import (
    ContactCreate,
    ContactListResponse,
    ContactResponse,
    ContactUpdate,
)

__all__ = [
    "UserSignup",
    "UserLogin",
    "UserResponse",
    "SignupResponse",
    "LoginResponse",
    "ProfileResponse",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "ChangePasswordRequest",
    "MessageResponse",
    "ContactCreate",
    "ContactUpdate",
    "ContactResponse",
    "ContactListResponse",
]
