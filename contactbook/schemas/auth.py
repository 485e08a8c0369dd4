"""User and authentication schemas."""

from typing import Annotated

from pydantic import ConfigDict, EmailStr, Field, StringConstraints

from contactbook.schemas.base import CamelModel

# bcrypt only looks at the first 72 bytes of a password. Passwords are never trimmed.
PASSWORD_MAX_LENGTH = 72


class UserSignup(CamelModel):
    """User signup request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=PASSWORD_MAX_LENGTH)
    name: Annotated[str, StringConstraints(strip_whitespace=True, max_length=255)] | None = None


class UserLogin(CamelModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)


class UserResponse(CamelModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    picture: str | None = None


class SignupResponse(CamelModel):
    id: int
    email: str


class LoginResponse(CamelModel):
    """Session token with user info."""

    token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserResponse


class ProfileResponse(CamelModel):
    message: str
    user: UserResponse


class ForgotPasswordRequest(CamelModel):
    email: EmailStr = Field(..., max_length=255)


class ResetPasswordRequest(CamelModel):
    """Password reset with a token delivered out of band."""

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=PASSWORD_MAX_LENGTH)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)
    new_password: str = Field(..., min_length=6, max_length=PASSWORD_MAX_LENGTH)


class MessageResponse(CamelModel):
    message: str
