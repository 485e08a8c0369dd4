"""Domain errors raised by services and mapped to HTTP responses in main."""

from fastapi import status


class ContactBookError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(ContactBookError):
    """Missing or invalid fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class DuplicateEmailError(ContactBookError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Email already registered"


class UnauthenticatedError(ContactBookError):
    """Missing, invalid or expired credentials.

    The detail is fixed so clients cannot tell why a token was rejected.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid authentication credentials"

    def __init__(self):
        super().__init__(self.default_detail)


class NotFoundError(ContactBookError):
    """Resource is absent or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class UpstreamFailure(ContactBookError):
    """The store or another dependency failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"


class TokenError(Exception):
    """Token could not be verified. Internal only; the API reports 401."""


class InvalidTokenError(TokenError):
    """Bad signature, malformed token, or wrong purpose."""


class ExpiredTokenError(TokenError):
    """Signature is valid but the token has expired."""
