"""Authentication service for JWT and password handling."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from functools import lru_cache

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from contactbook.config import Settings, get_settings
from contactbook.errors import ExpiredTokenError, InvalidTokenError


@lru_cache
def get_pwd_context(rounds: int | None = None) -> CryptContext:
    """Password hashing context, bcrypt with the configured cost factor."""
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return get_pwd_context().verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password. The salt is embedded in the returned string."""
    return get_pwd_context().hash(password)


class TokenPurpose(StrEnum):
    """What a token may be used for."""

    SESSION = "session"
    PASSWORD_RESET = "password_reset"


@dataclass(frozen=True)
class TokenClaims:
    subject: int
    purpose: TokenPurpose


class TokenService:
    """Issues and verifies signed, time-limited identity tokens.

    Tokens are stateless; nothing is stored server side.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        session_ttl: timedelta = timedelta(hours=1),
        reset_ttl: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] | None = None,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.default_ttls = {
            TokenPurpose.SESSION: session_ttl,
            TokenPurpose.PASSWORD_RESET: reset_ttl,
        }
        self.clock = clock or (lambda: datetime.now(UTC))

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            session_ttl=timedelta(minutes=settings.session_token_minutes),
            reset_ttl=timedelta(minutes=settings.reset_token_minutes),
        )

    def issue(
        self,
        subject: int,
        purpose: TokenPurpose = TokenPurpose.SESSION,
        ttl: timedelta | None = None,
    ) -> str:
        """Create a signed token for ``subject``."""
        now = self.clock()
        expire = now + (ttl if ttl is not None else self.default_ttls[purpose])
        to_encode = {
            "sub": str(subject),
            "purpose": purpose.value,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def issue_reset_token(self, user_id: int) -> str:
        """Create a password-reset token, to be handed to a notifier."""
        return self.issue(user_id, TokenPurpose.PASSWORD_RESET)

    def verify(self, token: str, purpose: TokenPurpose | None = None) -> TokenClaims:
        """Decode and validate a token.

        Raises:
            ExpiredTokenError: signature is valid but the token has expired
            InvalidTokenError: anything else, including a purpose mismatch
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise ExpiredTokenError("Token has expired") from e
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        try:
            subject = int(payload["sub"])
            token_purpose = TokenPurpose(payload["purpose"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError("Malformed token claims") from e

        if purpose is not None and token_purpose != purpose:
            raise InvalidTokenError(f"Expected a {purpose} token, got {token_purpose}")

        return TokenClaims(subject=subject, purpose=token_purpose)


@lru_cache
def get_token_service() -> TokenService:
    """Token service built once from settings."""
    return TokenService.from_settings(get_settings())
