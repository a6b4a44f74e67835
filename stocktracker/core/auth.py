"""Authentication utilities: bearer tokens, password hashing and the auth dependencies."""
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stocktracker.core.config import settings
from stocktracker.core.database import get_db
from stocktracker.core.errors import InvalidToken, Unauthenticated
from stocktracker.models.user import User

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

# Bearer token extraction. auto_error is off so that every failure goes
# through Unauthenticated and produces the same response.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


def _prehash(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    if len(password.encode('utf-8')) > 72:
        return hashlib.sha256(password.encode('utf-8')).hexdigest()
    return password


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Passwords longer than bcrypt's 72-byte limit are pre-hashed with SHA256.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(_prehash(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(_prehash(plain_password), hashed_password)


def dummy_verify_password() -> None:
    """Spend the same time as a real verification (unknown-email logins)."""
    pwd_context.dummy_verify()


class TokenService:
    """Issues and verifies signed, unencrypted bearer tokens.

    Tokens carry the user id in the ``sub`` claim. Nothing is stored server
    side: a token is valid as long as its signature checks out and it has not
    expired.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: Optional[int] = 1440
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, app_settings) -> "TokenService":
        return cls(
            secret=app_settings.jwt_secret,
            algorithm=app_settings.jwt_algorithm,
            expire_minutes=app_settings.access_token_expire_minutes,
        )

    def issue(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a signed token for a user.

        Args:
            user_id: Id of the user the token belongs to
            expires_delta: Optional custom lifetime, overrides the configured one

        Returns:
            Encoded JWT string
        """
        now = datetime.now(timezone.utc)
        claims = {"sub": str(user_id), "iat": now}

        if expires_delta is not None:
            claims["exp"] = now + expires_delta
        elif self.expire_minutes is not None:
            claims["exp"] = now + timedelta(minutes=self.expire_minutes)

        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Verify a token and return the user id it was issued for.

        Raises:
            InvalidToken: bad signature, malformed or expired token, or no
                ``sub`` claim
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidToken(str(e)) from e

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise InvalidToken("Token has no subject")

        return user_id


token_service = TokenService.from_settings(settings)


def get_token_service() -> TokenService:
    """FastAPI dependency returning the process-wide token service."""
    return token_service


async def resolve_user(
    token: Optional[str],
    db: AsyncSession,
    tokens: TokenService
) -> Optional[User]:
    """Resolve a bearer token to a live user, or None."""
    if not token:
        return None

    try:
        user_id = tokens.verify(token)
    except InvalidToken as e:
        logger.debug(f"Token rejected: {e}")
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        logger.debug(f"Token references unknown user: {user_id}")

    return user


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service)
) -> User:
    """
    FastAPI dependency to get the current authenticated user from the bearer token.

    Raises:
        Unauthenticated: If the header is missing, the token is invalid or
            the user no longer exists
    """
    user = await resolve_user(token, db, tokens)

    if user is None:
        raise Unauthenticated()

    return user


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service)
) -> Optional[User]:
    """Like get_current_user, but returns None instead of raising."""
    return await resolve_user(token, db, tokens)
