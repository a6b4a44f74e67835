"""Authentication service for signup, login and password changes."""
from typing import Optional, Tuple
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from stocktracker.models.user import User
from stocktracker.core.auth import (
    TokenService,
    hash_password,
    verify_password,
    dummy_verify_password,
)
from stocktracker.core.errors import Conflict, InvalidCredentials, SamePassword

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    @staticmethod
    async def signup(
        username: str,
        name: str,
        email: str,
        password: str,
        db: AsyncSession,
        tokens: TokenService
    ) -> Tuple[User, str]:
        """
        Register a new user and issue a token for it.

        Args:
            username: Unique username (trimmed)
            name: Display name (trimmed)
            email: Unique email address (trimmed, lowercased)
            password: Plain text password
            db: Database session
            tokens: Token service used to sign the new session token

        Returns:
            (User, token) tuple

        Raises:
            Conflict: If the email or the username is already registered
        """
        username = username.strip()
        name = name.strip()
        email = email.strip().lower()
        logger.info(f"Attempting to register user: {username} <{email}>")

        if await AuthService.get_user_by_email(email, db):
            logger.warning(f"Registration failed: Email already exists: {email}")
            raise Conflict("Email already in use", field="email")

        if await AuthService.get_user_by_username(username, db):
            logger.warning(f"Registration failed: Username already exists: {username}")
            raise Conflict("Username already in use", field="username")

        user = User(
            username=username,
            name=name,
            email=email,
            password_hash=hash_password(password),
        )

        try:
            db.add(user)
            await db.commit()
            await db.refresh(user)
        except IntegrityError as e:
            # Lost a race with a concurrent signup for the same email/username
            await db.rollback()
            logger.warning(f"Registration failed on unique constraint for {email}: {e.orig}")
            raise Conflict()
        except Exception as e:
            logger.error(f"Error registering user {email}: {str(e)}", exc_info=True)
            await db.rollback()
            raise

        logger.info(f"Successfully registered user: {email} (ID: {user.id})")
        return user, tokens.issue(user.id)

    @staticmethod
    async def authenticate_user(email: str, password: str, db: AsyncSession) -> Optional[User]:
        """
        Check an email/password pair.

        Returns:
            User object if authentication successful, None otherwise
        """
        user = await AuthService.get_user_by_email(email, db)

        if not user:
            dummy_verify_password()
            return None

        if not verify_password(password, user.password_hash):
            return None

        return user

    @staticmethod
    async def login(
        email: str,
        password: str,
        db: AsyncSession,
        tokens: TokenService
    ) -> Tuple[User, str]:
        """
        Log a user in.

        Returns:
            (User, token) tuple

        Raises:
            InvalidCredentials: Unknown email or wrong password (not distinguished)
        """
        user = await AuthService.authenticate_user(email, password, db)

        if user is None:
            logger.warning(f"Failed login attempt for: {email.strip().lower()}")
            raise InvalidCredentials()

        logger.info(f"User logged in: {user.email} (ID: {user.id})")
        return user, tokens.issue(user.id)

    @staticmethod
    async def change_password(user: User, new_password: str, db: AsyncSession) -> None:
        """
        Replace a user's password.

        Raises:
            SamePassword: If the new password matches the current one
        """
        if verify_password(new_password, user.password_hash):
            raise SamePassword()

        user.password_hash = hash_password(new_password)

        try:
            await db.commit()
        except Exception as e:
            logger.error(f"Error updating password for user {user.id}: {str(e)}", exc_info=True)
            await db.rollback()
            raise

        logger.info(f"Password updated for user: {user.id}")

    @staticmethod
    async def get_user_by_email(email: str, db: AsyncSession) -> Optional[User]:
        """
        Get a user by email address.

        The lookup is case-insensitive since emails are stored lowercased.
        """
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_username(username: str, db: AsyncSession) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username.strip()))
        return result.scalar_one_or_none()
