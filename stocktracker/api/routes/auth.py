"""Authentication API routes: signup, login, identity check and password change."""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from stocktracker.core.database import get_db
from stocktracker.core.auth import (
    TokenService,
    get_current_user,
    get_optional_user,
    get_token_service,
)
from stocktracker.core.config import settings
from stocktracker.services.auth_service import AuthService
from stocktracker.models.user import User

router = APIRouter(prefix="/api", tags=["authentication"])
logger = logging.getLogger(__name__)


# Request/Response Models
class SignupRequest(BaseModel):
    """User signup request."""
    username: str = Field(min_length=3)
    name: str = Field(min_length=1)
    email: EmailStr
    password: str

    @field_validator("username", "name", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        # Trimmed before the length constraints run
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    """Login request. Also accepts the capitalized keys older clients send."""
    email: EmailStr = Field(validation_alias=AliasChoices("email", "Email"))
    password: str = Field(validation_alias=AliasChoices("password", "Password"))


class UpdatePasswordRequest(BaseModel):
    newPassword: str = Field(min_length=1)


class UserSummary(BaseModel):
    id: str
    username: str
    name: str
    email: str


class AuthResponse(BaseModel):
    """Signup/login response with the session token."""
    token: str
    AUTH: bool = True
    user: UserSummary


class IsAuthResponse(BaseModel):
    AUTH: bool
    UserData: Optional[UserSummary] = None


def check_password_strength(password: str) -> None:
    if len(password) < settings.min_password_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {settings.min_password_length} characters long"
        )


@router.post("/signup", response_model=AuthResponse)
async def signup(
    signup_request: SignupRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service)
):
    """
    Register a new user.

    Returns a session token and the user summary.
    """
    logger.info(f"Signup request received for: {signup_request.username} <{signup_request.email}>")

    if not settings.registration_enabled:
        logger.warning(f"Signup rejected - registrations disabled: {signup_request.email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="New user registrations are currently disabled"
        )

    check_password_strength(signup_request.password)

    user, token = await AuthService.signup(
        signup_request.username,
        signup_request.name,
        signup_request.email,
        signup_request.password,
        db,
        tokens
    )

    return {"token": token, "AUTH": True, "user": user.summary()}


@router.post("/login", response_model=AuthResponse)
async def login(
    login_request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service)
):
    """
    Login with email and password.

    Unknown email and wrong password produce the same 401 response.
    """
    user, token = await AuthService.login(login_request.email, login_request.password, db, tokens)

    return {"token": token, "AUTH": True, "user": user.summary()}


@router.post("/isAUTH", response_model=IsAuthResponse, response_model_exclude_none=True)
async def is_auth(current_user: Optional[User] = Depends(get_optional_user)):
    """
    Resolve the bearer token to a user.

    Never fails: answers AUTH false for a missing, invalid or stale token.
    """
    if current_user is None:
        return {"AUTH": False}

    return {"AUTH": True, "UserData": current_user.summary()}


@router.post("/updatePassword")
async def update_password(
    request: UpdatePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Change the current user's password.

    Requires authentication.
    """
    check_password_strength(request.newPassword)

    await AuthService.change_password(current_user, request.newPassword, db)

    return {"message": "Password updated successfully"}
