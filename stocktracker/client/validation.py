"""Form-level input validation run before any request is sent."""
import re
from typing import Dict

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
MIN_USERNAME_LENGTH = 3
# Mirrors the server default (MIN_PASSWORD_LENGTH)
MIN_PASSWORD_LENGTH = 8


def _validate_email(email: str, errors: Dict[str, str]) -> None:
    if not email:
        errors["email"] = "Please enter an Email"
    elif not EMAIL_PATTERN.match(email.strip()):
        errors["email"] = "Email is not valid"


def _validate_password(password: str, errors: Dict[str, str]) -> None:
    if not password:
        errors["password"] = "Please enter a password"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"


def validate_login(email: str, password: str) -> Dict[str, str]:
    """Return field -> message for every invalid field (empty when valid)."""
    errors: Dict[str, str] = {}
    _validate_email(email, errors)
    _validate_password(password, errors)
    return errors


def validate_signup(username: str, name: str, email: str, password: str) -> Dict[str, str]:
    """Return field -> message for every invalid field (empty when valid)."""
    errors: Dict[str, str] = {}
    _validate_email(email, errors)

    if not username or not username.strip():
        errors["username"] = "Please enter a username"
    elif len(username.strip()) < MIN_USERNAME_LENGTH:
        errors["username"] = f"Username must be at least {MIN_USERNAME_LENGTH} characters long"

    if not name or not name.strip():
        errors["name"] = "Please enter a name"

    _validate_password(password, errors)
    return errors
