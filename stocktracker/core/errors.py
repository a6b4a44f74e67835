"""Domain error taxonomy.

Services raise these; the API layer converts them to JSON error bodies
(see ``stocktracker.api.main``).
"""
from typing import Optional


class StockTrackerError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Conflict(StockTrackerError):
    """A unique field (email, username) is already taken."""

    status_code = 409
    default_message = "Account already exists"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidCredentials(StockTrackerError):
    """Login failed. Never says whether the email or the password was wrong."""

    status_code = 401
    default_message = "Invalid credentials"


class Unauthenticated(StockTrackerError):
    """Missing, invalid or expired token, or a token for a user that is gone."""

    status_code = 401
    default_message = "Could not validate credentials"


class NotFound(StockTrackerError):
    status_code = 404
    default_message = "Not found"


class SamePassword(StockTrackerError):
    status_code = 400
    default_message = "New password is the same as the old password"


class UpstreamFailure(StockTrackerError):
    """External quote source unreachable or returned garbage."""

    status_code = 500
    default_message = "Failed to fetch stock data"


class InvalidToken(Exception):
    """Raised by TokenService.verify; the auth layer maps it to Unauthenticated."""
    pass
