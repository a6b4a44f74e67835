"""Services package initialization."""
from stocktracker.services.auth_service import AuthService
from stocktracker.services.watchlist_service import WatchlistService, normalize_symbol
from stocktracker.services.profile_service import ProfileService

__all__ = [
    "AuthService",
    "WatchlistService",
    "ProfileService",
    "normalize_symbol",
]
